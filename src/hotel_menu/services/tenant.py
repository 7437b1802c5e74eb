"""
Tenant scoping for catalog operations.

Every category, item and variant belongs to one business. Services never read
the business from ambient state; callers pass a ``TenantScope`` and every
lookup and write filters on it.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TenantScope:
    """The business whose catalog an operation may read and write."""

    business_id: str

    def __post_init__(self):
        if not self.business_id or not str(self.business_id).strip():
            raise ValueError("business_id is required")
        object.__setattr__(self, "business_id", str(self.business_id).strip())
