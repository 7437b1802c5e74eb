"""
Schema capability probing.

Some menu features arrived in later schema versions: the item ``is_veg``
column, the ``menu_item_variants`` table, and the variant ``is_veg`` column.
An import must work against any of those versions, so it asks a
``CapabilityProbe`` once per call which features exist and threads the
resulting ``CapabilitySet`` through the rest of the pipeline.

A missing feature is not an error: writes for it are skipped and the summary
carries a warning naming the upgrade. Any other probe failure (connection
lost, permissions, a required table missing) raises ``CapabilityProbeError``
and stops the import before the first row.

The default probe reads the live schema with the SQLAlchemy inspector.
``StaticCapabilityProbe`` returns a fixed answer, for tests and for callers
that already know their schema.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hotel_menu.models import MenuCategory, MenuItem, MenuItemVariant
from hotel_menu.services.exceptions import CapabilityProbeError
from hotel_menu.utils.constants import (
    MIGRATION_ITEM_IS_VEG,
    MIGRATION_VARIANT_IS_VEG,
    UPGRADE_COMMAND,
)

REQUIRED_TABLES = (MenuCategory.__tablename__, MenuItem.__tablename__)


@dataclass(frozen=True)
class CapabilitySet:
    """Optional schema features present in the store for one call."""

    item_veg: bool = True
    variants: bool = True
    variant_veg: bool = True

    def __post_init__(self):
        # The variant veg column cannot exist without its table
        if not self.variants and self.variant_veg:
            object.__setattr__(self, "variant_veg", False)

    @classmethod
    def full(cls) -> "CapabilitySet":
        return cls(item_veg=True, variants=True, variant_veg=True)

    @classmethod
    def legacy(cls) -> "CapabilitySet":
        """The original schema: no veg flags, no variants."""
        return cls(item_veg=False, variants=False, variant_veg=False)

    def missing_warnings(self) -> List[str]:
        """One operator-facing message per absent capability."""
        messages = []
        if not self.item_veg:
            messages.append(
                "is_veg column is not available yet. Veg/non-veg values were ignored. "
                f"Run migration {MIGRATION_ITEM_IS_VEG} ({UPGRADE_COMMAND})."
            )
        if not self.variants:
            messages.append(
                "menu_item_variants table is not available yet. Variant columns were ignored. "
                f"Run {UPGRADE_COMMAND} to enable variants."
            )
        elif not self.variant_veg:
            messages.append(
                "variant_is_veg column is not available yet. Variant veg/non-veg overrides "
                f"were ignored. Run migration {MIGRATION_VARIANT_IS_VEG} ({UPGRADE_COMMAND})."
            )
        return messages


class CapabilityProbe(ABC):
    """Strategy that determines a CapabilitySet for a session's database."""

    @abstractmethod
    def probe(self, session: Session) -> CapabilitySet:
        """
        Determine which optional features exist.

        Raises:
            CapabilityProbeError: The store could not be probed at all
        """


class SchemaInspectorProbe(CapabilityProbe):
    """Probe the live schema through the session's connection."""

    def probe(self, session: Session) -> CapabilitySet:
        try:
            inspector = inspect(session.connection())
            tables = set(inspector.get_table_names())

            for table in REQUIRED_TABLES:
                if table not in tables:
                    raise CapabilityProbeError(f"Required table {table} is missing.")

            item_columns = _column_names(inspector, MenuItem.__tablename__)
            variants = MenuItemVariant.__tablename__ in tables
            variant_columns = (
                _column_names(inspector, MenuItemVariant.__tablename__) if variants else set()
            )
        except SQLAlchemyError as exc:
            raise CapabilityProbeError(str(exc), exc) from exc

        return CapabilitySet(
            item_veg="is_veg" in item_columns,
            variants=variants,
            variant_veg="is_veg" in variant_columns,
        )


class StaticCapabilityProbe(CapabilityProbe):
    """Probe that always returns the same CapabilitySet."""

    def __init__(self, capabilities: CapabilitySet):
        self.capabilities = capabilities

    def probe(self, session: Session) -> CapabilitySet:
        return self.capabilities


def _column_names(inspector, table: str) -> set:
    return {column["name"].lower() for column in inspector.get_columns(table)}
