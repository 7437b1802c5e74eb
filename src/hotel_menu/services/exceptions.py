"""Service layer exception classes for the hotel menu catalog.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    ├── DatabaseError
    ├── CategoryNotFound
    ├── MenuItemNotFound
    ├── VariantNotFound
    ├── CategoryHierarchyError
    ├── CapabilityUnavailableError
    ├── CatalogStoreError
    └── MenuImportError
        ├── EmptyCsvError
        ├── MissingColumnError
        └── CapabilityProbeError
"""

from typing import Optional


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions should inherit from this class.
    """

    pass


class ValidationError(ServiceError):
    """Raised when data validation fails."""

    def __init__(self, errors: list):
        self.errors = errors
        error_msg = "; ".join(errors)
        super().__init__(f"Validation failed: {error_msg}")


class DatabaseError(ServiceError):
    """Raised when a database operation fails."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")


class CategoryNotFound(ServiceError):
    """Raised when a category cannot be found within the business.

    Example:
        >>> raise CategoryNotFound(12)
        CategoryNotFound: Category with ID 12 not found
    """

    def __init__(self, category_id):
        self.category_id = category_id
        super().__init__(f"Category with ID {category_id} not found")


class MenuItemNotFound(ServiceError):
    """Raised when a menu item cannot be found within the business."""

    def __init__(self, item_id):
        self.item_id = item_id
        super().__init__(f"Menu item with ID {item_id} not found")


class VariantNotFound(ServiceError):
    """Raised when a variant cannot be found, or belongs to another business."""

    def __init__(self, variant_id):
        self.variant_id = variant_id
        super().__init__(f"Variant with ID {variant_id} not found")


class CategoryHierarchyError(ServiceError):
    """Raised when a create/update would break the two-level category tree.

    Covers self-parenting, loops, and nesting a third level.
    """

    def __init__(self, message: str, category_id=None):
        self.category_id = category_id
        super().__init__(message)


class CapabilityUnavailableError(ServiceError):
    """Raised when an operation needs a schema feature the database lacks.

    Example:
        >>> raise CapabilityUnavailableError("variants")
        CapabilityUnavailableError: Schema capability 'variants' is not available
    """

    def __init__(self, capability: str):
        self.capability = capability
        super().__init__(f"Schema capability '{capability}' is not available")


class CatalogStoreError(ServiceError):
    """Raised by a catalog store when a read or write fails for one row.

    The import driver catches this, rolls the row back and records a
    row-level error; it never aborts the whole import.

    Args:
        operation: Store operation that failed (e.g., "insert_item")
        original_error: Underlying driver/SQLAlchemy exception
    """

    def __init__(self, operation: str, original_error: Optional[Exception] = None):
        self.operation = operation
        self.original_error = original_error
        detail = str(original_error) if original_error is not None else "unknown error"
        super().__init__(f"{operation} failed: {detail}")

    @property
    def detail(self) -> str:
        """The underlying error text, suitable for friendly_error()."""
        if self.original_error is None:
            return ""
        orig = getattr(self.original_error, "orig", None)
        return str(orig if orig is not None else self.original_error)


class MenuImportError(ServiceError):
    """Raised when a menu import cannot start (fatal, before any row)."""

    pass


class EmptyCsvError(MenuImportError):
    """Raised when the CSV has no header or no data rows."""

    pass


class MissingColumnError(MenuImportError):
    """Raised when a required header column is absent."""

    def __init__(self, column: str):
        self.column = column
        super().__init__(f"Missing required column: {column}")


class CapabilityProbeError(MenuImportError):
    """Raised when schema probing fails for a reason other than a missing feature."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(message)
