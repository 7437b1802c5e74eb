"""
Import summary reporting.

Collects the counts, row errors and warnings of one import call and renders
them as the response contract (``to_dict``) or as a text report for the CLI.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class RowError:
    """A problem with one CSV row (validation or store failure)."""

    row_no: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"rowNo": self.row_no, "message": self.message}


@dataclass
class ImportWarning:
    """An advisory message that did not stop any row."""

    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


@dataclass
class ImportSummary:
    """
    Counts and messages for one import call.

    ``invalid_rows`` counts rows rejected by validation only. Rows that fail
    later in the store add to ``errors`` but stay counted as valid.
    """

    dry_run: bool = False
    valid_rows: int = 0
    invalid_rows: int = 0
    categories_created: int = 0
    items_inserted: int = 0
    items_updated: int = 0
    variants_inserted: int = 0
    variants_updated: int = 0
    errors: List[RowError] = field(default_factory=list)
    warnings: List[ImportWarning] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        """Every data row seen: valid plus rejected by validation."""
        return self.valid_rows + self.invalid_rows

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def counts(self) -> Dict[str, int]:
        """The reconciliation counts, used to compare dry and real runs."""
        return {
            "categoriesCreated": self.categories_created,
            "itemsInserted": self.items_inserted,
            "itemsUpdated": self.items_updated,
            "variantsInserted": self.variants_inserted,
            "variantsUpdated": self.variants_updated,
            "errors": len(self.errors),
            "warnings": len(self.warnings),
        }

    def add_error(self, row_no: int, message: str) -> None:
        self.errors.append(RowError(row_no=row_no, message=message))

    def add_warning(self, message: str) -> None:
        self.warnings.append(ImportWarning(message=message))

    def to_dict(self) -> Dict[str, Any]:
        """Render the summary in the API response shape."""
        return {
            "dryRun": self.dry_run,
            "totalRows": self.total_rows,
            "validRows": self.valid_rows,
            "invalidRows": self.invalid_rows,
            "categoriesCreated": self.categories_created,
            "itemsInserted": self.items_inserted,
            "itemsUpdated": self.items_updated,
            "variantsInserted": self.variants_inserted,
            "variantsUpdated": self.variants_updated,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }

    def get_summary(self) -> str:
        """Generate user-friendly summary for CLI display."""
        lines = [
            "=" * 60,
            "Menu Import Summary",
        ]
        if self.dry_run:
            lines.append("*** DRY RUN - No changes committed ***")
        lines.append("=" * 60)

        lines.append(
            f"Rows: {self.total_rows} total, {self.valid_rows} valid, {self.invalid_rows} invalid"
        )
        lines.append(f"  Categories created: {self.categories_created}")
        lines.append(f"  Items inserted:     {self.items_inserted}")
        lines.append(f"  Items updated:      {self.items_updated}")
        lines.append(f"  Variants inserted:  {self.variants_inserted}")
        lines.append(f"  Variants updated:   {self.variants_updated}")

        if self.errors:
            lines.append("\nErrors:")
            for error in self.errors[:10]:
                lines.append(f"  - Row {error.row_no}: {error.message}")
            if len(self.errors) > 10:
                lines.append(f"  ... and {len(self.errors) - 10} more errors")

        if self.warnings:
            lines.append("\nWarnings:")
            for warning in self.warnings[:10]:
                lines.append(f"  - {warning.message}")
            if len(self.warnings) > 10:
                lines.append(f"  ... and {len(self.warnings) - 10} more warnings")

        lines.append("=" * 60)
        return "\n".join(lines)


@dataclass
class ImportResult:
    """
    Outcome of import_menu().

    Exactly one of two shapes:
    - success: ``success=True`` with a summary (row errors may be present)
    - failure: ``error`` set; ``summary`` only when rows were parsed but none
      were valid
    """

    success: bool = False
    summary: Optional[ImportSummary] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, summary: ImportSummary) -> "ImportResult":
        return cls(success=True, summary=summary)

    @classmethod
    def failed(cls, error: str, summary: Optional[ImportSummary] = None) -> "ImportResult":
        return cls(success=False, summary=summary, error=error)

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "summary": self.summary.to_dict()}
        result: Dict[str, Any] = {"error": self.error}
        if self.summary is not None:
            result["summary"] = self.summary.to_dict()
        return result
