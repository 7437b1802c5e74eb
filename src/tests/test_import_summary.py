"""Tests for import summary reporting."""

from hotel_menu.services.menu_import.import_summary import (
    ImportResult,
    ImportSummary,
    ImportWarning,
    RowError,
)


class TestImportSummary:
    """Tests for ImportSummary."""

    def test_to_dict_uses_response_keys(self):
        """Test the summary serializes with the camelCase response keys."""
        summary = ImportSummary(dry_run=True, valid_rows=3, invalid_rows=1, items_inserted=2)
        summary.add_error(4, "Item name is required.")
        summary.add_warning("heads up")

        assert summary.to_dict() == {
            "dryRun": True,
            "totalRows": 4,
            "validRows": 3,
            "invalidRows": 1,
            "categoriesCreated": 0,
            "itemsInserted": 2,
            "itemsUpdated": 0,
            "variantsInserted": 0,
            "variantsUpdated": 0,
            "errors": [{"rowNo": 4, "message": "Item name is required."}],
            "warnings": [{"message": "heads up"}],
        }

    def test_counts(self):
        """Test counts() flattens totals for logging."""
        summary = ImportSummary(categories_created=2, variants_updated=1)
        summary.add_warning("w")
        counts = summary.counts()
        assert counts["categoriesCreated"] == 2
        assert counts["variantsUpdated"] == 1
        assert counts["warnings"] == 1
        assert counts["errors"] == 0

    def test_has_errors(self):
        """Test has_errors flips once an error is added."""
        summary = ImportSummary()
        assert not summary.has_errors
        summary.add_error(2, "bad")
        assert summary.has_errors

    def test_get_summary_shows_dry_run_banner(self):
        """Test the text report marks dry runs."""
        text = ImportSummary(dry_run=True, valid_rows=1).get_summary()
        assert "DRY RUN" in text
        assert "Rows: 1 total, 1 valid, 0 invalid" in text

    def test_get_summary_truncates_errors(self):
        """Test the text report lists only the first ten errors."""
        summary = ImportSummary()
        for row_no in range(2, 15):
            summary.add_error(row_no, "bad")
        text = summary.get_summary()
        assert "Row 11: bad" in text
        assert "Row 12: bad" not in text
        assert "... and 3 more errors" in text


class TestImportResult:
    """Tests for ImportResult."""

    def test_ok_shape(self):
        """Test a successful result carries success and summary."""
        result = ImportResult.ok(ImportSummary(valid_rows=1))
        data = result.to_dict()
        assert data["success"] is True
        assert data["summary"]["validRows"] == 1
        assert "error" not in data

    def test_failed_without_summary(self):
        """Test a fatal failure carries only the error."""
        assert ImportResult.failed("Missing required column: name").to_dict() == {
            "error": "Missing required column: name"
        }

    def test_failed_with_summary(self):
        """Test a no-valid-rows failure also carries the summary."""
        summary = ImportSummary(invalid_rows=1, errors=[RowError(2, "Category is required.")])
        data = ImportResult.failed("Category is required.", summary).to_dict()
        assert data["error"] == "Category is required."
        assert data["summary"]["invalidRows"] == 1
        assert "success" not in data

    def test_warning_to_dict(self):
        """Test warnings serialize as message objects."""
        assert ImportWarning("x").to_dict() == {"message": "x"}
