"""Tests for the menu import CLI."""

import json

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError

import hotel_menu.services.database as db_module
from hotel_menu.models import MenuItem
from hotel_menu.models.base import Base
from hotel_menu.services.database import session_scope
from hotel_menu.utils import import_menu_cli

CSV_TEXT = "category,name,price_npr\nPizza,Margherita,700\nPizza,,700\n"


@pytest.fixture
def cli_db(test_db, db_engine, monkeypatch):
    """Route the CLI's engine lookups to the test database."""
    monkeypatch.setattr(import_menu_cli, "get_engine", lambda: db_engine)
    monkeypatch.setattr(db_module, "get_engine", lambda: db_engine)
    return test_db


class TestImportCommand:
    def test_import_prints_summary(self, cli_db, write_csv, capsys):
        """Test a real import prints the text summary and writes the valid row."""
        path = write_csv(CSV_TEXT)
        code = import_menu_cli.main(["import", path, "--business-id", "biz-1"])

        out = capsys.readouterr().out
        assert code == 0
        assert "Menu Import Summary" in out
        assert "Items inserted:     1" in out
        assert "Row 3: Item name is required." in out
        with session_scope() as session:
            assert session.query(MenuItem).count() == 1

    def test_dry_run_json(self, cli_db, write_csv, capsys):
        """Test --dry-run --json prints the response and writes nothing."""
        path = write_csv(CSV_TEXT)
        code = import_menu_cli.main(
            ["import", path, "--business-id", "biz-1", "--dry-run", "--json"]
        )

        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert data["success"] is True
        assert data["summary"]["dryRun"] is True
        assert data["summary"]["itemsInserted"] == 1
        with session_scope() as session:
            assert session.query(MenuItem).count() == 0

    def test_fatal_error_exit_code(self, cli_db, write_csv, capsys):
        """Test a missing column exits with 1 and a JSON error."""
        path = write_csv("category,price_npr\nPizza,700\n")
        code = import_menu_cli.main(["import", path, "--business-id", "biz-1", "--json"])
        assert code == 1
        assert json.loads(capsys.readouterr().out) == {"error": "Missing required column: name"}

    def test_non_csv_file(self, cli_db, write_csv, capsys):
        """Test non-.csv files are refused."""
        path = write_csv(CSV_TEXT, name="menu.txt")
        code = import_menu_cli.main(["import", path, "--business-id", "biz-1"])
        assert code == 1
        assert "ERROR: Only .csv files are supported." in capsys.readouterr().out

    def test_fresh_database_gets_schema(self, db_engine, monkeypatch, write_csv, test_db):
        """Test the import creates tables on an empty database."""
        Base.metadata.drop_all(db_engine)
        monkeypatch.setattr(import_menu_cli, "get_engine", lambda: db_engine)

        code = import_menu_cli.main(["import", write_csv(CSV_TEXT), "--business-id", "biz-1"])
        assert code == 0
        assert inspect(db_engine).has_table("menu_items")

    def test_database_error_exit_code(self, cli_db, write_csv, monkeypatch, capsys):
        """Test a database failure is reported instead of raised."""

        def _fail():
            raise OperationalError("PRAGMA", {}, Exception("could not connect to server"))

        monkeypatch.setattr(import_menu_cli, "_prepare_database", _fail)
        code = import_menu_cli.main(["import", write_csv(CSV_TEXT), "--business-id", "biz-1"])

        assert code == 1
        assert "ERROR: Network error." in capsys.readouterr().out

    def test_database_error_json(self, cli_db, write_csv, monkeypatch, capsys):
        """Test a database failure in --json mode prints an error object."""

        def _fail():
            raise OperationalError("PRAGMA", {}, Exception("disk I/O error"))

        monkeypatch.setattr(import_menu_cli, "_prepare_database", _fail)
        code = import_menu_cli.main(
            ["import", write_csv(CSV_TEXT), "--business-id", "biz-1", "--json"]
        )

        assert code == 1
        assert "disk I/O error" in json.loads(capsys.readouterr().out)["error"]


class TestUpgradeCommand:
    def test_upgrade_legacy(self, legacy_db, db_engine, monkeypatch, capsys):
        """Test an old database gains the variants table and veg columns."""
        monkeypatch.setattr(db_module, "get_engine", lambda: db_engine)
        assert import_menu_cli.main(["upgrade-schema"]) == 0
        out = capsys.readouterr().out
        assert "created table menu_item_variants" in out
        assert "added column menu_items.is_veg" in out

    def test_upgrade_current(self, cli_db, capsys):
        """Test a current schema reports nothing to do."""
        assert import_menu_cli.main(["upgrade-schema"]) == 0
        assert "Schema is already up to date." in capsys.readouterr().out

    def test_upgrade_database_error(self, monkeypatch, capsys):
        """Test a failing upgrade exits with 1."""

        def _fail():
            raise OperationalError("ALTER TABLE", {}, Exception("database is locked"))

        monkeypatch.setattr(import_menu_cli, "upgrade_menu_schema", _fail)
        assert import_menu_cli.main(["upgrade-schema"]) == 1
        assert "ERROR: " in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    """Test running without a command shows usage."""
    assert import_menu_cli.main([]) == 1
    assert "usage:" in capsys.readouterr().out
