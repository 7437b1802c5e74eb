"""
Menu Import CLI Utility

Command-line interface for importing a hotel menu from CSV and for bringing
an older database up to the current menu schema.

Usage Examples:
    # Preview an import without writing anything
    hotel-menu-import import menu.csv --business-id b-1 --dry-run

    # Import for real and print the JSON response
    hotel-menu-import import menu.csv --business-id b-1 --json

    # Add the variants table and is_veg columns to an older database
    hotel-menu-import upgrade-schema
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from hotel_menu.models import MenuCategory
from hotel_menu.services.database import get_engine, init_database, upgrade_menu_schema
from hotel_menu.services.exceptions import MenuImportError
from hotel_menu.services.menu_import import import_menu_file
from hotel_menu.utils.error_messages import friendly_error


def _prepare_database() -> None:
    """Create the schema on a fresh database; leave existing schemas alone."""
    engine = get_engine()
    if not inspect(engine).has_table(MenuCategory.__tablename__):
        init_database(engine)


def _print_error(message: str, as_json: bool) -> int:
    if as_json:
        print(json.dumps({"error": message}, indent=2))
    else:
        print(f"ERROR: {message}")
    return 1


def import_cmd(file_path: str, business_id: str, dry_run: bool = False, as_json: bool = False) -> int:
    """Import a menu CSV file for one business."""
    mode = "dry_run" if dry_run else "import"
    if not as_json:
        print(f"Importing menu from {file_path} for business {business_id} (mode: {mode})...")

    try:
        _prepare_database()
        result = import_menu_file(business_id, file_path, mode=mode)
    except (FileNotFoundError, MenuImportError, ValueError) as e:
        return _print_error(str(e), as_json)
    except SQLAlchemyError as e:
        return _print_error(friendly_error(str(e)), as_json)

    if as_json:
        print(json.dumps(result.to_dict(), indent=2))
    elif result.success:
        print(result.summary.get_summary())
    else:
        print(f"ERROR: {result.error}")
        if result.summary is not None:
            print(result.summary.get_summary())

    return 0 if result.success else 1


def upgrade_schema_cmd() -> int:
    """Apply missing menu schema upgrades."""
    print("Upgrading menu schema...")
    try:
        applied = upgrade_menu_schema()
    except SQLAlchemyError as e:
        print(f"ERROR: {friendly_error(str(e))}")
        return 1
    if not applied:
        print("Schema is already up to date.")
    for step in applied:
        print(f"  - {step}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="hotel-menu-import",
        description="Menu CSV import utility for the hotel menu catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Preview an import:
    hotel-menu-import import menu.csv --business-id b-1 --dry-run

  Import and print the JSON response:
    hotel-menu-import import menu.csv --business-id b-1 --json

  Upgrade an older database:
    hotel-menu-import upgrade-schema
""",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log service operations to stderr"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    import_parser = subparsers.add_parser("import", help="Import a menu CSV file")
    import_parser.add_argument("file", help="CSV file path")
    import_parser.add_argument(
        "--business-id", dest="business_id", required=True, help="Business that owns the menu"
    )
    import_parser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Preview the import without writing anything",
    )
    import_parser.add_argument(
        "--json", dest="as_json", action="store_true", help="Print the JSON response"
    )

    subparsers.add_parser(
        "upgrade-schema", help="Add the variants table and is_veg columns where missing"
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.verbose:
        logging.basicConfig(level=logging.INFO, stream=sys.stderr)

    if args.command == "import":
        return import_cmd(args.file, args.business_id, args.dry_run, args.as_json)
    elif args.command == "upgrade-schema":
        return upgrade_schema_cmd()
    else:
        print(f"Unknown command: {args.command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
