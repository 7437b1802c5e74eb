"""
Menu Import Service - bulk import of a hotel menu from CSV.

One call imports one CSV file into one business's catalog:

1. Tokenize and validate the CSV. A missing header column or an empty file
   stops the import; bad data rows are reported and skipped.
2. Warn about duplicate rows (same category path, item and variant).
3. Probe which optional schema features exist.
4. Reconcile the valid rows against the catalog, creating categories and
   inserting or updating items and variants.

Dry runs read a snapshot of the catalog and simulate every write in memory,
producing the same counts a real import would. Real imports commit each row
separately, so a failing row never undoes the rows around it.

Usage:
    from hotel_menu.services.menu_import import import_menu

    result = import_menu("b-1", csv_text, mode="dry_run")
    print(result.summary.get_summary())
"""

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session

from hotel_menu.services.database import session_scope
from hotel_menu.services.exceptions import (
    CapabilityProbeError,
    CatalogStoreError,
    MenuImportError,
)
from hotel_menu.services.logging_utils import get_service_logger, log_operation
from hotel_menu.services.tenant import TenantScope
from hotel_menu.utils.constants import ERROR_NO_VALID_ROWS, ERROR_NOT_CSV
from hotel_menu.utils.error_messages import friendly_error

from .capability_probe import CapabilityProbe, SchemaInspectorProbe
from .duplicate_detector import find_duplicate_rows
from .import_summary import ImportResult, ImportSummary
from .reconciliation import ImportMode, build_store, reconcile_rows
from .row_parser import ParsedMenuCsv, parse_menu_csv

logger = get_service_logger(__name__)


def import_menu(
    business_id: str,
    csv_text: str,
    mode: str = "import",
    session: Optional[Session] = None,
    capability_probe: Optional[CapabilityProbe] = None,
    veg_fallback: bool = True,
) -> ImportResult:
    """
    Import menu CSV text into a business's catalog.

    Args:
        business_id: Business that owns the catalog
        csv_text: Full CSV text, header first
        mode: "dry_run" to preview; anything else imports
        session: Optional SQLAlchemy session for transactional composition
        capability_probe: Schema probe (default: inspect the live schema)
        veg_fallback: is_veg value for blank or unrecognized veg flags

    Returns:
        ImportResult. ``result.success`` is True when the rows were reconciled
        (row errors may still be present); otherwise ``result.error`` says why
        nothing was imported.

    Raises:
        ValueError: If business_id is blank
    """
    scope = TenantScope(business_id)
    import_mode = ImportMode.from_value(mode)
    log_operation(
        logger,
        operation="import_menu",
        outcome="started",
        business_id=scope.business_id,
        mode=import_mode.value,
    )

    try:
        parsed = parse_menu_csv(csv_text or "", veg_fallback=veg_fallback)
    except MenuImportError as e:
        log_operation(
            logger,
            operation="import_menu",
            outcome="rejected",
            level=logging.WARNING,
            business_id=scope.business_id,
            error=str(e),
        )
        return ImportResult.failed(str(e))

    summary = _start_summary(parsed, import_mode)

    if not parsed.rows:
        error = parsed.errors[0].message if parsed.errors else ERROR_NO_VALID_ROWS
        log_operation(
            logger,
            operation="import_menu",
            outcome="no_valid_rows",
            level=logging.WARNING,
            business_id=scope.business_id,
            invalid_rows=summary.invalid_rows,
        )
        return ImportResult.failed(error, summary)

    if session is not None:
        return _import_menu_impl(scope, parsed, summary, import_mode, session, capability_probe)
    with session_scope() as sess:
        return _import_menu_impl(scope, parsed, summary, import_mode, sess, capability_probe)


def _start_summary(parsed: ParsedMenuCsv, mode: ImportMode) -> ImportSummary:
    summary = ImportSummary(
        dry_run=mode is ImportMode.DRY_RUN,
        valid_rows=len(parsed.rows),
        invalid_rows=len(parsed.errors),
    )
    summary.errors.extend(parsed.errors)
    summary.warnings.extend(find_duplicate_rows(parsed.rows))
    return summary


def _import_menu_impl(
    scope: TenantScope,
    parsed: ParsedMenuCsv,
    summary: ImportSummary,
    mode: ImportMode,
    session: Session,
    capability_probe: Optional[CapabilityProbe],
) -> ImportResult:
    probe = capability_probe or SchemaInspectorProbe()
    try:
        capabilities = probe.probe(session)
    except CapabilityProbeError as e:
        session.rollback()
        log_operation(
            logger,
            operation="import_menu",
            outcome="probe_failed",
            level=logging.ERROR,
            business_id=scope.business_id,
            error=str(e),
        )
        return ImportResult.failed(friendly_error(str(e)))

    log_operation(
        logger,
        operation="import_menu",
        outcome="capabilities_probed",
        level=logging.DEBUG,
        business_id=scope.business_id,
        item_veg=capabilities.item_veg,
        variants=capabilities.variants,
        variant_veg=capabilities.variant_veg,
    )
    for message in capabilities.missing_warnings():
        summary.add_warning(message)

    try:
        store = build_store(mode, session, scope, capabilities)
    except CatalogStoreError as e:
        session.rollback()
        log_operation(
            logger,
            operation="import_menu",
            outcome="snapshot_failed",
            level=logging.ERROR,
            business_id=scope.business_id,
            error=e.detail,
        )
        return ImportResult.failed(friendly_error(e.detail))

    reconcile_rows(store, scope, capabilities, parsed.rows, summary)

    # Dry runs only read; release the snapshot transaction
    if mode is ImportMode.DRY_RUN:
        session.rollback()

    log_operation(
        logger,
        operation="import_menu",
        outcome="success",
        business_id=scope.business_id,
        mode=mode.value,
        **summary.counts(),
    )
    return ImportResult.ok(summary)


def read_menu_file(file_path: str) -> str:
    """
    Read a menu CSV file as text.

    Args:
        file_path: Path to a .csv file

    Returns:
        File contents (UTF-8; a leading byte order mark is kept and later
        stripped by the tokenizer)

    Raises:
        FileNotFoundError: If file doesn't exist
        MenuImportError: If the file is not a .csv file
    """
    path = Path(file_path)
    if path.suffix.lower() != ".csv":
        raise MenuImportError(ERROR_NOT_CSV)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    return path.read_text(encoding="utf-8")


def import_menu_file(
    business_id: str,
    file_path: str,
    mode: str = "import",
    session: Optional[Session] = None,
    capability_probe: Optional[CapabilityProbe] = None,
) -> ImportResult:
    """
    Import a menu CSV file. See import_menu().

    Raises:
        FileNotFoundError: If file doesn't exist
        MenuImportError: If the file is not a .csv file
    """
    csv_text = read_menu_file(file_path)
    return import_menu(
        business_id,
        csv_text,
        mode=mode,
        session=session,
        capability_probe=capability_probe,
    )
