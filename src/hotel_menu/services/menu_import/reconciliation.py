"""
Reconciliation driver: runs validated rows through the resolver.

The driver picks the store for the requested mode, feeds rows to the
resolver in file order and isolates failures per row. A row that fails in the
store is rolled back completely and reported as a row error; its partial work
contributes nothing to the counts. Rows before and after it are unaffected.
"""

import logging
from enum import Enum
from typing import List

from sqlalchemy.orm import Session

from hotel_menu.services.exceptions import CatalogStoreError
from hotel_menu.services.logging_utils import get_service_logger, log_operation
from hotel_menu.services.tenant import TenantScope
from hotel_menu.utils.error_messages import friendly_error

from .capability_probe import CapabilitySet
from .catalog_resolver import CatalogResolver, RowOutcome
from .catalog_store import (
    CatalogStore,
    InMemorySimulatedStore,
    LiveCommittedStore,
    load_catalog_snapshot,
)
from .import_summary import ImportSummary
from .row_parser import ImportRow

logger = get_service_logger(__name__)


class ImportMode(str, Enum):
    """Import mode selection."""

    DRY_RUN = "dry_run"  # Simulate against a snapshot, write nothing
    IMPORT = "import"  # Write to the database, one commit per row

    @classmethod
    def from_value(cls, value) -> "ImportMode":
        """Anything other than "dry_run" is a real import."""
        if isinstance(value, cls):
            return value
        return cls.DRY_RUN if value == cls.DRY_RUN.value else cls.IMPORT


def build_store(
    mode: ImportMode, session: Session, scope: TenantScope, capabilities: CapabilitySet
) -> CatalogStore:
    """
    Create the catalog store for a mode.

    Raises:
        CatalogStoreError: The snapshot for a dry run could not be read
    """
    if mode is ImportMode.DRY_RUN:
        return InMemorySimulatedStore(load_catalog_snapshot(session, scope, capabilities))
    return LiveCommittedStore(session)


def apply_outcome(summary: ImportSummary, outcome: RowOutcome) -> None:
    """Add a successful row's effects to the summary."""
    summary.categories_created += outcome.categories_created
    summary.items_inserted += int(outcome.item_inserted)
    summary.items_updated += int(outcome.item_updated)
    summary.variants_inserted += int(outcome.variant_inserted)
    summary.variants_updated += int(outcome.variant_updated)
    for message in outcome.warnings:
        summary.add_warning(message)


def reconcile_rows(
    store: CatalogStore,
    scope: TenantScope,
    capabilities: CapabilitySet,
    rows: List[ImportRow],
    summary: ImportSummary,
) -> ImportSummary:
    """
    Resolve every row against the store, sequentially and in order.

    Args:
        store: Simulated or live catalog store
        scope: Business whose catalog is being imported
        capabilities: Optional schema features for this call
        rows: Validated rows in file order
        summary: Summary to update (counts, row errors, warnings)

    Returns:
        The updated summary
    """
    resolver = CatalogResolver(store, scope, capabilities)

    for row in rows:
        try:
            outcome = resolver.resolve(row)
            store.commit_row()
        except CatalogStoreError as e:
            store.rollback_row()
            message = friendly_error(e.detail)
            summary.add_error(row.row_no, message)
            log_operation(
                logger,
                operation="reconcile_row",
                outcome="row_failed",
                level=logging.WARNING,
                business_id=scope.business_id,
                row_no=row.row_no,
                store_operation=e.operation,
                error=e.detail,
            )
            continue

        apply_outcome(summary, outcome)

    return summary
