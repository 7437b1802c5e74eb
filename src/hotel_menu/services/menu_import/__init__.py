"""
Menu CSV import engine.

Public entry points:
    import_menu(business_id, csv_text, mode="import" | "dry_run")
    import_menu_file(business_id, file_path, mode=...)

The submodules are layered bottom-up: csv_tokenizer -> row_parser ->
duplicate_detector -> capability_probe -> catalog_store -> catalog_resolver
-> reconciliation -> menu_import_service.
"""

from .capability_probe import (
    CapabilityProbe,
    CapabilitySet,
    SchemaInspectorProbe,
    StaticCapabilityProbe,
)
from .catalog_store import (
    CatalogSnapshot,
    CatalogStore,
    InMemorySimulatedStore,
    LiveCommittedStore,
    load_catalog_snapshot,
)
from .import_summary import ImportResult, ImportSummary, ImportWarning, RowError
from .menu_import_service import import_menu, import_menu_file, read_menu_file
from .reconciliation import ImportMode
from .row_parser import ImportRow, parse_menu_csv

__all__ = [
    "CapabilityProbe",
    "CapabilitySet",
    "CatalogSnapshot",
    "CatalogStore",
    "ImportMode",
    "ImportResult",
    "ImportRow",
    "ImportSummary",
    "ImportWarning",
    "InMemorySimulatedStore",
    "LiveCommittedStore",
    "RowError",
    "SchemaInspectorProbe",
    "StaticCapabilityProbe",
    "import_menu",
    "import_menu_file",
    "load_catalog_snapshot",
    "parse_menu_csv",
    "read_menu_file",
]
