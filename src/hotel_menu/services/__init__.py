"""
Service layer for the hotel menu catalog.

Modules:
    database: engine, sessions and schema upgrades
    exceptions: service exception hierarchy
    logging_utils: structured operation logging
    menu_category_service: category tree management
    menu_item_service: item and variant management
    menu_import: CSV bulk import and reconciliation engine
    tenant: business scoping for every catalog read and write
"""
