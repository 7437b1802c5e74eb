"""
Constants for the hotel menu catalog.

This module defines system-wide constants including:
- Application metadata
- Menu CSV column names
- Vegetarian flag vocabulary
- Schema upgrade names referenced in import warnings
"""

from typing import FrozenSet, List

# ============================================================================
# Database
# ============================================================================

DATABASE_FILENAME = "hotel_menu.db"

# ============================================================================
# Menu CSV Columns
# ============================================================================

COL_CATEGORY = "category"
COL_SUBCATEGORY = "subcategory"
COL_NAME = "name"
COL_PRICE = "price_npr"
COL_DESCRIPTION = "description"
COL_IMAGE_URL = "image_url"
COL_IS_VEG = "is_veg"
COL_FOOD_TYPE = "food_type"  # Legacy spelling of is_veg
COL_VARIANT_NAME = "variant_name"
COL_VARIANT_PRICE = "variant_price_npr"
COL_VARIANT_IS_VEG = "variant_is_veg"

REQUIRED_MENU_COLUMNS: List[str] = [COL_CATEGORY, COL_NAME, COL_PRICE]

# ============================================================================
# Vegetarian Flag Vocabulary
# ============================================================================

VEG_TRUE_TOKENS: FrozenSet[str] = frozenset(
    {"veg", "vegetarian", "v", "true", "1", "yes", "y"}
)
VEG_FALSE_TOKENS: FrozenSet[str] = frozenset(
    {"non-veg", "non veg", "nonveg", "n", "false", "0", "no"}
)

# ============================================================================
# Schema Upgrades
# ============================================================================

MIGRATION_ITEM_IS_VEG = "0009_add_menu_item_is_veg.sql"
MIGRATION_VARIANT_IS_VEG = "0012_add_variant_is_veg.sql"
UPGRADE_COMMAND = "hotel-menu-import upgrade-schema"

# ============================================================================
# Messages
# ============================================================================

ERROR_EMPTY_CSV = "CSV must include header and at least one data row."
ERROR_NO_VALID_ROWS = "No valid rows found in CSV."
ERROR_NOT_CSV = "Only .csv files are supported."
ERROR_CATEGORY_REQUIRED = "Category is required."
ERROR_NAME_REQUIRED = "Item name is required."
ERROR_INVALID_PRICE = "price_npr must be a non-negative integer."
ERROR_VARIANT_PRICE_REQUIRED = "variant_price_npr is required when variant_name is provided."
ERROR_INVALID_VARIANT_PRICE = "variant_price_npr must be a non-negative integer."
