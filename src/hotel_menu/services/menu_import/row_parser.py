"""
Menu CSV row validation and normalization.

Turns tokenized CSV rows into ``ImportRow`` records. Header problems are
fatal for the whole import; problems in a data row reject only that row.

Usage:
    from hotel_menu.services.menu_import.row_parser import parse_menu_csv

    parsed = parse_menu_csv(csv_text)
    for row in parsed.rows:
        print(row.row_no, row.category, row.name, row.price_npr)
    for error in parsed.errors:
        print(error.row_no, error.message)
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from hotel_menu.services.exceptions import EmptyCsvError, MissingColumnError
from hotel_menu.utils import constants as c
from hotel_menu.utils.validators import parse_is_veg, parse_non_negative_int

from .csv_tokenizer import tokenize_csv
from .import_summary import RowError


@dataclass
class ImportRow:
    """One validated menu CSV line. Never persisted."""

    row_no: int
    category: str
    name: str
    price_npr: int
    subcategory: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_veg: bool = True
    variant_name: Optional[str] = None
    variant_price_npr: Optional[int] = None
    variant_is_veg: Optional[bool] = None  # None = inherit from the item


@dataclass
class ParsedMenuCsv:
    """Result of validating every data row of a menu CSV."""

    rows: List[ImportRow] = field(default_factory=list)
    errors: List[RowError] = field(default_factory=list)


class HeaderIndex:
    """Column positions resolved from the header row (-1 when absent)."""

    OPTIONAL_COLUMNS = (
        c.COL_SUBCATEGORY,
        c.COL_DESCRIPTION,
        c.COL_IMAGE_URL,
        c.COL_IS_VEG,
        c.COL_FOOD_TYPE,
        c.COL_VARIANT_NAME,
        c.COL_VARIANT_PRICE,
        c.COL_VARIANT_IS_VEG,
    )

    def __init__(self, header: List[str]):
        headers = [h.strip().lower() for h in header]
        for column in c.REQUIRED_MENU_COLUMNS:
            if column not in headers:
                raise MissingColumnError(column)

        self._positions: Dict[str, int] = {}
        for column in c.REQUIRED_MENU_COLUMNS + list(self.OPTIONAL_COLUMNS):
            self._positions[column] = headers.index(column) if column in headers else -1

        # Legacy files spell the veg flag as food_type
        if self._positions[c.COL_IS_VEG] < 0:
            self._positions[c.COL_IS_VEG] = self._positions[c.COL_FOOD_TYPE]

    def get(self, cols: List[str], column: str) -> str:
        """Trimmed field value, or "" when the column or field is missing."""
        position = self._positions.get(column, -1)
        if position < 0 or position >= len(cols):
            return ""
        return cols[position].strip()

    def get_optional(self, cols: List[str], column: str) -> Optional[str]:
        return self.get(cols, column) or None


def validate_row(
    index: HeaderIndex, cols: List[str], row_no: int, veg_fallback: bool = True
) -> Union[ImportRow, RowError]:
    """
    Validate one tokenized data row.

    Args:
        index: Column positions from the header
        cols: Tokenized fields of the row
        row_no: 1-based row number (header is row 1)
        veg_fallback: is_veg value for blank or unrecognized flags

    Returns:
        ImportRow when valid, otherwise a RowError describing the first problem
    """
    category = index.get(cols, c.COL_CATEGORY)
    if not category:
        return RowError(row_no, c.ERROR_CATEGORY_REQUIRED)

    name = index.get(cols, c.COL_NAME)
    if not name:
        return RowError(row_no, c.ERROR_NAME_REQUIRED)

    price = parse_non_negative_int(index.get(cols, c.COL_PRICE))
    if price is None:
        return RowError(row_no, c.ERROR_INVALID_PRICE)

    variant_name = index.get_optional(cols, c.COL_VARIANT_NAME)
    variant_price_raw = index.get(cols, c.COL_VARIANT_PRICE)
    if variant_name and not variant_price_raw:
        return RowError(row_no, c.ERROR_VARIANT_PRICE_REQUIRED)

    variant_price = None
    if variant_price_raw:
        variant_price = parse_non_negative_int(variant_price_raw)
        if variant_price is None:
            return RowError(row_no, c.ERROR_INVALID_VARIANT_PRICE)

    variant_veg_raw = index.get(cols, c.COL_VARIANT_IS_VEG)

    return ImportRow(
        row_no=row_no,
        category=category,
        subcategory=index.get_optional(cols, c.COL_SUBCATEGORY),
        name=name,
        price_npr=price,
        description=index.get_optional(cols, c.COL_DESCRIPTION),
        image_url=index.get_optional(cols, c.COL_IMAGE_URL),
        is_veg=parse_is_veg(index.get(cols, c.COL_IS_VEG), veg_fallback),
        variant_name=variant_name,
        variant_price_npr=variant_price,
        variant_is_veg=parse_is_veg(variant_veg_raw, True) if variant_veg_raw else None,
    )


def parse_menu_rows(table: List[List[str]], veg_fallback: bool = True) -> ParsedMenuCsv:
    """
    Validate tokenized rows (header first).

    Args:
        table: Output of tokenize_csv()
        veg_fallback: is_veg value for blank or unrecognized flags

    Returns:
        ParsedMenuCsv with valid rows and per-row errors, both in file order

    Raises:
        EmptyCsvError: Fewer than one header plus one data row
        MissingColumnError: A required column is not in the header
    """
    if len(table) < 2:
        raise EmptyCsvError(c.ERROR_EMPTY_CSV)

    index = HeaderIndex(table[0])
    parsed = ParsedMenuCsv()

    for offset, cols in enumerate(table[1:]):
        outcome = validate_row(index, cols, row_no=offset + 2, veg_fallback=veg_fallback)
        if isinstance(outcome, RowError):
            parsed.errors.append(outcome)
        else:
            parsed.rows.append(outcome)

    return parsed


def parse_menu_csv(text: str, veg_fallback: bool = True) -> ParsedMenuCsv:
    """Tokenize and validate menu CSV text. See parse_menu_rows()."""
    return parse_menu_rows(tokenize_csv(text), veg_fallback=veg_fallback)
