"""
Duplicate row detection for menu CSV files.

Two rows are duplicates when they name the same variant of the same item in
the same category path, ignoring case. Duplicates are still imported (the
later row wins); the operator just gets a warning listing the rows.
"""

from typing import Dict, List, Tuple

from .import_summary import ImportWarning
from .row_parser import ImportRow

DuplicateKey = Tuple[str, str, str, str]


def duplicate_key(row: ImportRow) -> DuplicateKey:
    """Case-insensitive (category, subcategory, name, variant) key for a row."""
    return (
        row.category.lower(),
        (row.subcategory or "").lower(),
        row.name.lower(),
        (row.variant_name or "").lower(),
    )


def find_duplicate_rows(rows: List[ImportRow]) -> List[ImportWarning]:
    """
    Report rows that share a duplicate key.

    Args:
        rows: Validated rows in file order

    Returns:
        One warning per key seen more than once, in order of first appearance
    """
    row_numbers: Dict[DuplicateKey, List[int]] = {}
    for row in rows:
        row_numbers.setdefault(duplicate_key(row), []).append(row.row_no)

    warnings = []
    for (category, subcategory, name, variant), numbers in row_numbers.items():
        if len(numbers) < 2:
            continue
        message = f'Duplicate item "{name}"'
        if variant:
            message += f' variant "{variant}"'
        message += f' in category "{category}"'
        if subcategory:
            message += f' / "{subcategory}"'
        message += f" appears in rows: {', '.join(str(n) for n in numbers)}"
        warnings.append(ImportWarning(message=message))
    return warnings
