"""
CSV tokenizer for menu uploads.

Turns raw CSV text into rows of trimmed string fields. Parsing is line based
and deliberately lenient:

- ``\\r\\n``, ``\\r`` and ``\\n`` all end a line; blank lines are dropped
- fields are comma separated and may be wrapped in double quotes
- inside quotes, ``""`` is a literal quote and commas are not separators
- an unterminated quote runs to the end of its line (no error)

Quoted newlines are not supported; menu exports never contain them.
"""

from typing import List

BOM = "\ufeff"


def split_csv_line(line: str) -> List[str]:
    """
    Split one CSV line into trimmed fields.

    Args:
        line: A single line without its line terminator

    Returns:
        List of fields, always at least one (possibly empty) field

    Example:
        >>> split_csv_line('"Tom, Suite",Club Sandwich,450')
        ['Tom, Suite', 'Club Sandwich', '450']
    """
    values: List[str] = []
    current: List[str] = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < length and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            values.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1

    values.append("".join(current).strip())
    return values


def split_lines(text: str) -> List[str]:
    """
    Split text into non-blank lines.

    Args:
        text: Raw CSV text

    Returns:
        Lines that contain at least one non-whitespace character
    """
    if text.startswith(BOM):
        text = text[len(BOM):]
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return [line for line in normalized.split("\n") if line.strip()]


def tokenize_csv(text: str) -> List[List[str]]:
    """
    Tokenize CSV text into rows of fields.

    The first returned row is the header. Row numbers shown to users are
    1-based over this list, so the header is row 1 and the first data row
    is row 2.

    Args:
        text: Raw CSV text

    Returns:
        List of rows, each a list of trimmed fields
    """
    return [split_csv_line(line) for line in split_lines(text)]
