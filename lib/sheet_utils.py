"""
Sheet utility functions.
A1 range building, column letters, and row inspection helpers.
"""
import re
from typing import Any


def quote_tab(tab: str) -> str:
    """
    Quote a tab name for use in an A1 range reference.
    Embedded single quotes are doubled: O'Brien -> 'O''Brien'
    """
    return "'" + str(tab).replace("'", "''") + "'"


def a1_range(tab: str, cells: str) -> str:
    """Build a range reference like 'Users'!A2:H."""
    return f"{quote_tab(tab)}!{cells}"


def col_letter_to_index(letter: str) -> int:
    """
    Convert column letter(s) to 0-based index.
    A -> 0, B -> 1, ..., Z -> 25, AA -> 26, etc.
    """
    result = 0
    for char in letter.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


def index_to_col_letter(index: int) -> str:
    """
    Convert 0-based index to column letter(s).
    0 -> A, 1 -> B, ..., 25 -> Z, 26 -> AA, etc.
    """
    result = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        result = chr(ord("A") + remainder) + result
    return result


def cell(row: list[Any], idx: int, default: str = "") -> str:
    """Cell value as a string, or default when the row is short or the cell empty."""
    if 0 <= idx < len(row) and row[idx] is not None and str(row[idx]) != "":
        return str(row[idx])
    return default


def is_blank_row(row: list[Any]) -> bool:
    """True when no cell in the row has visible content."""
    return not any(str(c).strip() for c in row if c is not None)


def extract_spreadsheet_id(url: Any) -> str | None:
    """
    Extract spreadsheet ID from a Google Sheets URL or raw ID string.

    Args:
        url: A Google Sheets URL or raw spreadsheet ID

    Returns:
        The spreadsheet ID if found (at least 25 chars), None otherwise
    """
    if not url:
        return None
    s = str(url).strip()
    match = re.search(r"/spreadsheets/d/([-\w]+)", s)
    if match:
        return match.group(1)
    match = re.search(r"[-\w]{25,}", s)
    return match.group(0) if match else None
