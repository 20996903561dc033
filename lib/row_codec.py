"""
Row codec for registry tabs.

Converts spreadsheet rows (lists of cell strings, as returned by the
values API) to record dicts and back. Each entity kind has a fixed column
order starting at column A; the identifier is always column A.
"""
from typing import Any, NamedTuple

from config import (
    USERS_TAB,
    STUDENTS_TAB,
    GROUPS_TAB,
    TIMESLOTS_TAB,
    USER_COLUMNS,
    STUDENT_COLUMNS,
    GROUP_COLUMNS,
    TIMESLOT_COLUMNS,
)
from lib.sheet_utils import cell, index_to_col_letter


class Column(NamedTuple):
    key: str
    header: str
    default: str | None = ""


class RowSpec(NamedTuple):
    """Column layout of one registry tab."""
    kind: str
    tab: str
    columns: tuple[Column, ...]

    @property
    def header(self) -> list[str]:
        return [c.header for c in self.columns]

    @property
    def keys(self) -> list[str]:
        return [c.key for c in self.columns]

    @property
    def last_column(self) -> str:
        return index_to_col_letter(len(self.columns) - 1)

    @property
    def data_cells(self) -> str:
        """Data rows below the header, e.g. A2:H."""
        return f"A2:{self.last_column}"

    def row_cells(self, row_index: int) -> str:
        """Cells of a single 1-based row, e.g. A5:H5."""
        return f"A{row_index}:{self.last_column}{row_index}"


def _spec(kind: str, tab: str, columns: tuple) -> RowSpec:
    return RowSpec(kind, tab, tuple(Column(*c) for c in columns))


ROW_SPECS: dict[str, RowSpec] = {
    "users": _spec("users", USERS_TAB, USER_COLUMNS),
    "students": _spec("students", STUDENTS_TAB, STUDENT_COLUMNS),
    "groups": _spec("groups", GROUPS_TAB, GROUP_COLUMNS),
    "timeslots": _spec("timeslots", TIMESLOTS_TAB, TIMESLOT_COLUMNS),
}


def get_spec(kind: str) -> RowSpec:
    """Look up the layout for an entity kind; unknown kinds raise KeyError."""
    try:
        return ROW_SPECS[kind]
    except KeyError:
        raise KeyError(f"unknown entity kind: {kind}") from None


def decode(kind: str, row: list[Any]) -> dict[str, Any] | None:
    """
    Decode one row into a record.

    Empty or missing cells take the column default. Returns None for rows
    whose identifier cell is blank; those are spacer rows, not records.
    """
    spec = get_spec(kind)
    if not cell(row, 0).strip():
        return None
    return {col.key: cell(row, i, col.default) for i, col in enumerate(spec.columns)}


def decode_rows(kind: str, rows: list[list[Any]]) -> list[dict[str, Any]]:
    """Decode a block of rows, dropping blank-identifier rows."""
    records = []
    for row in rows:
        record = decode(kind, row)
        if record is not None:
            records.append(record)
    return records


def encode(kind: str, record: dict[str, Any]) -> list[str]:
    """Encode a record into cell strings in column order. None becomes an empty cell."""
    spec = get_spec(kind)
    out = []
    for col in spec.columns:
        value = record.get(col.key)
        out.append("" if value is None else str(value))
    return out


def normalize_record(kind: str, record: dict[str, Any]) -> dict[str, Any]:
    """Apply column defaults to a caller-supplied record (id is kept as given)."""
    spec = get_spec(kind)
    row = encode(kind, record)
    return {col.key: (row[i] if row[i] != "" else col.default) for i, col in enumerate(spec.columns)}
