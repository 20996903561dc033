"""
Classification rules for salary workbooks.

Salary workbooks come in two shapes: month tabs (one row per teacher,
column A is the teacher) and per-teacher tabs (one row per month, the tab
name is the teacher). Workbook authors also keep one workbook per teacher,
in which case the workbook title is the only place the name appears.
"""
from typing import NamedTuple

from config import (
    MONTH_NAMES,
    INVALID_TEACHER_LABELS,
    TEACHER_NAME_ARTIFACTS,
    UNASSIGNED_PREFIX,
    GENERIC_WORKBOOK_WORDS,
    PIVOT_TAB_PREFIX,
)
from lib.common import normalize

_MONTHS = {m.lower() for m in MONTH_NAMES}

EXPLICIT = "explicit"
INFERRED = "inferred"
UNKNOWN = "unknown"


class TeacherName(NamedTuple):
    """Resolved teacher identity and how confident it is."""
    kind: str
    name: str
    reason: str = ""


def is_month_name(value: str) -> bool:
    return normalize(value) in _MONTHS


def is_invalid_label(value: str) -> bool:
    """True for column-A values that are labels (month, total, fio, ...) rather than names."""
    return normalize(value) in INVALID_TEACHER_LABELS


def is_pivot_tab(tab: str) -> bool:
    return str(tab).startswith(PIVOT_TAB_PREFIX)


def unassigned(tab: str) -> str:
    return f"{UNASSIGNED_PREFIX} ({tab})"


def needs_fallback(name: str) -> bool:
    """Empty names, Unassigned placeholders and header artifacts do not identify anyone."""
    n = normalize(name)
    if not n:
        return True
    if n.startswith(normalize(UNASSIGNED_PREFIX)):
        return True
    return n in TEACHER_NAME_ARTIFACTS


def is_generic_workbook(title: str) -> bool:
    """True when a workbook title reads like a shared finance workbook, not a person."""
    t = normalize(title)
    return any(word in t for word in GENERIC_WORKBOOK_WORDS)


def month_sheet_teacher(label: str, tab: str) -> str:
    """Teacher named by column A of a month tab, or the tab's Unassigned placeholder."""
    if not str(label or "").strip() or is_invalid_label(label):
        return unassigned(tab)
    return str(label).strip()


def is_ambiguous_month_label(label: str) -> bool:
    """Per-teacher tab rows labelled total, fio, answer or month are discarded unless the label is a month."""
    return is_invalid_label(label) and not is_month_name(label)


def resolve_teacher_name(derived: str, workbook_title: str) -> TeacherName:
    """
    Decide the teacher for a record.

    A usable derived name is explicit. Otherwise the workbook title is
    used when it does not look like a generic finance workbook; failing
    that the derived placeholder is kept and the identity is unknown.
    """
    if not needs_fallback(derived):
        return TeacherName(EXPLICIT, str(derived).strip())
    title = str(workbook_title or "").strip()
    if title and not is_generic_workbook(title):
        return TeacherName(INFERRED, title, "spreadsheet title")
    return TeacherName(UNKNOWN, str(derived or "").strip(), "no usable name")
