"""
Registry spreadsheet resolution.

Several spreadsheets may be configured; the registry is the one whose title
carries the REG marker or which already holds one of the registry tabs.
"""
from __future__ import annotations

from typing import Any, Iterable

from config import REGISTRY_TITLE_MARKER, REGISTRY_TABS
from lib.common import log, unique
from lib.errors import ConfigurationError


def candidate_ids(env_ids: Iterable[str], fallback_ids: Iterable[str]) -> list[str]:
    """
    Ordered candidate list: environment IDs first, fallbacks second.
    Blanks are dropped and duplicates keep their first position.
    """
    return unique([*env_ids, *fallback_ids])


def looks_like_registry(title: str, tab_names: Iterable[str]) -> bool:
    """True when the title contains the marker or any registry tab exists."""
    if REGISTRY_TITLE_MARKER in str(title or "").upper():
        return True
    return bool(REGISTRY_TABS.intersection(tab_names))


def resolve_primary_spreadsheet(sheets: Any, candidates: list[str]) -> str:
    """
    Pick the registry spreadsheet among candidates.

    Candidates are probed in order and the first registry-looking one wins.
    A candidate whose metadata cannot be fetched is skipped. When nothing
    matches, the first candidate is returned even if probing it failed.

    Args:
        sheets: SheetsClient (anything with get_metadata)
        candidates: Ordered, de-duplicated spreadsheet IDs

    Raises:
        ConfigurationError: If candidates is empty
    """
    if not candidates:
        raise ConfigurationError("No spreadsheet IDs configured")

    for spreadsheet_id in candidates:
        try:
            meta = sheets.get_metadata(spreadsheet_id)
        except Exception as e:
            log(f"registry probe skipped {spreadsheet_id}: {e}")
            continue
        if looks_like_registry(meta.title, meta.tabs):
            return spreadsheet_id

    return candidates[0]
