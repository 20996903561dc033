"""
Input parsing and validation utilities.

Functions for parsing and normalizing tool arguments and HTTP request
bodies, handling various input formats (strings, dicts, lists).
"""
from typing import Any


def strip_quotes(s: str) -> str:
    """
    Strip outer quotes from a string.

    Args:
        s: Input string

    Returns:
        String with leading/trailing quotes removed
    """
    s = s.strip()
    if (s.startswith('"') and s.endswith('"')) or (s.startswith("'") and s.endswith("'")):
        return s[1:-1]
    return s


def coerce_str(x: Any, keys: tuple[str, ...] = ()) -> str | None:
    """
    Extract a string from various input formats.

    Handles:
    - Direct string input
    - Dict with specified keys

    Args:
        x: Input value (string, dict, or other)
        keys: Tuple of keys to try in dict order

    Returns:
        Extracted string or None if not found
    """
    if isinstance(x, str):
        return strip_quotes(x)
    if isinstance(x, dict):
        for k in keys:
            v = x.get(k)
            if isinstance(v, str):
                return strip_quotes(v)
    return None


def as_list(x: Any, id_key: str = "id") -> list[str]:
    """
    Convert input to a list of string IDs.

    Handles:
    - None -> empty list
    - Single string -> list with one element
    - List/tuple of strings -> list of strings
    - List/tuple of dicts -> extract id_key from each
    """
    if x is None:
        return []
    if isinstance(x, (list, tuple)):
        out = []
        for v in x:
            if isinstance(v, str):
                out.append(strip_quotes(v))
            elif isinstance(v, dict):
                s = coerce_str(v, (id_key, "id"))
                if s:
                    out.append(s)
        return out
    if isinstance(x, str):
        return [strip_quotes(x)]
    return []


def as_refs(x: Any) -> list[dict[str, str]]:
    """
    Convert input to a list of {id, spreadsheetId} references.

    Accepts a list of dicts ({"id": ..., "spreadsheetId": ...}) or of
    bare id strings (spreadsheetId left empty).
    """
    if not isinstance(x, (list, tuple)):
        return []
    refs = []
    for v in x:
        if isinstance(v, str):
            refs.append({"id": strip_quotes(v), "spreadsheetId": ""})
        elif isinstance(v, dict):
            rid = coerce_str(v, ("id",))
            if rid:
                refs.append({
                    "id": rid,
                    "spreadsheetId": coerce_str(v, ("spreadsheetId", "spreadsheet_id")) or "",
                })
    return refs


def pick_fields(body: Any, keys: list[str]) -> dict[str, Any]:
    """
    Keep only the given keys from a request body.

    Non-dict bodies give an empty dict. Strings are stripped; None is kept
    so that optional references (parentId) can be cleared.
    """
    if not isinstance(body, dict):
        return {}
    out: dict[str, Any] = {}
    for k in keys:
        if k not in body:
            continue
        v = body[k]
        out[k] = v.strip() if isinstance(v, str) else v
    return out
