"""
Common utility functions.
"""
import sys
import unicodedata
from typing import Any


def log(*a: Any) -> None:
    print(*a, file=sys.stderr, flush=True)


def normalize(s: Any) -> str:
    """
    Normalize a string for comparison.
    - NFKC normalization
    - Lowercase
    - Strip whitespace
    """
    if s is None:
        return ""
    text = str(s).strip().lower()
    return unicodedata.normalize("NFKC", text)


def unique(items: Any) -> list[str]:
    """Drop blanks and duplicates, keeping the first occurrence."""
    seen: set[str] = set()
    out: list[str] = []
    for item in items:
        s = str(item or "").strip()
        if s and s not in seen:
            seen.add(s)
            out.append(s)
    return out


def ok(op: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
    """Create a successful response."""
    return {"ok": True, "op": op, "data": data or {}}


def ng(op: str, code: str, message: str, extra: dict[str, Any] | None = None) -> dict[str, Any]:
    """Create an error response."""
    error: dict[str, Any] = {"code": code, "message": message}
    if extra:
        error.update(extra)
    return {"ok": False, "op": op, "error": error}
