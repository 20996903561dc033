"""
In-memory audit log of registry mutations.

Keeps the most recent entries, newest first. The log lives in the server
process only; a restart starts from an empty log.
"""
import threading
import time
import uuid
from typing import Any

from config import AUDIT_LOG_MAX_ENTRIES

LOG_TYPES = ("user", "student", "cohort", "settings", "auth")


class AuditLog:
    """
    Bounded newest-first log.

    Usage:
        audit = AuditLog()
        audit.add("student", "Student Enrolled", "New student Ana Lee was enrolled in Grade 9.")
        audit.entries()  # [{"id": ..., "type": "student", ...}]
    """

    def __init__(self, max_entries: int = AUDIT_LOG_MAX_ENTRIES) -> None:
        self._entries: list[dict[str, Any]] = []
        self._max_entries = max_entries
        self._lock = threading.Lock()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def size(self) -> int:
        return len(self._entries)

    def add(
        self,
        log_type: str,
        action: str,
        description: str,
        user: str | None = None,
    ) -> dict[str, Any]:
        """
        Record an entry and return it.

        Args:
            log_type: One of LOG_TYPES
            action: Short action label (e.g. "Student Removed")
            description: Human readable description
            user: Who performed the action, if known
        """
        if log_type not in LOG_TYPES:
            raise ValueError(f"unknown log type: {log_type}")
        entry: dict[str, Any] = {
            "id": str(uuid.uuid4()),
            "type": log_type,
            "action": action,
            "description": description,
            "timestamp": int(time.time() * 1000),
        }
        if user:
            entry["user"] = user
        with self._lock:
            self._entries.insert(0, entry)
            del self._entries[self._max_entries:]
        return entry

    def entries(self, limit: int | None = None) -> list[dict[str, Any]]:
        """Entries newest first, optionally limited."""
        with self._lock:
            items = list(self._entries)
        if limit and limit > 0:
            items = items[:limit]
        return items

    def clear(self) -> int:
        """Remove all entries and return how many were removed."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        return count


_audit_log: AuditLog | None = None


def get_audit_log() -> AuditLog:
    """Get the process-wide audit log."""
    global _audit_log
    if _audit_log is None:
        _audit_log = AuditLog()
    return _audit_log


def reset_audit_log() -> None:
    """Reset the process-wide log (useful for testing)."""
    global _audit_log
    _audit_log = None
