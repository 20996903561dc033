"""
Base handler class for registry tab operations.

Provides common functionality for all entity handlers:
- Spreadsheet targeting (fixed or resolved per request)
- Tab provisioning (create + header row on first write)
- Row locating by identifier and row-index based update/delete
- Per-tab mutation locks
- Response helpers and audit logging
"""
from __future__ import annotations

import threading
from abc import ABC
from contextlib import contextmanager
from typing import Any, ClassVar, Iterator

from lib.audit_log import AuditLog, get_audit_log
from lib.common import ok
from lib.errors import ConfigurationError, config_error, not_found, sheet_error
from lib.row_codec import RowSpec, decode_rows, encode, get_spec
from lib.sheet_utils import a1_range, cell, index_to_col_letter


class BaseHandler(ABC):
    """
    Abstract base class for all registry tab handlers.

    Subclasses must define:
    - KIND: row codec kind ("users", "students", "groups", "timeslots")
    - resolve_spreadsheet_id(): where the handler reads and writes

    Example:
        class UsersHandler(BaseHandler):
            KIND = "users"

            def resolve_spreadsheet_id(self) -> str:
                return get_users_sheet_id()
    """

    KIND: ClassVar[str] = ""

    # Mutations on one tab are serialized so that a located row index is
    # still valid when the write lands (single process only).
    _tab_locks: ClassVar[dict[tuple[str, str], threading.Lock]] = {}
    _tab_locks_guard: ClassVar[threading.Lock] = threading.Lock()

    def __init__(
        self,
        sheets: Any,
        spreadsheet_id: str | None = None,
        audit: AuditLog | None = None,
    ) -> None:
        """
        Initialize handler with sheets client and optional overrides.

        Args:
            sheets: SheetsClient instance
            spreadsheet_id: Override the resolved spreadsheet ID
            audit: Audit log (defaults to the process-wide log)
        """
        self.sheets = sheets
        self._spreadsheet_id = spreadsheet_id
        self.audit = audit or get_audit_log()
        self.spec: RowSpec = get_spec(self.KIND)

    # === Properties ===

    @property
    def tab(self) -> str:
        """Tab this handler's records live in."""
        return self.spec.tab

    @property
    def service_account(self) -> str:
        return getattr(self.sheets, "service_account_email", "") or ""

    def resolve_spreadsheet_id(self) -> str:
        """Spreadsheet used when none was passed to the constructor."""
        raise NotImplementedError

    @property
    def spreadsheet_id(self) -> str:
        """Target spreadsheet, resolved on first use and fixed for this handler."""
        if not self._spreadsheet_id:
            self._spreadsheet_id = self.resolve_spreadsheet_id()
        return self._spreadsheet_id

    # === Locks ===

    @classmethod
    @contextmanager
    def tab_lock(cls, spreadsheet_id: str, tab: str) -> Iterator[None]:
        """Hold the mutation lock for one tab of one spreadsheet."""
        key = (spreadsheet_id, tab)
        with cls._tab_locks_guard:
            lock = cls._tab_locks.setdefault(key, threading.Lock())
        with lock:
            yield

    # === Tab Provisioning ===

    def tab_exists(self, tab: str, spreadsheet_id: str | None = None) -> bool:
        """Check the spreadsheet's current tab list for tab."""
        meta = self.sheets.get_metadata(spreadsheet_id or self.spreadsheet_id)
        return tab in meta.tabs

    def ensure_tab(
        self,
        tab: str,
        header: list[str],
        spreadsheet_id: str | None = None,
    ) -> bool:
        """
        Create tab with a header row unless it already exists.

        Returns:
            True if the tab was created, False if it was already there
        """
        sid = spreadsheet_id or self.spreadsheet_id
        if self.tab_exists(tab, sid):
            return False
        self.sheets.add_tab(sid, tab)
        self.sheets.update_values(sid, a1_range(tab, self._header_cells(header)), [list(header)])
        return True

    @staticmethod
    def _header_cells(header: list[str]) -> str:
        return f"A1:{index_to_col_letter(len(header) - 1)}1"

    # === Row Locating ===

    def find_row_index(
        self,
        tab: str,
        record_id: str,
        spreadsheet_id: str | None = None,
    ) -> int | None:
        """
        Find the sheet row holding record_id in column A.

        Row 1 is the header and is never matched.

        Returns:
            1-based row index, or None if not found
        """
        sid = spreadsheet_id or self.spreadsheet_id
        column = self.sheets.get_values(sid, a1_range(tab, "A:A"))
        target = str(record_id)
        for i, row in enumerate(column[1:], 2):
            if cell(row, 0) == target:
                return i
        return None

    # === Row Mutation ===

    def append_row(self, tab: str, row: list[Any], spreadsheet_id: str | None = None) -> None:
        """Append one row below the tab's data."""
        sid = spreadsheet_id or self.spreadsheet_id
        self.sheets.append_values(sid, a1_range(tab, self.spec.data_cells), [row])

    def upsert_row(
        self,
        tab: str,
        row_index: int,
        row: list[Any],
        spreadsheet_id: str | None = None,
    ) -> None:
        """Overwrite the cells of one 1-based row."""
        sid = spreadsheet_id or self.spreadsheet_id
        self.sheets.update_values(sid, a1_range(tab, self.spec.row_cells(row_index)), [row])

    def delete_row(self, tab: str, row_index: int, spreadsheet_id: str | None = None) -> None:
        """
        Remove one 1-based row.

        The tab's structural sheetId is looked up right before the delete,
        so a renamed tab is still addressed correctly.
        """
        sid = spreadsheet_id or self.spreadsheet_id
        meta = self.sheets.get_metadata(sid)
        sheet_id = meta.tabs.get(tab)
        if sheet_id is None:
            raise LookupError(f"tab '{tab}' not found in {sid}")
        self.sheets.delete_rows(sid, sheet_id, row_index - 1, row_index)

    # === Generic CRUD ===

    def read_records(self, spreadsheet_id: str | None = None) -> list[dict[str, Any]]:
        """Decode every record of this handler's tab; a missing tab has none."""
        sid = spreadsheet_id or self.spreadsheet_id
        if not self.tab_exists(self.tab, sid):
            return []
        rows = self.sheets.get_values(sid, a1_range(self.tab, self.spec.data_cells))
        return decode_rows(self.KIND, rows)

    def list_records(self, op: str, key: str) -> dict[str, Any]:
        """List all records of the tab."""
        try:
            sid = self.spreadsheet_id
            records = self.read_records(sid)
        except ConfigurationError as e:
            return config_error(op, str(e))
        except Exception as e:
            return self._sheet_error(op, e)
        return self._ok(op, {key: records, "count": len(records), "spreadsheetId": sid})

    def create_record(self, op: str, key: str, record: dict[str, Any]) -> dict[str, Any]:
        """Provision the tab if needed and append record."""
        try:
            sid = self.spreadsheet_id
            with self.tab_lock(sid, self.tab):
                self.ensure_tab(self.tab, self.spec.header, sid)
                self.append_row(self.tab, encode(self.KIND, record), sid)
        except ConfigurationError as e:
            return config_error(op, str(e))
        except Exception as e:
            return self._sheet_error(op, e)
        return self._ok(op, {key: record, "spreadsheetId": sid})

    def update_record(
        self,
        op: str,
        key: str,
        record: dict[str, Any],
        label: str,
        spreadsheet_id: str | None = None,
    ) -> dict[str, Any]:
        """Overwrite the row whose identifier equals record["id"]."""
        try:
            sid = spreadsheet_id or self.spreadsheet_id
            with self.tab_lock(sid, self.tab):
                row_index = None
                if self.tab_exists(self.tab, sid):
                    row_index = self.find_row_index(self.tab, record["id"], sid)
                if row_index is None:
                    return not_found(op, f"{label} not found")
                self.upsert_row(self.tab, row_index, encode(self.KIND, record), sid)
        except ConfigurationError as e:
            return config_error(op, str(e))
        except Exception as e:
            return self._sheet_error(op, e, spreadsheet_id)
        return self._ok(op, {key: record, "spreadsheetId": sid})

    def delete_record(
        self,
        op: str,
        record_id: str,
        label: str,
        spreadsheet_id: str | None = None,
    ) -> dict[str, Any]:
        """Remove the row whose identifier equals record_id."""
        try:
            sid = spreadsheet_id or self.spreadsheet_id
            with self.tab_lock(sid, self.tab):
                row_index = None
                if self.tab_exists(self.tab, sid):
                    row_index = self.find_row_index(self.tab, record_id, sid)
                if row_index is None:
                    return not_found(op, f"{label} not found")
                self.delete_row(self.tab, row_index, sid)
        except ConfigurationError as e:
            return config_error(op, str(e))
        except Exception as e:
            return self._sheet_error(op, e, spreadsheet_id)
        return self._ok(op, {"success": True, "id": record_id, "spreadsheetId": sid})

    # === Response Helpers ===

    def _ok(self, op: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
        """Return success response."""
        return ok(op, data or {})

    def _sheet_error(
        self,
        op: str,
        exc: Exception,
        spreadsheet_id: str | None = None,
    ) -> dict[str, Any]:
        """Upstream store failure, tagged with the spreadsheet the request targeted."""
        return sheet_error(
            op,
            str(exc),
            service_account=self.service_account,
            spreadsheet_id=spreadsheet_id or self._spreadsheet_id,
        )

    def _record(self, log_type: str, action: str, description: str) -> None:
        """Add an audit log entry for a completed mutation."""
        self.audit.add(log_type, action, description)
