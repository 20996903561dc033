"""
Pytest configuration and fixtures for the registry server tests.

Provides a MagicMock sheets client for unit tests and a stateful in-memory
FakeSheets for scenarios that read back what they wrote.
"""
import os
import re
import pytest
from typing import Any
from unittest.mock import MagicMock

# Set test environment variables before importing anything
os.environ.setdefault("GOOGLE_CREDENTIALS_JSON", '{"type": "service_account", "project_id": "test"}')

from core.base_handler import BaseHandler
from lib.audit_log import reset_audit_log
from lib.sheet_utils import col_letter_to_index
from sheets_client import SpreadsheetMeta, reset_sheets_client

REGISTRY_ID = "registry-spreadsheet-0000000001"
PRIMARY_ID = "primary-spreadsheet-00000000001"
TIMESLOTS_ID = "timeslots-spreadsheet-000000001"
SALARY_ID = "salary-spreadsheet-000000000001"
SERVICE_ACCOUNT = "registry@test-project.iam.gserviceaccount.com"

_RANGE = re.compile(r"^'((?:[^']|'')*)'!([A-Z]+)(\d*):([A-Z]+)(\d*)$")


# ========== Response Assertion Helpers ==========

class ResponseAssertions:
    """Helper class for asserting API response structures."""

    @staticmethod
    def assert_success(response: dict, op: str | None = None) -> dict:
        """Assert response is successful and return data.

        Args:
            response: The response dict to check
            op: Optional operation name to verify

        Returns:
            The data dict from the response
        """
        assert response.get("ok") is True, f"Expected success, got: {response}"
        if op:
            assert response.get("op") == op, f"Expected op={op}, got {response.get('op')}"
        return response.get("data", {})

    @staticmethod
    def assert_error(response: dict, code: str, op: str | None = None) -> dict:
        """Assert response is an error with given code.

        Args:
            response: The response dict to check
            code: Expected error code
            op: Optional operation name to verify

        Returns:
            The error dict from the response
        """
        assert response.get("ok") is False, f"Expected error, got success: {response}"
        assert response.get("error", {}).get("code") == code, \
            f"Expected error code {code}, got {response.get('error', {}).get('code')}"
        if op:
            assert response.get("op") == op, f"Expected op={op}, got {response.get('op')}"
        return response.get("error", {})


# ========== In-memory Sheets ==========

class FakeSheets:
    """
    In-memory SheetsClient.

    Each spreadsheet has a title and ordered tabs; each tab keeps its rows
    including the header at index 0. Reads trim trailing empty cells and
    rows the way the values API does. Spreadsheets listed in `failing`
    raise on every call.
    """

    service_account_email = SERVICE_ACCOUNT

    def __init__(self) -> None:
        self.workbooks: dict[str, dict[str, Any]] = {}
        self.failing: set[str] = set()
        self._next_sheet_id = 100

    # --- setup ---

    def add_spreadsheet(
        self,
        spreadsheet_id: str,
        title: str = "",
        tabs: dict[str, list[list[Any]]] | None = None,
    ) -> None:
        self.workbooks[spreadsheet_id] = {"title": title, "tabs": {}}
        for name, rows in (tabs or {}).items():
            self._new_tab(spreadsheet_id, name, rows)

    def rows(self, spreadsheet_id: str, tab: str) -> list[list[Any]]:
        """Raw rows of a tab, header included."""
        return self._book(spreadsheet_id)["tabs"][tab]["rows"]

    def _new_tab(self, spreadsheet_id: str, name: str, rows: list[list[Any]] | None = None) -> int:
        sheet_id = self._next_sheet_id
        self._next_sheet_id += 1
        self.workbooks[spreadsheet_id]["tabs"][name] = {
            "sheetId": sheet_id,
            "rows": [list(r) for r in (rows or [])],
        }
        return sheet_id

    def _book(self, spreadsheet_id: str) -> dict[str, Any]:
        if spreadsheet_id in self.failing or spreadsheet_id not in self.workbooks:
            raise RuntimeError(f"Requested entity was not found: {spreadsheet_id}")
        return self.workbooks[spreadsheet_id]

    def _locate(self, spreadsheet_id: str, range_a1: str) -> tuple[list[list[Any]], int, int | None, int, int]:
        match = _RANGE.match(range_a1)
        if not match:
            raise ValueError(f"Unable to parse range: {range_a1}")
        tab = match.group(1).replace("''", "'")
        tabs = self._book(spreadsheet_id)["tabs"]
        if tab not in tabs:
            raise RuntimeError(f"Unable to parse range: {range_a1}")
        start_row = int(match.group(3) or 1)
        end_row = int(match.group(5)) if match.group(5) else None
        start_col = col_letter_to_index(match.group(2))
        end_col = col_letter_to_index(match.group(4))
        return tabs[tab]["rows"], start_row, end_row, start_col, end_col

    # --- SheetsClient surface ---

    def get_metadata(self, spreadsheet_id: str) -> SpreadsheetMeta:
        book = self._book(spreadsheet_id)
        tabs = {name: t["sheetId"] for name, t in book["tabs"].items()}
        return SpreadsheetMeta(spreadsheet_id, book["title"], tabs)

    def get_values(self, spreadsheet_id: str, range_a1: str) -> list[list[str]]:
        rows, start_row, end_row, start_col, end_col = self._locate(spreadsheet_id, range_a1)
        out = []
        for row in rows[start_row - 1:end_row]:
            cells = ["" if v is None else str(v) for v in row[start_col:end_col + 1]]
            while cells and cells[-1] == "":
                cells.pop()
            out.append(cells)
        while out and not out[-1]:
            out.pop()
        return out

    def batch_get_values(self, spreadsheet_id: str, ranges: list[str]) -> list[list[list[str]]]:
        return [self.get_values(spreadsheet_id, r) for r in ranges]

    def update_values(self, spreadsheet_id: str, range_a1: str, values: list[list[Any]]) -> None:
        rows, start_row, _, start_col, _ = self._locate(spreadsheet_id, range_a1)
        for offset, new in enumerate(values):
            index = start_row - 1 + offset
            while len(rows) <= index:
                rows.append([])
            row = rows[index]
            while len(row) < start_col + len(new):
                row.append("")
            row[start_col:start_col + len(new)] = list(new)

    def append_values(self, spreadsheet_id: str, range_a1: str, values: list[list[Any]]) -> None:
        rows, _, _, _, _ = self._locate(spreadsheet_id, range_a1)
        last = len(rows)
        while last > 0 and not any(str(c).strip() for c in rows[last - 1]):
            last -= 1
        rows[last:last] = [list(v) for v in values]

    def add_tab(self, spreadsheet_id: str, title: str) -> int:
        book = self._book(spreadsheet_id)
        if title in book["tabs"]:
            raise RuntimeError(f'A sheet with the name "{title}" already exists.')
        return self._new_tab(spreadsheet_id, title)

    def delete_rows(self, spreadsheet_id: str, sheet_id: int, start_index: int, end_index: int) -> None:
        for tab in self._book(spreadsheet_id)["tabs"].values():
            if tab["sheetId"] == sheet_id:
                del tab["rows"][start_index:end_index]
                return
        raise RuntimeError(f"No grid with id: {sheet_id}")


# ========== Fixtures ==========

@pytest.fixture(autouse=True)
def _reset_registry_state():
    """Fresh audit log, tab locks and client singleton for every test."""
    reset_audit_log()
    reset_sheets_client()
    BaseHandler._tab_locks.clear()
    yield
    reset_audit_log()
    reset_sheets_client()


@pytest.fixture
def registry_env(monkeypatch):
    """Point every spreadsheet accessor at the test ids."""
    monkeypatch.setenv("GOOGLE_SHEET_ID", REGISTRY_ID)
    monkeypatch.setenv("PRIMARY_SHEET_ID", PRIMARY_ID)
    monkeypatch.setenv("TIMESLOTS_SHEET_ID", TIMESLOTS_ID)
    monkeypatch.setenv("SALARY_SHEET_IDS", SALARY_ID)


@pytest.fixture
def assertions():
    """Fixture providing response assertion helpers."""
    return ResponseAssertions()


@pytest.fixture
def mock_sheets_client():
    """
    Mock SheetsClient for unit tests.
    Returns a MagicMock that can be configured per test.
    """
    mock = MagicMock()
    mock.service_account_email = SERVICE_ACCOUNT
    mock.get_values.return_value = []
    mock.batch_get_values.return_value = []
    mock.get_metadata.return_value = SpreadsheetMeta(REGISTRY_ID, "Registry", {})
    return mock


@pytest.fixture
def fake_sheets(registry_env):
    """FakeSheets with empty registry, primary and time slot spreadsheets."""
    fake = FakeSheets()
    fake.add_spreadsheet(REGISTRY_ID, "School REG")
    fake.add_spreadsheet(PRIMARY_ID, "Students Primary")
    fake.add_spreadsheet(TIMESLOTS_ID, "Time Slots")
    return fake


@pytest.fixture
def sample_users_rows():
    """Users tab with header"""
    return [
        ["ID", "EmployeeID", "FirstName", "LastName", "Password", "Role", "Telephone", "Email"],
        ["u1", "E001", "Jane", "Smith", "pw", "teacher", "555-0100", "jane@example.com"],
        ["u2", "E002", "Omar", "Khan", "pw", "admin", "", "omar@example.com"],
    ]


@pytest.fixture
def sample_students_rows():
    """Students tab with header"""
    return [
        ["ID", "Name", "Surname", "Phone", "Parent Phone", "Group", "Status"],
        ["s1", "Ana", "Lee", "555-0001", "555-0002", "Grade 9", "Active"],
        ["s2", "Ben", "Ortiz", "", "", "Grade 10", "Inactive"],
    ]
