"""
Google Sheets API client using gspread.
Provides Service Account authentication and the spreadsheet operations
the registry handlers need (metadata, values get/update/append, structural
batch updates).
"""
import json
from typing import Any, NamedTuple

import gspread
from google.oauth2.service_account import Credentials

from lib.errors import ConfigurationError

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.readonly",
]

RAW = {"valueInputOption": "RAW"}


class SpreadsheetMeta(NamedTuple):
    """Spreadsheet title and its tabs (title -> structural sheetId, in sheet order)."""
    spreadsheet_id: str
    title: str
    tabs: dict[str, int]


class SheetsClient:
    """Wrapper around gspread for Google Sheets API access."""

    def __init__(self, credentials_json: str | dict):
        """
        Initialize the client with Service Account credentials.

        Args:
            credentials_json: Either a JSON string or dict containing
                             the Service Account credentials.
        """
        if isinstance(credentials_json, str):
            credentials_json = json.loads(credentials_json)
        creds = Credentials.from_service_account_info(credentials_json, scopes=SCOPES)
        self.gc = gspread.authorize(creds)
        self.service_account_email: str = credentials_json.get("client_email", "")
        self._spreadsheet_cache: dict[str, gspread.Spreadsheet] = {}

    def open_by_id(self, spreadsheet_id: str) -> gspread.Spreadsheet:
        """Open a spreadsheet by ID with caching."""
        if spreadsheet_id not in self._spreadsheet_cache:
            self._spreadsheet_cache[spreadsheet_id] = self.gc.open_by_key(spreadsheet_id)
        return self._spreadsheet_cache[spreadsheet_id]

    def get_metadata(self, spreadsheet_id: str) -> SpreadsheetMeta:
        """Fetch the current title and tab list (always a fresh API call)."""
        ss = self.open_by_id(spreadsheet_id)
        meta = ss.fetch_sheet_metadata()
        tabs: dict[str, int] = {}
        for sheet in meta.get("sheets", []):
            props = sheet.get("properties", {})
            tabs[props.get("title", "")] = props.get("sheetId")
        title = meta.get("properties", {}).get("title", "")
        return SpreadsheetMeta(spreadsheet_id, title, tabs)

    def get_values(self, spreadsheet_id: str, range_a1: str) -> list[list[str]]:
        """Get values from a range like 'Users'!A2:H (trailing empty cells omitted)."""
        ss = self.open_by_id(spreadsheet_id)
        return ss.values_get(range_a1).get("values", [])

    def batch_get_values(self, spreadsheet_id: str, ranges: list[str]) -> list[list[list[str]]]:
        """Get several ranges in one request; results follow the order of ranges."""
        if not ranges:
            return []
        ss = self.open_by_id(spreadsheet_id)
        resp = ss.values_batch_get(ranges)
        value_ranges = resp.get("valueRanges", [])
        return [vr.get("values", []) for vr in value_ranges]

    def update_values(
        self,
        spreadsheet_id: str,
        range_a1: str,
        values: list[list[Any]],
    ) -> None:
        """Overwrite a range with raw values."""
        ss = self.open_by_id(spreadsheet_id)
        ss.values_update(range_a1, params=RAW, body={"values": values})

    def append_values(
        self,
        spreadsheet_id: str,
        range_a1: str,
        values: list[list[Any]],
    ) -> None:
        """Append rows after the last row of the table found in range_a1."""
        ss = self.open_by_id(spreadsheet_id)
        ss.values_append(
            range_a1,
            params={**RAW, "insertDataOption": "INSERT_ROWS"},
            body={"values": values},
        )

    def add_tab(self, spreadsheet_id: str, title: str) -> int:
        """Create a new tab and return its structural sheetId."""
        ss = self.open_by_id(spreadsheet_id)
        resp = ss.batch_update({"requests": [{"addSheet": {"properties": {"title": title}}}]})
        replies = resp.get("replies") or [{}]
        return replies[0].get("addSheet", {}).get("properties", {}).get("sheetId")

    def delete_rows(
        self,
        spreadsheet_id: str,
        sheet_id: int,
        start_index: int,
        end_index: int,
    ) -> None:
        """
        Remove rows [start_index, end_index) (0-based) from the tab with the
        given structural sheetId.
        """
        ss = self.open_by_id(spreadsheet_id)
        ss.batch_update({
            "requests": [{
                "deleteDimension": {
                    "range": {
                        "sheetId": sheet_id,
                        "dimension": "ROWS",
                        "startIndex": start_index,
                        "endIndex": end_index,
                    }
                }
            }]
        })


# Singleton instance for the application
_sheets_client: SheetsClient | None = None


def get_sheets_client() -> SheetsClient:
    """
    Get the global SheetsClient instance.
    Initializes from environment variables on first call.

    Raises:
        ConfigurationError: If no credentials are configured
    """
    global _sheets_client
    if _sheets_client is None:
        from env_loader import get_google_credentials
        credentials = get_google_credentials()
        try:
            _sheets_client = SheetsClient(credentials)
        except (ValueError, KeyError) as e:
            raise ConfigurationError(f"Invalid Google credentials: {e}") from e
    return _sheets_client


def reset_sheets_client() -> None:
    """Reset the global client (useful for testing)."""
    global _sheets_client
    _sheets_client = None
