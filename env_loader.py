"""
Environment variable loader for the registry server.
Handles loading credentials and spreadsheet IDs from .env file or environment.
"""
import os
import json
from pathlib import Path

# Load .env file if it exists
from dotenv import load_dotenv

from config import PRIMARY_SHEET_ID, REGISTRY_FALLBACK_IDS, TIMESLOTS_SHEET_ID
from core.spreadsheet_locator import candidate_ids
from lib.common import unique
from lib.errors import ConfigurationError
from lib.sheet_utils import extract_spreadsheet_id


# Find .env file (look in current dir and parent dirs)
def _find_env_file() -> Path | None:
    current = Path(__file__).parent
    for _ in range(3):  # Check up to 3 levels up
        env_path = current / ".env"
        if env_path.exists():
            return env_path
        current = current.parent
    return None

_env_file = _find_env_file()
if _env_file:
    load_dotenv(_env_file)


def get_google_credentials() -> dict:
    """
    Get Google Service Account credentials.

    Priority:
    1. GOOGLE_CREDENTIALS_FILE (path to JSON file)
    2. GOOGLE_CREDENTIALS_JSON (JSON string content)
    3. GOOGLE_SERVICE_ACCOUNT_EMAIL + GOOGLE_PRIVATE_KEY

    Returns:
        dict: Parsed credentials dictionary

    Raises:
        ConfigurationError: If no credentials are configured
    """
    # Option 1: File path
    creds_file = os.environ.get("GOOGLE_CREDENTIALS_FILE")
    if creds_file:
        creds_path = Path(creds_file)
        if not creds_path.exists():
            raise ConfigurationError(f"GOOGLE_CREDENTIALS_FILE not found: {creds_file}")
        with open(creds_path, "r") as f:
            return json.load(f)

    # Option 2: JSON content
    creds_json = os.environ.get("GOOGLE_CREDENTIALS_JSON")
    if creds_json:
        try:
            return json.loads(creds_json)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid GOOGLE_CREDENTIALS_JSON: {e}")

    # Option 3: email + private key (escaped newlines restored)
    email = os.environ.get("GOOGLE_SERVICE_ACCOUNT_EMAIL")
    private_key = os.environ.get("GOOGLE_PRIVATE_KEY")
    if email and private_key:
        return {
            "type": "service_account",
            "client_email": email,
            "private_key": private_key.replace("\\n", "\n"),
            "token_uri": "https://oauth2.googleapis.com/token",
        }

    raise ConfigurationError(
        "No Google credentials configured. "
        "Set GOOGLE_CREDENTIALS_FILE, GOOGLE_CREDENTIALS_JSON, or "
        "GOOGLE_SERVICE_ACCOUNT_EMAIL and GOOGLE_PRIVATE_KEY in .env"
    )


def _split_ids(raw: str | None) -> list[str]:
    """Split a comma-separated list of spreadsheet IDs or URLs."""
    if not raw:
        return []
    return unique(extract_spreadsheet_id(part) or "" for part in raw.split(","))


def get_env_sheet_ids() -> list[str]:
    """Spreadsheet IDs from GOOGLE_SHEET_ID, in order."""
    return _split_ids(os.environ.get("GOOGLE_SHEET_ID"))


def get_registry_candidates() -> list[str]:
    """Environment IDs first, then the built-in fallbacks, without duplicates."""
    return candidate_ids(get_env_sheet_ids(), REGISTRY_FALLBACK_IDS)


def get_users_sheet_id() -> str:
    """First configured spreadsheet ID, or the primary sheet."""
    ids = get_env_sheet_ids()
    return ids[0] if ids else PRIMARY_SHEET_ID


def get_primary_sheet_id() -> str:
    """Spreadsheet every student write goes to."""
    ids = _split_ids(os.environ.get("PRIMARY_SHEET_ID"))
    return ids[0] if ids else PRIMARY_SHEET_ID


def get_timeslots_sheet_id() -> str:
    """Spreadsheet holding the TimeSlots tab."""
    ids = _split_ids(os.environ.get("TIMESLOTS_SHEET_ID"))
    return ids[0] if ids else TIMESLOTS_SHEET_ID


def get_salary_sheet_ids() -> list[str]:
    """Spreadsheets scanned by the salary report (SALARY_SHEET_IDS, else registry candidates)."""
    ids = _split_ids(os.environ.get("SALARY_SHEET_IDS"))
    return ids or get_registry_candidates()


def get_port() -> int:
    """Get server port from environment."""
    return int(os.environ.get("PORT", "8080"))
