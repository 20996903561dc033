"""
Tests for environment accessors and credential loading.
"""
import json
import pytest

import env_loader
from config import PRIMARY_SHEET_ID, REGISTRY_FALLBACK_IDS, TIMESLOTS_SHEET_ID
from lib.errors import ConfigurationError

SHEET_A = "1aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
SHEET_B = "1bbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb"

ENV_KEYS = (
    "GOOGLE_SHEET_ID", "PRIMARY_SHEET_ID", "TIMESLOTS_SHEET_ID", "SALARY_SHEET_IDS", "PORT",
    "GOOGLE_CREDENTIALS_FILE", "GOOGLE_CREDENTIALS_JSON",
    "GOOGLE_SERVICE_ACCOUNT_EMAIL", "GOOGLE_PRIVATE_KEY",
)


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestSheetIds:
    """Tests for spreadsheet id accessors"""

    def test_defaults(self, clean_env):
        assert env_loader.get_env_sheet_ids() == []
        assert env_loader.get_users_sheet_id() == PRIMARY_SHEET_ID
        assert env_loader.get_primary_sheet_id() == PRIMARY_SHEET_ID
        assert env_loader.get_timeslots_sheet_id() == TIMESLOTS_SHEET_ID
        assert env_loader.get_registry_candidates() == list(dict.fromkeys(REGISTRY_FALLBACK_IDS))

    def test_comma_separated_ids_and_urls(self, clean_env):
        clean_env.setenv(
            "GOOGLE_SHEET_ID",
            f" {SHEET_A} , https://docs.google.com/spreadsheets/d/{SHEET_B}/edit , {SHEET_A}",
        )
        assert env_loader.get_env_sheet_ids() == [SHEET_A, SHEET_B]
        assert env_loader.get_users_sheet_id() == SHEET_A

    def test_candidates_env_first(self, clean_env):
        clean_env.setenv("GOOGLE_SHEET_ID", f"{SHEET_A},{REGISTRY_FALLBACK_IDS[1]}")
        assert env_loader.get_registry_candidates() == [SHEET_A, REGISTRY_FALLBACK_IDS[1], REGISTRY_FALLBACK_IDS[0]]

    def test_salary_ids(self, clean_env):
        assert env_loader.get_salary_sheet_ids() == env_loader.get_registry_candidates()
        clean_env.setenv("SALARY_SHEET_IDS", f"{SHEET_B},{SHEET_A}")
        assert env_loader.get_salary_sheet_ids() == [SHEET_B, SHEET_A]

    def test_port(self, clean_env):
        assert env_loader.get_port() == 8080
        clean_env.setenv("PORT", "9000")
        assert env_loader.get_port() == 9000


class TestCredentials:
    """Tests for get_google_credentials"""

    def test_none_configured(self, clean_env):
        with pytest.raises(ConfigurationError):
            env_loader.get_google_credentials()

    def test_json(self, clean_env):
        clean_env.setenv("GOOGLE_CREDENTIALS_JSON", '{"client_email": "bot@example.iam"}')
        assert env_loader.get_google_credentials()["client_email"] == "bot@example.iam"

    def test_invalid_json(self, clean_env):
        clean_env.setenv("GOOGLE_CREDENTIALS_JSON", "{not json")
        with pytest.raises(ConfigurationError):
            env_loader.get_google_credentials()

    def test_file_wins(self, clean_env, tmp_path):
        path = tmp_path / "creds.json"
        path.write_text(json.dumps({"client_email": "file@example.iam"}))
        clean_env.setenv("GOOGLE_CREDENTIALS_FILE", str(path))
        clean_env.setenv("GOOGLE_CREDENTIALS_JSON", '{"client_email": "json@example.iam"}')
        assert env_loader.get_google_credentials()["client_email"] == "file@example.iam"

    def test_missing_file(self, clean_env, tmp_path):
        clean_env.setenv("GOOGLE_CREDENTIALS_FILE", str(tmp_path / "nope.json"))
        with pytest.raises(ConfigurationError):
            env_loader.get_google_credentials()

    def test_email_and_key(self, clean_env):
        clean_env.setenv("GOOGLE_SERVICE_ACCOUNT_EMAIL", "bot@example.iam")
        clean_env.setenv("GOOGLE_PRIVATE_KEY", "-----BEGIN-----\\nabc\\n-----END-----")
        creds = env_loader.get_google_credentials()
        assert creds["client_email"] == "bot@example.iam"
        assert creds["private_key"] == "-----BEGIN-----\nabc\n-----END-----"
        assert creds["type"] == "service_account"
