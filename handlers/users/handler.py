"""
Users handler class.

Registry users (admins, employees, teachers) stored in the Users tab of
the first configured spreadsheet.
"""
from __future__ import annotations

from typing import Any, ClassVar

from core.base_handler import BaseHandler
from config import USER_ROLES
from env_loader import get_users_sheet_id
from lib.errors import bad_request
from lib.id_rules import new_record_id
from lib.input_parser import pick_fields
from lib.row_codec import normalize_record

USER_FIELDS = ["employeeId", "firstName", "lastName", "password", "role", "telephone", "email"]


class UsersHandler(BaseHandler):
    """
    Handler for user operations.

    - list: all users (empty when the Users tab does not exist yet)
    - create: server-generated id, tab provisioned on first write
    - update/delete: addressed by id
    """

    KIND: ClassVar[str] = "users"

    def resolve_spreadsheet_id(self) -> str:
        return get_users_sheet_id()

    def list(self) -> dict[str, Any]:
        return self.list_records("users.list", "users")

    def create(self, payload: dict | None = None) -> dict[str, Any]:
        """
        Create a user.

        Args:
            payload: Field values; unknown keys are ignored

        Returns:
            Response with the created user
        """
        op = "users.create"
        fields = pick_fields(payload, USER_FIELDS)
        error = self._validate_role(op, fields)
        if error:
            return error

        record = normalize_record(self.KIND, {**fields, "id": new_record_id()})
        result = self.create_record(op, "user", record)
        if result["ok"]:
            self._record("user", "User Created",
                         f"New user {record['firstName']} {record['lastName']} was added.")
        return result

    def update(self, payload: dict | None = None) -> dict[str, Any]:
        """Overwrite the user whose id is payload["id"]."""
        op = "users.update"
        fields = pick_fields(payload, ["id", *USER_FIELDS])
        if not fields.get("id"):
            return bad_request(op, "id is required")
        error = self._validate_role(op, fields)
        if error:
            return error

        record = normalize_record(self.KIND, fields)
        result = self.update_record(op, "user", record, "User")
        if result["ok"]:
            self._record("user", "User Updated",
                         f"User {record['firstName']} {record['lastName']} was updated.")
        return result

    def delete(self, user_id: str | None) -> dict[str, Any]:
        op = "users.delete"
        if not user_id:
            return bad_request(op, "id is required")
        result = self.delete_record(op, str(user_id), "User")
        if result["ok"]:
            self._record("user", "User Removed", f"User {user_id} was removed.")
        return result

    def _validate_role(self, op: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        role = fields.get("role")
        if role and role not in USER_ROLES:
            return bad_request(op, f"role must be one of {', '.join(USER_ROLES)}")
        return None
