"""
Students handler class.

Students are read from every candidate spreadsheet that has a Students tab
and are always created in the primary spreadsheet. Updates and deletes are
addressed by (id, spreadsheetId) supplied by the caller, since the same
student tab may exist in several spreadsheets.
"""
from __future__ import annotations

from typing import Any, ClassVar

from core.base_handler import BaseHandler
from config import STUDENT_STATUSES
from env_loader import get_primary_sheet_id, get_registry_candidates
from lib.common import log, unique
from lib.errors import bad_request, not_found
from lib.id_rules import new_record_id
from lib.input_parser import pick_fields
from lib.row_codec import normalize_record
from lib.types import StudentRecord

STUDENT_FIELDS = ["name", "surname", "phone", "parentPhone", "group"]


class StudentsHandler(BaseHandler):
    """
    Handler for student-related operations.

    - list: union of all candidate spreadsheets, each record tagged with spreadsheetId
    - create: always in the primary spreadsheet, status Active
    - update/delete/toggle_status: require an explicit spreadsheetId
    - bulk_delete: sequence of single deletes, no rollback on partial failure
    """

    KIND: ClassVar[str] = "students"

    def resolve_spreadsheet_id(self) -> str:
        return get_primary_sheet_id()

    def source_spreadsheet_ids(self) -> list[str]:
        """Spreadsheets students are read from, primary first."""
        return unique([self.spreadsheet_id, *get_registry_candidates()])

    # === List ===

    def list(self) -> dict[str, Any]:
        """
        List students across all source spreadsheets.

        A failing secondary spreadsheet is logged and skipped; a failing
        primary spreadsheet fails the request.
        """
        op = "students.list"
        primary = self.spreadsheet_id
        students: list[StudentRecord] = []

        for sid in self.source_spreadsheet_ids():
            try:
                records = self.read_records(sid)
            except Exception as e:
                if sid == primary:
                    return self._sheet_error(op, e, sid)
                log(f"students.list skipped {sid}: {e}")
                continue
            students.extend({**r, "spreadsheetId": sid} for r in records)

        return self._ok(op, {"students": students, "count": len(students)})

    # === Create ===

    def create(self, payload: dict | None = None) -> dict[str, Any]:
        """
        Enroll a student in the primary spreadsheet.

        Args:
            payload: name and surname (required), phone, parentPhone, group

        Returns:
            Response with the created student (status Active)
        """
        op = "students.create"
        fields = pick_fields(payload, STUDENT_FIELDS)
        if not fields.get("name") or not fields.get("surname"):
            return bad_request(op, "Name and Surname are required")

        record = normalize_record(self.KIND, {**fields, "id": new_record_id(), "status": "Active"})
        record["spreadsheetId"] = self.spreadsheet_id
        result = self.create_record(op, "student", record)
        if result["ok"]:
            self._record("student", "Student Enrolled",
                         f"New student {record['name']} {record['surname']} "
                         f"was enrolled in {record['group'] or 'no group'}.")
        return result

    # === Update ===

    def update(self, payload: dict | None = None) -> dict[str, Any]:
        """Overwrite a student row in the spreadsheet named by payload["spreadsheetId"]."""
        op = "students.update"
        fields = pick_fields(payload, ["id", "spreadsheetId", *STUDENT_FIELDS, "status"])
        sid = fields.pop("spreadsheetId", None)
        if not fields.get("id") or not sid:
            return bad_request(op, "Missing ID or SpreadsheetID")
        status = fields.get("status")
        if status and status not in STUDENT_STATUSES:
            return bad_request(op, f"status must be one of {', '.join(STUDENT_STATUSES)}")

        record = normalize_record(self.KIND, fields)
        record["spreadsheetId"] = sid
        result = self.update_record(op, "student", record, "Student", spreadsheet_id=sid)
        if result["ok"]:
            self._record("student", "Student Updated",
                         f"Student {record['name']} {record['surname']} records were updated.")
        return result

    def toggle_status(self, student_id: str | None, spreadsheet_id: str | None) -> dict[str, Any]:
        """Flip a student between Active and Inactive."""
        op = "students.toggle_status"
        if not student_id or not spreadsheet_id:
            return bad_request(op, "Missing ID or SpreadsheetID")

        try:
            records = self.read_records(spreadsheet_id)
        except Exception as e:
            return self._sheet_error(op, e, spreadsheet_id)

        current = next((r for r in records if r["id"] == student_id), None)
        if current is None:
            return not_found(op, "Student not found in sheet")

        status = "Inactive" if current["status"] == "Active" else "Active"
        result = self.update({**current, "status": status, "spreadsheetId": spreadsheet_id})
        if not result["ok"]:
            return {**result, "op": op}
        return self._ok(op, result["data"])

    # === Delete ===

    def delete(self, student_id: str | None, spreadsheet_id: str | None) -> dict[str, Any]:
        op = "students.delete"
        if not student_id or not spreadsheet_id:
            return bad_request(op, "Missing ID or SpreadsheetID")
        result = self.delete_record(op, str(student_id), "Student", spreadsheet_id=spreadsheet_id)
        if result["ok"]:
            self._record("student", "Student Removed", f"Student {student_id} was removed from the system.")
        return result

    def bulk_delete(self, refs: list[dict[str, str]]) -> dict[str, Any]:
        """
        Delete several students one after another.

        Each deletion stands alone: earlier deletions are kept when a later
        one fails.

        Args:
            refs: [{"id": ..., "spreadsheetId": ...}, ...]

        Returns:
            Response with deleted ids and failures
        """
        op = "students.bulk_delete"
        if not refs:
            return bad_request(op, "students[] is required")

        deleted: list[str] = []
        failed: list[dict[str, Any]] = []
        for ref in refs:
            result = self.delete(ref.get("id"), ref.get("spreadsheetId"))
            if result["ok"]:
                deleted.append(ref["id"])
            else:
                failed.append({"id": ref.get("id"), **result["error"]})

        return self._ok(op, {"deleted": deleted, "failed": failed, "count": len(deleted)})
