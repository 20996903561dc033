"""
Groups (cohorts) handler class.

Cohorts live in the Groups tab of the registry spreadsheet, which is
resolved per request from the configured candidates. teacherId and
timeSlotId are soft references: they may point at nothing.
"""
from __future__ import annotations

from typing import Any, ClassVar

from core.base_handler import BaseHandler
from core.spreadsheet_locator import resolve_primary_spreadsheet
from config import SCHEDULE_TYPES
from env_loader import get_registry_candidates
from lib.errors import ConfigurationError, bad_request, config_error
from lib.id_rules import new_record_id
from lib.input_parser import pick_fields
from lib.row_codec import normalize_record
from lib.types import GroupRecord, TimeSlotRecord, UserRecord

GROUP_FIELDS = ["name", "description", "teacherId", "scheduleType", "timeSlotId"]
UNASSIGNED = "Unassigned"


def assign_names(
    groups: list[GroupRecord],
    users: list[UserRecord],
    timeslots: list[TimeSlotRecord],
) -> list[dict[str, Any]]:
    """
    Attach teacherName and timeSlotName to each group.
    Dangling or empty references read as Unassigned.
    """
    teachers = {
        u["id"]: f"{u.get('firstName', '')} {u.get('lastName', '')}".strip() or u["id"]
        for u in users
    }
    slots = {s["id"]: s.get("name") or s["id"] for s in timeslots}
    out = []
    for g in groups:
        out.append({
            **g,
            "teacherName": teachers.get(g.get("teacherId") or "", UNASSIGNED),
            "timeSlotName": slots.get(g.get("timeSlotId") or "", UNASSIGNED),
        })
    return out


class GroupsHandler(BaseHandler):
    """
    Handler for cohort operations.

    - list / create / update / delete against the resolved registry
    - overview: groups joined with teacher and time slot names
    """

    KIND: ClassVar[str] = "groups"

    def resolve_spreadsheet_id(self) -> str:
        return resolve_primary_spreadsheet(self.sheets, get_registry_candidates())

    def list(self) -> dict[str, Any]:
        return self.list_records("groups.list", "groups")

    def create(self, payload: dict | None = None) -> dict[str, Any]:
        """
        Create a cohort.

        Args:
            payload: name (required), description, teacherId, scheduleType, timeSlotId
        """
        op = "groups.create"
        fields = pick_fields(payload, GROUP_FIELDS)
        if not fields.get("name"):
            return bad_request(op, "name is required")
        error = self._validate_schedule(op, fields)
        if error:
            return error

        record = normalize_record(self.KIND, {**fields, "id": new_record_id()})
        result = self.create_record(op, "group", record)
        if result["ok"]:
            self._record("cohort", "Cohort Created", f"Cohort {record['name']} was created.")
        return result

    def update(self, payload: dict | None = None) -> dict[str, Any]:
        op = "groups.update"
        fields = pick_fields(payload, ["id", *GROUP_FIELDS])
        if not fields.get("id"):
            return bad_request(op, "id is required")
        error = self._validate_schedule(op, fields)
        if error:
            return error

        record = normalize_record(self.KIND, fields)
        result = self.update_record(op, "group", record, "Group")
        if result["ok"]:
            self._record("cohort", "Cohort Updated", f"Cohort {record['name']} was updated.")
        return result

    def delete(self, group_id: str | None) -> dict[str, Any]:
        op = "groups.delete"
        if not group_id:
            return bad_request(op, "id is required")
        result = self.delete_record(op, str(group_id), "Group")
        if result["ok"]:
            self._record("cohort", "Cohort Removed", f"Cohort {group_id} was removed.")
        return result

    def overview(
        self,
        users: list[UserRecord],
        timeslots: list[TimeSlotRecord],
    ) -> dict[str, Any]:
        """
        List groups with resolved teacher and time slot names.

        Args:
            users: Users as returned by UsersHandler.list
            timeslots: Time slots as returned by TimeSlotsHandler.list
        """
        op = "groups.overview"
        try:
            groups = self.read_records()
        except ConfigurationError as e:
            return config_error(op, str(e))
        except Exception as e:
            return self._sheet_error(op, e)
        rows = assign_names(groups, users, timeslots)
        return self._ok(op, {"groups": rows, "count": len(rows), "spreadsheetId": self.spreadsheet_id})

    def _validate_schedule(self, op: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        schedule = fields.get("scheduleType")
        if schedule and schedule not in SCHEDULE_TYPES:
            return bad_request(op, f"scheduleType must be one of {', '.join(SCHEDULE_TYPES)}")
        return None
