"""
Time slots handler class.

Time slots are parent-less groups kept in the TimeSlots tab of a fixed
spreadsheet. They can be listed, created and deleted; there is no update.
"""
from __future__ import annotations

from typing import Any, ClassVar

from core.base_handler import BaseHandler
from env_loader import get_timeslots_sheet_id
from lib.errors import bad_request
from lib.id_rules import new_record_id
from lib.input_parser import pick_fields
from lib.row_codec import normalize_record


class TimeSlotsHandler(BaseHandler):
    """Handler for time slot operations."""

    KIND: ClassVar[str] = "timeslots"

    def resolve_spreadsheet_id(self) -> str:
        return get_timeslots_sheet_id()

    def list(self) -> dict[str, Any]:
        return self.list_records("timeslots.list", "timeslots")

    def create(self, payload: dict | None = None) -> dict[str, Any]:
        """
        Create a time slot.

        Args:
            payload: {"name": "14:00", "parentId": optional}
        """
        op = "timeslots.create"
        fields = pick_fields(payload, ["name", "parentId"])
        if not fields.get("name"):
            return bad_request(op, "name is required")

        record = normalize_record(self.KIND, {**fields, "id": new_record_id()})
        result = self.create_record(op, "timeslot", record)
        if result["ok"]:
            self._record("cohort", "Time Slot Added", f"Time slot {record['name']} was added.")
        return result

    def delete(self, slot_id: str | None) -> dict[str, Any]:
        op = "timeslots.delete"
        if not slot_id:
            return bad_request(op, "id is required")
        result = self.delete_record(op, str(slot_id), "Time Slot")
        if result["ok"]:
            self._record("cohort", "Time Slot Removed", f"Time slot {slot_id} was removed.")
        return result
