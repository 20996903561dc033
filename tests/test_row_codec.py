"""
Tests for the registry row codec.
"""
import pytest

from lib.row_codec import decode, decode_rows, encode, get_spec, normalize_record


FULL_RECORDS = {
    "users": {
        "id": "u1", "employeeId": "E001", "firstName": "Jane", "lastName": "Smith",
        "password": "pw", "role": "teacher", "telephone": "555-0100", "email": "jane@example.com",
    },
    "students": {
        "id": "s1", "name": "Ana", "surname": "Lee", "phone": "555-0001",
        "parentPhone": "555-0002", "group": "Grade 9", "status": "Inactive",
    },
    "groups": {
        "id": "g1", "name": "Grade 9", "description": "Morning", "teacherId": "u1",
        "scheduleType": "TTS", "timeSlotId": "t1",
    },
    "timeslots": {"id": "t1", "name": "14:00", "parentId": "t0"},
}


class TestRowSpec:
    """Tests for tab layouts"""

    def test_users_layout(self):
        spec = get_spec("users")
        assert spec.tab == "Users"
        assert spec.header == ["ID", "EmployeeID", "FirstName", "LastName", "Password", "Role", "Telephone", "Email"]
        assert spec.data_cells == "A2:H"
        assert spec.row_cells(5) == "A5:H5"

    def test_timeslots_layout(self):
        spec = get_spec("timeslots")
        assert spec.tab == "TimeSlots"
        assert spec.data_cells == "A2:C"

    def test_unknown_kind(self):
        with pytest.raises(KeyError):
            get_spec("invoices")


class TestDecodeEncode:
    """Tests for decode/encode"""

    @pytest.mark.parametrize("kind", sorted(FULL_RECORDS))
    def test_decode_of_encode_is_identity(self, kind):
        record = FULL_RECORDS[kind]
        assert decode(kind, encode(kind, record)) == record

    def test_encode_column_order(self):
        assert encode("timeslots", {"name": "14:00", "id": "t1"}) == ["t1", "14:00", ""]

    def test_encode_ignores_unknown_keys(self):
        row = encode("students", {**FULL_RECORDS["students"], "spreadsheetId": "sheet-1"})
        assert len(row) == 7
        assert "sheet-1" not in row

    def test_decode_blank_id_is_none(self):
        assert decode("students", ["", "Ana", "Lee"]) is None
        assert decode("students", []) is None

    def test_decode_short_row_uses_defaults(self):
        record = decode("students", ["s1", "Ana", "Lee"])
        assert record["phone"] == ""
        assert record["status"] == "Active"

    def test_decode_defaults_per_kind(self):
        assert decode("users", ["u1"])["role"] == "employee"
        assert decode("groups", ["g1"])["scheduleType"] == "MWF"
        assert decode("timeslots", ["t1", "14:00"])["parentId"] is None

    def test_decode_rows_drops_spacer_rows(self):
        rows = [["s1", "Ana"], [], ["", "orphan"], ["s2", "Ben"]]
        assert [r["id"] for r in decode_rows("students", rows)] == ["s1", "s2"]


class TestNormalizeRecord:
    """Tests for normalize_record"""

    def test_applies_defaults(self):
        record = normalize_record("groups", {"id": "g1", "name": "Grade 9"})
        assert record == {
            "id": "g1", "name": "Grade 9", "description": "", "teacherId": "",
            "scheduleType": "MWF", "timeSlotId": "",
        }

    def test_keeps_given_values(self):
        assert normalize_record("users", {"id": "u1", "role": "admin"})["role"] == "admin"
