"""
Tests for the in-memory audit log.
"""
import pytest

from lib.audit_log import AuditLog, get_audit_log, reset_audit_log


class TestAuditLog:
    """Tests for AuditLog"""

    def test_newest_first(self):
        log = AuditLog()
        log.add("user", "User Created", "first")
        log.add("student", "Student Enrolled", "second")
        assert [e["description"] for e in log.entries()] == ["second", "first"]

    def test_entry_shape(self):
        entry = AuditLog().add("cohort", "Cohort Created", "Cohort Grade 9 was created.", user="admin")
        assert set(entry) == {"id", "type", "action", "description", "timestamp", "user"}
        assert isinstance(entry["timestamp"], int)

    def test_user_optional(self):
        assert "user" not in AuditLog().add("settings", "Saved", "x")

    def test_bounded(self):
        log = AuditLog(max_entries=3)
        for i in range(5):
            log.add("auth", "Login", str(i))
        assert log.size == 3
        assert [e["description"] for e in log.entries()] == ["4", "3", "2"]

    def test_default_bound(self):
        assert AuditLog().max_entries == 50

    def test_limit(self):
        log = AuditLog()
        for i in range(4):
            log.add("user", "x", str(i))
        assert len(log.entries(2)) == 2
        assert len(log.entries(0)) == 4

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            AuditLog().add("billing", "x", "y")

    def test_clear(self):
        log = AuditLog()
        log.add("user", "x", "y")
        assert log.clear() == 1
        assert log.entries() == []

    def test_singleton_reset(self):
        first = get_audit_log()
        assert get_audit_log() is first
        reset_audit_log()
        assert get_audit_log() is not first
