"""
Configuration constants for the registry server.
Centralizes spreadsheet IDs, tab names, and column layouts.
"""
from typing import Final

# Spreadsheet IDs used when the environment does not provide any
PRIMARY_SHEET_ID: Final[str] = "1ozJmAzAVf-ISwa6pvtSrwQSkkKpxE5sUpJVTKH_Xw-k"
REGISTRY_FALLBACK_IDS: Final[tuple[str, ...]] = (
    "1ozJmAzAVf-ISwa6pvtSrwQSkkKpxE5sUpJVTKH_Xw-k",
    "1_GwFosb5GihN6DFNLQtY2P9vNiBruRm7LO85_WQ-Y8k",
)
TIMESLOTS_SHEET_ID: Final[str] = "1WkHjKplq7Ruf3u1IxvlW3H_MeTbAXejREKRpFPOOaUw"

# Tab names
USERS_TAB: Final[str] = "Users"
STUDENTS_TAB: Final[str] = "Students"
GROUPS_TAB: Final[str] = "Groups"
TIMESLOTS_TAB: Final[str] = "TimeSlots"
FINES_TAB: Final[str] = "Fines"
PIVOT_TAB_PREFIX: Final[str] = "Pivot Table"

# Registry detection
REGISTRY_TITLE_MARKER: Final[str] = "REG"
REGISTRY_TABS: Final[frozenset[str]] = frozenset({USERS_TAB, STUDENTS_TAB, GROUPS_TAB, TIMESLOTS_TAB})

# Column layouts: (record key, header label, default for an empty cell)
USER_COLUMNS: Final[tuple[tuple[str, str, str | None], ...]] = (
    ("id", "ID", ""),
    ("employeeId", "EmployeeID", ""),
    ("firstName", "FirstName", ""),
    ("lastName", "LastName", ""),
    ("password", "Password", ""),
    ("role", "Role", "employee"),
    ("telephone", "Telephone", ""),
    ("email", "Email", ""),
)

STUDENT_COLUMNS: Final[tuple[tuple[str, str, str | None], ...]] = (
    ("id", "ID", ""),
    ("name", "Name", ""),
    ("surname", "Surname", ""),
    ("phone", "Phone", ""),
    ("parentPhone", "Parent Phone", ""),
    ("group", "Group", ""),
    ("status", "Status", "Active"),
)

GROUP_COLUMNS: Final[tuple[tuple[str, str, str | None], ...]] = (
    ("id", "ID", ""),
    ("name", "Name", ""),
    ("description", "Description", ""),
    ("teacherId", "Teacher ID", ""),
    ("scheduleType", "Schedule", "MWF"),
    ("timeSlotId", "Time Slot ID", ""),
)

TIMESLOT_COLUMNS: Final[tuple[tuple[str, str, str | None], ...]] = (
    ("id", "ID", ""),
    ("name", "Name", ""),
    ("parentId", "ParentID", None),
)

# Allowed enumerations
USER_ROLES: Final[tuple[str, ...]] = ("admin", "employee", "teacher")
STUDENT_STATUSES: Final[tuple[str, ...]] = ("Active", "Inactive")
SCHEDULE_TYPES: Final[tuple[str, ...]] = ("MWF", "TTS", "DAILY")

# Salary workbook ranges
FINES_RANGE: Final[str] = "A2:E"
SALARY_RANGE: Final[str] = "A2:F"

MONTH_NAMES: Final[tuple[str, ...]] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

# Column-A values that never name a teacher (compared case-insensitively)
INVALID_TEACHER_LABELS: Final[frozenset[str]] = frozenset(
    {m.lower() for m in MONTH_NAMES} | {"month", "total", "fio", "answer"}
)

# Derived names that are header artifacts rather than people
TEACHER_NAME_ARTIFACTS: Final[frozenset[str]] = frozenset({"fio", "teacher"})
UNASSIGNED_PREFIX: Final[str] = "Unassigned"

# Words that mark a workbook title as a generic finance workbook
GENERIC_WORKBOOK_WORDS: Final[tuple[str, ...]] = (
    "salary", "finance", "os it", "track", "copy of",
) + tuple(m.lower() for m in MONTH_NAMES)

# Number of raw rows kept in the aggregator diagnostics
DIAGNOSTIC_SAMPLE_ROWS: Final[int] = 5

# Salary endpoint caching
SALARY_CACHE_CONTROL: Final[str] = "public, s-maxage=60, stale-while-revalidate=300"

# Audit log retention
AUDIT_LOG_MAX_ENTRIES: Final[int] = 50

REMEDIATION_HINT: Final[str] = "Ensure you have shared your sheet as EDITOR with: {email}"
