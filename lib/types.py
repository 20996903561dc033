"""
Type definitions for the registry server.
Provides type safety for responses, sheet data, and record shapes.
"""
from typing import TypedDict, Any


class ErrorDetail(TypedDict):
    """Error detail structure."""
    code: str
    message: str


class SuccessResponse(TypedDict):
    """Successful API response."""
    ok: bool
    op: str
    data: dict[str, Any]


class ErrorResponse(TypedDict):
    """Error API response."""
    ok: bool
    op: str
    error: ErrorDetail


# Union type for all API responses
Response = SuccessResponse | ErrorResponse

# Sheet data types
SheetRow = list[Any]
SheetValues = list[SheetRow]


class UserRecord(TypedDict):
    id: str
    employeeId: str
    firstName: str
    lastName: str
    password: str
    role: str
    telephone: str
    email: str


class StudentRecord(TypedDict, total=False):
    id: str
    name: str
    surname: str
    phone: str
    parentPhone: str
    group: str
    status: str
    spreadsheetId: str


class GroupRecord(TypedDict):
    id: str
    name: str
    description: str
    teacherId: str
    scheduleType: str
    timeSlotId: str


class TimeSlotRecord(TypedDict):
    id: str
    name: str
    parentId: str | None


class FineRecord(TypedDict):
    teacherName: str
    teacherNameSource: str
    reason: str
    month: str
    date: str
    amount: str
    spreadsheetId: str


class SalaryRecord(TypedDict):
    teacherName: str
    teacherNameSource: str
    month: str
    income: str
    bonus: str
    fine: str
    recount: str
    total: str
    spreadsheetId: str
