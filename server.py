"""
School Registry Server

Serves the registry spreadsheets (users, students, cohorts, time slots) and
the salary/fines report over Google Sheets API access, both as MCP tools
and as HTTP JSON routes under /api.
"""
import json
from contextlib import asynccontextmanager
from typing import Any, Callable

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.endpoints import HTTPEndpoint
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from config import SALARY_CACHE_CONTROL
from env_loader import get_port
from sheets_client import get_sheets_client
from handlers.users import UsersHandler
from handlers.students import StudentsHandler
from handlers.groups import GroupsHandler
from handlers.timeslots import TimeSlotsHandler
from handlers.salary import SalaryHandler
from lib.audit_log import get_audit_log
from lib.common import log, ok
from lib.errors import ConfigurationError, bad_request, config_error, http_status
from lib.input_parser import coerce_str, as_list, as_refs


def allowed_hosts(port: int) -> list[str]:
    """Host headers the MCP endpoint accepts when served on port."""
    return [f"localhost:{port}", f"127.0.0.1:{port}"]


transport_security = TransportSecuritySettings(
    enable_dns_rebinding_protection=True,
    allowed_hosts=allowed_hosts(get_port()),
)

mcp = FastMCP("school-registry", transport_security=transport_security)


def _with_sheets(op: str, fn: Callable[[Any], dict]) -> dict:
    """Run fn with the shared SheetsClient; missing credentials become CONFIG_ERROR."""
    try:
        sheets = get_sheets_client()
    except ConfigurationError as e:
        log(f"{op}: {e}")
        return config_error(op)
    return fn(sheets)


def _groups_overview(sheets: Any) -> dict:
    """Groups joined with the users and time slots they reference."""
    op = "groups.overview"
    users = UsersHandler(sheets).list()
    if not users.get("ok"):
        return {**users, "op": op}
    slots = TimeSlotsHandler(sheets).list()
    if not slots.get("ok"):
        return {**slots, "op": op}
    return GroupsHandler(sheets).overview(
        users["data"]["users"],
        slots["data"]["timeslots"],
    )


# ===== Users Tools =====

@mcp.tool()
async def users_list() -> dict:
    """List registry users (admins, employees, teachers).

    Returns (example):
    { ok:true, op:"users.list", data:{ users:[{id, firstName, lastName, role, …}], count, spreadsheetId } }
    """
    return _with_sheets("users.list", lambda s: UsersHandler(s).list())


@mcp.tool()
async def users_create(record: dict[str, Any] | None = None) -> dict:
    """Create a user. The id is generated by the server.

    Args:
    - record: {employeeId, firstName, lastName, password, role, telephone, email}
      role is one of admin / employee / teacher (default employee).
    """
    return _with_sheets("users.create", lambda s: UsersHandler(s).create(record))


@mcp.tool()
async def users_update(record: dict[str, Any] | None = None) -> dict:
    """Overwrite a user row. record must contain id."""
    return _with_sheets("users.update", lambda s: UsersHandler(s).update(record))


@mcp.tool()
async def users_delete(user_id: Any) -> dict:
    """Delete a user by id."""
    uid = coerce_str(user_id, ("user_id", "id"))
    if not uid:
        return bad_request("users.delete", "user_id is required")
    return _with_sheets("users.delete", lambda s: UsersHandler(s).delete(uid))


# ===== Students Tools =====

@mcp.tool()
async def students_list() -> dict:
    """List students from every candidate spreadsheet.

    Each student carries the spreadsheetId it was read from; pass it back
    to students_update / students_delete / students_toggle_status.
    """
    return _with_sheets("students.list", lambda s: StudentsHandler(s).list())


@mcp.tool()
async def students_create(record: dict[str, Any] | None = None) -> dict:
    """Enroll a student in the primary spreadsheet (status Active).

    Args:
    - record: {name, surname, phone, parentPhone, group}; name and surname are required.

    Example:
    - students_create({"record": {"name": "Ana", "surname": "Lee", "group": "Grade 9"}})
    """
    return _with_sheets("students.create", lambda s: StudentsHandler(s).create(record))


@mcp.tool()
async def students_update(record: dict[str, Any] | None = None) -> dict:
    """Overwrite a student row. record must contain id and spreadsheetId."""
    return _with_sheets("students.update", lambda s: StudentsHandler(s).update(record))


@mcp.tool()
async def students_delete(student_id: Any, spreadsheet_id: Any = None) -> dict:
    """Delete a student from the spreadsheet it lives in (spreadsheet_id required)."""
    sid = coerce_str(student_id, ("student_id", "id"))
    spid = coerce_str(spreadsheet_id, ("spreadsheet_id", "spreadsheetId"))
    return _with_sheets("students.delete", lambda s: StudentsHandler(s).delete(sid, spid))


@mcp.tool()
async def students_toggle_status(student_id: Any, spreadsheet_id: Any = None) -> dict:
    """Flip a student between Active and Inactive."""
    sid = coerce_str(student_id, ("student_id", "id"))
    spid = coerce_str(spreadsheet_id, ("spreadsheet_id", "spreadsheetId"))
    return _with_sheets(
        "students.toggle_status",
        lambda s: StudentsHandler(s).toggle_status(sid, spid),
    )


@mcp.tool()
async def students_bulk_delete(students: Any) -> dict:
    """Delete several students one by one.

    Args:
    - students: [{"id": "...", "spreadsheetId": "..."}, …]

    Deletions that succeeded are kept when a later one fails; failures are
    listed in data.failed.
    """
    refs = as_refs(students)
    return _with_sheets("students.bulk_delete", lambda s: StudentsHandler(s).bulk_delete(refs))


# ===== Groups Tools =====

@mcp.tool()
async def groups_list() -> dict:
    """List cohorts from the registry spreadsheet."""
    return _with_sheets("groups.list", lambda s: GroupsHandler(s).list())


@mcp.tool()
async def groups_create(record: dict[str, Any] | None = None) -> dict:
    """Create a cohort.

    Args:
    - record: {name, description, teacherId, scheduleType, timeSlotId}
      scheduleType is one of MWF / TTS / DAILY (default MWF).
    """
    return _with_sheets("groups.create", lambda s: GroupsHandler(s).create(record))


@mcp.tool()
async def groups_update(record: dict[str, Any] | None = None) -> dict:
    """Overwrite a cohort row. record must contain id."""
    return _with_sheets("groups.update", lambda s: GroupsHandler(s).update(record))


@mcp.tool()
async def groups_delete(group_id: Any) -> dict:
    """Delete a cohort by id."""
    gid = coerce_str(group_id, ("group_id", "id"))
    if not gid:
        return bad_request("groups.delete", "group_id is required")
    return _with_sheets("groups.delete", lambda s: GroupsHandler(s).delete(gid))


@mcp.tool()
async def groups_overview() -> dict:
    """Cohorts with teacherName and timeSlotName resolved (Unassigned when dangling)."""
    return _with_sheets("groups.overview", _groups_overview)


# ===== Time Slots Tools =====

@mcp.tool()
async def timeslots_list() -> dict:
    """List time slots."""
    return _with_sheets("timeslots.list", lambda s: TimeSlotsHandler(s).list())


@mcp.tool()
async def timeslots_create(name: Any, parent_id: str | None = None) -> dict:
    """Create a time slot (e.g. "14:00")."""
    n = coerce_str(name, ("name",))
    payload = {"name": n, "parentId": parent_id}
    return _with_sheets("timeslots.create", lambda s: TimeSlotsHandler(s).create(payload))


@mcp.tool()
async def timeslots_delete(slot_id: Any) -> dict:
    """Delete a time slot by id."""
    tid = coerce_str(slot_id, ("slot_id", "id"))
    if not tid:
        return bad_request("timeslots.delete", "slot_id is required")
    return _with_sheets("timeslots.delete", lambda s: TimeSlotsHandler(s).delete(tid))


# ===== Salary Tools =====

@mcp.tool()
async def salary_report(spreadsheet_ids: Any = None) -> dict:
    """Aggregate fines and salaries from the salary workbooks.

    Args:
    - spreadsheet_ids: optional list of workbook ids (default: configured workbooks)

    Every record has teacherName and teacherNameSource (explicit / inferred / unknown).
    """
    ids = as_list(spreadsheet_ids) or None
    return _with_sheets("salary.aggregate", lambda s: SalaryHandler(s).aggregate(ids))


# ===== Utility Tools =====

@mcp.tool()
async def logs_list(limit: int | None = None) -> dict:
    """Recent registry changes, newest first."""
    entries = get_audit_log().entries(limit)
    return ok("logs.list", {"logs": entries, "count": len(entries)})


@mcp.tool()
async def tools_help() -> dict:
    """List the tools this server exposes and how to call them."""
    tools = [
        {"name": "users_list", "desc": "List users", "args": {}},
        {"name": "users_create", "desc": "Create a user", "args": {"record": "dict"}},
        {"name": "users_update", "desc": "Update a user", "args": {"record": "dict (id required)"}},
        {"name": "users_delete", "desc": "Delete a user", "args": {"user_id": "string"}},
        {"name": "students_list", "desc": "List students across spreadsheets", "args": {}},
        {"name": "students_create", "desc": "Enroll a student", "args": {"record": "dict"}},
        {"name": "students_update", "desc": "Update a student", "args": {"record": "dict (id, spreadsheetId required)"}},
        {"name": "students_delete", "desc": "Delete a student", "args": {"student_id": "string", "spreadsheet_id": "string"}},
        {"name": "students_toggle_status", "desc": "Flip Active/Inactive", "args": {"student_id": "string", "spreadsheet_id": "string"}},
        {"name": "students_bulk_delete", "desc": "Delete several students", "args": {"students": "list"}},
        {"name": "groups_list", "desc": "List cohorts", "args": {}},
        {"name": "groups_create", "desc": "Create a cohort", "args": {"record": "dict"}},
        {"name": "groups_update", "desc": "Update a cohort", "args": {"record": "dict (id required)"}},
        {"name": "groups_delete", "desc": "Delete a cohort", "args": {"group_id": "string"}},
        {"name": "groups_overview", "desc": "Cohorts with teacher and time slot names", "args": {}},
        {"name": "timeslots_list", "desc": "List time slots", "args": {}},
        {"name": "timeslots_create", "desc": "Create a time slot", "args": {"name": "string", "parent_id": "string"}},
        {"name": "timeslots_delete", "desc": "Delete a time slot", "args": {"slot_id": "string"}},
        {"name": "salary_report", "desc": "Fines and salaries report", "args": {"spreadsheet_ids": "string[]"}},
        {"name": "logs_list", "desc": "Recent registry changes", "args": {"limit": "int"}},
    ]
    return ok("tools.help", {"tools": tools})


# ===== HTTP Routes =====

def _to_response(
    result: dict,
    key: str | None = None,
    status_code: int = 200,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """
    Render a handler envelope as an HTTP response.

    Success bodies are the data (or data[key]); error bodies are
    {"error": message, ...extra} with the status of the error code.
    """
    if result.get("ok"):
        data = result.get("data") or {}
        return JSONResponse(data[key] if key else data, status_code=status_code, headers=headers)
    error = dict(result.get("error") or {})
    code = error.pop("code", "")
    message = error.pop("message", "")
    return JSONResponse({"error": message, **error}, status_code=http_status(code))


async def _dispatch(
    op: str,
    fn: Callable[[Any], dict],
    key: str | None = None,
    status_code: int = 200,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    result = await run_in_threadpool(_with_sheets, op, fn)
    return _to_response(result, key, status_code, headers)


async def _read_body(request: Request) -> dict[str, Any]:
    """JSON object body; an empty body reads as {}."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="JSON object expected")
    return body


def _param(request: Request, body: dict[str, Any], key: str) -> str | None:
    """Value from the JSON body, falling back to the query string."""
    value = body.get(key)
    if value is None:
        value = request.query_params.get(key)
    if value is None:
        return None
    return coerce_str(value) if isinstance(value, str) else str(value)


class UsersEndpoint(HTTPEndpoint):
    async def get(self, request: Request) -> JSONResponse:
        return await _dispatch("users.list", lambda s: UsersHandler(s).list(), key="users")

    async def post(self, request: Request) -> JSONResponse:
        body = await _read_body(request)
        return await _dispatch("users.create", lambda s: UsersHandler(s).create(body), key="user", status_code=201)

    async def put(self, request: Request) -> JSONResponse:
        body = await _read_body(request)
        return await _dispatch("users.update", lambda s: UsersHandler(s).update(body), key="user")

    async def delete(self, request: Request) -> JSONResponse:
        body = await _read_body(request)
        user_id = _param(request, body, "id")
        return await _dispatch("users.delete", lambda s: UsersHandler(s).delete(user_id))


class StudentsEndpoint(HTTPEndpoint):
    async def get(self, request: Request) -> JSONResponse:
        return await _dispatch("students.list", lambda s: StudentsHandler(s).list(), key="students")

    async def post(self, request: Request) -> JSONResponse:
        body = await _read_body(request)
        return await _dispatch(
            "students.create", lambda s: StudentsHandler(s).create(body), key="student", status_code=201
        )

    async def put(self, request: Request) -> JSONResponse:
        body = await _read_body(request)
        return await _dispatch("students.update", lambda s: StudentsHandler(s).update(body), key="student")

    async def delete(self, request: Request) -> JSONResponse:
        body = await _read_body(request)
        student_id = _param(request, body, "id")
        spreadsheet_id = _param(request, body, "spreadsheetId")
        return await _dispatch(
            "students.delete", lambda s: StudentsHandler(s).delete(student_id, spreadsheet_id)
        )


class StudentsBulkDeleteEndpoint(HTTPEndpoint):
    async def post(self, request: Request) -> JSONResponse:
        body = await _read_body(request)
        refs = as_refs(body.get("students"))
        return await _dispatch("students.bulk_delete", lambda s: StudentsHandler(s).bulk_delete(refs))


class StudentsToggleStatusEndpoint(HTTPEndpoint):
    async def post(self, request: Request) -> JSONResponse:
        body = await _read_body(request)
        student_id = _param(request, body, "id")
        spreadsheet_id = _param(request, body, "spreadsheetId")
        return await _dispatch(
            "students.toggle_status",
            lambda s: StudentsHandler(s).toggle_status(student_id, spreadsheet_id),
            key="student",
        )


class GroupsEndpoint(HTTPEndpoint):
    async def get(self, request: Request) -> JSONResponse:
        if request.query_params.get("view") == "overview":
            return await _dispatch("groups.overview", _groups_overview, key="groups")
        return await _dispatch("groups.list", lambda s: GroupsHandler(s).list(), key="groups")

    async def post(self, request: Request) -> JSONResponse:
        body = await _read_body(request)
        return await _dispatch("groups.create", lambda s: GroupsHandler(s).create(body), key="group", status_code=201)

    async def put(self, request: Request) -> JSONResponse:
        body = await _read_body(request)
        return await _dispatch("groups.update", lambda s: GroupsHandler(s).update(body), key="group")

    async def delete(self, request: Request) -> JSONResponse:
        body = await _read_body(request)
        group_id = _param(request, body, "id")
        return await _dispatch("groups.delete", lambda s: GroupsHandler(s).delete(group_id))


class TimeSlotsEndpoint(HTTPEndpoint):
    async def get(self, request: Request) -> JSONResponse:
        return await _dispatch("timeslots.list", lambda s: TimeSlotsHandler(s).list(), key="timeslots")

    async def post(self, request: Request) -> JSONResponse:
        body = await _read_body(request)
        return await _dispatch(
            "timeslots.create", lambda s: TimeSlotsHandler(s).create(body), key="timeslot", status_code=201
        )

    async def delete(self, request: Request) -> JSONResponse:
        body = await _read_body(request)
        slot_id = _param(request, body, "id")
        return await _dispatch("timeslots.delete", lambda s: TimeSlotsHandler(s).delete(slot_id))


class SheetsEndpoint(HTTPEndpoint):
    async def get(self, request: Request) -> JSONResponse:
        result = await run_in_threadpool(
            _with_sheets, "salary.aggregate", lambda s: SalaryHandler(s).aggregate()
        )
        headers = {"Cache-Control": SALARY_CACHE_CONTROL} if result.get("ok") else None
        return _to_response(result, headers=headers)


class LogsEndpoint(HTTPEndpoint):
    async def get(self, request: Request) -> JSONResponse:
        try:
            limit = int(request.query_params.get("limit") or 0)
        except ValueError:
            raise HTTPException(status_code=400, detail="limit must be an integer")
        entries = get_audit_log().entries(limit)
        return JSONResponse(entries)

    async def delete(self, request: Request) -> JSONResponse:
        cleared = get_audit_log().clear()
        return JSONResponse({"success": True, "cleared": cleared})


async def healthz(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


async def root(request: Request) -> JSONResponse:
    return JSONResponse(
        {"error": "Use /api/* for JSON routes, /mcp for MCP or /healthz for health check"},
        status_code=406,
    )


async def http_error(request: Request, exc: HTTPException) -> JSONResponse:
    message = "Method not allowed" if exc.status_code == 405 else exc.detail
    return JSONResponse({"error": message}, status_code=exc.status_code, headers=exc.headers)


async def configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
    log(f"{request.url.path}: {exc}")
    return JSONResponse({"error": "Missing configuration"}, status_code=500)


def create_app(lifespan: Any = None) -> Starlette:
    """Starlette app serving the /api routes and /healthz."""
    return Starlette(
        routes=[
            Route("/", root),
            Route("/healthz", healthz),
            Route("/api/users", UsersEndpoint),
            Route("/api/students", StudentsEndpoint),
            Route("/api/students/bulk-delete", StudentsBulkDeleteEndpoint),
            Route("/api/students/toggle-status", StudentsToggleStatusEndpoint),
            Route("/api/groups", GroupsEndpoint),
            Route("/api/timeslots", TimeSlotsEndpoint),
            Route("/api/sheets", SheetsEndpoint),
            Route("/api/logs", LogsEndpoint),
        ],
        exception_handlers={
            HTTPException: http_error,
            ConfigurationError: configuration_error,
        },
        lifespan=lifespan,
    )


# ===== Server Entry Point =====

def main() -> None:
    import uvicorn

    # Get MCP ASGI app
    mcp_app = mcp.streamable_http_app()

    @asynccontextmanager
    async def lifespan(app):
        async with mcp.session_manager.run():
            yield

    starlette_app = create_app(lifespan=lifespan)

    # Combined ASGI app - MCP app handles /mcp path internally
    async def combined_app(scope, receive, send):
        path = scope.get("path", "/")
        if path.startswith("/mcp"):
            await mcp_app(scope, receive, send)
        else:
            await starlette_app(scope, receive, send)

    port = get_port()
    log(f"Starting server on port {port}")
    uvicorn.run(combined_app, host="0.0.0.0", port=port, lifespan="on")


if __name__ == "__main__":
    main()
