"""
Salary handler class.
Builds the salary/fines report from one or more salary workbooks.

Workbook layout:
- Fines tab: A=teacher, B=reason, C=month, D=date, E=amount (from row 2)
- Month tabs (named January..December): A=teacher, B..F=income, bonus,
  fine, recount, total
- Any other tab is a per-teacher tab named after the teacher:
  A=month, B..F as above
"""
from __future__ import annotations

from typing import Any

from config import FINES_TAB, FINES_RANGE, SALARY_RANGE, DIAGNOSTIC_SAMPLE_ROWS
from env_loader import get_salary_sheet_ids
from lib.common import ok, log, unique
from lib.salary_rules import (
    is_month_name,
    is_pivot_tab,
    is_ambiguous_month_label,
    month_sheet_teacher,
    resolve_teacher_name,
)
from lib.sheet_utils import a1_range, cell, is_blank_row
from lib.types import FineRecord, SalaryRecord, SheetValues


class SalaryHandler:
    """
    Handler for the salary/fines report.

    Amounts are passed through as the sheet shows them; parsing currency
    is left to whoever presents the report.
    """

    def __init__(self, sheets: Any) -> None:
        """Initialize SalaryHandler with a SheetsClient."""
        self.sheets = sheets

    def aggregate(self, spreadsheet_ids: list[str] | None = None) -> dict[str, Any]:
        """
        Collect fines and salaries from every workbook.

        A workbook that cannot be read (no access, bad range) is logged,
        noted in diagnostics, and contributes nothing.

        Args:
            spreadsheet_ids: Workbooks to scan (default: configured salary sheets)

        Returns:
            Response with fines, salaries and diagnostics
        """
        op = "salary.aggregate"
        ids = unique(spreadsheet_ids if spreadsheet_ids is not None else get_salary_sheet_ids())

        fines: list[dict[str, Any]] = []
        salaries: list[dict[str, Any]] = []
        diagnostics: dict[str, Any] = {
            "spreadsheets": [],
            "sheets": {},
            "rawRows": [],
            "errors": [],
        }

        for sid in ids:
            try:
                wb_fines, wb_salaries = self._read_workbook(sid, diagnostics)
            except Exception as e:
                log(f"salary workbook {sid} skipped: {e}")
                diagnostics["errors"].append({"spreadsheetId": sid, "error": str(e)})
                continue
            fines.extend(wb_fines)
            salaries.extend(wb_salaries)
            diagnostics["spreadsheets"].append(sid)

        return ok(op, {"fines": fines, "salaries": salaries, "diagnostics": diagnostics})

    # === Workbook Reading ===

    def _read_workbook(
        self,
        spreadsheet_id: str,
        diagnostics: dict[str, Any],
    ) -> tuple[list[FineRecord], list[SalaryRecord]]:
        meta = self.sheets.get_metadata(spreadsheet_id)
        tabs = [t for t in meta.tabs if not is_pivot_tab(t)]
        diagnostics["sheets"][spreadsheet_id] = tabs

        fines: list[FineRecord] = []
        if FINES_TAB in tabs:
            rows = self.sheets.get_values(spreadsheet_id, a1_range(FINES_TAB, FINES_RANGE))
            fines = [
                self._fine(row, meta.title, spreadsheet_id)
                for row in rows
                if not is_blank_row(row)
            ]

        salary_tabs = [t for t in tabs if t != FINES_TAB]
        batches = self.sheets.batch_get_values(
            spreadsheet_id, [a1_range(t, SALARY_RANGE) for t in salary_tabs]
        )

        salaries: list[SalaryRecord] = []
        for tab, rows in zip(salary_tabs, batches):
            self._sample(diagnostics, rows)
            if is_month_name(tab):
                salaries.extend(self._month_tab(tab, rows, meta.title, spreadsheet_id))
            else:
                salaries.extend(self._teacher_tab(tab, rows, meta.title, spreadsheet_id))

        return fines, salaries

    def _month_tab(self, tab: str, rows: SheetValues, title: str, sid: str) -> list[SalaryRecord]:
        """One row per teacher; the tab name is the month."""
        out = []
        for row in rows:
            if is_blank_row(row):
                continue
            teacher = month_sheet_teacher(cell(row, 0), tab)
            out.append(self._salary(teacher, tab, row, title, sid))
        return out

    def _teacher_tab(self, tab: str, rows: SheetValues, title: str, sid: str) -> list[SalaryRecord]:
        """One row per month; the tab name is the teacher."""
        out = []
        for row in rows:
            if is_blank_row(row):
                continue
            label = cell(row, 0).strip()
            if is_ambiguous_month_label(label):
                continue
            out.append(self._salary(tab, label or tab, row, title, sid))
        return out

    # === Records ===

    @staticmethod
    def _salary(teacher: str, month: str, row: list[Any], title: str, sid: str) -> SalaryRecord:
        name = resolve_teacher_name(teacher, title)
        return SalaryRecord(
            teacherName=name.name,
            teacherNameSource=name.kind,
            month=month,
            income=cell(row, 1, "0"),
            bonus=cell(row, 2, "0"),
            fine=cell(row, 3, "0"),
            recount=cell(row, 4, "0"),
            total=cell(row, 5, "0"),
            spreadsheetId=sid,
        )

    @staticmethod
    def _fine(row: list[Any], title: str, sid: str) -> FineRecord:
        name = resolve_teacher_name(cell(row, 0), title)
        return FineRecord(
            teacherName=name.name,
            teacherNameSource=name.kind,
            reason=cell(row, 1),
            month=cell(row, 2),
            date=cell(row, 3),
            amount=cell(row, 4, "0"),
            spreadsheetId=sid,
        )

    @staticmethod
    def _sample(diagnostics: dict[str, Any], rows: SheetValues) -> None:
        room = DIAGNOSTIC_SAMPLE_ROWS - len(diagnostics["rawRows"])
        if room > 0:
            diagnostics["rawRows"].extend(rows[:room])
