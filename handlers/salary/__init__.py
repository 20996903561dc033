"""
Salary handler package.

Exports SalaryHandler class for the salary/fines report.
"""
from handlers.salary.handler import SalaryHandler

__all__ = ["SalaryHandler"]
