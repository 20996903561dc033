"""
Students handler package.

Exports StudentsHandler class for student-related operations.
"""
from handlers.students.handler import StudentsHandler

__all__ = ["StudentsHandler"]
