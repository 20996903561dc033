"""
Groups handler package.

Exports GroupsHandler class for cohort operations.
"""
from handlers.groups.handler import GroupsHandler

__all__ = ["GroupsHandler"]
