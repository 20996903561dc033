"""
Users handler package.

Exports UsersHandler class for registry user operations.
"""
from handlers.users.handler import UsersHandler

__all__ = ["UsersHandler"]
