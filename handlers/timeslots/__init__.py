"""
Time slots handler package.

Exports TimeSlotsHandler class for time slot operations.
"""
from handlers.timeslots.handler import TimeSlotsHandler

__all__ = ["TimeSlotsHandler"]
