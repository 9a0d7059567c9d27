"""
Exceptions raised by the scheduling workflow.

Unsupported inputs and infeasible residual pools are reported through
ScheduleOutcome statuses, not exceptions.
"""

from datetime import date
from typing import Optional


class SchedulingError(Exception):
    """Base class for scheduler errors."""


class DataUnavailableError(SchedulingError):
    """A read or write against the league store failed."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class ScheduleConflictError(SchedulingError):
    """A schedule is already posted for the date and overwrite was not confirmed."""

    def __init__(self, match_date: date, existing_matches: int):
        super().__init__(
            f"A schedule with {existing_matches} matches already exists for {match_date.isoformat()}. "
            f"Confirm overwrite or cancel."
        )
        self.match_date = match_date
        self.existing_matches = existing_matches
