"""Errors raised by the tracker core.

The API layer maps each kind to an HTTP status; callers using the core
directly decide whether to log, surface or retry.
"""
from datetime import date
from typing import Optional


class TrackerError(Exception):
    """Base class for every error the tracker raises on purpose."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(TrackerError):
    status_code = 404

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(TrackerError):
    status_code = 400


class DateOutOfRangeError(ValidationError):
    """A task due date falls outside its project's date range."""

    def __init__(
        self,
        due_date: date,
        start_date: date,
        end_date: date,
        detail: Optional[str] = None,
    ):
        super().__init__(
            detail
            or f"Due date {due_date.isoformat()} is outside the project range "
            f"{start_date.isoformat()} to {end_date.isoformat()}"
        )
        self.due_date = due_date
        self.start_date = start_date
        self.end_date = end_date


class PersistenceError(TrackerError):
    """The underlying store failed; the original exception is ``__cause__``."""

    status_code = 500
