"""Error taxonomy for the scheduling service.

Services raise these; the HTTP layer maps each category to a status code
(see ``app.py``). Conditions that only degrade a single schedule or calendar
(bad recurrence rule, missing calendar) are logged and never raised.
"""

from fastapi import Request
from fastapi.responses import JSONResponse


class SchedulingError(Exception):
    """Base class for user-facing scheduling failures."""

    category = "error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(SchedulingError):
    """A referenced schedule, calendar, route version or trip does not exist."""

    category = "not_found"
    status_code = 404


class ValidationError(SchedulingError):
    """Input is malformed or incomplete (bad rule, missing stop times, ...)."""

    category = "validation_error"
    status_code = 422


class ConflictError(SchedulingError):
    """The operation collides with existing state."""

    category = "conflict"
    status_code = 409


class DomainError(SchedulingError):
    """The operation is not allowed in the current state of the domain."""

    category = "domain_error"
    status_code = 400


async def scheduling_error_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    """Render a SchedulingError as a JSON response."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.category,
            "message": exc.message,
        },
    )
