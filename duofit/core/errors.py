"""
Domain errors raised by the services and translated to HTTP in duofit.main.
"""


class DuoFitError(Exception):
    """Base class for every error raised by the DuoFit services."""


class ValidationError(DuoFitError):
    """Input rejected before anything was written."""


class NotFoundError(DuoFitError):
    """A referenced user, food, meal, line item or exercise does not exist."""


class ExternalServiceError(DuoFitError):
    """Food search or photo analysis failed upstream or timed out."""


class ConsistencyViolation(DuoFitError):
    """A derived aggregate no longer matches its source of truth."""

    def __init__(self, user_id: int, day, message: str):
        self.user_id = user_id
        self.day = day
        self.message = message
        super().__init__(f"user_id={user_id} date={day}: {message}")
