# This project was developed with assistance from AI tools.
"""Domain exceptions raised by the service layer.

Each carries the HTTP status the app-level handler maps it to, so routes
can let them propagate instead of re-wrapping every call in HTTPException.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


class LoanDeskError(Exception):
    """Base class for errors that are reported to the caller."""

    status_code = 500
    title = "Internal Server Error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationFailed(LoanDeskError):
    """Bad or missing input. Lists every offending field."""

    status_code = 400
    title = "Bad Request"

    def __init__(self, errors: list[FieldError], detail: str | None = None):
        self.errors = list(errors)
        names = ", ".join(e.field for e in self.errors)
        super().__init__(detail or f"Validation failed for: {names}")

    @property
    def fields(self) -> list[str]:
        return [e.field for e in self.errors]


class InvalidAmount(ValidationFailed):
    def __init__(self, message: str = "Loan amount must be a finite positive number"):
        super().__init__([FieldError("loanAmount", message)])


class InvalidTenure(ValidationFailed):
    def __init__(self, message: str = "Loan tenure must be a positive whole number of months"):
        super().__init__([FieldError("loanTenure", message)])


class NotFound(LoanDeskError):
    status_code = 404
    title = "Not Found"


class NotAuthorized(LoanDeskError):
    status_code = 403
    title = "Forbidden"


class InvalidOTP(LoanDeskError):
    """Deliberately generic: never says which check failed."""

    status_code = 400
    title = "Bad Request"

    def __init__(self):
        super().__init__("Invalid or expired OTP")


class Conflict(LoanDeskError):
    status_code = 409
    title = "Conflict"


class InvalidTransition(Conflict):
    """Raised when an application status transition is not allowed."""


class NotificationFailed(Exception):
    """Email delivery failed. Logged by the notifier, never surfaced to callers."""
