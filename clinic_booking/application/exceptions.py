class InvalidTimeFormat(ValueError):
    """Raised when a time-of-day or calendar-date string cannot be parsed."""
    pass


class BookingServiceError(RuntimeError):
    """Raised when the remote booking service fails (HTTP error, timeout, bad payload)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        server_message: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.server_message = server_message  # user-facing text returned by the service, if any


class BookingConflictError(BookingServiceError):
    """Raised when the requested slot was booked by someone else (HTTP 409)."""

    def __init__(self, message: str, server_message: str | None = None) -> None:
        super().__init__(message, status_code=409, server_message=server_message)


class WizardError(RuntimeError):
    """Base class for illegal booking wizard actions."""
    pass


class WizardNotReadyError(WizardError):
    """Raised when the doctor's schedule, exceptions or services could not be loaded."""
    pass


class WizardStepError(WizardError):
    """Raised when a step transition is not allowed from the current state."""
    pass


class ServiceNotOfferedError(WizardError):
    """Raised when the doctor does not offer the requested consultation kind."""
    pass
