"""Custom exception classes for RentalDesk."""


class RentalDeskError(Exception):
    """Base exception for RentalDesk errors."""
    pass


class APIError(RentalDeskError):
    """Raised when the backend returns an error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(RentalDeskError):
    """Raised when required configuration is missing."""
    pass


class ValidationError(RentalDeskError):
    """Raised when input validation fails.

    ``errors`` maps field names to messages when several fields were checked at once.
    """

    def __init__(self, message: str, errors: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.errors: dict[str, str] = dict(errors or {})


class NetworkError(RentalDeskError):
    """Raised when network requests fail."""
    pass
