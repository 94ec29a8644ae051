"""
Custom exception classes for unified error handling.
"""

from fastapi import HTTPException


class AppBaseError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message: str, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class InvalidEventError(AppBaseError):
    """Raised when a calendar event cannot be parsed or has start > end."""
    def __init__(self, message: str = "Invalid calendar event", detail: str | None = None):
        super().__init__(
            message=message,
            detail=detail or "Check that start/end are RFC3339 timestamps and start <= end.",
        )


class InvalidTravelWindowError(AppBaseError):
    """Raised when the travel window is malformed or inverted."""
    def __init__(self, message: str = "Invalid travel window", detail: str | None = None):
        super().__init__(
            message=message,
            detail=detail or "Travel window start must not be after its end.",
        )


class InvalidTimezoneError(AppBaseError):
    """Raised when an IANA timezone identifier cannot be loaded."""
    def __init__(self, tz_name: str):
        self.tz_name = tz_name
        super().__init__(
            message=f"Unknown timezone '{tz_name}'",
            detail="Use an IANA identifier such as 'America/New_York'.",
        )


# ── Utility: convert to HTTPException ────────────────────

def app_error_to_http(
    error: AppBaseError,
    status_code: int = 422,
) -> HTTPException:
    """Convert an AppBaseError to an HTTPException with consistent JSON body."""
    return HTTPException(
        status_code=status_code,
        detail={
            "error": error.message,
            "detail": error.detail,
            "type": type(error).__name__,
        },
    )
