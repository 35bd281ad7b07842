"""Application errors surfaced to API clients."""


def status_to_code(status: int | None) -> str:
    """Map an HTTP status to an error code."""
    if status in (400, 409, 422):
        return "VALIDATION_ERROR"
    if status == 401:
        return "UNAUTHORIZED"
    if status == 403:
        return "FORBIDDEN"
    if status == 404:
        return "NOT_FOUND"
    if status == 429:
        return "RATE_LIMITED"
    if status in (500, 502, 503, 504):
        return "INTERNAL_ERROR"
    return "UNKNOWN"


class SubScoutError(Exception):
    """Base exception carrying an HTTP status and a user-facing message."""

    status = 500

    def __init__(
        self,
        message: str,
        status: int | None = None,
        code: str | None = None,
        user_message: str | None = None,
    ):
        super().__init__(message)
        if status is not None:
            self.status = status
        self.code = code or status_to_code(self.status)
        self.user_message = user_message or message

    def to_dict(self) -> dict:
        return {"message": self.user_message, "code": self.code}


class NotFoundError(SubScoutError):
    """Resource is missing or belongs to another user."""
    status = 404
