from typing import Any

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    """HTTP error raised by the service layer with a stable machine readable code."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str | None = None

    def __init__(
        self,
        detail: Any = None,
        *,
        error: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=type(self).status_code, detail=detail, headers=headers)
        self.error = error


class Unauthenticated(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"


class InvalidInput(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_input"


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class InternalError(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal_error"

    def __init__(self, error: str | None = None) -> None:
        super().__init__("Server error", error=error)
