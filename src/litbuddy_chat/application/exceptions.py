from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class ApiError(AppError):
    """Non-2xx response from a REST collaborator."""

    def __init__(
        self,
        detail: str = "",
        status: int | None = None,
        body: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(detail)
        self.status = status
        self.body = body or {}


class NotFoundError(ApiError):
    pass


class ForbiddenError(ApiError):
    pass


class ConflictError(ApiError):
    pass


class RequestTimeoutError(ApiError):
    pass


class NotConnectedError(AppError):
    pass


class AlreadySubscribedError(AppError):
    pass


class ConversationPausedError(AppError):
    pass


_BY_STATUS: dict[int, type[ApiError]] = {
    403: ForbiddenError,
    404: NotFoundError,
    408: RequestTimeoutError,
    409: ConflictError,
}


def api_error_for(status: int, detail: str, body: dict[str, Any] | None = None) -> ApiError:
    cls = _BY_STATUS.get(status, ApiError)
    return cls(detail, status=status, body=body)
