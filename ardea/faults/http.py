"""
HTTP exception hierarchy.

Raised by application handlers; carried to the engine's error hook and
translated into a response there. Default messages are the standard reason
phrases.
"""

from http import HTTPStatus
from typing import Any, Optional

from .core import Fault, FaultDomain


class HttpException(Fault):
    """
    Request-time fault carrying an HTTP status.

    Example:
        raise HttpException("Quota exceeded", 429)
    """

    def __init__(
        self,
        message: Optional[str] = None,
        status: int = HTTPStatus.INTERNAL_SERVER_ERROR,
        *,
        metadata: Optional[dict[str, Any]] = None,
    ):
        status = int(status or HTTPStatus.INTERNAL_SERVER_ERROR)
        self.status = status
        try:
            known = HTTPStatus(status)
            code, phrase = known.name, known.phrase
        except ValueError:
            code, phrase = f"HTTP_{status}", "Error"
        super().__init__(
            code=code,
            message=message or phrase,
            domain=FaultDomain.SECURITY if status in (401, 403) else FaultDomain.HTTP,
            public=True,
            metadata=metadata,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "message": self.message}


class BadRequestException(HttpException):
    def __init__(self, message: str = HTTPStatus.BAD_REQUEST.phrase, **kwargs):
        super().__init__(message, HTTPStatus.BAD_REQUEST, **kwargs)


class UnauthorizedException(HttpException):
    def __init__(self, message: str = HTTPStatus.UNAUTHORIZED.phrase, **kwargs):
        super().__init__(message, HTTPStatus.UNAUTHORIZED, **kwargs)


class ForbiddenException(HttpException):
    def __init__(self, message: str = HTTPStatus.FORBIDDEN.phrase, **kwargs):
        super().__init__(message, HTTPStatus.FORBIDDEN, **kwargs)


class NotFoundException(HttpException):
    def __init__(self, message: str = HTTPStatus.NOT_FOUND.phrase, **kwargs):
        super().__init__(message, HTTPStatus.NOT_FOUND, **kwargs)


class MethodNotAllowedException(HttpException):
    def __init__(self, message: str = HTTPStatus.METHOD_NOT_ALLOWED.phrase, **kwargs):
        super().__init__(message, HTTPStatus.METHOD_NOT_ALLOWED, **kwargs)
