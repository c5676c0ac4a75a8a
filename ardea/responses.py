"""
Common response envelopes and default hooks.

Every response body shares the ``{"success": ..., "message": ...}``
envelope; successful results also carry ``data``.
"""

import logging
from typing import Any, Dict, Optional

from .context import Context
from .faults import HttpException

logger = logging.getLogger("ardea.responses")

UNAUTHORIZED_MESSAGE = "Unauthorized"
FORBIDDEN_MESSAGE = "Forbidden"
INTERNAL_ERROR_MESSAGE = "Internal server error"


def success(data: Any = None, message: str = "Success") -> Dict[str, Any]:
    return {"success": True, "message": message, "data": data}


def failure(message: str, **extra: Any) -> Dict[str, Any]:
    return {"success": False, "message": message, **extra}


def unauthorized() -> Dict[str, Any]:
    return failure(UNAUTHORIZED_MESSAGE)


def forbidden() -> Dict[str, Any]:
    return failure(FORBIDDEN_MESSAGE)


def is_envelope(value: Any) -> bool:
    return isinstance(value, dict) and "success" in value and "message" in value


def envelope_response(ctx: Context, result: Any) -> Optional[Dict[str, Any]]:
    """
    Default response hook: wrap bare handler results in the success
    envelope. Results that already are envelopes pass through unchanged.
    """
    if is_envelope(result):
        return None
    return success(result)


def http_error_handler(ctx: Context, error: BaseException) -> Dict[str, Any]:
    """
    Default error hook.

    ``HttpException`` maps to its own status and message; anything else is
    a 500 that reports the error text.
    """
    if isinstance(error, HttpException):
        ctx.status = error.status
        return error.to_dict()

    logger.error(f"Unhandled {type(error).__name__} on {ctx.method.upper()} {ctx.path}: {error}")
    ctx.status = 500
    return failure(INTERNAL_ERROR_MESSAGE, error=str(error))
