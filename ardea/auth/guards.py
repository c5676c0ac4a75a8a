"""
Ardea Auth - Guards

Authentication and authorization hooks. Both are ordinary pre-handlers:
``bearer_auth`` answers 401 itself, while a role mismatch raises
``ForbiddenException`` so it travels through the error hook like any other
request-time fault.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Iterable, Optional, Union

from ..context import Context
from ..engine.lifecycle import maybe_await
from ..faults import ForbiddenException
from ..responses import unauthorized

logger = logging.getLogger("ardea.auth")

Verifier = Callable[[str], Union[Optional[dict], Awaitable[Optional[dict]]]]

BEARER_PREFIX = "Bearer "


def extract_bearer(ctx: Context) -> Optional[str]:
    """Token portion of an ``Authorization: Bearer <token>`` header."""
    header = ctx.header("authorization")
    if not header or not header.startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX):].strip() or None


def user_roles(user: Any) -> set[str]:
    """Roles of an authenticated payload, from ``role`` and/or ``roles``."""
    if not isinstance(user, dict):
        return set()
    roles = set()
    if user.get("role"):
        roles.add(user["role"])
    roles.update(user.get("roles") or ())
    return roles


def require_roles(roles: Iterable[str]) -> Callable[[Context], None]:
    """
    Build a guard requiring the authenticated user to hold one of ``roles``.

    Runs after authentication; reads ``ctx.store["user"]``.
    """
    required = frozenset(roles)

    def guard(ctx: Context) -> None:
        if not required:
            return None
        if not user_roles(ctx.user) & required:
            logger.info(f"Forbidden {ctx.method.upper()} {ctx.path}: requires one of {sorted(required)}")
            raise ForbiddenException()
        return None

    guard.__name__ = "require_roles"
    return guard


def bearer_auth(verifier: Verifier, roles: Optional[Iterable[str]] = None):
    """
    Build an authentication hook around a token verifier.

    ``verifier(token)`` returns the token payload, or a falsy value when the
    token is invalid; it may be a coroutine function (``TokenManager.verify``).

    Missing or invalid credentials set status 401 and return the
    unauthorized envelope. On success the payload is stored at
    ``ctx.store["user"]``.

    Example:
        tokens = TokenManager(settings.token_secret)
        app = await ArdeaFactory.create(AppModule, {"auth": bearer_auth(tokens.verify)})
    """
    role_guard = require_roles(roles) if roles else None

    async def authenticate(ctx: Context):
        token = extract_bearer(ctx)
        if token is None:
            ctx.status = 401
            return unauthorized()

        payload = await maybe_await(verifier(token))
        if not payload:
            ctx.status = 401
            return unauthorized()

        ctx.store["user"] = payload

        if role_guard is not None:
            role_guard(ctx)
        return None

    authenticate.__name__ = "bearer_auth"
    return authenticate
