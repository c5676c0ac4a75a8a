"""
Ardea Engine contract and request lifecycle.

Concrete adapters live in submodules (``ardea.engine.asgi`` for Starlette,
``ardea.testing`` for the in-memory recorder).
"""

from .base import (
    HTTP_METHODS,
    Engine,
    ErrorHook,
    Hook,
    Plugin,
    ResponseHook,
    RouteConfig,
    RouteHandler,
    RouteRegistration,
    SocketHooks,
    join_path,
    normalize_path,
)
from .lifecycle import handle_request, maybe_await

__all__ = [
    "HTTP_METHODS",
    "Engine",
    "ErrorHook",
    "Hook",
    "Plugin",
    "ResponseHook",
    "RouteConfig",
    "RouteHandler",
    "RouteRegistration",
    "SocketHooks",
    "join_path",
    "normalize_path",
    "handle_request",
    "maybe_await",
]
