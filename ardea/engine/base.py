"""
Engine contract.

Ardea never speaks HTTP itself. It hands finished registrations to an
engine implementing this protocol.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Union, runtime_checkable

from ..context import Context

Hook = Callable[[Context], Union[Any, Awaitable[Any]]]
ResponseHook = Callable[[Context, Any], Union[Any, Awaitable[Any]]]
ErrorHook = Callable[[Context, BaseException], Union[Any, Awaitable[Any]]]
RouteHandler = Callable[[Context], Any]
Plugin = Callable[["Engine"], Any]

HTTP_METHODS = ("get", "post", "put", "delete", "patch")


@dataclass
class RouteConfig:
    """
    Per-route configuration handed to the engine.

    Attributes:
        before_handle: Pre-handlers run in order; the first non-None
                       return value becomes the response
        after_handle: Post-handler ``(ctx, result)``; a non-None return
                      replaces the result
        tags: Grouping tags
        body: Opaque request body schema
        query: Opaque query schema
        response: Opaque response schemas keyed by status
        detail: Introspection detail (summary, description, security)
        streaming: Handler yields StreamUnits instead of returning a value
    """
    before_handle: List[Hook] = field(default_factory=list)
    after_handle: Optional[ResponseHook] = None
    tags: List[str] = field(default_factory=list)
    body: Any = None
    query: Any = None
    response: Any = None
    detail: Dict[str, Any] = field(default_factory=dict)
    streaming: bool = False


@dataclass
class RouteRegistration:
    """One route as received by an engine."""
    method: str
    path: str
    handler: RouteHandler
    config: RouteConfig


@dataclass
class SocketHooks:
    """
    Lifecycle hooks of one WebSocket endpoint.

    ``open``/``close``/``message`` receive the engine's socket object;
    ``message`` also receives the decoded payload.
    """
    before_handle: Optional[Hook] = None
    open: Optional[Callable[..., Any]] = None
    close: Optional[Callable[..., Any]] = None
    message: Optional[Callable[..., Any]] = None
    body: Any = None


@runtime_checkable
class Engine(Protocol):
    """HTTP/WebSocket engine protocol."""

    def route(self, method: str, path: str, handler: RouteHandler, config: RouteConfig) -> Any:
        ...

    def ws(self, path: str, hooks: SocketHooks) -> Any:
        ...

    def use(self, plugin: Plugin) -> Any:
        ...

    def on_error(self, handler: ErrorHook) -> Any:
        ...

    def cors_plugin(self, config: Dict[str, Any]) -> Plugin:
        ...

    def docs_plugin(self, config: Dict[str, Any]) -> Plugin:
        ...


def normalize_path(path: str) -> str:
    """Ensure a path or prefix begins with ``/``."""
    path = path or "/"
    return path if path.startswith("/") else f"/{path}"


def join_path(prefix: str, path: str) -> str:
    """Full route path: normalized prefix followed by normalized route path."""
    prefix = normalize_path(prefix)
    path = normalize_path(path)
    if prefix == "/":
        return path
    return prefix + path
