"""
In-memory engine for tests and route listing.

``RecordingEngine`` keeps every registration it receives and can dispatch
a ``Context`` through the same request lifecycle the real adapter uses.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from .context import Context
from .engine.base import ErrorHook, Plugin, RouteConfig, RouteHandler, RouteRegistration, SocketHooks
from .engine.lifecycle import handle_request

_SEGMENT = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


class RecordingEngine:
    """
    Engine that records instead of serving.

    Example:
        engine = RecordingEngine()
        await ArdeaFactory.create(AppModule, engine=engine)
        assert [r.path for r in engine.routes] == ["/users", "/users/:id"]
        result = await engine.dispatch("get", "/users/42")
    """

    def __init__(self):
        self.routes: List[RouteRegistration] = []
        self.sockets: Dict[str, SocketHooks] = {}
        self.plugins: List[Plugin] = []
        self.error_hook: Optional[ErrorHook] = None
        self.cors_config: Optional[Dict[str, Any]] = None
        self.docs_config: Optional[Dict[str, Any]] = None
        self.events: List[Tuple[str, Any]] = []

    def route(self, method: str, path: str, handler: RouteHandler, config: RouteConfig) -> "RecordingEngine":
        self.routes.append(RouteRegistration(method, path, handler, config))
        self.events.append(("route", (method, path)))
        return self

    def ws(self, path: str, hooks: SocketHooks) -> "RecordingEngine":
        self.sockets[path] = hooks
        self.events.append(("ws", path))
        return self

    def use(self, plugin: Plugin) -> "RecordingEngine":
        self.plugins.append(plugin)
        self.events.append(("use", plugin))
        plugin(self)
        return self

    def on_error(self, handler: ErrorHook) -> "RecordingEngine":
        self.error_hook = handler
        self.events.append(("on_error", handler))
        return self

    def cors_plugin(self, config: Dict[str, Any]) -> Plugin:
        def cors(engine: "RecordingEngine") -> None:
            engine.cors_config = config

        return cors

    def docs_plugin(self, config: Dict[str, Any]) -> Plugin:
        def docs(engine: "RecordingEngine") -> None:
            engine.docs_config = config

        return docs

    # Inspection

    def find(self, method: str, path: str) -> Tuple[RouteRegistration, Dict[str, str]]:
        """
        Match a concrete request path against the recorded routes.

        Raises:
            LookupError: No route matches
        """
        method = method.lower()
        for registration in self.routes:
            if registration.method != method:
                continue
            params = match_path(registration.path, path)
            if params is not None:
                return registration, params
        raise LookupError(f"No route for {method.upper()} {path}")

    async def dispatch(
        self,
        method: str,
        path: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        body: Any = None,
        query: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Any, Context]:
        """Run a request through the matching route; returns (result, ctx)."""
        registration, params = self.find(method, path)
        ctx = Context(
            method=method.lower(),
            path=path,
            headers=headers or {},
            body=body,
            query=query or {},
            params=params,
        )
        result = await handle_request(registration, ctx, self.error_hook)
        return result, ctx


def match_path(pattern: str, path: str) -> Optional[Dict[str, str]]:
    """Match ``/users/:id`` against ``/users/42``; None when it does not match."""
    regex = "^" + _SEGMENT.sub(r"(?P<\1>[^/]+)", re.escape(pattern)) + "$"
    match = re.match(regex, path)
    return match.groupdict() if match else None
