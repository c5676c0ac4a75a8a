"""
Controller Metadata

Route and controller records assembled from decorator metadata when a
controller class is published.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Optional, Tuple

from ..metadata import MetadataRegistry
from ..params import BindingKind, ParameterBinding, extract_bindings

ROUTES_KEY = "routes"
PREFIX_KEY = "prefix"
TAG_KEY = "tag"
PUBLIC_KEY = "public"
ROLES_KEY = "roles"

DEFAULT_TAG = "default"


@dataclass(frozen=True)
class RouteDeclaration:
    """What a route decorator captured at declaration time."""
    method: str
    path: str
    detail: Optional[Dict[str, Any]] = None
    response: Any = None


@dataclass(frozen=True)
class RouteMetadata:
    """
    Recorded shape of one handler.

    Attributes:
        method: Lower-case HTTP method
        path: Route path, normalized to start with ``/``
        handler_name: Attribute name of the handler on the controller
        handler: The undecorated function
        bindings: Parameter bindings ordered by index
        is_public: Route skips the authentication hook
        roles: Roles required on top of authentication
        detail: Explicit introspection detail, if any
        response_schema: Opaque response schemas
        streaming: Handler is a (sync or async) generator function
    """
    method: str
    path: str
    handler_name: str
    handler: Callable[..., Any]
    bindings: Tuple[ParameterBinding, ...] = ()
    is_public: bool = False
    roles: FrozenSet[str] = frozenset()
    detail: Optional[Dict[str, Any]] = None
    response_schema: Any = None
    streaming: bool = False

    def binding(self, kind: BindingKind) -> Optional[ParameterBinding]:
        """First binding of ``kind``, if any."""
        for binding in self.bindings:
            if binding.kind is kind:
                return binding
        return None

    @property
    def body_schema(self) -> Any:
        binding = self.binding(BindingKind.BODY)
        return binding.schema if binding else None

    @property
    def query_schema(self) -> Any:
        binding = self.binding(BindingKind.QUERY)
        return binding.schema if binding else None


@dataclass(frozen=True)
class ControllerMetadata:
    """All routes of one controller, in declaration order."""
    prefix: str
    tag: str = DEFAULT_TAG
    routes: Tuple[RouteMetadata, ...] = field(default_factory=tuple)

    def get_route(self, method: str, path: str) -> Optional[RouteMetadata]:
        for route in self.routes:
            if route.method == method and route.path == path:
                return route
        return None


def is_streaming(func: Callable[..., Any]) -> bool:
    return inspect.isasyncgenfunction(func) or inspect.isgeneratorfunction(func)


def publish_route(
    registry: MetadataRegistry,
    owner: type,
    func: Callable[..., Any],
    declaration: RouteDeclaration,
) -> RouteMetadata:
    """
    Assemble a RouteMetadata from everything attached to ``func`` and
    append it to the owner's route list.
    """
    route = RouteMetadata(
        method=declaration.method,
        path=declaration.path,
        handler_name=func.__name__,
        handler=func,
        bindings=tuple(extract_bindings(func)),
        is_public=bool(registry.get(func, PUBLIC_KEY)),
        roles=frozenset(registry.get(func, ROLES_KEY, ())),
        detail=declaration.detail,
        response_schema=declaration.response,
        streaming=is_streaming(func),
    )
    registry.append(owner, ROUTES_KEY, route)
    return route


def read_controller_metadata(registry: MetadataRegistry, cls: type) -> ControllerMetadata:
    """Publish ``cls`` if needed and return its controller record."""
    registry.publish(cls)
    return ControllerMetadata(
        prefix=registry.get(cls, PREFIX_KEY, "/"),
        tag=registry.get(cls, TAG_KEY) or DEFAULT_TAG,
        routes=tuple(registry.get(cls, ROUTES_KEY, ())),
    )
