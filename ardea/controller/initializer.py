"""
Controller Initializer

Turns a published controller class into engine route registrations:
one controller instance, one wrapped handler per route.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Dict, List, Optional

from ..application import ApplicationContext
from ..auth.guards import require_roles
from ..context import Context
from ..engine.base import Engine, Hook, ResponseHook, RouteConfig, join_path
from ..engine.lifecycle import maybe_await
from ..metadata import MetadataRegistry
from ..params import UNSET, BindingKind, ParameterBinding, parameter_names
from .metadata import ControllerMetadata, RouteMetadata, read_controller_metadata
from .streaming import iterate_units

routes_logger = logging.getLogger("ardea.routes")
router_logger = logging.getLogger("ardea.router")

BEARER_SECURITY = {"security": [{"BearerAuth": []}]}
NO_SECURITY = {"security": []}


class ControllerInitializer:
    """
    Recorded by ``@Controller`` and awaited by the application factory.

    Steps, in order: publish deferred route metadata, construct the
    controller from the container, register every route with the engine,
    freeze the controller's metadata.
    """

    def __init__(self, cls: type, prefix: str, registry: MetadataRegistry):
        self.cls = cls
        self.prefix = prefix
        self.registry = registry

    async def __call__(
        self,
        engine: Engine,
        context: ApplicationContext,
        *,
        auth: Optional[Hook] = None,
        response: Optional[ResponseHook] = None,
    ) -> ControllerMetadata:
        metadata = read_controller_metadata(self.registry, self.cls)
        instance = context.container.instantiate(self.cls)

        routes_logger.info(f"{self.cls.__name__} {metadata.prefix}")

        for route in metadata.routes:
            path = join_path(metadata.prefix, route.path)
            engine.route(
                route.method,
                path,
                wrap_handler(instance, route),
                self.route_config(metadata, route, auth, response),
            )
            router_logger.info(f"Mapped {{{path}, {route.method.upper()}}} route")

        self.registry.freeze(self.cls)
        return metadata

    def route_config(
        self,
        metadata: ControllerMetadata,
        route: RouteMetadata,
        auth: Optional[Hook],
        response: Optional[ResponseHook],
    ) -> RouteConfig:
        before_handle: List[Hook] = []
        if not route.is_public:
            if auth is not None:
                before_handle.append(auth)
            if route.roles:
                before_handle.append(require_roles(route.roles))

        return RouteConfig(
            before_handle=before_handle,
            after_handle=None if route.streaming else response,
            tags=[metadata.tag],
            body=route.body_schema,
            query=route.query_schema,
            response=route.response_schema,
            detail=route_detail(route, auth is not None),
            streaming=route.streaming,
        )

    def __repr__(self) -> str:
        return f"ControllerInitializer({self.cls.__qualname__}, prefix={self.prefix!r})"


def route_detail(route: RouteMetadata, has_auth: bool) -> Dict[str, Any]:
    """Explicit detail wins; otherwise only the security entry is computed."""
    if route.detail is not None:
        return dict(route.detail)
    if has_auth and not route.is_public:
        return copy.deepcopy(BEARER_SECURITY)
    return copy.deepcopy(NO_SECURITY)


def build_extractor(bindings: tuple[ParameterBinding, ...]):
    """
    Build the argument extractor of one handler.

    The returned coroutine function maps a request context to a list
    indexed by binding index; indices without a binding hold ``UNSET``.
    """
    size = max((b.index for b in bindings), default=-1) + 1

    async def extract(ctx: Context) -> List[Any]:
        args: List[Any] = [UNSET] * size
        for binding in bindings:
            args[binding.index] = await resolve_binding(binding, ctx)
        return args

    return extract


async def resolve_binding(binding: ParameterBinding, ctx: Context) -> Any:
    if binding.kind is BindingKind.RAW_CONTEXT:
        return ctx
    if binding.kind is BindingKind.BODY:
        return ctx.body
    if binding.kind is BindingKind.QUERY:
        return ctx.query
    if binding.kind is BindingKind.PARAM:
        return ctx.params.get(binding.slug)
    return await maybe_await(binding.extractor(ctx))


def wrap_handler(instance: Any, route: RouteMetadata) -> Callable[[Context], Any]:
    """
    Wrap a controller method into an engine handler taking one context.

    Bound arguments are passed by parameter name; unbound parameters keep
    their defaults. Streaming handlers return an async iterator of
    StreamUnits.
    """
    extract = build_extractor(route.bindings)
    names = parameter_names(route.handler)
    method = getattr(instance, route.handler_name)
    label = f"{type(instance).__name__}.{route.handler_name}"

    async def call(ctx: Context) -> Dict[str, Any]:
        args = await extract(ctx)
        return {names[i]: value for i, value in enumerate(args) if value is not UNSET}

    if route.streaming:
        async def stream_handler(ctx: Context):
            return iterate_units(method(**await call(ctx)), label)

        stream_handler.__name__ = route.handler_name
        return stream_handler

    async def handler(ctx: Context):
        return await maybe_await(method(**await call(ctx)))

    handler.__name__ = route.handler_name
    return handler
