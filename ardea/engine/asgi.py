"""
Starlette engine adapter.

Maps Ardea route and socket registrations onto a Starlette application:

- ``:name`` path segments become ``{name}`` path parameters
- request bodies are decoded from JSON or form data
- handler results are sent as JSON; streaming handlers as NDJSON, one
  StreamUnit per line
- ``HttpException`` raised without an error hook becomes
  ``{"success": false, "message": ...}`` with its status
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

from starlette.applications import Starlette
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response, StreamingResponse
from starlette.routing import Route, WebSocketRoute
from starlette.schemas import SchemaGenerator
from starlette.websockets import WebSocket, WebSocketDisconnect

from ..context import Context
from ..faults import BadRequestException, HttpException
from .base import HTTP_METHODS, ErrorHook, Plugin, RouteConfig, RouteHandler, RouteRegistration, SocketHooks
from .lifecycle import handle_request, maybe_await

logger = logging.getLogger("ardea.engine")

_SEGMENT = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")

POLICY_VIOLATION = 1008

_CORS_ALIASES = {
    "origin": "allow_origins",
    "origins": "allow_origins",
    "methods": "allow_methods",
    "headers": "allow_headers",
    "allowed_headers": "allow_headers",
    "credentials": "allow_credentials",
    "expose_headers": "expose_headers",
    "max_age": "max_age",
}

_SWAGGER_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>{title}</title>
  <link rel="stylesheet" href="https://cdn.jsdelivr.net/npm/swagger-ui-dist@5/swagger-ui.css">
</head>
<body>
  <div id="swagger-ui"></div>
  <script src="https://cdn.jsdelivr.net/npm/swagger-ui-dist@5/swagger-ui-bundle.js"></script>
  <script>SwaggerUIBundle({{url: "{schema_url}", dom_id: "#swagger-ui"}});</script>
</body>
</html>
"""


def to_starlette_path(path: str) -> str:
    """``/users/:id`` -> ``/users/{id}``"""
    return _SEGMENT.sub(r"{\1}", path)


class StarletteEngine:
    """
    Engine backed by a Starlette application.

    Example:
        engine = await ArdeaFactory.create(AppModule)
        engine.listen(host="0.0.0.0", port=8000)
    """

    def __init__(self, app: Optional[Starlette] = None, *, debug: bool = False):
        self.app = app or Starlette(debug=debug)
        self.registrations: List[RouteRegistration] = []
        self.sockets: Dict[str, SocketHooks] = {}
        self.error_hook: Optional[ErrorHook] = None

    # Engine protocol

    def route(self, method: str, path: str, handler: RouteHandler, config: RouteConfig) -> "StarletteEngine":
        method = method.lower()
        if method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        registration = RouteRegistration(method, path, handler, config)
        self.registrations.append(registration)
        self.app.router.routes.append(
            Route(to_starlette_path(path), self._endpoint(registration), methods=[method.upper()])
        )
        return self

    def ws(self, path: str, hooks: SocketHooks) -> "StarletteEngine":
        self.sockets[path] = hooks
        self.app.router.routes.append(WebSocketRoute(to_starlette_path(path), self._socket_endpoint(path, hooks)))
        return self

    def use(self, plugin: Plugin) -> "StarletteEngine":
        plugin(self)
        return self

    def on_error(self, handler: ErrorHook) -> "StarletteEngine":
        self.error_hook = handler
        return self

    def cors_plugin(self, config: Dict[str, Any]) -> Plugin:
        options = {
            "allow_origins": ["*"],
            "allow_methods": ["*"],
            "allow_headers": ["*"],
        }
        for key, value in config.items():
            options[_CORS_ALIASES.get(key, key)] = value
        if isinstance(options["allow_origins"], str):
            options["allow_origins"] = [options["allow_origins"]]

        def plugin(engine: "StarletteEngine") -> None:
            engine.app.add_middleware(CORSMiddleware, **options)
            logger.debug(f"CORS enabled for {options['allow_origins']}")

        return plugin

    def docs_plugin(self, config: Dict[str, Any]) -> Plugin:
        """
        Serve an OpenAPI document at ``{path}/json`` and a Swagger UI page
        at ``{path}`` (default ``/swagger``).
        """
        base = config.get("path", "/swagger").rstrip("/") or "/swagger"
        info = {
            "title": config.get("title", "Ardea API"),
            "version": config.get("version", "1.0.0"),
        }
        if config.get("description"):
            info["description"] = config["description"]

        def plugin(engine: "StarletteEngine") -> None:
            async def schema_json(request: Request) -> Response:
                return JSONResponse(engine.openapi_schema(info))

            async def page(request: Request) -> Response:
                return HTMLResponse(_SWAGGER_HTML.format(title=info["title"], schema_url=f"{base}/json"))

            engine.app.router.routes.append(Route(f"{base}/json", schema_json, include_in_schema=False))
            engine.app.router.routes.append(Route(base, page, include_in_schema=False))
            logger.debug(f"API docs mounted at {base}")

        return plugin

    # Serving

    def listen(self, host: str = "127.0.0.1", port: int = 8000, log_level: str = "info") -> None:
        import uvicorn

        logging.basicConfig(
            level=getattr(logging, log_level.upper()),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        )
        logger.info(f"Starting uvicorn server on {host}:{port}")
        uvicorn.run(self.app, host=host, port=port, log_level=log_level)

    async def __call__(self, scope, receive, send) -> None:
        await self.app(scope, receive, send)

    # Documentation

    def openapi_schema(self, info: Dict[str, Any]) -> Dict[str, Any]:
        generator = SchemaGenerator({"openapi": "3.0.0", "info": info})
        schema = generator.get_schema(routes=self.app.routes)
        schema.setdefault("paths", {})
        schema["components"] = {
            "securitySchemes": {
                "BearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"},
            }
        }

        for registration in self.registrations:
            config = registration.config
            operation: Dict[str, Any] = {"tags": list(config.tags)}
            operation.update(config.detail)
            if isinstance(config.body, dict):
                operation["requestBody"] = {"content": {"application/json": {"schema": config.body}}}
            if isinstance(config.response, dict):
                operation["responses"] = {
                    str(status): {"description": str(status), "content": {"application/json": {"schema": body}}}
                    for status, body in config.response.items()
                }
            path = to_starlette_path(registration.path)
            schema["paths"].setdefault(path, {})[registration.method] = operation

        return schema

    # Endpoints

    def _endpoint(self, registration: RouteRegistration):
        async def endpoint(request: Request) -> Response:
            try:
                ctx = await self._build_context(request)
            except HttpException as e:
                return JSONResponse(e.to_dict(), status_code=e.status)

            try:
                result = await handle_request(registration, ctx, self.error_hook)
            except HttpException as e:
                return JSONResponse(e.to_dict(), status_code=e.status)

            if registration.config.streaming and hasattr(result, "__aiter__"):
                return StreamingResponse(_ndjson(result), status_code=ctx.status, media_type="application/x-ndjson")
            return _render(result, ctx.status)

        endpoint.__name__ = getattr(registration.handler, "__name__", "endpoint")
        return endpoint

    def _socket_endpoint(self, path: str, hooks: SocketHooks):
        async def endpoint(websocket: WebSocket) -> None:
            ctx = Context(
                method="ws",
                path=websocket.url.path,
                headers=dict(websocket.headers),
                query=dict(websocket.query_params),
                params=dict(websocket.path_params),
                request=websocket,
            )

            if hooks.before_handle is not None:
                try:
                    early = await maybe_await(hooks.before_handle(ctx))
                except HttpException as e:
                    logger.info(f"WebSocket {path} rejected: {e.message}")
                    await websocket.close(code=POLICY_VIOLATION)
                    return
                if early is not None:
                    logger.info(f"WebSocket {path} rejected with status {ctx.status}")
                    await websocket.close(code=POLICY_VIOLATION)
                    return

            await websocket.accept()
            websocket.state.ctx = ctx

            try:
                if hooks.open is not None:
                    await maybe_await(hooks.open(websocket))

                while True:
                    event = await websocket.receive()
                    if event["type"] == "websocket.disconnect":
                        break
                    if hooks.message is not None:
                        await maybe_await(hooks.message(websocket, _decode_message(event)))
            except WebSocketDisconnect:
                pass
            finally:
                if hooks.close is not None:
                    await maybe_await(hooks.close(websocket))

        return endpoint

    async def _build_context(self, request: Request) -> Context:
        return Context(
            method=request.method.lower(),
            path=request.url.path,
            headers=dict(request.headers),
            body=await _read_body(request),
            query=dict(request.query_params),
            params=dict(request.path_params),
            request=request,
        )


async def _read_body(request: Request) -> Any:
    if request.method in ("GET", "HEAD", "DELETE") and not request.headers.get("content-length"):
        return None

    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        return dict(form)

    raw = await request.body()
    if not raw:
        return None
    if "json" in content_type or not content_type:
        try:
            return json.loads(raw)
        except ValueError:
            raise BadRequestException("Malformed JSON body") from None
    return raw.decode("utf-8", errors="replace")


def _decode_message(event: Dict[str, Any]) -> Any:
    text = event.get("text")
    if text is None:
        return event.get("bytes")
    try:
        return json.loads(text)
    except ValueError:
        return text


def _render(result: Any, status: int) -> Response:
    if isinstance(result, Response):
        return result
    if result is None:
        return Response(status_code=status if status != 200 else 204)
    if isinstance(result, str):
        return PlainTextResponse(result, status_code=status)
    return JSONResponse(result, status_code=status)


async def _ndjson(units):
    async for unit in units:
        yield json.dumps(unit.to_dict(), default=str) + "\n"
