"""
Controllers: decorators, published metadata, initialization into an engine.
"""

from typing import Annotated

import pytest

from ardea.context import Context
from ardea.controller import (
    INITIALIZE_KEY,
    ApiTag,
    Controller,
    ControllerInitializer,
    Delete,
    Get,
    Patch,
    Post,
    Public,
    Put,
    Roles,
    build_extractor,
    read_controller_metadata,
)
from ardea.controller.streaming import StreamUnit
from ardea.di import Service
from ardea.faults import ForbiddenException, MetadataFrozenError
from ardea.metadata import registry as default_registry
from ardea.params import UNSET, Body, CustomParam, Param, Query, RawContext, extract_bindings

from conftest import make_ctx


async def initialize(cls, engine, app_context, **hooks):
    init = default_registry.get(cls, INITIALIZE_KEY)
    return await init(engine, app_context, **hooks)


# ============================================================================
# Decorators and Metadata
# ============================================================================

class TestControllerDecorators:

    def test_prefix_is_normalized(self):
        @Controller("users")
        class Users:
            pass

        assert default_registry.get(Users, "prefix") == "/users"
        assert isinstance(default_registry.get(Users, INITIALIZE_KEY), ControllerInitializer)

    def test_routes_publish_in_declaration_order(self):
        @Controller("/items")
        class Items:
            @Get()
            def index(self):
                pass

            @Post("create")
            def create(self):
                pass

            @Put("/:id")
            def replace(self):
                pass

            @Patch("/:id")
            def update(self):
                pass

            @Delete("/:id")
            def remove(self):
                pass

        metadata = read_controller_metadata(default_registry, Items)

        assert [(r.method, r.path) for r in metadata.routes] == [
            ("get", "/"),
            ("post", "/create"),
            ("put", "/:id"),
            ("patch", "/:id"),
            ("delete", "/:id"),
        ]
        assert metadata.get_route("post", "/create").handler_name == "create"

    def test_tag_defaults(self):
        @Controller("/a")
        class Untagged:
            pass

        @Controller("/b")
        @ApiTag("Things")
        class Tagged:
            pass

        assert read_controller_metadata(default_registry, Untagged).tag == "default"
        assert read_controller_metadata(default_registry, Tagged).tag == "Things"

    def test_public_and_roles_in_any_order(self):
        @Controller("/x")
        class X:
            @Public()
            @Get("/open")
            def opened(self):
                pass

            @Get("/admin")
            @Roles("admin")
            @Roles("owner")
            def admin(self):
                pass

        metadata = read_controller_metadata(default_registry, X)

        assert metadata.get_route("get", "/open").is_public is True
        admin = metadata.get_route("get", "/admin")
        assert admin.is_public is False
        assert admin.roles == frozenset({"admin", "owner"})

    def test_schemas_come_from_bindings(self):
        body_schema = {"type": "object"}
        query_schema = {"type": "object", "properties": {"q": {"type": "string"}}}

        @Controller("/s")
        class S:
            @Post("/", response={201: {"type": "object"}})
            def create(
                self,
                payload: Annotated[dict, Body(body_schema)],
                filters: Annotated[dict, Query(query_schema)],
            ):
                pass

        route = read_controller_metadata(default_registry, S).routes[0]

        assert route.body_schema is body_schema
        assert route.query_schema is query_schema
        assert route.response_schema == {201: {"type": "object"}}

    def test_generator_handlers_are_streaming(self):
        @Controller("/feed")
        class Feed:
            @Get()
            async def live(self):
                yield 1

            @Get("/plain")
            async def plain(self):
                return 1

        metadata = read_controller_metadata(default_registry, Feed)
        assert metadata.get_route("get", "/").streaming is True
        assert metadata.get_route("get", "/plain").streaming is False


# ============================================================================
# Argument Extraction
# ============================================================================

class TestExtractor:

    @pytest.mark.asyncio
    async def test_extraction_is_index_preserving(self):
        async def tenant(ctx):
            return ctx.header("x-tenant")

        def handler(
            self,
            ctx: Annotated[Context, RawContext()],
            skipped: int,
            payload: Annotated[dict, Body()],
            who: Annotated[str, CustomParam(tenant)],
        ):
            pass

        extract = build_extractor(tuple(extract_bindings(handler)))
        ctx = make_ctx("post", "/", headers={"X-Tenant": "acme"}, body={"a": 1})

        args = await extract(ctx)

        assert len(args) == 4
        assert args[0] is ctx
        assert args[1] is UNSET
        assert args[2] == {"a": 1}
        assert args[3] == "acme"

    @pytest.mark.asyncio
    async def test_query_and_path_segments(self):
        def handler(self, q: Annotated[dict, Query()], id: Annotated[str, Param("id")]):
            pass

        extract = build_extractor(tuple(extract_bindings(handler)))
        args = await extract(make_ctx(query={"page": "2"}, params={"id": "42"}))

        assert args == [{"page": "2"}, "42"]


# ============================================================================
# Initialization
# ============================================================================

class TestControllerInitializer:

    @pytest.mark.asyncio
    async def test_n_routes_become_n_registrations(self, engine, app_context):
        @Controller("users")
        class Users:
            @Get()
            def index(self):
                pass

            @Get(":id")
            def show(self):
                pass

            @Post()
            def create(self):
                pass

        await initialize(Users, engine, app_context)

        assert [(r.method, r.path) for r in engine.routes] == [
            ("get", "/users/"),
            ("get", "/users/:id"),
            ("post", "/users/"),
        ]

    @pytest.mark.asyncio
    async def test_root_prefix(self, engine, app_context):
        @Controller()
        class Root:
            @Get("/health")
            def health(self):
                return "ok"

        await initialize(Root, engine, app_context)
        assert engine.routes[0].path == "/health"

    @pytest.mark.asyncio
    async def test_controller_receives_services(self, engine, app_context):
        @Service()
        class Greeter:
            def greet(self, name):
                return f"hello {name}"

        @Controller("/greet")
        class Greeting:
            def __init__(self, greeter: Greeter):
                self.greeter = greeter

            @Get("/:name")
            async def hello(self, name: Annotated[str, Param("name")]):
                return self.greeter.greet(name)

        await initialize(Greeting, engine, app_context)
        result, _ = await engine.dispatch("get", "/greet/ana")

        assert result == "hello ana"
        assert Greeter in app_context.container

    @pytest.mark.asyncio
    async def test_public_route_never_calls_auth(self, engine, app_context):
        calls = []

        async def auth(ctx):
            calls.append(ctx.path)

        @Controller("/p")
        class P:
            @Get("/open")
            @Public()
            def opened(self):
                return "open"

            @Get("/closed")
            def closed(self):
                return "closed"

        await initialize(P, engine, app_context, auth=auth)

        assert engine.routes[0].config.before_handle == []
        assert engine.routes[1].config.before_handle == [auth]

        await engine.dispatch("get", "/p/open")
        assert calls == []

        await engine.dispatch("get", "/p/closed")
        assert calls == ["/p/closed"]

    @pytest.mark.asyncio
    async def test_auth_runs_before_handler(self, engine, app_context):
        order = []

        def auth(ctx):
            order.append("auth")

        @Controller("/o")
        class O:
            @Get()
            def index(self):
                order.append("handler")

        await initialize(O, engine, app_context, auth=auth)
        await engine.dispatch("get", "/o/")

        assert order == ["auth", "handler"]

    @pytest.mark.asyncio
    async def test_roles_add_guard_after_auth(self, engine, app_context):
        def auth(ctx):
            ctx.store["user"] = {"role": "user"}

        @Controller("/r")
        class R:
            @Delete("/:id")
            @Roles("admin")
            def remove(self):
                return "removed"

        await initialize(R, engine, app_context, auth=auth)

        hooks = engine.routes[0].config.before_handle
        assert hooks[0] is auth
        assert len(hooks) == 2

        with pytest.raises(ForbiddenException):
            await engine.dispatch("delete", "/r/1")

    @pytest.mark.asyncio
    async def test_security_detail(self, engine, app_context):
        def auth(ctx):
            return None

        explicit = {"summary": "Custom", "security": []}

        @Controller("/d")
        class D:
            @Get("/guarded")
            def guarded(self):
                pass

            @Get("/open")
            @Public()
            def opened(self):
                pass

            @Get("/custom", detail=explicit)
            def custom(self):
                pass

        await initialize(D, engine, app_context, auth=auth)
        details = [r.config.detail for r in engine.routes]

        assert details[0] == {"security": [{"BearerAuth": []}]}
        assert details[1] == {"security": []}
        assert details[2] == explicit

    @pytest.mark.asyncio
    async def test_without_auth_no_security(self, engine, app_context):
        @Controller("/n")
        class N:
            @Get()
            def index(self):
                pass

        await initialize(N, engine, app_context)
        assert engine.routes[0].config.detail == {"security": []}

    @pytest.mark.asyncio
    async def test_response_hook_skipped_for_streams(self, engine, app_context):
        def response(ctx, result):
            return {"wrapped": result}

        @Controller("/h")
        @ApiTag("Hooks")
        class H:
            @Get("/value")
            def value(self):
                return 1

            @Get("/stream")
            async def stream(self):
                yield 1

        await initialize(H, engine, app_context, response=response)
        value, stream = engine.routes

        assert value.config.after_handle is response
        assert value.config.tags == ["Hooks"]
        assert stream.config.after_handle is None
        assert stream.config.streaming is True

        result, _ = await engine.dispatch("get", "/h/value")
        assert result == {"wrapped": 1}

    @pytest.mark.asyncio
    async def test_streaming_handler_yields_units(self, engine, app_context):
        @Controller("/events")
        class Events:
            @Get()
            async def feed(self, q: Annotated[dict, Query()]):
                for i in range(int(q["count"])):
                    yield i

        await initialize(Events, engine, app_context)
        stream, _ = await engine.dispatch("get", "/events/", query={"count": "2"})
        units = [unit async for unit in stream]

        assert units == [StreamUnit.of(0), StreamUnit.of(1), StreamUnit.end()]

    @pytest.mark.asyncio
    async def test_stream_error_is_terminal(self, engine, app_context):
        @Controller("/broken")
        class Broken:
            @Get()
            def feed(self):
                yield "first"
                raise RuntimeError("second")

        await initialize(Broken, engine, app_context)
        stream, _ = await engine.dispatch("get", "/broken/")
        units = [unit async for unit in stream]

        assert len(units) == 2
        assert units[0] == StreamUnit.of("first")
        assert units[1].is_error

    @pytest.mark.asyncio
    async def test_metadata_frozen_after_initialization(self, engine, app_context):
        @Controller("/f")
        class F:
            @Get()
            def index(self):
                pass

        await initialize(F, engine, app_context)

        with pytest.raises(MetadataFrozenError):
            ApiTag("late")(F)

    @pytest.mark.asyncio
    async def test_handler_exceptions_reach_error_hook(self, engine, app_context):
        @Controller("/e")
        class E:
            @Get()
            def index(self):
                raise ForbiddenException("nope")

        await initialize(E, engine, app_context)

        def on_error(ctx, error):
            ctx.status = error.status
            return error.to_dict()

        engine.on_error(on_error)
        result, ctx = await engine.dispatch("get", "/e/")

        assert ctx.status == 403
        assert result == {"success": False, "message": "nope"}
