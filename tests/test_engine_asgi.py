"""
Starlette engine adapter, exercised over HTTP and WebSocket with the
Starlette TestClient.
"""

import asyncio
import json
from typing import Annotated

import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from ardea import (
    ArdeaFactory,
    Body,
    Controller,
    Get,
    Message,
    Module,
    NotFoundException,
    Open,
    Param,
    Post,
    Public,
    Query,
    Roles,
    Websocket,
    bearer_auth,
    envelope_response,
    http_error_handler,
)
from ardea.engine.asgi import StarletteEngine, to_starlette_path

from conftest import bearer


def build_app(tokens, **options):
    @Controller("/notes")
    class Notes:
        def __init__(self):
            self.notes = {"1": "first"}

        @Get("/:id")
        @Public()
        def show(self, id: Annotated[str, Param("id")]):
            if id not in self.notes:
                raise NotFoundException(f"Note {id} not found")
            return {"id": id, "text": self.notes[id]}

        @Post()
        def create(self, payload: Annotated[dict, Body({"type": "object"})]):
            self.notes[str(len(self.notes) + 1)] = payload["text"]
            return {"id": str(len(self.notes))}

        @Get()
        @Public()
        def search(self, q: Annotated[dict, Query()]):
            return [n for n in self.notes.values() if q.get("text", "") in n]

        @Get("/admin/stats")
        @Roles("admin")
        def stats(self):
            return {"count": len(self.notes)}

        @Get("/stream/all")
        @Public()
        async def stream(self):
            yield "a"
            yield "b"

        @Get("/stream/broken")
        @Public()
        def broken(self):
            yield "a"
            raise NotFoundException("gone")

    @Websocket("/echo")
    class Echo:
        @Open()
        async def opened(self, ws):
            await ws.send_json({"event": "welcome"})

        @Message()
        async def received(self, ws, message):
            await ws.send_json({"echo": message})

    @Module(controllers=[Notes, Echo])
    class AppModule:
        pass

    settings = {
        "auth": bearer_auth(tokens.verify),
        "response": envelope_response,
        "error": http_error_handler,
        **options,
    }
    engine = asyncio.run(ArdeaFactory.create(AppModule, settings, engine=StarletteEngine()))
    return engine


@pytest.fixture
def client(tokens):
    return TestClient(build_app(tokens, swagger={"title": "Notes"}, cors=True).app)


def test_path_conversion():
    assert to_starlette_path("/users/:id/posts/:post_id") == "/users/{id}/posts/{post_id}"
    assert to_starlette_path("/plain") == "/plain"


# ============================================================================
# HTTP
# ============================================================================

class TestHttp:

    def test_path_param(self, client):
        response = client.get("/notes/1")
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Success",
            "data": {"id": "1", "text": "first"},
        }

    def test_query(self, client):
        response = client.get("/notes/", params={"text": "fir"})
        assert response.json()["data"] == ["first"]

    def test_http_exception_translated(self, client):
        response = client.get("/notes/99")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Note 99 not found"}

    def test_missing_token(self, client):
        response = client.post("/notes/", json={"text": "second"})
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Unauthorized"}

    def test_invalid_token(self, client):
        response = client.post("/notes/", json={"text": "second"}, headers=bearer("xyz"))
        assert response.status_code == 401

    def test_json_body(self, client, tokens):
        token = tokens.sign({"id": "u1", "role": "user"})
        response = client.post("/notes/", json={"text": "second"}, headers=bearer(token))

        assert response.status_code == 200
        assert response.json()["data"] == {"id": "2"}

    def test_malformed_json(self, client, tokens):
        token = tokens.sign({"id": "u1"})
        response = client.post(
            "/notes/",
            content=b"{not json",
            headers={**bearer(token), "content-type": "application/json"},
        )
        assert response.status_code == 400

    def test_role_forbidden(self, client, tokens):
        token = tokens.sign({"id": "u1", "role": "user"})
        response = client.get("/notes/admin/stats", headers=bearer(token))

        assert response.status_code == 403
        assert response.json() == {"success": False, "message": "Forbidden"}

    def test_role_allowed(self, client, tokens):
        token = tokens.sign({"id": "u1", "role": "admin"})
        response = client.get("/notes/admin/stats", headers=bearer(token))
        assert response.json()["data"] == {"count": 1}

    def test_method_not_registered(self, client):
        assert client.delete("/notes/1").status_code == 405


# ============================================================================
# Streaming
# ============================================================================

class TestStreaming:

    def test_ndjson_units(self, client):
        response = client.get("/notes/stream/all")
        lines = [json.loads(line) for line in response.text.splitlines()]

        assert response.headers["content-type"].startswith("application/x-ndjson")
        assert lines == [{"value": "a"}, {"value": "b"}, {"end": True}]

    def test_error_unit_ends_stream(self, client):
        response = client.get("/notes/stream/broken")
        lines = [json.loads(line) for line in response.text.splitlines()]

        assert lines == [
            {"value": "a"},
            {"error": {"type": "NotFoundException", "message": "gone", "status": 404}},
        ]


# ============================================================================
# Plugins
# ============================================================================

class TestPlugins:

    def test_openapi_document(self, client):
        schema = client.get("/swagger/json").json()

        assert schema["info"]["title"] == "Notes"
        operation = schema["paths"]["/notes/{id}"]["get"]
        assert operation["security"] == []
        assert schema["paths"]["/notes/"]["post"]["security"] == [{"BearerAuth": []}]
        assert "BearerAuth" in schema["components"]["securitySchemes"]

    def test_swagger_page(self, client):
        response = client.get("/swagger")
        assert response.status_code == 200
        assert "/swagger/json" in response.text

    def test_cors_headers(self, client):
        response = client.get("/notes/1", headers={"Origin": "https://example.com"})
        assert response.headers["access-control-allow-origin"] == "*"


# ============================================================================
# WebSocket
# ============================================================================

class TestWebSocket:

    def test_authenticated_echo(self, client, tokens):
        token = tokens.sign({"id": "u1"})
        with client.websocket_connect("/echo", headers=bearer(token)) as ws:
            assert ws.receive_json() == {"event": "welcome"}
            ws.send_json({"text": "hi"})
            assert ws.receive_json() == {"echo": {"text": "hi"}}
            ws.send_text("plain")
            assert ws.receive_json() == {"echo": "plain"}

    def test_unauthenticated_socket_closed(self, client):
        with pytest.raises(WebSocketDisconnect) as exc:
            with client.websocket_connect("/echo") as ws:
                ws.receive_json()

        assert exc.value.code == 1008
