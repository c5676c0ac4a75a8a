"""
Socket Decorators - declarative WebSocket endpoints

- @Websocket(path, public=False) - Declare the endpoint
- @Open() - Connection opened
- @Close() - Connection closed
- @Message(schema) - Message received
"""

from typing import Any, Callable, Optional, TypeVar

from ..controller.decorators import INITIALIZE_KEY
from ..engine.base import normalize_path
from ..metadata import MetadataRegistry, registry as default_registry
from .initializer import WebSocketInitializer
from .metadata import SocketHookRef, publish_socket_hook

F = TypeVar("F", bound=Callable[..., Any])
C = TypeVar("C", bound=type)

PATH_KEY = "socket_path"
PUBLIC_KEY = "socket_public"


class Websocket:
    """
    WebSocket endpoint decorator.

    Example:
        @Websocket("/chat")
        class ChatSocket:
            def __init__(self, rooms: RoomService):
                self.rooms = rooms

            @Message(ChatMessage)
            async def on_message(self, ws, message):
                await ws.send_json({"echo": message})
    """

    def __init__(
        self,
        path: str,
        public: bool = False,
        *,
        registry: Optional[MetadataRegistry] = None,
    ):
        """
        Args:
            path: Endpoint path (supports ``:name`` segments)
            public: Skip the authentication hook for this endpoint
        """
        self.path = normalize_path(path)
        self.public = public
        self.registry = registry or default_registry

    def __call__(self, cls: C) -> C:
        self.registry.set(cls, PATH_KEY, self.path)
        self.registry.set(cls, PUBLIC_KEY, self.public)
        self.registry.set(cls, INITIALIZE_KEY, WebSocketInitializer(cls, self.path, self.public, self.registry))
        return cls


class _SocketHook:
    hook: str = ""

    def __init__(self, *, registry: Optional[MetadataRegistry] = None):
        self.registry = registry or default_registry
        self.schema: Any = None

    def __call__(self, func: F) -> F:
        registry = self.registry
        ref = SocketHookRef(self.hook, func.__name__, self.schema)
        registry.defer(func, lambda owner: publish_socket_hook(registry, owner, ref))
        return func


class Open(_SocketHook):
    """Connection-opened hook; receives the engine's socket."""
    hook = "open"


class Close(_SocketHook):
    """Connection-closed hook; receives the engine's socket."""
    hook = "close"


class Message(_SocketHook):
    """
    Message hook; receives the engine's socket and the decoded message.

    ``schema`` is carried to the engine as the message body schema.
    """
    hook = "message"

    def __init__(self, schema: Any = None, *, registry: Optional[MetadataRegistry] = None):
        super().__init__(registry=registry)
        self.schema = schema
