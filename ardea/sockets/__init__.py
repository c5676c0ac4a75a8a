"""
Ardea Sockets - declarative WebSocket endpoints.
"""

from .decorators import Close, Message, Open, Websocket
from .initializer import WebSocketInitializer
from .metadata import SocketMetadata, read_socket_metadata

__all__ = [
    "Websocket",
    "Open",
    "Close",
    "Message",
    "WebSocketInitializer",
    "SocketMetadata",
    "read_socket_metadata",
]
