"""
Socket metadata - which methods of a socket class handle which event.
"""

from dataclasses import dataclass, replace
from typing import Any, Optional

from ..metadata import MetadataRegistry

SOCKET_KEY = "socket"


@dataclass(frozen=True)
class SocketHookRef:
    hook: str
    handler_name: str
    schema: Any = None


@dataclass(frozen=True)
class SocketMetadata:
    """
    Handler names of one socket class.

    Declaring the same hook twice keeps the last declaration.
    """
    open: Optional[str] = None
    close: Optional[str] = None
    message: Optional[str] = None
    body: Any = None


def publish_socket_hook(registry: MetadataRegistry, owner: type, ref: SocketHookRef) -> SocketMetadata:
    current = registry.get(owner, SOCKET_KEY) or SocketMetadata()
    changes = {ref.hook: ref.handler_name}
    if ref.hook == "message":
        changes["body"] = ref.schema
    updated = replace(current, **changes)
    registry.set(owner, SOCKET_KEY, updated)
    return updated


def read_socket_metadata(registry: MetadataRegistry, cls: type) -> SocketMetadata:
    """Publish ``cls`` if needed and return its socket record."""
    registry.publish(cls)
    return registry.get(cls, SOCKET_KEY) or SocketMetadata()
