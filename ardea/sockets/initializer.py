"""
WebSocket Initializer - binds a socket class to one engine endpoint.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..application import ApplicationContext
from ..engine.base import Engine, Hook, ResponseHook, SocketHooks
from ..metadata import MetadataRegistry
from .metadata import SocketMetadata, read_socket_metadata

logger = logging.getLogger("ardea.sockets")


class WebSocketInitializer:
    """Recorded by ``@Websocket`` and awaited by the application factory."""

    def __init__(self, cls: type, path: str, public: bool, registry: MetadataRegistry):
        self.cls = cls
        self.path = path
        self.public = public
        self.registry = registry

    async def __call__(
        self,
        engine: Engine,
        context: ApplicationContext,
        *,
        auth: Optional[Hook] = None,
        response: Optional[ResponseHook] = None,
    ) -> SocketMetadata:
        logger.info(f"{self.cls.__name__} {{{self.path}}}")

        metadata = read_socket_metadata(self.registry, self.cls)
        instance = context.container.instantiate(self.cls)

        engine.ws(
            self.path,
            SocketHooks(
                before_handle=None if self.public else auth,
                open=_bound(instance, metadata.open),
                close=_bound(instance, metadata.close),
                message=_bound(instance, metadata.message),
                body=metadata.body,
            ),
        )

        self.registry.freeze(self.cls)
        return metadata

    def __repr__(self) -> str:
        return f"WebSocketInitializer({self.cls.__qualname__}, path={self.path!r})"


def _bound(instance: Any, name: Optional[str]):
    return getattr(instance, name) if name else None
