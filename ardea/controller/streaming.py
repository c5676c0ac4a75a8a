"""
Streaming handler units.

A streaming handler's output is delivered as tagged units instead of raw
values, so an error raised mid-iteration is distinguishable from a value:

    value, value, ..., end      normal exhaustion
    value, ..., error           iteration raised; nothing follows
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Dict, Optional

logger = logging.getLogger("ardea.stream")


class UnitKind(str, Enum):
    VALUE = "value"
    ERROR = "error"
    END = "end"


@dataclass(frozen=True)
class StreamUnit:
    kind: UnitKind
    payload: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def of(cls, payload: Any) -> "StreamUnit":
        return cls(UnitKind.VALUE, payload=payload)

    @classmethod
    def failure(cls, error: BaseException) -> "StreamUnit":
        return cls(UnitKind.ERROR, error=error)

    @classmethod
    def end(cls) -> "StreamUnit":
        return cls(UnitKind.END)

    @property
    def is_value(self) -> bool:
        return self.kind is UnitKind.VALUE

    @property
    def is_error(self) -> bool:
        return self.kind is UnitKind.ERROR

    @property
    def is_end(self) -> bool:
        return self.kind is UnitKind.END

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly form used by engines that serialize units."""
        if self.kind is UnitKind.VALUE:
            return {"value": self.payload}
        if self.kind is UnitKind.ERROR:
            return {
                "error": {
                    "type": type(self.error).__name__,
                    "message": getattr(self.error, "message", None) or str(self.error),
                    "status": getattr(self.error, "status", 500),
                }
            }
        return {"end": True}


async def iterate_units(produced: Any, label: str = "stream") -> AsyncIterator[StreamUnit]:
    """
    Drive a sync or async iterable and tag everything it produces.
    """
    try:
        if hasattr(produced, "__aiter__"):
            async for item in produced:
                yield StreamUnit.of(item)
        else:
            for item in produced:
                yield StreamUnit.of(item)
    except Exception as error:
        logger.warning(f"{label} raised {type(error).__name__} mid-stream: {error}")
        yield StreamUnit.failure(error)
        return

    yield StreamUnit.end()
