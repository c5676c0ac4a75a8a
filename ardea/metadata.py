"""
Metadata Registry

Associative store from (declaration target, key) to accumulated value.

Decorators write here while a class body is being evaluated. Route
publication is deferred: method decorators queue a publisher on the method,
and the queue is drained by ``publish(owner)`` once the owning class exists.
That call is the boundary between the declaration phase and the resolution
phase; readers (initializers) always call it before consuming metadata.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List
from weakref import WeakKeyDictionary

from .faults import MetadataFrozenError

logger = logging.getLogger("ardea.metadata")

Publisher = Callable[[type], None]

_PENDING = "__pending__"
_PUBLISHED = "__published__"


class MetadataRegistry:
    """
    Process-wide metadata store.

    Entries are keyed by the target object itself and live as long as the
    target does. Once a target is frozen its entries are read-only.

    Example:
        registry.set(UsersController, "prefix", "/users")
        registry.get(UsersController, "prefix")  # "/users"
    """

    def __init__(self):
        self._store: WeakKeyDictionary = WeakKeyDictionary()
        self._frozen: WeakKeyDictionary = WeakKeyDictionary()

    def _entries(self, target: Any, create: bool = False) -> Dict[str, Any]:
        entries = self._store.get(target)
        if entries is None:
            entries = {}
            if create:
                self._store[target] = entries
        return entries

    def get(self, target: Any, key: str, default: Any = None) -> Any:
        return self._entries(target).get(key, default)

    def has(self, target: Any, key: str) -> bool:
        return key in self._entries(target)

    def set(self, target: Any, key: str, value: Any) -> None:
        if self.is_frozen(target):
            raise MetadataFrozenError(target, key)
        self._entries(target, create=True)[key] = value

    def append(self, target: Any, key: str, value: Any) -> List[Any]:
        """Append to an accumulating list entry and return the list."""
        values = self.get(target, key)
        if values is None:
            values = []
        values = [*values, value]
        self.set(target, key, values)
        return values

    def keys(self, target: Any) -> List[str]:
        return [key for key in self._entries(target) if not key.startswith("__")]

    # Deferred publication

    def defer(self, target: Callable, publisher: Publisher) -> None:
        """
        Queue a publication on a method target.

        The publisher receives the owning class when ``publish`` runs.
        """
        self.append(target, _PENDING, publisher)

    def publish(self, owner: type) -> None:
        """
        Drain the publication queues of every member of ``owner``.

        Members are visited in definition order, and each queue in the
        order its publishers were deferred. Runs once per owner.
        """
        if self.get(owner, _PUBLISHED):
            return

        count = 0
        seen = set()
        for member in vars(owner).values():
            func = _unwrap_member(member)
            # aliases of one function publish once
            if func is None or func in seen:
                continue
            seen.add(func)
            for publisher in self.get(func, _PENDING, ()):
                publisher(owner)
                count += 1

        self.set(owner, _PUBLISHED, True)
        logger.debug(f"Published {count} deferred entries for {owner.__qualname__}")

    def is_published(self, owner: type) -> bool:
        return bool(self.get(owner, _PUBLISHED))

    # Freezing

    def freeze(self, target: Any) -> None:
        self._frozen[target] = True

    def is_frozen(self, target: Any) -> bool:
        try:
            return target in self._frozen
        except TypeError:
            return False


def _unwrap_member(member: Any) -> Callable | None:
    if isinstance(member, (staticmethod, classmethod)):
        member = member.__func__
    return member if callable(member) and not isinstance(member, type) else None


registry = MetadataRegistry()
