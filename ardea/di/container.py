"""
DI Container - flat map from class identity to singleton instance.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar, get_args, get_origin, get_type_hints

from ..metadata import MetadataRegistry, registry as default_registry
from .decorators import is_service
from .errors import (
    DependencyCycleFault,
    DuplicateServiceFault,
    ServiceNotFoundFault,
    UnresolvableParameterFault,
)

T = TypeVar("T")

logger = logging.getLogger("ardea.di")


class Container:
    """
    Singleton instances keyed by class.

    Classes declared with ``@Service()`` are built on first request and
    registered; anything else must be registered explicitly.

    Example:
        container = Container()
        container.register(Settings, Settings(debug=True))
        service = container.provide(UserService)
    """

    __slots__ = ("_instances", "_registry", "_building")

    def __init__(self, registry: Optional[MetadataRegistry] = None):
        self._instances: Dict[type, Any] = {}
        self._registry = registry or default_registry
        self._building: List[type] = []

    def register(self, token: type, instance: Any) -> None:
        if token in self._instances:
            raise DuplicateServiceFault(token)
        self._instances[token] = instance
        logger.debug(f"Registered service {token.__qualname__}")

    def resolve(self, token: Type[T], requested_by: Optional[type] = None) -> T:
        try:
            return self._instances[token]
        except KeyError:
            raise ServiceNotFoundFault(token, requested_by) from None

    def has(self, token: type) -> bool:
        return token in self._instances

    def provide(self, token: Type[T], requested_by: Optional[type] = None) -> T:
        """
        Resolve ``token``, building it first if it is a declared service.
        """
        if token in self._instances:
            return self._instances[token]

        if not isinstance(token, type) or not is_service(token, self._registry):
            raise ServiceNotFoundFault(token, requested_by)

        if token in self._building:
            start = self._building.index(token)
            raise DependencyCycleFault([*self._building[start:], token])

        self._building.append(token)
        try:
            instance = self.instantiate(token)
        finally:
            self._building.pop()

        self.register(token, instance)
        return instance

    def instantiate(self, cls: Type[T]) -> T:
        """Construct ``cls`` with its declared dependencies, in order."""
        kwargs = {
            name: self.provide(dependency, requested_by=cls)
            for name, dependency in _constructor_params(cls)
        }
        return cls(**kwargs)

    @staticmethod
    def dependencies_of(cls: type) -> List[type]:
        """
        Declared constructor parameter types, in declaration order.

        ``Annotated[T, ...]`` resolves to ``T``. Parameters with a default
        are left to their default.
        """
        return [dependency for _, dependency in _constructor_params(cls)]

    def __contains__(self, token: type) -> bool:
        return token in self._instances

    def __len__(self) -> int:
        return len(self._instances)

    def __repr__(self) -> str:
        names = ", ".join(token.__qualname__ for token in self._instances)
        return f"Container([{names}])"


def _constructor_params(cls: type) -> List[Tuple[str, Any]]:
    init = cls.__init__
    if init is object.__init__:
        return []

    try:
        hints = get_type_hints(init, include_extras=True)
    except NameError:
        hints = {}

    params = []
    for name, param in inspect.signature(init).parameters.items():
        if name == "self" or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        if param.default is not inspect.Parameter.empty:
            continue
        annotation = hints.get(name, param.annotation)
        if annotation is inspect.Parameter.empty:
            raise UnresolvableParameterFault(cls, name)
        if get_origin(annotation) is not None and hasattr(annotation, "__metadata__"):
            annotation = get_args(annotation)[0]
        params.append((name, annotation))

    return params
