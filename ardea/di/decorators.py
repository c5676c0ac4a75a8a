"""
Service declaration.
"""

from typing import Callable, Optional, Type, TypeVar

from ..metadata import MetadataRegistry, registry as default_registry
from .errors import DuplicateServiceFault

T = TypeVar("T")

SERVICE_KEY = "service"


def Service(*, registry: Optional[MetadataRegistry] = None) -> Callable[[Type[T]], Type[T]]:
    """
    Declare a class as a singleton service resolvable by class identity.

    Declaring the same class twice is a fatal wiring error.

    Example:
        @Service()
        class UserRepository:
            ...

        @Service()
        class UserService:
            def __init__(self, repo: UserRepository):
                self.repo = repo
    """
    store = registry or default_registry

    def decorator(cls: Type[T]) -> Type[T]:
        if store.get(cls, SERVICE_KEY):
            raise DuplicateServiceFault(cls)
        store.set(cls, SERVICE_KEY, True)
        return cls

    return decorator


def is_service(cls: type, registry: Optional[MetadataRegistry] = None) -> bool:
    return bool((registry or default_registry).get(cls, SERVICE_KEY))
