"""
Module declaration.
"""

from typing import List, Optional, Sequence, Type, TypeVar

from .metadata import MetadataRegistry, registry as default_registry

C = TypeVar("C", bound=type)

CONTROLLERS_KEY = "controllers"


class Module:
    """
    Declare a root module listing its controller and socket classes.

    Example:
        @Module(controllers=[UsersController, ChatSocket])
        class AppModule:
            pass
    """

    def __init__(
        self,
        controllers: Sequence[type] = (),
        *,
        registry: Optional[MetadataRegistry] = None,
    ):
        self.controllers = list(controllers)
        self.registry = registry or default_registry

    def __call__(self, cls: C) -> C:
        self.registry.set(cls, CONTROLLERS_KEY, self.controllers)
        return cls


def module_controllers(cls: type, registry: Optional[MetadataRegistry] = None) -> Optional[List[Type]]:
    """Controller list of a module, or None if ``cls`` is not a module."""
    return (registry or default_registry).get(cls, CONTROLLERS_KEY)
