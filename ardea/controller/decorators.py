"""
Controller Decorators

Class and method decorators that record routing metadata. Nothing here
touches an engine; route publication is deferred until the controller
initializes.
"""

from typing import Any, Callable, Dict, Optional, TypeVar

from ..engine.base import normalize_path
from ..metadata import MetadataRegistry, registry as default_registry
from .initializer import ControllerInitializer
from .metadata import (
    PREFIX_KEY,
    PUBLIC_KEY,
    ROLES_KEY,
    TAG_KEY,
    RouteDeclaration,
    publish_route,
)

F = TypeVar("F", bound=Callable[..., Any])
C = TypeVar("C", bound=type)

INITIALIZE_KEY = "initialize"


class Controller:
    """
    Declare a class as a controller mounted under ``prefix``.

    The constructor's annotated parameters are resolved from the DI
    container when the application boots.

    Example:
        @Controller("users")
        class UsersController:
            def __init__(self, users: UserService):
                self.users = users

            @Get("/:id")
            async def show(self, id: Annotated[str, Param("id")]):
                return await self.users.get(id)
    """

    def __init__(self, prefix: str = "/", *, registry: Optional[MetadataRegistry] = None):
        self.prefix = normalize_path(prefix)
        self.registry = registry or default_registry

    def __call__(self, cls: C) -> C:
        self.registry.set(cls, PREFIX_KEY, self.prefix)
        self.registry.set(cls, INITIALIZE_KEY, ControllerInitializer(cls, self.prefix, self.registry))
        return cls


class ApiTag:
    """Group a controller's routes under ``tag``."""

    def __init__(self, tag: str, *, registry: Optional[MetadataRegistry] = None):
        self.tag = tag
        self.registry = registry or default_registry

    def __call__(self, cls: C) -> C:
        self.registry.set(cls, TAG_KEY, self.tag)
        return cls


class RouteDecorator:
    """
    Base route decorator.

    Queues a publication on the handler; the RouteMetadata is assembled
    when the owning controller is published, after every other decorator
    on the handler has run.
    """

    method: str = ""

    def __init__(
        self,
        path: str = "/",
        *,
        detail: Optional[Dict[str, Any]] = None,
        response: Any = None,
        registry: Optional[MetadataRegistry] = None,
    ):
        """
        Args:
            path: Route path, relative to the controller prefix
            detail: Explicit introspection detail (summary, description,
                    tags, security); overrides the computed security entry
            response: Opaque response schemas keyed by status code
        """
        self.declaration = RouteDeclaration(
            method=self.method,
            path=normalize_path(path),
            detail=detail,
            response=response,
        )
        self.registry = registry or default_registry

    def __call__(self, func: F) -> F:
        registry = self.registry
        declaration = self.declaration
        registry.defer(func, lambda owner: publish_route(registry, owner, func, declaration))
        return func


class Get(RouteDecorator):
    """GET route decorator."""
    method = "get"


class Post(RouteDecorator):
    """POST route decorator."""
    method = "post"


class Put(RouteDecorator):
    """PUT route decorator."""
    method = "put"


class Delete(RouteDecorator):
    """DELETE route decorator."""
    method = "delete"


class Patch(RouteDecorator):
    """PATCH route decorator."""
    method = "patch"


class Public:
    """Exempt a route from the authentication hook."""

    def __init__(self, *, registry: Optional[MetadataRegistry] = None):
        self.registry = registry or default_registry

    def __call__(self, func: F) -> F:
        self.registry.set(func, PUBLIC_KEY, True)
        return func


class Roles:
    """
    Require one of ``roles`` on top of authentication.

    Example:
        @Delete("/:id")
        @Roles("admin")
        async def remove(self, id: Annotated[str, Param("id")]):
            ...
    """

    def __init__(self, *roles: str, registry: Optional[MetadataRegistry] = None):
        self.roles = roles
        self.registry = registry or default_registry

    def __call__(self, func: F) -> F:
        existing = self.registry.get(func, ROLES_KEY, ())
        self.registry.set(func, ROLES_KEY, (*existing, *self.roles))
        return func
