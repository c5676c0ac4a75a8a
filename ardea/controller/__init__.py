"""
Ardea Controllers - class-based route declarations.

Example:
    @Controller("users")
    @ApiTag("Users")
    class UsersController:
        def __init__(self, users: UserService):
            self.users = users

        @Get("/")
        @Public()
        async def index(self):
            return await self.users.all()

        @Post("/")
        @Roles("admin")
        async def create(self, payload: Annotated[dict, Body(UserSchema)]):
            return await self.users.create(payload)
"""

from .decorators import (
    INITIALIZE_KEY,
    ApiTag,
    Controller,
    Delete,
    Get,
    Patch,
    Post,
    Public,
    Put,
    Roles,
    RouteDecorator,
)
from .initializer import ControllerInitializer, build_extractor, route_detail, wrap_handler
from .metadata import ControllerMetadata, RouteMetadata, read_controller_metadata
from .streaming import StreamUnit, UnitKind, iterate_units

__all__ = [
    "INITIALIZE_KEY",
    "ApiTag",
    "Controller",
    "Delete",
    "Get",
    "Patch",
    "Post",
    "Public",
    "Put",
    "Roles",
    "RouteDecorator",
    "ControllerInitializer",
    "build_extractor",
    "route_detail",
    "wrap_handler",
    "ControllerMetadata",
    "RouteMetadata",
    "read_controller_metadata",
    "StreamUnit",
    "UnitKind",
    "iterate_units",
]
