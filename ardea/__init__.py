"""
Ardea - declarative application assembly for async Python web engines

Applications declare modules, controllers, services, routes, parameter
bindings and socket hooks with decorators; Ardea resolves them into engine
registrations and a dependency-injection graph:

- Metadata: deferred publication of decorator metadata
- Controllers: routes, parameter bindings, streaming handlers
- Sockets: WebSocket lifecycle hooks
- DI: constructor injection of singleton services
- Faults: boot-time wiring faults and HTTP exceptions
- Engine: engine protocol and the Starlette adapter
"""

__version__ = "0.1.0"

# ============================================================================
# Core
# ============================================================================

from .metadata import MetadataRegistry, registry
from .context import Context
from .application import ApplicationContext
from .module import Module
from .config import CreateOptions, ServerSettings, ConfigError
from .factory import ArdeaFactory, create_app

# ============================================================================
# Declarations
# ============================================================================

from .controller import (
    ApiTag,
    Controller,
    Delete,
    Get,
    Patch,
    Post,
    Public,
    Put,
    Roles,
    StreamUnit,
)
from .params import (
    Body,
    CustomParam,
    Param,
    Query,
    RawContext,
    create_param_decorator,
)
from .sockets import Close, Message, Open, Websocket
from .di import Container, Service

# ============================================================================
# Faults
# ============================================================================

from .faults import (
    Fault,
    FaultDomain,
    Severity,
    BootFault,
    HttpException,
    BadRequestException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    MethodNotAllowedException,
)

# ============================================================================
# Engine, auth and responses
# ============================================================================

from .engine import Engine, RouteConfig, RouteRegistration, SocketHooks
from .auth import TokenManager, bearer_auth, require_roles
from .responses import envelope_response, http_error_handler

__all__ = [
    "__version__",
    "MetadataRegistry",
    "registry",
    "Context",
    "ApplicationContext",
    "Module",
    "CreateOptions",
    "ServerSettings",
    "ConfigError",
    "ArdeaFactory",
    "create_app",
    "ApiTag",
    "Controller",
    "Delete",
    "Get",
    "Patch",
    "Post",
    "Public",
    "Put",
    "Roles",
    "StreamUnit",
    "Body",
    "CustomParam",
    "Param",
    "Query",
    "RawContext",
    "create_param_decorator",
    "Close",
    "Message",
    "Open",
    "Websocket",
    "Container",
    "Service",
    "Fault",
    "FaultDomain",
    "Severity",
    "BootFault",
    "HttpException",
    "BadRequestException",
    "UnauthorizedException",
    "ForbiddenException",
    "NotFoundException",
    "MethodNotAllowedException",
    "Engine",
    "RouteConfig",
    "RouteRegistration",
    "SocketHooks",
    "TokenManager",
    "bearer_auth",
    "require_roles",
    "envelope_response",
    "http_error_handler",
]
