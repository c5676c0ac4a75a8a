"""
Ardea Faults - typed error signals.

Boot faults abort application assembly; HTTP exceptions travel from handlers
to the engine's error hook.
"""

from .core import Fault, FaultDomain, Severity
from .boot import (
    BootFault,
    InvalidModuleFault,
    MissingInitializerFault,
    DuplicateBindingFault,
    MetadataFrozenError,
    UnresolvedAnnotationFault,
    UnsupportedSignatureFault,
)
from .http import (
    HttpException,
    BadRequestException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    MethodNotAllowedException,
)

__all__ = [
    "Fault",
    "FaultDomain",
    "Severity",
    "BootFault",
    "InvalidModuleFault",
    "MissingInitializerFault",
    "DuplicateBindingFault",
    "MetadataFrozenError",
    "UnresolvedAnnotationFault",
    "UnsupportedSignatureFault",
    "HttpException",
    "BadRequestException",
    "UnauthorizedException",
    "ForbiddenException",
    "NotFoundException",
    "MethodNotAllowedException",
]
