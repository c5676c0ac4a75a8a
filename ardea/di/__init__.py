"""
Ardea Dependency Injection

One singleton per class identity, resolved by declared constructor types.
"""

from .container import Container
from .decorators import Service, is_service
from .errors import (
    DIFault,
    DuplicateServiceFault,
    ServiceNotFoundFault,
    DependencyCycleFault,
    UnresolvableParameterFault,
)

__all__ = [
    "Container",
    "Service",
    "is_service",
    "DIFault",
    "DuplicateServiceFault",
    "ServiceNotFoundFault",
    "DependencyCycleFault",
    "UnresolvableParameterFault",
]
