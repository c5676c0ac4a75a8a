"""
DI-specific faults with diagnostics.
"""

from typing import Any, List, Optional

from ..faults import BootFault, FaultDomain


def _name(token: Any) -> str:
    return getattr(token, "__qualname__", str(token))


class DIFault(BootFault):
    """Base fault for DI errors."""

    def __init__(self, code: str, message: str, **metadata: Any):
        super().__init__(code, message, domain=FaultDomain.DI, metadata=metadata)


class DuplicateServiceFault(DIFault):
    """A service token was registered twice."""

    def __init__(self, token: Any):
        self.token = token
        super().__init__(
            "DUPLICATE_SERVICE",
            f"Service {_name(token)} already exists",
            token=_name(token),
        )


class ServiceNotFoundFault(DIFault):
    """A class was used as a dependency without being declared as a service."""

    def __init__(self, token: Any, requested_by: Optional[Any] = None):
        self.token = token
        self.requested_by = requested_by

        msg = f"No service registered for {_name(token)}"
        if requested_by is not None:
            msg = f"Injected service {_name(token)} is undefined in {_name(requested_by)}"
        msg += "\n\nSuggested fixes:"
        msg += f"\n  - Decorate {_name(token)} with @Service()"
        msg += f"\n  - Register an instance with container.register({_name(token)}, ...)"

        super().__init__(
            "SERVICE_NOT_FOUND",
            msg,
            token=_name(token),
            requested_by=_name(requested_by) if requested_by is not None else None,
        )


class DependencyCycleFault(DIFault):
    """Circular dependency between services."""

    def __init__(self, cycle: List[Any]):
        self.cycle = cycle
        names = [_name(token) for token in cycle]

        msg = "Detected dependency cycle:"
        for i, name in enumerate(names):
            arrow = " -> " if i < len(names) - 1 else ""
            msg += f"\n  {name}{arrow}"

        super().__init__("DEPENDENCY_CYCLE", msg, cycle=names)


class UnresolvableParameterFault(DIFault):
    """Constructor parameter has neither a type annotation nor a default."""

    def __init__(self, owner: type, parameter: str):
        super().__init__(
            "UNRESOLVABLE_PARAMETER",
            f"Constructor parameter '{parameter}' of {_name(owner)} needs a type annotation",
            owner=_name(owner),
            parameter=parameter,
        )
