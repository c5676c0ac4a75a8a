"""
Boot-time faults.

Every fault here reflects a static wiring mistake. They are raised while an
application is being assembled and are never retried.
"""

from typing import Any, Optional

from .core import Fault, FaultDomain, Severity


class BootFault(Fault):
    """Base class for application assembly faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        domain: FaultDomain = FaultDomain.BOOT,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=domain,
            severity=Severity.FATAL,
            public=False,
            metadata=metadata,
        )


class InvalidModuleFault(BootFault):
    """Root module carries no controller list."""

    def __init__(self, module: type):
        super().__init__(
            code="INVALID_MODULE",
            message=f"Invalid class module: {module.__qualname__} is not decorated with @Module",
            metadata={"module": module.__qualname__},
        )


class MissingInitializerFault(BootFault):
    """A module lists a class that was never declared as controller or socket."""

    def __init__(self, module: type, target: type):
        super().__init__(
            code="MISSING_INITIALIZER",
            message=(
                f"Invalid class module: {target.__qualname__} listed in "
                f"{module.__qualname__} has no @Controller or @Websocket declaration"
            ),
            metadata={"module": module.__qualname__, "target": target.__qualname__},
        )


class DuplicateBindingFault(BootFault):
    """Two parameter bindings claim the same handler index."""

    def __init__(self, handler: str, index: int, kinds: list[str]):
        super().__init__(
            code="DUPLICATE_BINDING",
            message=(
                f"Parameter {index} of {handler} has more than one binding: "
                f"{', '.join(kinds)}"
            ),
            domain=FaultDomain.METADATA,
            metadata={"handler": handler, "index": index, "kinds": kinds},
        )


class MetadataFrozenError(BootFault):
    """Metadata write attempted after the owning declaration was initialized."""

    def __init__(self, target: Any, key: str):
        name = getattr(target, "__qualname__", repr(target))
        super().__init__(
            code="METADATA_FROZEN",
            message=f"Metadata '{key}' of {name} is read-only after initialization",
            domain=FaultDomain.METADATA,
            metadata={"target": name, "key": key},
        )


class UnresolvedAnnotationFault(BootFault):
    """A marker-bearing parameter annotation names something undefined."""

    def __init__(self, handler: str, parameter: str, error: Exception):
        super().__init__(
            code="UNRESOLVED_ANNOTATION",
            message=(
                f"Cannot resolve the annotation of parameter '{parameter}' "
                f"of {handler}: {error}"
            ),
            domain=FaultDomain.METADATA,
            metadata={"handler": handler, "parameter": parameter},
        )


class UnsupportedSignatureFault(BootFault):
    """Handler parameters that cannot be passed by keyword."""

    def __init__(self, handler: str, parameter: str, kind: str):
        super().__init__(
            code="UNSUPPORTED_SIGNATURE",
            message=(
                f"Parameter '{parameter}' of {handler} is {kind}; "
                f"handler arguments are passed by keyword"
            ),
            domain=FaultDomain.METADATA,
            metadata={"handler": handler, "parameter": parameter, "kind": kind},
        )
