"""
Ardea Faults - Core types.

Defines:
- Fault base class (structured fault objects)
- FaultDomain (explicit fault domains)
- Severity levels
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class Severity(str, Enum):
    """
    Fault severity levels.

    FATAL faults abort application boot.
    """
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


class FaultDomain:
    """
    Fault domains (taxonomy).

    Identifies the functional area where a fault occurred.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.value = name
        self.description = description

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"FaultDomain(name='{self.name}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FaultDomain):
            return self.name == other.name
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(self.name)


# Standard Domains
FaultDomain.METADATA = FaultDomain("metadata", "Declaration metadata errors")
FaultDomain.DI = FaultDomain("di", "Dependency injection errors")
FaultDomain.BOOT = FaultDomain("boot", "Application assembly errors")
FaultDomain.HTTP = FaultDomain("http", "Request-time HTTP errors")
FaultDomain.SECURITY = FaultDomain("security", "Authentication and authorization")


DOMAIN_DEFAULTS = {
    FaultDomain.METADATA: Severity.FATAL,
    FaultDomain.DI: Severity.FATAL,
    FaultDomain.BOOT: Severity.FATAL,
    FaultDomain.HTTP: Severity.ERROR,
    FaultDomain.SECURITY: Severity.ERROR,
}


class Fault(Exception):
    """
    Base fault class - structured, typed fault object.

    Attributes:
        code: Stable machine-readable identifier (e.g., "SERVICE_NOT_FOUND")
        message: Human-readable summary
        domain: Fault domain
        severity: Fault severity (defaults from the domain)
        public: Whether safe to expose to a client
        metadata: Additional context data

    Example:
        ```python
        raise Fault(
            code="TOKEN_EXPIRED",
            message="Token expired",
            domain=FaultDomain.SECURITY,
            public=True,
        )
        ```
    """

    def __init__(
        self,
        code: str | None = None,
        message: str | None = None,
        *,
        domain: FaultDomain | None = None,
        severity: Optional[Severity] = None,
        public: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        # Fallback to class attributes if not provided
        self.code = code if code is not None else getattr(self, "code", None)
        self.message = message if message is not None else getattr(self, "message", None)
        self.domain = domain if domain is not None else getattr(self, "domain", None)

        if self.code is None or self.message is None or self.domain is None:
            raise TypeError(f"{self.__class__.__name__} missing required code, message, or domain")

        super().__init__(self.message)

        self.severity = severity or DOMAIN_DEFAULTS.get(self.domain, Severity.ERROR)
        self.public = public
        self.metadata = metadata or {}

    @property
    def is_fatal(self) -> bool:
        return self.severity == Severity.FATAL

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(code={self.code!r}, domain={self.domain.value}, "
            f"severity={self.severity.value}, public={self.public})"
        )
