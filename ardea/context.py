"""
Request Context

The value every hook, extractor and raw-context parameter receives.
Engines build one per request from their native request object.
"""

from typing import Any, Dict, Optional
from dataclasses import dataclass, field


@dataclass
class Context:
    """
    Request context provided to hooks and handlers.

    Attributes:
        method: Lower-case HTTP method ("get", "post", ...)
        path: Request path
        headers: Request headers (lower-case names)
        body: Parsed request body, passed verbatim to ``Body`` parameters
        query: Query parameters, passed verbatim to ``Query`` parameters
        params: Path-segment values keyed by name
        store: Per-request state shared between hooks (e.g. ``store["user"]``)
        status: Response status; hooks may set it
        request: The engine's native request object, if any
        route: The route registration being served, if any
    """

    method: str = "get"
    path: str = "/"
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    query: Dict[str, Any] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)
    store: Dict[str, Any] = field(default_factory=dict)
    status: int = 200
    request: Optional[Any] = None
    route: Optional[Any] = None

    def __post_init__(self):
        self.headers = {key.lower(): value for key, value in self.headers.items()}

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    @property
    def user(self) -> Optional[Any]:
        """Authenticated payload stored by the authentication hook."""
        return self.store.get("user")
