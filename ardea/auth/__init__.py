"""
Ardea Auth - bearer authentication hook, role guard and HS256 tokens.
"""

from .guards import bearer_auth, extract_bearer, require_roles, user_roles
from .tokens import TokenManager

__all__ = [
    "bearer_auth",
    "extract_bearer",
    "require_roles",
    "user_roles",
    "TokenManager",
]
