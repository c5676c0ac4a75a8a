"""
Shared test fixtures and helpers for the Ardea test suite.
"""

from typing import Any, Dict, Optional

import pytest

from ardea.application import ApplicationContext
from ardea.auth import TokenManager
from ardea.context import Context
from ardea.metadata import MetadataRegistry
from ardea.testing import RecordingEngine

TEST_SECRET = "test-secret"


# ============================================================================
# Context Helpers
# ============================================================================


def make_ctx(
    method: str = "get",
    path: str = "/",
    *,
    headers: Optional[Dict[str, str]] = None,
    body: Any = None,
    query: Optional[Dict[str, Any]] = None,
    params: Optional[Dict[str, str]] = None,
) -> Context:
    """Build a request Context for testing."""
    return Context(
        method=method,
        path=path,
        headers=headers or {},
        body=body,
        query=query or {},
        params=params or {},
    )


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def engine() -> RecordingEngine:
    return RecordingEngine()


@pytest.fixture
def registry() -> MetadataRegistry:
    """Isolated metadata registry for tests that inspect raw entries."""
    return MetadataRegistry()


@pytest.fixture
def app_context() -> ApplicationContext:
    return ApplicationContext()


@pytest.fixture
def tokens() -> TokenManager:
    return TokenManager(TEST_SECRET, ttl=3600)
