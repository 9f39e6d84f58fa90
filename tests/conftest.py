"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import httpx
import pytest

from aggregator.repository import Store
from aggregator.service import Resolver
from core.config import UpstreamSettings

from .support import FakeStore, ProviderStub, make_settings


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "postgres: Tests that need TEST_DATABASE_URL")


@pytest.fixture
def settings() -> UpstreamSettings:
    return make_settings()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def provider() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
def http(provider) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(provider.handler), timeout=5.0)


@pytest.fixture
def resolver(store, http, settings) -> Resolver:
    # FakeStore is duck-typed against Store.
    fake: Store = store  # type: ignore[assignment]
    return Resolver(fake, http, settings)
