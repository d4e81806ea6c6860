"""
Pytest configuration and fixtures for vidprobe tests.

Network access is faked with ``httpx.MockTransport``: tests register canned
responses on a ``FakeBackend`` keyed by URL prefix, and any request that
matches no route fails with ``httpx.ConnectError``.
"""

from __future__ import annotations

import httpx
import pytest

from tests.fakes import FakeBackend
from vidprobe.config.settings import Settings


@pytest.fixture
def settings() -> Settings:
    """Settings with every credential configured."""
    return Settings(
        youtube_api_key="test_youtube_key",
        rapidapi_key="test_rapidapi_key",
        rapidapi_key_tiktok="test_tiktok_key",
        _env_file=None,
    )


@pytest.fixture
def keyless_settings() -> Settings:
    """Settings with no credentials configured."""
    return Settings(
        youtube_api_key="",
        rapidapi_key="",
        rapidapi_key_tiktok="",
        _env_file=None,
    )


@pytest.fixture
def backend() -> FakeBackend:
    """Empty fake backend; register routes per test."""
    return FakeBackend()


@pytest.fixture
def http_client(backend: FakeBackend) -> httpx.AsyncClient:
    """Async client wired to the fake backend."""
    return httpx.AsyncClient(transport=httpx.MockTransport(backend.handler))
