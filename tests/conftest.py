"""
Shared pytest fixtures for drivegrab tests.

Upstream is faked with httpx.MockTransport (see helpers.FakeDrive); no test
touches the network.
"""

from collections.abc import Generator
from unittest.mock import MagicMock, patch

import pytest

from config import Settings, get_settings
from tests.helpers import FakeDrive


@pytest.fixture
def settings() -> Settings:
    """Defaults, with error-on-exhaustion left at 'redirect'."""
    return Settings()


@pytest.fixture
def small_settings() -> Settings:
    """Tiny size ceiling and chunk size so streaming paths run on small bodies."""
    return Settings(size_ceiling=64, chunk_size=16, min_payload_bytes=10)


@pytest.fixture
def drive() -> FakeDrive:
    return FakeDrive()


@pytest.fixture(autouse=True)
def no_retry_sleep() -> Generator[MagicMock, None, None]:
    """Metadata retries back off with time.sleep; don't actually wait."""
    with patch("retry.time.sleep") as mock_sleep:
        yield mock_sleep


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
