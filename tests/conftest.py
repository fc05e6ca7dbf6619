"""Pytest configuration and fixtures."""

from collections.abc import Generator

import pytest

from at_realtime.config import Settings, get_settings


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Generator[None, None, None]:
    """Reset cached settings so env changes in one test don't leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at a fake AT host."""
    return Settings(
        at_api_key="test-key",
        at_api_base_url="https://at.example.com/v2",
        fetch_timeout_sec=5,
        _env_file=None,
    )
