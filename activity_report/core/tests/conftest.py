"""Shared fixtures for core tests."""

from collections.abc import Iterator

import pytest
import structlog


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    """Reset the global settings cache before and after each test.

    This ensures tests don't interfere with each other via cached settings.
    """
    import activity_report.core.config

    activity_report.core.config._settings = None

    yield

    activity_report.core.config._settings = None


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove report settings that may leak in from the developer's shell.

    Returns:
        The monkeypatch fixture with GITHUB_TOKEN set to a test value
    """
    for name in (
        "GITHUB_GRAPHQL_URL",
        "TRACKED_GITHUB_USERS",
        "REPORT_SINCE",
        "ENRICH_REPORTS",
        "LOOKBACK_MONTHS",
        "PLAIN_TITLE_MAX_CHARS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GITHUB_TOKEN", "test_token")
    return monkeypatch


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Restore structlog defaults after each test that configured logging."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
