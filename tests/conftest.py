"""Shared pytest fixtures for Activity Report workflow tests."""

from collections.abc import Callable, Iterator
from datetime import UTC, datetime

import pytest
import structlog

from activity_report.core.config import Settings
from activity_report.shared.models import (
    ActivityRecord,
    Issue,
    PullRequest,
    RepoCommitSummary,
    Review,
)


@pytest.fixture
def mock_settings() -> Settings:
    """Create Settings instance with test values.

    Returns:
        Settings instance configured for testing
    """
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        github_token="test_github_token",
        tracked_github_users="alice,bob",
        report_since="2024-01-01",
        enrich_reports=False,
        lookback_months=2,
        plain_title_max_chars=40,
        log_level="INFO",
    )


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    """Reset the global settings cache before and after each test.

    This ensures tests don't interfere with each other via cached settings.
    """
    # Import here to avoid circular dependencies
    import activity_report.core.config

    # Clear cache before test
    activity_report.core.config._settings = None

    yield

    # Clear cache after test
    activity_report.core.config._settings = None


def _make_record(login: str) -> ActivityRecord:
    day = datetime(2024, 1, 5, tzinfo=UTC)
    return ActivityRecord(
        pull_requests=[
            PullRequest(
                title=f"Change by {login}",
                number=1,
                repo=f"{login}/project",
                created_at=day,
                updated_at=day,
            )
        ],
        reviews=[
            Review(
                created_at=day,
                updated_at=day,
                repo=f"{login}/project",
                pr_number=2,
                pr_title="Own change",
                pr_author=login,
            )
        ],
        issues=[
            Issue(
                title=f"Issue by {login}",
                number=3,
                repo=f"{login}/project",
                created_at=day,
                updated_at=day,
            )
        ],
        commits_by_repo=[RepoCommitSummary(repo=f"{login}/project", total_count=4)],
    )


@pytest.fixture
def record_factory() -> Callable[[str], ActivityRecord]:
    """Factory building a small record whose titles mention the login."""
    return _make_record


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Restore structlog defaults after each test that configured logging."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
