"""Shared test fixtures for GitHub integration tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from activity_report.github.client import GitHubClient


@pytest.fixture
def github_client() -> GitHubClient:
    """Create a GitHub client with a mocked session.

    Returns:
        GitHubClient whose session.post is a MagicMock
    """
    client = GitHubClient("test_token_12345")
    client.session = AsyncMock()
    client.session.post = MagicMock()
    return client
