"""GraphQL response builders shared by the GitHub tests."""

from typing import Any
from unittest.mock import AsyncMock, MagicMock


def mock_response_context(
    status: int = 200,
    json_data: Any = None,
    headers: dict[str, str] | None = None,
) -> MagicMock:
    """Build an async context manager yielding a fake aiohttp response.

    Args:
        status: HTTP status code
        json_data: Value returned by response.json()
        headers: Response headers

    Returns:
        MagicMock usable as ``async with session.post(...) as response``
    """
    response = AsyncMock()
    response.status = status
    response.headers = headers or {}
    response.json = AsyncMock(return_value=json_data)

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=None)
    return context


def pr_node(
    number: int,
    updated_at: str,
    created_at: str = "2024-01-02T09:00:00Z",
    repo: str = "octo/widgets",
    title: str | None = None,
) -> dict[str, Any]:
    """GraphQL pull request node as returned inside pullRequestContributions."""
    return {
        "title": title or f"Pull request {number}",
        "number": number,
        "repository": {"nameWithOwner": repo},
        "createdAt": created_at,
        "updatedAt": updated_at,
        "mergedAt": None,
        "closedAt": None,
        "isDraft": False,
        "state": "OPEN",
        "commits": {"totalCount": 3},
        "additions": 10,
        "deletions": 2,
        "comments": {"totalCount": 1},
        "reviews": {"totalCount": 1},
        "body": "Body text",
    }


def review_node(number: int, updated_at: str, author: str = "someone") -> dict[str, Any]:
    """GraphQL review node as returned inside pullRequestReviewContributions."""
    return {
        "createdAt": updated_at,
        "updatedAt": updated_at,
        "state": "APPROVED",
        "comments": {"totalCount": 0},
        "repository": {"nameWithOwner": "octo/widgets"},
        "pullRequest": {
            "number": number,
            "title": f"Reviewed {number}",
            "author": {"login": author},
        },
    }


def issue_node(number: int, updated_at: str) -> dict[str, Any]:
    """GraphQL issue node as returned inside issueContributions."""
    return {
        "title": f"Issue {number}",
        "number": number,
        "repository": {"nameWithOwner": "octo/widgets"},
        "createdAt": updated_at,
        "updatedAt": updated_at,
        "closedAt": None,
        "comments": {"totalCount": 2},
    }


def contributions_page(
    prs: list[dict[str, Any]] | None = None,
    reviews: list[dict[str, Any]] | None = None,
    issues: list[dict[str, Any]] | None = None,
    commits_by_repo: list[dict[str, Any]] | None = None,
    has_next_page: bool = False,
    end_cursor: str | None = None,
) -> dict[str, Any]:
    """Full response body for one page of the contributions query."""
    page_info = {"hasNextPage": has_next_page, "endCursor": end_cursor}
    return {
        "data": {
            "user": {
                "contributionsCollection": {
                    "pullRequestContributions": {
                        "nodes": [{"pullRequest": n} for n in prs or []],
                        "pageInfo": page_info,
                    },
                    "pullRequestReviewContributions": {
                        "nodes": [{"pullRequestReview": n} for n in reviews or []],
                        "pageInfo": page_info,
                    },
                    "issueContributions": {
                        "nodes": [{"issue": n} for n in issues or []],
                        "pageInfo": page_info,
                    },
                    "commitContributionsByRepository": commits_by_repo or [],
                }
            }
        }
    }


def repo_contribution(repo: str, total: int) -> dict[str, Any]:
    """commitContributionsByRepository entry."""
    return {"repository": {"nameWithOwner": repo}, "contributions": {"totalCount": total}}


