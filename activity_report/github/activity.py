"""Primary contributions fetch for one account."""

import calendar
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from activity_report.core.logging import get_logger
from activity_report.github.client import GitHubClient
from activity_report.github.paginator import Page, paginate
from activity_report.github.queries import USER_CONTRIBUTIONS_QUERY
from activity_report.shared.exceptions import QueryError
from activity_report.shared.models import (
    ActivityRecord,
    Issue,
    PullRequest,
    RepoCommitSummary,
    Review,
    as_utc,
)

logger = get_logger(__name__)

DEFAULT_LOOKBACK_MONTHS = 1


def to_github_timestamp(value: datetime) -> str:
    """Format a datetime the way GitHub's DateTime/GitTimestamp scalars expect.

    Example:
        >>> to_github_timestamp(datetime(2024, 1, 1))
        '2024-01-01T00:00:00Z'
    """
    return as_utc(value).isoformat().replace("+00:00", "Z")


def contribution_window_start(since: datetime, months: int = DEFAULT_LOOKBACK_MONTHS) -> datetime:
    """Move ``since`` back by whole calendar months.

    The day is clamped to the length of the target month, so March 31st
    minus one month is the last day of February.

    Example:
        >>> contribution_window_start(datetime(2024, 3, 31)).date()
        datetime.date(2024, 2, 29)
        >>> contribution_window_start(datetime(2024, 1, 15)).date()
        datetime.date(2023, 12, 15)
    """
    month_index = since.month - 1 - months
    year = since.year + month_index // 12
    month = month_index % 12 + 1
    day = min(since.day, calendar.monthrange(year, month)[1])
    return since.replace(year=year, month=month, day=day)


def filter_since(record: ActivityRecord, since: datetime) -> ActivityRecord:
    """Keep only pull requests, reviews and issues updated at or after ``since``.

    Safe to apply repeatedly; commit summaries are left untouched.

    Args:
        record: Record to filter in place
        since: Window start

    Returns:
        The same record
    """
    since = as_utc(since)
    record.pull_requests = [pr for pr in record.pull_requests if pr.updated_at >= since]
    record.reviews = [review for review in record.reviews if review.updated_at >= since]
    record.issues = [issue for issue in record.issues if issue.updated_at >= since]
    return record


def _nodes(connection: dict[str, Any], key: str) -> list[dict[str, Any]]:
    return [node[key] for node in connection.get("nodes") or [] if node and node.get(key)]


async def fetch_activity(
    client: GitHubClient,
    login: str,
    since: datetime,
    lookback_months: int = DEFAULT_LOOKBACK_MONTHS,
) -> ActivityRecord:
    """Fetch pull requests, reviews, issues and commit summaries for ``login``.

    GitHub pages the contributions collection by when a contribution started,
    not by when it was last updated, so the query starts ``lookback_months``
    before ``since`` and the result is filtered back down to the window.

    The three contribution lists are paged together with the cursor from the
    pull request connection. Commit summaries are the same on every page and
    are taken from the first one.

    Args:
        client: Open GitHub client
        login: Account login
        since: Window start
        lookback_months: Calendar months to query before ``since``

    Returns:
        ActivityRecord filtered to items updated since ``since``

    Raises:
        AuthError: If the token is missing or rejected
        QueryError: If any page fails or has an unexpected shape
    """
    since = as_utc(since)
    window_start = contribution_window_start(since, lookback_months)

    logger.info(
        "activity.fetch.started",
        login=login,
        since=since.isoformat(),
        window_start=window_start.isoformat(),
    )

    async def fetch_page(cursor: str | None) -> Page[dict[str, Any]]:
        variables = {
            "cursor": cursor,
            "login": login,
            "since": to_github_timestamp(window_start),
        }
        data = await client.execute(USER_CONTRIBUTIONS_QUERY, variables)
        try:
            user = data["data"]["user"]
            if user is None:
                raise QueryError(f"User not found: {login}")
            contributions = user["contributionsCollection"]
            page_info = contributions["pullRequestContributions"]["pageInfo"]
        except (KeyError, TypeError) as e:
            raise QueryError(f"Unexpected contributions response for {login}: {e}") from e
        return Page(
            items=[contributions],
            has_next_page=bool(page_info.get("hasNextPage")),
            end_cursor=page_info.get("endCursor"),
        )

    pages = await paginate(fetch_page)

    record = ActivityRecord()
    try:
        for index, contributions in enumerate(pages):
            record.pull_requests.extend(
                PullRequest.from_graphql(node)
                for node in _nodes(contributions["pullRequestContributions"], "pullRequest")
            )
            record.reviews.extend(
                Review.from_graphql(node)
                for node in _nodes(
                    contributions["pullRequestReviewContributions"], "pullRequestReview"
                )
            )
            record.issues.extend(
                Issue.from_graphql(node)
                for node in _nodes(contributions["issueContributions"], "issue")
            )
            if index == 0:
                record.commits_by_repo = [
                    RepoCommitSummary.from_graphql(entry)
                    for entry in contributions.get("commitContributionsByRepository") or []
                ]
    except (KeyError, TypeError, ValidationError) as e:
        raise QueryError(f"Unexpected contributions response for {login}: {e}") from e

    fetched = len(record.pull_requests) + len(record.reviews) + len(record.issues)
    filter_since(record, since)

    logger.info(
        "activity.fetch.complete",
        login=login,
        pages=len(pages),
        fetched=fetched,
        pull_requests=len(record.pull_requests),
        reviews=len(record.reviews),
        issues=len(record.issues),
        repos=len(record.commits_by_repo),
    )

    return record
