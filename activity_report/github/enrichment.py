"""Secondary per-repository and per-pull-request fetches.

Both passes mutate the record in place. Every concurrent branch writes only
to its own repository summary or pull request, so the passes can run at the
same time, but nothing else may read the record until they finish.
"""

import asyncio
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from activity_report.core.logging import get_logger
from activity_report.github.activity import to_github_timestamp
from activity_report.github.client import GitHubClient
from activity_report.github.paginator import INACCESSIBLE, Page, paginate
from activity_report.github.queries import (
    DEFAULT_BRANCH_HISTORY_QUERY,
    PR_CHANGED_FILES_QUERY,
    PR_COMMENTS_QUERY,
    PR_REVIEWS_QUERY,
    PR_TIMELINE_QUERY,
    REPO_INFO_QUERY,
    USER_ID_QUERY,
)
from activity_report.shared.exceptions import AuthError, QueryError
from activity_report.shared.models import (
    ActivityRecord,
    ChangedFile,
    CommitNode,
    PRComment,
    PRReviewDetail,
    PullRequest,
    RepoCommitSummary,
    RepoInfo,
    TimelineEvent,
    as_utc,
)

logger = get_logger(__name__)

# Failures absorbed at the per-repository / per-pull-request boundary
ITEM_ERRORS = (QueryError, ValidationError)

# Raised by the node parsers when a payload is missing fields or nests nulls
SHAPE_ERRORS = (KeyError, TypeError, AttributeError)


def _pull_request_node(data: dict[str, Any] | None) -> dict[str, Any] | None:
    if not data or not data.get("data"):
        return None
    repository = data["data"].get("repository") or {}
    return repository.get("pullRequest")


async def fetch_user_id(client: GitHubClient, login: str) -> str:
    """Resolve the stable node ID used to filter commit history by author.

    Raises:
        QueryError: If the lookup fails or the account does not exist
    """
    data = await client.execute(USER_ID_QUERY, {"login": login})
    try:
        user_id: str = data["data"]["user"]["id"]
    except (KeyError, TypeError) as e:
        raise QueryError(f"Could not resolve user ID for {login}") from e
    return user_id


async def fetch_repo_commits(
    client: GitHubClient, owner: str, repo: str, since: datetime, author_id: str
) -> list[CommitNode]:
    """Fetch every default-branch commit by ``author_id`` since ``since``.

    Returns:
        Commits in history order; empty when the repository is not visible
        or has no default branch
    """

    async def fetch_page(cursor: str | None) -> Any:
        variables = {
            "owner": owner,
            "repo": repo,
            "cursor": cursor,
            "since": to_github_timestamp(since),
            "authorId": author_id,
        }
        data = await client.safe_execute(DEFAULT_BRANCH_HISTORY_QUERY, variables)
        if not data or not data.get("data"):
            return INACCESSIBLE
        try:
            repository = data["data"].get("repository") or {}
            target = (repository.get("defaultBranchRef") or {}).get("target") or {}
            history = target.get("history")
            if not history:
                return Page()
            return Page.from_connection(history, CommitNode.from_graphql)
        except SHAPE_ERRORS as e:
            raise QueryError(f"Unexpected commit history for {owner}/{repo}: {e}") from e

    return await paginate(fetch_page)


async def fetch_repo_info(client: GitHubClient, owner: str, name: str) -> RepoInfo | None:
    """Fetch repository description and topics, or None when not visible."""
    data = await client.safe_execute(REPO_INFO_QUERY, {"owner": owner, "name": name})
    if not data or not data.get("data") or not data["data"].get("repository"):
        return None
    try:
        return RepoInfo.from_graphql(data["data"]["repository"])
    except SHAPE_ERRORS as e:
        raise QueryError(f"Unexpected repository info for {owner}/{name}: {e}") from e


def _item_result(result: Any, default: Any, event: str, **context: Any) -> Any:
    """Unwrap one ``gather`` result, replacing an absorbed failure with ``default``.

    Raises:
        AuthError: Passed through so the whole request fails
        Exception: Anything outside the per-item failures is re-raised
    """
    if not isinstance(result, BaseException):
        return result
    if isinstance(result, AuthError) or not isinstance(result, ITEM_ERRORS):
        raise result
    logger.warning(event, error=str(result), **context)
    return default


async def _enrich_repo(
    client: GitHubClient, summary: RepoCommitSummary, since: datetime, author_id: str
) -> None:
    owner, name = summary.owner_and_name
    commits, repo_info = await asyncio.gather(
        fetch_repo_commits(client, owner, name, since, author_id),
        fetch_repo_info(client, owner, name),
        return_exceptions=True,
    )

    event = "enrich.repo.failed"
    summary.commits = _item_result(commits, [], event, repo=summary.repo, part="commits")
    summary.direct_commits = len(summary.commits)
    summary.repo_info = _item_result(repo_info, None, event, repo=summary.repo, part="info")


async def enrich_commits(
    client: GitHubClient, record: ActivityRecord, since: datetime, login: str
) -> ActivityRecord:
    """Attach landed commits and repository metadata to every commit summary.

    ``direct_commits`` counts only commits on the default branch, so it can be
    lower than the contribution total GitHub reports for the repository.

    Args:
        client: Open GitHub client
        record: Record to enrich in place
        since: Window start
        login: Account whose commits are collected

    Returns:
        The same record

    Raises:
        AuthError: If the token is missing or rejected
        QueryError: If the account ID lookup fails
    """
    since = as_utc(since)
    author_id = await fetch_user_id(client, login)

    logger.info("enrich.commits.started", login=login, repos=len(record.commits_by_repo))
    await asyncio.gather(
        *(_enrich_repo(client, summary, since, author_id) for summary in record.commits_by_repo)
    )
    logger.info(
        "enrich.commits.complete",
        login=login,
        direct_commits=sum(s.direct_commits or 0 for s in record.commits_by_repo),
    )
    return record


async def fetch_pr_comments(
    client: GitHubClient, owner: str, repo: str, number: int
) -> list[PRComment]:
    """Fetch all issue-style comments on a pull request."""

    async def fetch_page(cursor: str | None) -> Any:
        variables = {"owner": owner, "repo": repo, "number": number, "cursor": cursor}
        data = await client.safe_execute(PR_COMMENTS_QUERY, variables)
        if not data or not data.get("data"):
            return INACCESSIBLE
        try:
            pull_request = _pull_request_node(data) or {}
            if not pull_request.get("comments"):
                return Page()
            return Page.from_connection(pull_request["comments"], PRComment.from_graphql)
        except SHAPE_ERRORS as e:
            raise QueryError(f"Unexpected comments for {owner}/{repo}#{number}: {e}") from e

    return await paginate(fetch_page)


async def fetch_pr_reviews(
    client: GitHubClient, owner: str, repo: str, number: int
) -> list[PRReviewDetail]:
    """Fetch all formal reviews on a pull request with their inline comments."""

    async def fetch_page(cursor: str | None) -> Any:
        variables = {"owner": owner, "repo": repo, "number": number, "cursor": cursor}
        data = await client.safe_execute(PR_REVIEWS_QUERY, variables)
        if not data or not data.get("data"):
            return INACCESSIBLE
        try:
            pull_request = _pull_request_node(data) or {}
            if not pull_request.get("reviews"):
                return Page()
            return Page.from_connection(pull_request["reviews"], PRReviewDetail.from_graphql)
        except SHAPE_ERRORS as e:
            raise QueryError(f"Unexpected reviews for {owner}/{repo}#{number}: {e}") from e

    return await paginate(fetch_page)


async def fetch_pr_changed_files(
    client: GitHubClient, owner: str, repo: str, number: int
) -> list[ChangedFile]:
    """Fetch the first page of files changed by a pull request."""
    data = await client.safe_execute(
        PR_CHANGED_FILES_QUERY, {"owner": owner, "repo": repo, "number": number}
    )
    try:
        pull_request = _pull_request_node(data) or {}
        nodes = (pull_request.get("files") or {}).get("nodes") or []
        return [ChangedFile.from_graphql(node) for node in nodes if node]
    except SHAPE_ERRORS as e:
        raise QueryError(f"Unexpected changed files for {owner}/{repo}#{number}: {e}") from e


async def fetch_pr_timeline(
    client: GitHubClient, owner: str, repo: str, number: int
) -> list[TimelineEvent]:
    """Fetch ready-for-review, review-requested and merged events."""
    data = await client.safe_execute(
        PR_TIMELINE_QUERY, {"owner": owner, "repo": repo, "number": number}
    )
    try:
        pull_request = _pull_request_node(data) or {}
        nodes = (pull_request.get("timelineItems") or {}).get("nodes") or []
        events = [TimelineEvent.from_graphql(node) for node in nodes if node]
    except SHAPE_ERRORS as e:
        raise QueryError(f"Unexpected timeline for {owner}/{repo}#{number}: {e}") from e
    return [event for event in events if event is not None]


async def _enrich_pull_request(client: GitHubClient, pr: PullRequest, since: datetime) -> None:
    owner, name = pr.owner_and_name
    results = await asyncio.gather(
        fetch_pr_comments(client, owner, name, pr.number),
        fetch_pr_reviews(client, owner, name, pr.number),
        fetch_pr_changed_files(client, owner, name, pr.number),
        fetch_pr_timeline(client, owner, name, pr.number),
        return_exceptions=True,
    )

    comments, reviews, changed_files, timeline_items = (
        _item_result(result, [], "enrich.pull_request.failed", repo=pr.repo, number=pr.number)
        for result in results
    )

    pr.comment_details = [c for c in comments if c.created_at >= since]
    pr.review_details = [r for r in reviews if r.created_at >= since]
    pr.changed_files = changed_files
    pr.timeline_items = timeline_items


async def enrich_pull_requests(
    client: GitHubClient, record: ActivityRecord, since: datetime
) -> ActivityRecord:
    """Attach comments, reviews, changed files and timeline events to every pull request.

    Comments and reviews older than ``since`` are dropped. All pull requests
    are fetched at once with no concurrency limit, which is fine for one
    account's window but grows linearly with the number of pull requests.

    Args:
        client: Open GitHub client
        record: Record to enrich in place
        since: Window start

    Returns:
        The same record

    Raises:
        AuthError: If the token is missing or rejected
    """
    since = as_utc(since)
    logger.info("enrich.pull_requests.started", pull_requests=len(record.pull_requests))
    await asyncio.gather(*(_enrich_pull_request(client, pr, since) for pr in record.pull_requests))
    logger.info("enrich.pull_requests.complete", pull_requests=len(record.pull_requests))
    return record


async def enrich_activity(
    client: GitHubClient, record: ActivityRecord, since: datetime, login: str
) -> ActivityRecord:
    """Run the commit and pull request passes concurrently."""
    await asyncio.gather(
        enrich_commits(client, record, since, login),
        enrich_pull_requests(client, record, since),
    )
    return record
