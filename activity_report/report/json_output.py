"""JSON projection of an activity record."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel

from activity_report.report.renderer import summarize_counts, visible_reviews
from activity_report.shared.models import ActivityRecord, PullRequest, as_utc


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


def _dump_list(models: list[Any] | None) -> list[dict[str, Any]] | None:
    if models is None:
        return None
    return [_dump(model) for model in models]


def _pull_request_entry(pr: PullRequest) -> dict[str, Any]:
    return {
        "title": pr.title,
        "url": pr.url,
        "repo": pr.repo,
        "number": pr.number,
        "state": pr.state,
        "isDraft": pr.is_draft,
        "created": pr.created_at.isoformat(),
        "updated": pr.updated_at.isoformat(),
        "merged": pr.merged_at.isoformat() if pr.merged_at else None,
        "closed": pr.closed_at.isoformat() if pr.closed_at else None,
        "additions": pr.additions,
        "deletions": pr.deletions,
        "commitCount": pr.commit_count,
        "commentCount": pr.comment_count,
        "reviewCount": pr.review_count,
        "body": pr.body,
        "commentDetails": _dump_list(pr.comment_details),
        "reviewDetails": _dump_list(pr.review_details),
        "changedFiles": _dump_list(pr.changed_files),
        "timelineItems": _dump_list(pr.timeline_items),
    }


def to_json(
    record: ActivityRecord, login: str, since: datetime, now: datetime | None = None
) -> dict[str, Any]:
    """Flatten a record into aggregate stats plus normalized arrays.

    The stats use the same counting rules as the text formats: self-reviews
    are left out and commits count landed commits once a repository has been
    enriched.

    Args:
        record: Fetched (and optionally enriched) activity
        login: Account the record belongs to
        since: Window start
        now: Window end (default: current time)

    Returns:
        JSON-serializable dictionary

    Example:
        >>> data = to_json(ActivityRecord(), "octocat", datetime(2024, 1, 1, tzinfo=UTC))
        >>> data["stats"]["totalPRs"]
        0
    """
    counts = summarize_counts(record, login)
    end = as_utc(now) if now else datetime.now(UTC)

    return {
        "username": login,
        "period": {
            "start": as_utc(since).isoformat(),
            "end": end.isoformat(),
        },
        "stats": {
            "totalPRs": counts.pull_requests,
            "totalReviews": counts.reviews,
            "totalIssues": counts.issues,
            "totalCommitRepos": counts.commit_repos,
            "totalCommits": counts.commits,
        },
        "pullRequests": [_pull_request_entry(pr) for pr in record.pull_requests],
        "issues": [{**_dump(issue), "url": issue.url} for issue in record.issues],
        "reviews": [
            {**_dump(review), "url": review.pr_url}
            for review in visible_reviews(record.reviews, login)
        ],
        "commitsByRepo": [_dump(summary) for summary in record.commits_by_repo],
    }
