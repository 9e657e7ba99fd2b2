"""Pytest fixtures for report rendering tests."""

from datetime import UTC, datetime

import pytest

from activity_report.shared.models import (
    ActivityRecord,
    ChangedFile,
    CommitNode,
    Issue,
    PRComment,
    PRReviewDetail,
    PullRequest,
    RepoCommitSummary,
    RepoInfo,
    Review,
    ReviewComment,
    TimelineEvent,
    TimelineKind,
)

LONG_TITLE = "Refactor the contributions parser to handle nested connection pages"


@pytest.fixture
def since() -> datetime:
    return datetime(2024, 1, 1, tzinfo=UTC)


@pytest.fixture
def activity_record() -> ActivityRecord:
    """Record for octocat with one self-review and no enrichment.

    Returns:
        ActivityRecord with 2 PRs, 2 reviews (1 self), 1 issue, 2 repos
    """
    return ActivityRecord(
        pull_requests=[
            PullRequest(
                title=LONG_TITLE,
                number=1,
                repo="octo/widgets",
                created_at=datetime(2024, 1, 2, 9, tzinfo=UTC),
                updated_at=datetime(2024, 1, 6, tzinfo=UTC),
                merged_at=datetime(2024, 1, 6, tzinfo=UTC),
                state="MERGED",
                commit_count=3,
                additions=120,
                deletions=30,
                comment_count=2,
                review_count=1,
                body="Splits parsing\ninto helpers",
            ),
            PullRequest(
                title="Fix typo",
                number=2,
                repo="octo/other",
                created_at=datetime(2023, 12, 15, tzinfo=UTC),
                updated_at=datetime(2024, 1, 10, tzinfo=UTC),
                state="OPEN",
                body="Old description",
            ),
        ],
        reviews=[
            Review(
                created_at=datetime(2024, 1, 3, tzinfo=UTC),
                updated_at=datetime(2024, 1, 3, tzinfo=UTC),
                state="APPROVED",
                repo="octo/widgets",
                pr_number=7,
                pr_title="My own change",
                pr_author="OctoCat",
            ),
            Review(
                created_at=datetime(2024, 1, 4, tzinfo=UTC),
                updated_at=datetime(2024, 1, 4, tzinfo=UTC),
                state="CHANGES_REQUESTED",
                comment_count=3,
                repo="octo/widgets",
                pr_number=42,
                pr_title="Add <script> tag support",
                pr_author="someone",
            ),
        ],
        issues=[
            Issue(
                title="Crash on empty repo",
                number=5,
                repo="octo/widgets",
                created_at=datetime(2024, 1, 8, tzinfo=UTC),
                updated_at=datetime(2024, 1, 8, tzinfo=UTC),
                comment_count=4,
            )
        ],
        commits_by_repo=[
            RepoCommitSummary(repo="octo/widgets", total_count=5),
            RepoCommitSummary(repo="octo/other", total_count=2),
        ],
    )


@pytest.fixture
def enriched_record(activity_record: ActivityRecord) -> ActivityRecord:
    """The same record after both enrichment passes."""
    pr = activity_record.pull_requests[0]
    pr.comment_details = [
        PRComment(
            author="bob",
            body_text="Looks good",
            created_at=datetime(2024, 1, 3, tzinfo=UTC),
            reactions={"+1": 2},
        )
    ]
    pr.review_details = [
        PRReviewDetail(
            author="dave",
            state="APPROVED",
            created_at=datetime(2024, 1, 4, tzinfo=UTC),
            comments=[
                ReviewComment(
                    body_text="Rename this helper",
                    path="src/parser.py",
                    created_at=datetime(2024, 1, 4, tzinfo=UTC),
                )
            ],
        )
    ]
    pr.changed_files = [ChangedFile(path="src/parser.py", additions=5, deletions=1)]
    pr.timeline_items = [
        TimelineEvent(
            kind=TimelineKind.REVIEW_REQUESTED,
            actor="octocat",
            created_at=datetime(2024, 1, 2, tzinfo=UTC),
            requested_reviewer="dave",
        ),
        TimelineEvent(
            kind=TimelineKind.MERGED,
            actor="dave",
            created_at=datetime(2024, 1, 6, tzinfo=UTC),
            merge_commit="abc123",
        ),
    ]
    old_pr = activity_record.pull_requests[1]
    old_pr.comment_details = []
    old_pr.review_details = []
    old_pr.changed_files = []
    old_pr.timeline_items = []

    widgets, other = activity_record.commits_by_repo
    widgets.commits = [
        CommitNode(
            message_headline="Split parser",
            message_body="Moves helpers\ninto their own module",
            committed_date=datetime(2024, 1, 5, tzinfo=UTC),
        )
    ]
    widgets.direct_commits = 1
    widgets.repo_info = RepoInfo(description="Widgets", topics=["cli", "python"])
    other.commits = []
    other.direct_commits = 0
    other.repo_info = None
    return activity_record
