"""Data models for Activity Report.

Each model mirrors one GraphQL node shape and offers a ``from_graphql``
constructor that flattens the nested connection/totalCount structure the API
returns into plain attributes.
"""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated, Any

from pydantic import AfterValidator, AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


Timestamp = Annotated[datetime, AfterValidator(as_utc)]


def _total(node: dict[str, Any], key: str) -> int:
    """Read ``node[key].totalCount``, treating a missing connection as zero."""
    connection = node.get(key) or {}
    return int(connection.get("totalCount") or 0)


def _login(actor: dict[str, Any] | None) -> str | None:
    """Read ``login`` from an actor object; deleted accounts come back as null."""
    if not actor:
        return None
    return actor.get("login")


def _repo_name(node: dict[str, Any]) -> str:
    return str((node.get("repository") or {}).get("nameWithOwner") or "")


class ReportModel(BaseModel):
    """Base model: snake_case attributes, camelCase when dumped to JSON."""

    model_config = ConfigDict(alias_generator=AliasGenerator(serialization_alias=to_camel))


class PRComment(ReportModel):
    """Issue-style comment on a pull request.

    Attributes:
        author: Comment author login (None for deleted accounts)
        body_text: Plain-text comment body
        created_at: Comment creation timestamp
        reactions: Reaction type to count, zero counts omitted
    """

    author: str | None = None
    body_text: str = ""
    created_at: Timestamp
    reactions: dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_graphql(cls, node: dict[str, Any]) -> "PRComment":
        """Parse a comment node, collapsing ``reactionGroups`` to a sparse mapping.

        Example:
            >>> node = {
            ...     "author": {"login": "octocat"},
            ...     "bodyText": "LGTM",
            ...     "createdAt": "2024-01-05T10:00:00Z",
            ...     "reactionGroups": [
            ...         {"content": "THUMBS_UP", "reactors": {"totalCount": 2}},
            ...         {"content": "EYES", "reactors": {"totalCount": 0}},
            ...     ],
            ... }
            >>> PRComment.from_graphql(node).reactions
            {'THUMBS_UP': 2}
        """
        return cls(
            author=_login(node.get("author")),
            body_text=node.get("bodyText") or "",
            created_at=node["createdAt"],
            reactions=collapse_reactions(node.get("reactionGroups") or []),
        )


def collapse_reactions(groups: list[dict[str, Any]]) -> dict[str, int]:
    """Turn GraphQL reaction groups into ``{content: count}`` without zero entries."""
    reactions: dict[str, int] = {}
    for group in groups:
        count = _total(group, "reactors")
        if count > 0:
            reactions[group["content"]] = count
    return reactions


class ReviewComment(ReportModel):
    """Inline comment attached to a formal review."""

    body_text: str = ""
    path: str | None = None
    position: int | None = None
    diff_hunk: str | None = None
    created_at: Timestamp

    @classmethod
    def from_graphql(cls, node: dict[str, Any]) -> "ReviewComment":
        return cls(
            body_text=node.get("bodyText") or "",
            path=node.get("path"),
            position=node.get("position"),
            diff_hunk=node.get("diffHunk"),
            created_at=node["createdAt"],
        )


class PRReviewDetail(ReportModel):
    """Formal review on a pull request with its inline comments."""

    author: str | None = None
    state: str = ""
    created_at: Timestamp
    comments: list[ReviewComment] = Field(default_factory=list)

    @classmethod
    def from_graphql(cls, node: dict[str, Any]) -> "PRReviewDetail":
        comment_nodes = (node.get("comments") or {}).get("nodes") or []
        return cls(
            author=_login(node.get("author")),
            state=node.get("state") or "",
            created_at=node["createdAt"],
            comments=[ReviewComment.from_graphql(c) for c in comment_nodes if c],
        )


class ChangedFile(ReportModel):
    """File touched by a pull request."""

    path: str
    additions: int = 0
    deletions: int = 0
    change_type: str | None = None

    @classmethod
    def from_graphql(cls, node: dict[str, Any]) -> "ChangedFile":
        return cls(
            path=node["path"],
            additions=node.get("additions") or 0,
            deletions=node.get("deletions") or 0,
            change_type=node.get("changeType"),
        )


class TimelineKind(StrEnum):
    """Timeline event kinds kept during enrichment."""

    READY_FOR_REVIEW = "ReadyForReviewEvent"
    REVIEW_REQUESTED = "ReviewRequestedEvent"
    MERGED = "MergedEvent"


class TimelineEvent(ReportModel):
    """Pull request timeline event of one of the recognized kinds.

    Attributes:
        kind: Event type (GraphQL ``__typename``)
        actor: Login of the account that triggered the event
        created_at: Event timestamp
        requested_reviewer: Reviewer login (review requests to users only)
        merge_commit: Merge commit OID (merge events only)
    """

    kind: TimelineKind
    actor: str | None = None
    created_at: Timestamp
    requested_reviewer: str | None = None
    merge_commit: str | None = None

    @classmethod
    def from_graphql(cls, node: dict[str, Any]) -> "TimelineEvent | None":
        """Parse a timeline node, returning None for kinds that are not tracked."""
        try:
            kind = TimelineKind(node.get("__typename"))
        except ValueError:
            return None
        return cls(
            kind=kind,
            actor=_login(node.get("actor")),
            created_at=node["createdAt"],
            requested_reviewer=_login(node.get("requestedReviewer")),
            merge_commit=(node.get("commit") or {}).get("oid"),
        )


class PullRequest(ReportModel):
    """Pull request authored by the subject.

    The four ``*_details``/``changed_files``/``timeline_items`` fields stay None
    until the pull request enrichment pass assigns them.
    """

    title: str
    number: int
    repo: str
    created_at: Timestamp
    updated_at: Timestamp
    merged_at: Timestamp | None = None
    closed_at: Timestamp | None = None
    is_draft: bool = False
    state: str = ""
    commit_count: int = 0
    additions: int = 0
    deletions: int = 0
    comment_count: int = 0
    review_count: int = 0
    body: str = ""

    comment_details: list[PRComment] | None = None
    review_details: list[PRReviewDetail] | None = None
    changed_files: list[ChangedFile] | None = None
    timeline_items: list[TimelineEvent] | None = None

    @property
    def url(self) -> str:
        return f"https://github.com/{self.repo}/pull/{self.number}"

    @property
    def owner_and_name(self) -> tuple[str, str]:
        owner, _, name = self.repo.partition("/")
        return owner, name

    @classmethod
    def from_graphql(cls, node: dict[str, Any]) -> "PullRequest":
        """Parse a ``pullRequestContributions`` node's ``pullRequest`` object."""
        return cls(
            title=node.get("title") or "",
            number=node["number"],
            repo=_repo_name(node),
            created_at=node["createdAt"],
            updated_at=node["updatedAt"],
            merged_at=node.get("mergedAt"),
            closed_at=node.get("closedAt"),
            is_draft=bool(node.get("isDraft")),
            state=node.get("state") or "",
            commit_count=_total(node, "commits"),
            additions=node.get("additions") or 0,
            deletions=node.get("deletions") or 0,
            comment_count=_total(node, "comments"),
            review_count=_total(node, "reviews"),
            body=node.get("body") or "",
        )


class Review(ReportModel):
    """Review the subject left on a pull request."""

    created_at: Timestamp
    updated_at: Timestamp
    state: str = ""
    comment_count: int = 0
    repo: str
    pr_number: int
    pr_title: str = ""
    pr_author: str | None = None

    @property
    def pr_url(self) -> str:
        return f"https://github.com/{self.repo}/pull/{self.pr_number}"

    @classmethod
    def from_graphql(cls, node: dict[str, Any]) -> "Review":
        """Parse a ``pullRequestReviewContributions`` node's review object."""
        pull_request = node.get("pullRequest") or {}
        return cls(
            created_at=node["createdAt"],
            updated_at=node["updatedAt"],
            state=node.get("state") or "",
            comment_count=_total(node, "comments"),
            repo=_repo_name(node),
            pr_number=pull_request["number"],
            pr_title=pull_request.get("title") or "",
            pr_author=_login(pull_request.get("author")),
        )


class Issue(ReportModel):
    """Issue opened by the subject."""

    title: str
    number: int
    repo: str
    created_at: Timestamp
    updated_at: Timestamp
    closed_at: Timestamp | None = None
    comment_count: int = 0

    @property
    def url(self) -> str:
        return f"https://github.com/{self.repo}/issues/{self.number}"

    @classmethod
    def from_graphql(cls, node: dict[str, Any]) -> "Issue":
        return cls(
            title=node.get("title") or "",
            number=node["number"],
            repo=_repo_name(node),
            created_at=node["createdAt"],
            updated_at=node["updatedAt"],
            closed_at=node.get("closedAt"),
            comment_count=_total(node, "comments"),
        )


class CommitNode(ReportModel):
    """Commit that landed on a repository's default branch."""

    message_headline: str = ""
    message_body: str = ""
    committed_date: Timestamp

    @classmethod
    def from_graphql(cls, node: dict[str, Any]) -> "CommitNode":
        return cls(
            message_headline=node.get("messageHeadline") or "",
            message_body=node.get("messageBody") or "",
            committed_date=node["committedDate"],
        )


class RepoInfo(ReportModel):
    """Repository description and topic tags."""

    description: str | None = None
    topics: list[str] = Field(default_factory=list)

    @classmethod
    def from_graphql(cls, node: dict[str, Any]) -> "RepoInfo":
        topic_nodes = (node.get("repositoryTopics") or {}).get("nodes") or []
        return cls(
            description=node.get("description"),
            topics=[t["topic"]["name"] for t in topic_nodes if t and t.get("topic")],
        )


class RepoCommitSummary(ReportModel):
    """Commit contributions to one repository.

    Attributes:
        repo: Repository ``owner/name``
        total_count: Contribution count reported by the contributions collection
        commits: Default-branch commits authored by the subject (after enrichment)
        direct_commits: ``len(commits)``; differs from total_count when work
            landed on other branches or was squashed
        repo_info: Description and topics, None when not visible
    """

    repo: str
    total_count: int = 0
    commits: list[CommitNode] | None = None
    direct_commits: int | None = None
    repo_info: RepoInfo | None = None

    @property
    def owner_and_name(self) -> tuple[str, str]:
        owner, _, name = self.repo.partition("/")
        return owner, name

    @classmethod
    def from_graphql(cls, node: dict[str, Any]) -> "RepoCommitSummary":
        """Parse a ``commitContributionsByRepository`` entry."""
        return cls(
            repo=_repo_name(node),
            total_count=_total(node, "contributions"),
        )


class ActivityRecord(ReportModel):
    """Everything fetched for one account over one window."""

    pull_requests: list[PullRequest] = Field(default_factory=list)
    reviews: list[Review] = Field(default_factory=list)
    issues: list[Issue] = Field(default_factory=list)
    commits_by_repo: list[RepoCommitSummary] = Field(default_factory=list)
