"""Text rendering of an activity record as HTML or plain text."""

import html
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from activity_report.shared.exceptions import ConfigError
from activity_report.shared.models import (
    ActivityRecord,
    PullRequest,
    RepoCommitSummary,
    Review,
    TimelineEvent,
    TimelineKind,
    as_utc,
)

DEFAULT_TITLE_MAX_CHARS = 50
ELLIPSIS = "…"
MISSING = "-"
GHOST = "ghost"


class ReportFormat(StrEnum):
    """Output formats produced by render()."""

    HTML = "html"
    PLAIN = "plain"


@dataclass(frozen=True)
class ReportCounts:
    """Totals every output format agrees on."""

    pull_requests: int
    reviews: int
    issues: int
    commit_repos: int
    commits: int


def format_date(value: datetime | None, placeholder: str = MISSING) -> str:
    """Format a timestamp as M/D/YYYY, or ``placeholder`` when absent.

    Example:
        >>> format_date(datetime(2024, 1, 5))
        '1/5/2024'
        >>> format_date(None)
        '-'
    """
    if value is None:
        return placeholder
    return f"{value.month}/{value.day}/{value.year}"


def shorten(text: str, max_chars: int | None) -> str:
    """Cut ``text`` to ``max_chars`` characters, marking the cut with an ellipsis.

    Example:
        >>> shorten("Refactor the parser", 8)
        'Refactor…'
    """
    if max_chars is None or len(text) <= max_chars:
        return text
    return text[:max_chars] + ELLIPSIS


def indent(text: str, prefix: str) -> str:
    """Prefix every line of ``text``, including empty ones."""
    return "\n".join(prefix + line for line in text.split("\n"))


def is_self_review(review: Review, subject_login: str) -> bool:
    """Whether the subject reviewed a pull request they authored themselves."""
    return review.pr_author is not None and review.pr_author.lower() == subject_login.lower()


def visible_reviews(reviews: list[Review], subject_login: str) -> list[Review]:
    """Reviews that count as collaboration (self-reviews removed)."""
    return [review for review in reviews if not is_self_review(review, subject_login)]


def commit_total(summary: RepoCommitSummary) -> int:
    """Landed commits when enriched, otherwise GitHub's contribution count."""
    if summary.direct_commits is not None:
        return summary.direct_commits
    return summary.total_count


def summarize_counts(record: ActivityRecord, subject_login: str) -> ReportCounts:
    """Compute the totals shown by every format for ``record``."""
    return ReportCounts(
        pull_requests=len(record.pull_requests),
        reviews=len(visible_reviews(record.reviews, subject_login)),
        issues=len(record.issues),
        commit_repos=len(record.commits_by_repo),
        commits=sum(commit_total(summary) for summary in record.commits_by_repo),
    )


class _Writer:
    """Accumulates output lines for one format."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def print(self, line: str = "") -> None:
        self.lines.append(line)

    def output(self) -> str:
        return "\n".join(self.lines)


class _HtmlWriter(_Writer):
    def title(self, text: str) -> None:
        self.print(f"<h2>{html.escape(text)}</h2>")

    def heading(self, text: str) -> None:
        self.print(f"<h3>{html.escape(text)}</h3>\n")

    def table(self, headers: list[str], rows: list[dict[str, str]]) -> None:
        self.print("<table>")
        self.print("<thead><tr>")
        for header in headers:
            self.print(f"<th>{html.escape(header)}</th>")
        self.print("</tr></thead>")
        self.print("<tbody>")
        for row in rows:
            self.print("<tr>")
            for header in headers:
                self.print(f"<td>{row.get(header, '')}</td>")
            self.print("</tr>")
        self.print("</tbody>")
        self.print("</table>")


class _PlainWriter(_Writer):
    def title(self, text: str) -> None:
        self.print(f"# {text}")

    def heading(self, text: str) -> None:
        self.print(f"\n## {text}\n")

    def table(self, headers: list[str], rows: list[dict[str, str]]) -> None:
        for row in rows:
            self.print(" | ".join(f"{header}: {row.get(header, '')}" for header in headers))


def _link(url: str, text: str) -> str:
    return f'<a href="{html.escape(url)}">{html.escape(text)}</a>'


def _describe_timeline_event(event: TimelineEvent) -> str:
    actor = event.actor or GHOST
    when = format_date(event.created_at)
    if event.kind is TimelineKind.READY_FOR_REVIEW:
        return f"Ready for review by {actor} ({when})"
    if event.kind is TimelineKind.REVIEW_REQUESTED:
        reviewer = event.requested_reviewer or "a team"
        return f"Review requested from {reviewer} by {actor} ({when})"
    return f"Merged by {actor} ({when})"


def _print_pull_request_detail(writer: _Writer, pr: PullRequest, since: datetime) -> None:
    writer.print(
        f"PR: {pr.repo}#{pr.number}: {pr.title} ({format_date(pr.created_at)})"
        f" | State: {pr.state}"
        f" | Merged: {format_date(pr.merged_at)}"
        f" | Comments/Reviews: {pr.comment_count}/{pr.review_count}"
        f" | Changes: +{pr.additions}/-{pr.deletions}"
    )

    writer.print("Changed files:")
    for changed in pr.changed_files or []:
        writer.print(
            f"  - {changed.path} ({changed.additions} additions, {changed.deletions} deletions)"
        )

    writer.print("Timeline:")
    for event in pr.timeline_items or []:
        writer.print(f"  - {_describe_timeline_event(event)}")

    # Bodies written before the window are not part of this period's work
    if pr.created_at >= since:
        writer.print("Body:")
        if pr.body:
            writer.print(indent(pr.body, "  "))

    comments = pr.comment_details or []
    writer.print("Comments:" + ("" if comments else " None"))
    for comment in comments:
        writer.print(f"  - {comment.author or GHOST} ({format_date(comment.created_at)})")
        writer.print(indent(comment.body_text, "    "))

    reviews = pr.review_details or []
    writer.print("Reviews:" + ("" if reviews else " None"))
    for review in reviews:
        writer.print(f"  - {review.author or GHOST} ({format_date(review.created_at)})")
        writer.print(f"    State: {review.state}")
        for review_comment in review.comments:
            writer.print(f"    - {review_comment.body_text}")

    writer.print()


def _print_repo_detail(writer: _Writer, summary: RepoCommitSummary) -> None:
    info = summary.repo_info
    description = (info.description or "") if info else ""
    topics = f" [{', '.join(info.topics)}]" if info and info.topics else ""
    landed = summary.direct_commits if summary.direct_commits is not None else ""
    writer.print(
        f"Repository: {summary.repo} ({description}{topics}),"
        f" Contributions: {summary.total_count}, Commits landed: {landed}"
    )
    for commit in summary.commits or []:
        writer.print(f"  - {commit.message_headline} ({format_date(commit.committed_date)})")
        if commit.message_body:
            writer.print(indent(commit.message_body, "    "))
    if summary.commits:
        writer.print()


def render(
    record: ActivityRecord,
    since: datetime,
    subject_login: str,
    fmt: ReportFormat | str = ReportFormat.HTML,
    include_detail: bool = False,
    title_max_chars: int = DEFAULT_TITLE_MAX_CHARS,
) -> str:
    """Render an activity record as an HTML fragment or plain text.

    Sections are Pull Requests, Issues, Reviews and Commits by Repository.
    Reviews the subject left on their own pull requests are left out. Plain
    text with ``include_detail`` expands each pull request and repository into
    a narrative built from enrichment data; any enrichment that is missing is
    simply shown as empty.

    Args:
        record: Fetched (and optionally enriched) activity
        since: Window start shown in the title
        subject_login: Account the report is about
        fmt: ``html`` or ``plain``
        include_detail: Expand pull requests and commits (plain text only)
        title_max_chars: Title budget for plain tables

    Returns:
        Rendered report

    Raises:
        ConfigError: If ``fmt`` is not a known format
    """
    try:
        fmt = ReportFormat(fmt)
    except ValueError as e:
        raise ConfigError(f"Unknown report format: {fmt}") from e

    since = as_utc(since)
    is_html = fmt is ReportFormat.HTML
    detailed = include_detail and not is_html
    max_chars = None if is_html else title_max_chars
    writer: _HtmlWriter | _PlainWriter = _HtmlWriter() if is_html else _PlainWriter()

    writer.title(f"Activity for @{subject_login} since {format_date(since)}")

    writer.heading("Pull Requests")
    if detailed:
        for pr in record.pull_requests:
            _print_pull_request_detail(writer, pr, since)
    else:
        pr_rows = [
            {
                "Created": format_date(pr.created_at),
                "State": pr.state,
                "Title": (
                    f"{_link(pr.url, f'{pr.repo}/#{pr.number}')}: {html.escape(pr.title)}"
                    if is_html
                    else shorten(pr.title, max_chars)
                ),
                "Merged": format_date(pr.merged_at),
                "Comments/Reviews": f"{pr.comment_count}/{pr.review_count}",
                "Changes": f"+{pr.additions}/-{pr.deletions}",
                "PR": pr.url,
            }
            for pr in record.pull_requests
        ]
        headers = ["Created", "State", "Title", "Merged", "Comments/Reviews", "Changes"]
        writer.table(headers if is_html else headers + ["PR"], pr_rows)

    writer.heading("Issues")
    issue_rows = [
        {
            "Created": format_date(issue.created_at),
            "Title": (
                f"{_link(issue.url, f'{issue.repo}/#{issue.number}')}: {html.escape(issue.title)}"
                if is_html
                else shorten(issue.title, max_chars)
            ),
            "Closed": format_date(issue.closed_at),
            "Comments": str(issue.comment_count),
            "Issue": issue.url,
        }
        for issue in record.issues
    ]
    headers = ["Created", "Title", "Closed", "Comments"]
    writer.table(headers if is_html else headers + ["Issue"], issue_rows)

    writer.heading("Reviews")
    review_rows = [
        {
            "Date": format_date(review.created_at),
            "State": review.state,
            "Title": (
                f"{_link(review.pr_url, f'{review.repo}#{review.pr_number}')}:"
                f" {html.escape(review.pr_title)}"
                if is_html
                else shorten(review.pr_title, max_chars)
            ),
            "Author": (
                html.escape(review.pr_author or GHOST) if is_html else review.pr_author or GHOST
            ),
            "Comments": str(review.comment_count),
            "PR": review.pr_url,
        }
        for review in visible_reviews(record.reviews, subject_login)
    ]
    headers = ["Date", "State", "Title", "Author", "Comments"]
    writer.table(headers if is_html else headers + ["PR"], review_rows)

    writer.heading("Commits by Repository")
    if detailed:
        for summary in record.commits_by_repo:
            _print_repo_detail(writer, summary)
    else:
        writer.table(
            ["Repository", "Commits"],
            [
                {
                    "Repository": html.escape(summary.repo) if is_html else summary.repo,
                    "Commits": str(commit_total(summary)),
                }
                for summary in record.commits_by_repo
            ],
        )

    return writer.output()
