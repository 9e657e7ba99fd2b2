"""Report workflow: fetch, optionally enrich, and render each account in turn."""

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from activity_report.core.logging import (
    bind_subject,
    clear_subject,
    get_logger,
    set_correlation_id,
)
from activity_report.github.activity import DEFAULT_LOOKBACK_MONTHS, fetch_activity
from activity_report.github.client import GitHubClient
from activity_report.github.enrichment import enrich_activity
from activity_report.report.consolidate import consolidate_html, consolidate_plain
from activity_report.report.json_output import to_json
from activity_report.report.renderer import DEFAULT_TITLE_MAX_CHARS, ReportFormat, render
from activity_report.shared.exceptions import ConfigError
from activity_report.shared.models import ActivityRecord, as_utc

logger = get_logger(__name__)


class ProgressPhase(StrEnum):
    """Points in the workflow at which the observer is notified."""

    CONNECT = "connect"
    FETCH = "fetch"
    ENRICH = "enrich"
    RENDER = "render"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class ProgressEvent:
    """Progress notification.

    Attributes:
        phase: Workflow phase just entered
        message: Human-readable status line
        index: 1-based position of the current account (per-account phases)
        total: Number of accounts in the request
    """

    phase: ProgressPhase
    message: str
    index: int | None = None
    total: int | None = None


ProgressObserver = Callable[[ProgressEvent], None]


@dataclass
class UserReport:
    """Everything produced for one account."""

    login: str
    activity: ActivityRecord
    html_report: str
    plain_text_report: str
    json_report: dict[str, Any]


@dataclass
class ReportResult:
    """Outcome of one report request.

    For a single account ``html_report`` and ``plain_text_report`` are that
    account's reports; for several they are the consolidated versions.
    """

    report_id: str
    logins: list[str]
    since: datetime
    enriched: bool
    users: list[UserReport] = field(default_factory=list)
    html_report: str = ""
    plain_text_report: str = ""
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_multi_user(self) -> bool:
        return len(self.logins) > 1


def parse_usernames(username: str | None, usernames: str | None = None) -> list[str]:
    """Build the ordered, de-duplicated account list for a request.

    Args:
        username: Primary account
        usernames: Additional accounts, comma-separated

    Returns:
        Logins in first-seen order

    Raises:
        ConfigError: If no account is given

    Example:
        >>> parse_usernames("alice", "bob, alice,,carol")
        ['alice', 'bob', 'carol']
    """
    candidates: list[str] = []
    if username and username.strip():
        candidates.append(username.strip())
    if usernames:
        candidates.extend(name.strip() for name in usernames.split(","))

    logins = list(dict.fromkeys(name for name in candidates if name))
    if not logins:
        raise ConfigError("At least one username is required")
    return logins


def parse_since(value: str | None) -> datetime:
    """Parse the window start from an ISO date or datetime string.

    Raises:
        ConfigError: If the value is empty or not ISO formatted

    Example:
        >>> parse_since("2024-01-01")
        datetime.datetime(2024, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)
    """
    if not value or not value.strip():
        raise ConfigError("Start date is required")
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError as e:
        raise ConfigError(f"Invalid date format: {value}. Please use YYYY-MM-DD") from e
    return as_utc(parsed)


def _subject_label(login: str, index: int, total: int) -> str:
    return f"user {index}/{total}" if total > 1 else f"@{login}"


async def generate_report(
    client: GitHubClient,
    logins: list[str],
    since: datetime,
    enrich: bool = False,
    observer: ProgressObserver | None = None,
    lookback_months: int = DEFAULT_LOOKBACK_MONTHS,
    title_max_chars: int = DEFAULT_TITLE_MAX_CHARS,
) -> ReportResult:
    """Produce HTML, plain-text and JSON reports for each account.

    Accounts are processed one after another; within an account the two
    enrichment passes run concurrently. Any fatal error stops the whole
    request after an ``error`` notification.

    Args:
        client: Open GitHub client
        logins: Accounts to report on, in display order
        since: Window start
        enrich: Run the enrichment passes and render detailed plain text
        observer: Callback receiving ProgressEvent notifications
        lookback_months: Contribution look-back passed to fetch_activity
        title_max_chars: Title budget for plain tables

    Returns:
        ReportResult with per-account and combined output

    Raises:
        ConfigError: If no account is given
        AuthError: If the token is missing or rejected
        QueryError: If a required query fails
    """
    if not logins:
        raise ConfigError("At least one username is required")

    since = as_utc(since)
    result = ReportResult(
        report_id=uuid.uuid4().hex, logins=list(logins), since=since, enriched=enrich
    )
    set_correlation_id(result.report_id)
    total = len(logins)

    def notify(phase: ProgressPhase, message: str, index: int | None = None) -> None:
        logger.debug("report.progress", phase=str(phase), message=message, index=index)
        if observer is not None:
            observer(ProgressEvent(phase=phase, message=message, index=index, total=total))

    logger.info("report.started", logins=result.logins, since=since.isoformat(), enrich=enrich)

    try:
        notify(ProgressPhase.CONNECT, "Connecting to GitHub API...")

        for index, login in enumerate(logins, start=1):
            label = _subject_label(login, index, total)
            bind_subject(login)

            notify(ProgressPhase.FETCH, f"Fetching data for {label}...", index)
            activity = await fetch_activity(client, login, since, lookback_months)

            if enrich:
                notify(ProgressPhase.ENRICH, f"Enriching data for {label}...", index)
                await enrich_activity(client, activity, since, login)

            notify(ProgressPhase.RENDER, f"Generating report for {label}...", index)
            result.users.append(
                UserReport(
                    login=login,
                    activity=activity,
                    html_report=render(activity, since, login, ReportFormat.HTML, enrich),
                    plain_text_report=render(
                        activity, since, login, ReportFormat.PLAIN, enrich, title_max_chars
                    ),
                    json_report=to_json(activity, login, since),
                )
            )
            clear_subject()

        if result.is_multi_user:
            result.html_report = consolidate_html(result.users, since)
            result.plain_text_report = consolidate_plain(result.users)
        else:
            result.html_report = result.users[0].html_report
            result.plain_text_report = result.users[0].plain_text_report

    except Exception as e:
        clear_subject()
        logger.error("report.failed", error=str(e), error_type=type(e).__name__)
        notify(ProgressPhase.ERROR, f"Error: {e}")
        raise

    notify(ProgressPhase.COMPLETE, "Processing complete!")
    logger.info("report.complete", users=len(result.users))
    return result
