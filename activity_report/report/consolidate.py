"""Combine per-account reports into one multi-account report."""

import html
from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from activity_report.report.renderer import format_date


class RenderedReport(Protocol):
    """Per-account output consumed by the consolidation helpers."""

    login: str
    html_report: str
    plain_text_report: str


def user_banner(login: str) -> str:
    """Section marker separating accounts in consolidated plain text."""
    return f"==== USER: @{login} ===="


def consolidate_plain(reports: Sequence[RenderedReport]) -> str:
    """Join plain-text reports, one banner-headed section per account.

    Example:
        >>> class R:
        ...     login, html_report, plain_text_report = "a", "", "# Activity"
        >>> consolidate_plain([R()])
        '==== USER: @a ====\\n\\n# Activity\\n\\n'
    """
    return "\n".join(
        f"{user_banner(report.login)}\n\n{report.plain_text_report}\n\n" for report in reports
    )


def consolidate_html(reports: Sequence[RenderedReport], since: datetime) -> str:
    """Wrap per-account HTML reports in a tabbed container.

    Args:
        reports: Rendered reports in display order
        since: Window start shown in the header

    Returns:
        HTML fragment with one tab and one pane per account
    """
    tabs: list[str] = []
    panes: list[str] = []
    for index, report in enumerate(reports):
        active = index == 0
        login = html.escape(report.login)
        tabs.append(
            '<li class="nav-item" role="presentation">'
            f'<button class="nav-link{" active" if active else ""}" id="user-tab-{index}"'
            f' data-bs-toggle="tab" data-bs-target="#user-content-{index}" type="button"'
            f' role="tab" aria-controls="user-content-{index}"'
            f' aria-selected="{"true" if active else "false"}">@{login}</button>'
            "</li>"
        )
        panes.append(
            f'<div class="tab-pane fade{" show active" if active else ""}"'
            f' id="user-content-{index}" role="tabpanel" aria-labelledby="user-tab-{index}">'
            f"\n{report.html_report}\n</div>"
        )

    return "\n".join(
        [
            '<div class="multi-user-report">',
            f"<h2>Activity Report for {len(reports)} Users</h2>",
            f"<p>Showing activity since {format_date(since)}</p>",
            '<ul class="nav nav-tabs mb-4" id="userTabs" role="tablist">',
            *tabs,
            "</ul>",
            '<div class="tab-content" id="userTabsContent">',
            *panes,
            "</div>",
            "</div>",
        ]
    )
