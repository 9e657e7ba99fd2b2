"""Tests for multi-account consolidation."""

from dataclasses import dataclass
from datetime import UTC, datetime

from activity_report.report.consolidate import consolidate_html, consolidate_plain, user_banner


@dataclass
class _Report:
    login: str
    html_report: str
    plain_text_report: str


REPORTS = [
    _Report("alice", "<h2>Alice</h2>", "# Activity for @alice"),
    _Report("bob", "<h2>Bob</h2>", "# Activity for @bob"),
]


def test_user_banner() -> None:
    assert user_banner("alice") == "==== USER: @alice ===="


def test_consolidate_plain_keeps_order() -> None:
    """Test each account gets a banner-headed section in request order."""
    output = consolidate_plain(REPORTS)

    assert output.index("==== USER: @alice ====") < output.index("# Activity for @alice")
    assert output.index("# Activity for @alice") < output.index("==== USER: @bob ====")
    assert output.index("==== USER: @bob ====") < output.index("# Activity for @bob")


def test_consolidate_html_tabs() -> None:
    """Test one tab and pane per account with the first one active."""
    output = consolidate_html(REPORTS, datetime(2024, 1, 1, tzinfo=UTC))

    assert output.startswith('<div class="multi-user-report">')
    assert "<h2>Activity Report for 2 Users</h2>" in output
    assert "<p>Showing activity since 1/1/2024</p>" in output
    assert 'id="user-tab-0"' in output
    assert 'id="user-tab-1"' in output
    assert 'class="nav-link active" id="user-tab-0"' in output
    assert 'class="nav-link" id="user-tab-1"' in output
    assert 'class="tab-pane fade show active" id="user-content-0"' in output
    assert 'class="tab-pane fade" id="user-content-1"' in output
    assert output.index("<h2>Alice</h2>") < output.index("<h2>Bob</h2>")


def test_consolidate_html_escapes_login() -> None:
    """Test account names are escaped in tab labels."""
    output = consolidate_html(
        [_Report("<b>", "", "")], datetime(2024, 1, 1, tzinfo=UTC)
    )

    assert "@&lt;b&gt;</button>" in output
