"""Tests for the JSON report projection."""

import json
import re
from datetime import UTC, datetime

from activity_report.report.json_output import to_json
from activity_report.report.renderer import ReportFormat, render
from activity_report.shared.models import ActivityRecord

NOW = datetime(2024, 1, 31, 12, tzinfo=UTC)


def test_to_json_shape(activity_record: ActivityRecord, since: datetime) -> None:
    """Test the top-level layout and window bounds."""
    data = to_json(activity_record, "octocat", since, now=NOW)

    assert data["username"] == "octocat"
    assert data["period"] == {
        "start": "2024-01-01T00:00:00+00:00",
        "end": "2024-01-31T12:00:00+00:00",
    }
    assert set(data) == {
        "username",
        "period",
        "stats",
        "pullRequests",
        "issues",
        "reviews",
        "commitsByRepo",
    }
    json.dumps(data)


def test_to_json_stats_exclude_self_reviews(
    activity_record: ActivityRecord, since: datetime
) -> None:
    """Test stats and the reviews array agree and leave self-reviews out."""
    data = to_json(activity_record, "octocat", since, now=NOW)

    assert data["stats"] == {
        "totalPRs": 2,
        "totalReviews": 1,
        "totalIssues": 1,
        "totalCommitRepos": 2,
        "totalCommits": 7,
    }
    assert [review["prNumber"] for review in data["reviews"]] == [42]
    assert data["reviews"][0]["url"] == "https://github.com/octo/widgets/pull/42"


def test_to_json_pull_request_entries(activity_record: ActivityRecord, since: datetime) -> None:
    """Test pull requests carry camelCase fields and null enrichment before enriching."""
    data = to_json(activity_record, "octocat", since, now=NOW)
    pr = data["pullRequests"][0]

    assert pr["url"] == "https://github.com/octo/widgets/pull/1"
    assert pr["merged"] == "2024-01-06T00:00:00+00:00"
    assert pr["commitCount"] == 3
    assert pr["commentDetails"] is None
    assert pr["timelineItems"] is None
    assert data["pullRequests"][1]["merged"] is None


def test_to_json_enriched_entries(enriched_record: ActivityRecord, since: datetime) -> None:
    """Test enrichment lists are serialized with camelCase keys."""
    data = to_json(enriched_record, "octocat", since, now=NOW)
    pr = data["pullRequests"][0]

    assert pr["commentDetails"][0]["bodyText"] == "Looks good"
    assert pr["commentDetails"][0]["reactions"] == {"+1": 2}
    assert pr["reviewDetails"][0]["comments"][0]["path"] == "src/parser.py"
    assert pr["changedFiles"][0]["additions"] == 5
    assert pr["timelineItems"][1]["mergeCommit"] == "abc123"
    assert data["commitsByRepo"][0]["directCommits"] == 1
    assert data["commitsByRepo"][0]["repoInfo"]["topics"] == ["cli", "python"]
    assert data["stats"]["totalCommits"] == 1
    assert data["issues"][0]["url"] == "https://github.com/octo/widgets/issues/5"


def test_counts_agree_across_formats(enriched_record: ActivityRecord, since: datetime) -> None:
    """Test HTML, plain text and JSON report the same totals."""
    stats = to_json(enriched_record, "octocat", since, now=NOW)["stats"]
    plain = render(enriched_record, since, "octocat", ReportFormat.PLAIN).splitlines()
    html_output = render(enriched_record, since, "octocat", ReportFormat.HTML)

    assert len([line for line in plain if line.startswith("Date: ")]) == stats["totalReviews"]
    assert len([line for line in plain if "| PR: " in line and "| Merged: " in line]) == (
        stats["totalPRs"]
    )
    assert len([line for line in plain if "| Issue: " in line]) == stats["totalIssues"]
    repo_rows = [line for line in plain if line.startswith("Repository: ")]
    assert len(repo_rows) == stats["totalCommitRepos"]
    assert sum(int(line.rsplit(": ", 1)[1]) for line in repo_rows) == stats["totalCommits"]

    body_rows = html_output.splitlines().count("<tr>")
    assert body_rows == (
        stats["totalPRs"] + stats["totalIssues"] + stats["totalReviews"] + stats["totalCommitRepos"]
    )
    assert len(re.findall(r'href="https://github.com/[^"]+/pull/42"', html_output)) == 1


def test_to_json_empty_record(since: datetime) -> None:
    """Test an empty record produces zero totals and empty arrays."""
    data = to_json(ActivityRecord(), "octocat", since, now=NOW)

    assert all(value == 0 for value in data["stats"].values())
    assert data["pullRequests"] == []
    assert data["commitsByRepo"] == []
