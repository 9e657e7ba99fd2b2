"""Activity Report command-line entry point."""

import argparse
import asyncio
import json
import sys

from pydantic import ValidationError

from activity_report.core.config import Settings, get_settings
from activity_report.core.logging import get_logger, setup_logging
from activity_report.github.client import GitHubClient
from activity_report.pipeline import (
    ProgressEvent,
    ReportResult,
    generate_report,
    parse_since,
    parse_usernames,
)
from activity_report.shared.exceptions import (
    ActivityReportError,
    AuthError,
    ConfigError,
    QueryError,
)

logger = get_logger(__name__)

OUTPUT_FORMATS = ("html", "plain", "json")


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser; unset options fall back to Settings."""
    parser = argparse.ArgumentParser(
        prog="activity-report",
        description="Summarize GitHub contributions for one or more accounts.",
    )
    parser.add_argument("users", nargs="?", help="Comma-separated GitHub logins")
    parser.add_argument("--since", help="Window start as YYYY-MM-DD")
    parser.add_argument("--format", choices=OUTPUT_FORMATS, default="plain", dest="output_format")
    parser.add_argument(
        "--enrich",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Fetch comments, reviews, files and commits for a detailed report",
    )
    return parser


def log_progress(event: ProgressEvent) -> None:
    """Progress observer that writes each phase to the log."""
    logger.info(
        "report.phase", phase=str(event.phase), message=event.message, index=event.index
    )


def format_output(result: ReportResult, output_format: str) -> str:
    """Pick the requested representation of a finished report."""
    if output_format == "html":
        return result.html_report
    if output_format == "json":
        reports = [user.json_report for user in result.users]
        return json.dumps(reports[0] if len(reports) == 1 else reports, indent=2)
    return result.plain_text_report


async def main(args: argparse.Namespace, settings: Settings) -> str:
    """Run one report request described by command-line arguments.

    Args:
        args: Parsed command-line arguments
        settings: Application settings providing token and defaults

    Returns:
        Rendered report text
    """
    logins = parse_usernames(None, args.users or settings.tracked_github_users)
    since = parse_since(args.since or settings.report_since)
    enrich = settings.enrich_reports if args.enrich is None else args.enrich

    async with GitHubClient(settings.github_token, settings.github_graphql_url) as client:
        result = await generate_report(
            client,
            logins,
            since,
            enrich=enrich,
            observer=log_progress,
            lookback_months=settings.lookback_months,
            title_max_chars=settings.plain_title_max_chars,
        )

    return format_output(result, args.output_format)


def run(argv: list[str] | None = None) -> None:
    """Entry point for the activity-report command."""
    args = build_parser().parse_args(argv)
    try:
        # Load settings first to validate configuration
        settings = get_settings()
        setup_logging(log_level=settings.log_level)

        output = asyncio.run(main(args, settings))

    except (ConfigError, ValidationError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    except AuthError as e:
        print(f"Authentication error: {e}", file=sys.stderr)
        sys.exit(1)
    except QueryError as e:
        print(f"GitHub query failed: {e}", file=sys.stderr)
        sys.exit(1)
    except ActivityReportError as e:
        print(f"Report failed: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)

    print(output)


if __name__ == "__main__":
    run()
