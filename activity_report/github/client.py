"""GitHub GraphQL client with failure classification."""

from typing import Any, TypeVar

import aiohttp

from activity_report.core.logging import get_logger
from activity_report.shared.exceptions import (
    AuthError,
    ErrorCategory,
    QueryError,
    SoftAccessError,
)

logger = get_logger(__name__)

T = TypeVar("T")

# Structured error types GitHub puts on GraphQL errors
GRAPHQL_ERROR_TYPES: dict[str, ErrorCategory] = {
    "FORBIDDEN": ErrorCategory.FORBIDDEN,
    "NOT_FOUND": ErrorCategory.NOT_FOUND,
}

# Fallback for errors that carry only a message
SOFT_ERROR_PATTERNS: dict[str, ErrorCategory] = {
    "Forbidden": ErrorCategory.FORBIDDEN,
    "Not Found": ErrorCategory.NOT_FOUND,
    "Resource not accessible": ErrorCategory.FORBIDDEN,
}

HTTP_STATUS_CATEGORIES: dict[int, ErrorCategory] = {
    403: ErrorCategory.FORBIDDEN,
    404: ErrorCategory.NOT_FOUND,
}


def classify_error(message: str, error_type: str | None = None) -> ErrorCategory:
    """Classify an upstream failure as a soft access denial or a real error.

    The structured GraphQL ``type`` wins; the message patterns are only
    consulted when the error carries no recognized type.

    Args:
        message: Error message reported by the API
        error_type: GraphQL error ``type`` field, if present

    Returns:
        ErrorCategory for the failure

    Example:
        >>> classify_error("Could not resolve to a Repository", "NOT_FOUND")
        <ErrorCategory.NOT_FOUND: 'not_found'>
        >>> classify_error("Resource not accessible by integration")
        <ErrorCategory.FORBIDDEN: 'forbidden'>
        >>> classify_error("Something went wrong")
        <ErrorCategory.OTHER: 'other'>
    """
    if error_type and error_type in GRAPHQL_ERROR_TYPES:
        return GRAPHQL_ERROR_TYPES[error_type]
    for pattern, category in SOFT_ERROR_PATTERNS.items():
        if pattern in message:
            return category
    return ErrorCategory.OTHER


def _query_error(message: str, category: ErrorCategory) -> QueryError:
    if category.is_soft:
        return SoftAccessError(message, category)
    return QueryError(message, category)


class GitHubClient:
    """Async GitHub GraphQL client.

    One instance serves a whole report request; concurrent enrichment branches
    share its session and token. There is no retry layer: every failure is
    classified once and raised.

    Attributes:
        GRAPHQL_URL: Default GitHub GraphQL endpoint
    """

    GRAPHQL_URL = "https://api.github.com/graphql"

    def __init__(self, token: str, url: str | None = None) -> None:
        """Initialize GitHub client with authentication token.

        Args:
            token: GitHub personal access token
            url: GraphQL endpoint override (default: GRAPHQL_URL)
        """
        self.token = token
        self.url = url or self.GRAPHQL_URL
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "GitHubClient":
        """Context manager entry: create aiohttp session.

        Returns:
            Self for use in async with statement
        """
        self.session = aiohttp.ClientSession(
            headers={
                "Authorization": f"bearer {self.token}",
                "Accept": "application/json",
                "User-Agent": "activity-report",
            }
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Context manager exit: close aiohttp session."""
        if self.session:
            await self.session.close()

    async def execute(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Run one GraphQL query.

        Args:
            query: GraphQL document
            variables: Query variables

        Returns:
            Decoded response body (with a ``data`` key)

        Raises:
            AuthError: If the token is empty or rejected
            SoftAccessError: If the resource is not visible to the token
            QueryError: On any other HTTP, transport, or GraphQL error
        """
        if not self.token:
            raise AuthError("GitHub token is required")
        if not self.session:
            raise QueryError("Session not initialized")

        try:
            async with self.session.post(
                self.url, json={"query": query, "variables": variables}
            ) as response:
                if response.status == 401:
                    raise AuthError(f"Invalid token: {response.status}")
                if response.status != 200:
                    if response.headers.get("x-ratelimit-remaining") == "0":
                        logger.warning(
                            "github.ratelimit",
                            reset=response.headers.get("x-ratelimit-reset"),
                            status=response.status,
                        )
                        raise QueryError(f"Rate limited: {response.status}")
                    category = HTTP_STATUS_CATEGORIES.get(response.status, ErrorCategory.OTHER)
                    raise _query_error(f"API error: {response.status}", category)
                try:
                    data = await response.json()
                except (aiohttp.ContentTypeError, ValueError) as e:
                    raise QueryError(f"Invalid JSON response: {e}") from e
        except aiohttp.ClientError as e:
            raise QueryError(f"Network error: {e}") from e

        if not isinstance(data, dict):
            raise QueryError("Unexpected response shape: body is not an object")

        errors = data.get("errors")
        if errors:
            first = errors[0] if isinstance(errors[0], dict) else {}
            message = str(first.get("message") or "Unknown GraphQL error")
            category = classify_error(message, first.get("type"))
            logger.debug("github.query.failed", error=message, category=str(category))
            raise _query_error(message, category)

        return data

    async def safe_execute(
        self, query: str, variables: dict[str, Any], fallback: T = None  # type: ignore[assignment]
    ) -> dict[str, Any] | T:
        """Run a query, returning ``fallback`` when access is denied.

        Private or deleted repositories reachable only through a contribution
        summary produce these errors; every other failure propagates.

        Args:
            query: GraphQL document
            variables: Query variables
            fallback: Value returned on a soft access error

        Returns:
            Decoded response body, or ``fallback``
        """
        try:
            return await self.execute(query, variables)
        except SoftAccessError as e:
            logger.info(
                "github.query.inaccessible",
                owner=variables.get("owner"),
                repo=variables.get("repo") or variables.get("name"),
                category=str(e.category),
                error=str(e),
            )
            return fallback
