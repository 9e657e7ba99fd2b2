"""Cursor pagination shared by every paged GraphQL fetch."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from activity_report.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class _Inaccessible(Enum):
    INACCESSIBLE = "inaccessible"


# Returned by a page fetch when the resource turned out to be invisible
INACCESSIBLE = _Inaccessible.INACCESSIBLE


@dataclass
class Page(Generic[T]):
    """One page of a GraphQL connection."""

    items: list[T] = field(default_factory=list)
    has_next_page: bool = False
    end_cursor: str | None = None

    @classmethod
    def from_connection(
        cls, connection: dict[str, Any], parse: Callable[[dict[str, Any]], T]
    ) -> "Page[T]":
        """Build a page from a ``{nodes, pageInfo}`` connection object."""
        page_info = connection.get("pageInfo") or {}
        return cls(
            items=[parse(node) for node in connection.get("nodes") or [] if node is not None],
            has_next_page=bool(page_info.get("hasNextPage")),
            end_cursor=page_info.get("endCursor"),
        )


PageFetcher = Callable[[str | None], Awaitable[Page[T] | _Inaccessible]]


async def paginate(fetch_page: PageFetcher[T]) -> list[T]:
    """Walk a cursor-paged source from the start until it is exhausted.

    Pages are concatenated in order without deduplication, since the API hands
    out disjoint pages. A fetch returning ``INACCESSIBLE`` ends the walk and
    whatever was accumulated so far is returned. So does a page that claims a
    successor but carries no cursor to reach it.

    Args:
        fetch_page: Coroutine function taking the cursor (None for the first
            page) and returning a Page or INACCESSIBLE

    Returns:
        All items in page order

    Example:
        >>> async def fetch(cursor):
        ...     if cursor is None:
        ...         return Page(items=[1, 2], has_next_page=True, end_cursor="c1")
        ...     return Page(items=[3])
        >>> await paginate(fetch)
        [1, 2, 3]
    """
    items: list[T] = []
    cursor: str | None = None
    pages = 0

    while True:
        page = await fetch_page(cursor)
        if page is INACCESSIBLE:
            logger.debug("github.paginate.inaccessible", pages=pages, items=len(items))
            break

        pages += 1
        items.extend(page.items)
        if not page.has_next_page:
            break
        if not page.end_cursor:
            logger.warning("github.paginate.missing_cursor", pages=pages, items=len(items))
            break
        cursor = page.end_cursor

    return items
