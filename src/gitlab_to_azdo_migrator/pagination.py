"""Page-by-page iteration over paginated GitLab listings."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

logger: logging.Logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results.

    ``next_page`` follows GitLab's ``X-Next-Page`` header: it is 0 on the last page.
    """

    items: list[T] = field(default_factory=list)
    current_page: int = 1
    next_page: int = 0


def iter_pages(fetch_page: Callable[[int], Page[T]], *, first_page: int = 1) -> Iterator[T]:
    """Yield the items of every page, starting at ``first_page``.

    Stops as soon as a page reports a next page that is not beyond the current one.
    """
    page_number = first_page
    while True:
        page = fetch_page(page_number)
        logger.debug(f"Fetched page {page.current_page} with {len(page.items)} items")
        yield from page.items
        if page.next_page <= page.current_page:
            return
        page_number = page.next_page
