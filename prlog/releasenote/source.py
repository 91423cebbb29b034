"""Paginated providers of closed pull requests."""

from abc import ABC, abstractmethod
from typing import Any, Iterator, List, Mapping

from ..errors import ConfigError
from .models import PullRequestRecord

DEFAULT_PAGE_SIZE = 100


class PullRequestSource(ABC):
    """Closed pull requests against one base branch, most recently updated first.

    Implementations raise ``FetchError`` for any failed page call and never
    retry; callers decide what a failure means for the whole run.
    """

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE):
        if page_size < 1:
            raise ConfigError(f"page_size must be at least 1, got {page_size}")
        self.page_size = page_size

    @abstractmethod
    def fetch_page(self, page: int) -> List[PullRequestRecord]:
        """Fetch one page of records (pages are numbered from 1).

        Returns:
            Records on the page; an empty list once the listing is exhausted
        """

    def pages(self, start: int = 1) -> Iterator[List[PullRequestRecord]]:
        """Lazily yield pages from ``start`` until the first empty page.

        Every call starts a fresh iteration, so the sequence can be restarted.
        """
        page = start
        while True:
            records = self.fetch_page(page)
            if not records:
                return
            yield records
            page += 1


def require_number(raw: Mapping[str, Any], key: str = 'number') -> int:
    """Return the request number of a raw API record.

    A request without a number cannot be deduplicated or reported, so this is
    a data-integrity fault rather than a skippable record.
    """
    number = raw.get(key)
    if number is None:
        raise ConfigError(f"Pull request record without a number (title: {raw.get('title')!r})")
    try:
        return int(number)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Pull request record has invalid number {number!r}") from e
