"""Matching closed pull requests to the commits of a release range.

Providers list pull requests by last update, not by where they landed in the
commit graph, and offer no way to ask for "requests merged into this range".
The reconciler therefore walks the listing page by page, keeps every request
whose landing commit is inside the range, and gives up once ``max_skips``
requests in total have landed outside it.

That cap is a cost/precision tradeoff: an old request that landed inside an
old range can be missed when more than ``max_skips`` newer, out-of-range
requests precede it in the listing. Raise ``max_skips`` for such ranges.
"""

import logging
from typing import Dict, Optional

from ..errors import ConfigError
from .models import PullRequestRecord, ReconciliationState
from .range import CommitSetIndex
from .source import PullRequestSource

DEFAULT_MAX_SKIPS = 50

# Which record keeps a commit id claimed by more than one request
DUPLICATE_POLICIES = ("first", "last")


class Reconciler:
    """Bounded-effort matcher between a PullRequestSource and a CommitSetIndex."""

    def __init__(self, source: PullRequestSource, index: CommitSetIndex,
                 max_skips: int = DEFAULT_MAX_SKIPS, keep: str = "first",
                 logger: Optional[logging.Logger] = None):
        """Initialize reconciler.

        Args:
            source: Provider of closed pull requests
            index: Commits of the release range
            max_skips: Out-of-range requests tolerated before giving up
            keep: ``first`` or ``last`` record wins when two share a commit
            logger: Logger instance
        """
        if max_skips < 1:
            raise ConfigError(f"max_skips must be at least 1, got {max_skips}")
        if keep not in DUPLICATE_POLICIES:
            raise ConfigError(f"Unknown duplicate policy {keep!r}")
        self.source = source
        self.index = index
        self.max_skips = max_skips
        self.keep = keep
        self.logger = logger or logging.getLogger(__name__)

    def run(self) -> Dict[str, PullRequestRecord]:
        """Fetch pages until the listing is exhausted or the skip cap is hit.

        Returns:
            Mapping of landing commit id to pull request

        Raises:
            FetchError: If any page fetch fails; nothing matched so far is returned
        """
        state = ReconciliationState()

        # pages() stops at the first empty page: every closed pull request seen
        for records in self.source.pages(start=state.page):
            state.pages_fetched += 1
            for record in records:
                self._consider(state, record)

            self.logger.debug(
                f"Page {state.page}: {len(state.matches)} matched, {state.not_found} out of range so far"
            )
            if state.not_found >= self.max_skips:
                self.logger.info(
                    f"Stopping after page {state.page}: {state.not_found} pull requests "
                    f"outside the range (limit {self.max_skips})"
                )
                break
            state.page += 1

        self.logger.info(
            f"Matched {len(state.matches)} pull requests to {len(self.index)} commits "
            f"in {state.pages_fetched} page(s)"
        )
        return dict(state.matches)

    def _consider(self, state: ReconciliationState, record: PullRequestRecord) -> None:
        commit = record.landing_commit
        if not commit:
            self.logger.warning(f"Skipping #{record.number}: no merge or head commit")
            return

        if commit not in self.index:
            state.not_found += 1
            return

        existing = state.matches.get(commit)
        if existing is not None and existing.number != record.number:
            self.logger.warning(
                f"Commit {commit} claimed by #{existing.number} and #{record.number}, keeping {self.keep}"
            )
            if self.keep == "first":
                return
        state.matches[commit] = record
