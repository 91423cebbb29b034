"""Changelog generation pipeline."""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from ..git import GitRepository
from .formatter import check_mode, render
from .models import PullRequestRecord
from .range import CommitRange, CommitSetIndex, RangeResolver
from .reconciler import DEFAULT_MAX_SKIPS, Reconciler
from .source import PullRequestSource


@dataclass(frozen=True)
class Changelog:
    """Result of a generation run."""

    commit_range: CommitRange
    index: CommitSetIndex
    matches: Dict[str, PullRequestRecord]
    text: str


def generate_changelog(repo: GitRepository, source: PullRequestSource,
                       ranges: Optional[Sequence[str]] = None,
                       branch: Optional[str] = None,
                       previous_release: bool = False,
                       mode: str = "list",
                       max_skips: int = DEFAULT_MAX_SKIPS,
                       keep: str = "first",
                       logger: Optional[logging.Logger] = None) -> Changelog:
    """Generate the changelog of a commit range.

    Args:
        repo: Local repository the range refers to
        source: Closed pull requests of the branch the range belongs to
        ranges: Explicit git range expressions (skip tag lookup)
        branch: Branch whose latest tag starts the range
        previous_release: Use the range of the last tagged release
        mode: Output mode, ``list`` or ``structured``
        max_skips: Out-of-range pull requests tolerated before giving up
        keep: Duplicate commit policy, ``first`` or ``last``
        logger: Logger instance

    Returns:
        The rendered changelog with the data it was built from

    Raises:
        ConfigError, ResolutionError, TraversalError, FetchError
    """
    logger = logger or logging.getLogger(__name__)

    # Fail before any git or network work
    check_mode(mode)

    commit_range = RangeResolver(repo, logger).resolve(ranges, branch, previous_release)
    index = CommitSetIndex.build(repo, commit_range)
    logger.info(f"Range {commit_range} has {len(index)} commits")

    matches = Reconciler(source, index, max_skips=max_skips, keep=keep,
                         logger=logger).run()

    text = render(mode, index.ordered, matches)
    return Changelog(commit_range=commit_range, index=index, matches=matches, text=text)
