"""Commit range resolution and membership index."""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple

from ..errors import ResolutionError, TraversalError
from ..git import GitCommandError, GitRepository

HEAD = "HEAD"


@dataclass(frozen=True)
class CommitRange:
    """Git range expressions describing the commits of a release."""

    expressions: Tuple[str, ...]
    start: Optional[str] = None
    end: Optional[str] = None

    @classmethod
    def between(cls, start: str, end: str) -> "CommitRange":
        """Range of commits reachable from ``end`` but not from ``start``."""
        return cls(expressions=(f"{start}..{end}",), start=start, end=end)

    def __str__(self) -> str:
        return " ".join(self.expressions)


class RangeResolver:
    """Turns explicit ranges, a branch or the previous-release flag into a CommitRange."""

    def __init__(self, repo: GitRepository, logger: Optional[logging.Logger] = None):
        self.repo = repo
        self.logger = logger or logging.getLogger(__name__)

    def resolve(self, ranges: Optional[Sequence[str]] = None, branch: Optional[str] = None,
                previous_release: bool = False) -> CommitRange:
        """Resolve the commit range of a release.

        Args:
            ranges: Explicit git range expressions, used verbatim when given
            branch: Branch whose latest tag starts the range (default: current checkout)
            previous_release: Resolve the range of the last tagged release instead

        Returns:
            The commit range

        Raises:
            ResolutionError: If the branch or its tags cannot be resolved
        """
        if ranges:
            self.logger.info(f"Using explicit range: {' '.join(ranges)}")
            return CommitRange(expressions=tuple(ranges))

        ref = self._resolve_branch(branch)
        latest = self.repo.latest_tag(ref)
        if not latest:
            raise ResolutionError(f"No tag found on branch {ref}")

        if not previous_release:
            self.logger.info(f"Using range {latest}..{HEAD} (latest tag on {ref})")
            return CommitRange.between(latest, HEAD)

        previous = self.repo.latest_tag(f"{latest}^")
        if not previous:
            raise ResolutionError(f"No release tag before {latest} on branch {ref}")
        self.logger.info(f"Using previous release range {previous}..{latest}")
        return CommitRange.between(previous, latest)

    def branch_name(self, branch: Optional[str] = None) -> str:
        """``branch`` itself, or the name of the current checkout when not given.

        Raises:
            ResolutionError: If the checkout is a detached HEAD, which names no
                branch to filter pull requests by
        """
        if branch:
            return branch
        try:
            current = self.repo.current_branch()
        except GitCommandError as e:
            raise ResolutionError(f"Cannot determine current branch: {e.message}") from e
        if current == HEAD:
            raise ResolutionError("Detached HEAD: pass --branch")
        return current

    def _resolve_branch(self, branch: Optional[str]) -> str:
        """Return a reference for ``branch`` that names a commit."""
        branch = self.branch_name(branch)
        for ref in (branch, f"origin/{branch}"):
            if self.repo.resolve_commit(ref):
                return ref
        raise ResolutionError(f"Branch {branch} does not resolve to a commit")


class CommitSetIndex:
    """The commits of a range, in oldest-first order and as a set."""

    def __init__(self, ordered: Sequence[str]):
        seen = set()
        unique = []
        for commit in ordered:
            if commit not in seen:
                seen.add(commit)
                unique.append(commit)
        self.ordered: Tuple[str, ...] = tuple(unique)
        self.commits = frozenset(seen)

    @classmethod
    def build(cls, repo: GitRepository, commit_range: CommitRange) -> "CommitSetIndex":
        """Enumerate a range with git's own ancestry traversal.

        Raises:
            TraversalError: If git rejects the range or the range is empty
        """
        try:
            ordered = repo.rev_list(*commit_range.expressions)
        except GitCommandError as e:
            raise TraversalError(f"Cannot enumerate commits in {commit_range}: {e.message}") from e
        if not ordered:
            raise TraversalError(f"No commits in range {commit_range}", empty=True)
        return cls(ordered)

    def __contains__(self, commit: object) -> bool:
        return commit in self.commits

    def __len__(self) -> int:
        return len(self.ordered)

    def __iter__(self) -> Iterator[str]:
        return iter(self.ordered)
