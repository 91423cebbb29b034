"""Test configuration and fixtures."""

from typing import Callable, Dict, List, Optional, Sequence

import pytest

from prlog.errors import FetchError
from prlog.git import GitCommandError
from prlog.releasenote.models import PullRequestRecord
from prlog.releasenote.source import PullRequestSource


class FakeSource(PullRequestSource):
    """In-memory pull request listing that records which pages were requested."""

    def __init__(self, pages: Sequence[Sequence[PullRequestRecord]],
                 fail_on: Optional[int] = None, page_size: int = 100):
        super().__init__(page_size)
        self._pages = [list(p) for p in pages]
        self.fail_on = fail_on
        self.requested: List[int] = []

    def fetch_page(self, page: int) -> List[PullRequestRecord]:
        self.requested.append(page)
        if page == self.fail_on:
            raise FetchError(f"connection reset fetching page {page}")
        if page > len(self._pages):
            return []
        return list(self._pages[page - 1])


class FakeRepository:
    """Stand-in for GitRepository backed by dictionaries."""

    def __init__(self, branch: str = "main", refs: Sequence[str] = ("main",),
                 tags: Optional[Dict[str, str]] = None,
                 rev_lists: Optional[Dict[str, List[str]]] = None,
                 slug: Optional[str] = "acme/widget"):
        self.branch = branch
        self.refs = set(refs)
        self.tags = tags or {}
        self.rev_lists = rev_lists or {}
        self.slug = slug
        self.calls: List[str] = []
        self.created_tags: List[tuple] = []

    def current_branch(self) -> str:
        self.calls.append("current_branch")
        return self.branch

    def resolve_commit(self, ref: str) -> Optional[str]:
        self.calls.append(f"resolve_commit {ref}")
        return "f" * 40 if ref in self.refs else None

    def latest_tag(self, ref: str) -> Optional[str]:
        self.calls.append(f"latest_tag {ref}")
        return self.tags.get(ref)

    def tag_exists(self, name: str) -> bool:
        return name in self.tags.values()

    def rev_list(self, *ranges: str) -> List[str]:
        key = " ".join(ranges)
        self.calls.append(f"rev_list {key}")
        if key not in self.rev_lists:
            raise GitCommandError(["git", "rev-list", *ranges], f"bad revision '{key}'", 128)
        return list(self.rev_lists[key])

    def remote_slug(self, remote: str = "origin") -> Optional[str]:
        return self.slug

    def create_tag(self, name: str, message: str, ref: str = "HEAD") -> None:
        self.created_tags.append((name, message, ref))


@pytest.fixture
def make_record() -> Callable[..., PullRequestRecord]:
    """Factory for pull request records."""

    def _make(number: int, merge_commit: Optional[str] = None,
              head_commit: Optional[str] = None, title: Optional[str] = None,
              author: str = "octocat") -> PullRequestRecord:
        return PullRequestRecord(
            number=number,
            title=title or f"Change {number}",
            author=author,
            merge_commit=merge_commit,
            head_commit=head_commit,
            body="",
            branch=f"feature-{number}",
            url=f"https://github.com/acme/widget/pull/{number}",
        )

    return _make


@pytest.fixture
def fake_source() -> Callable[..., FakeSource]:
    return FakeSource


@pytest.fixture
def fake_repo() -> Callable[..., FakeRepository]:
    return FakeRepository
