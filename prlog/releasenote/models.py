"""Data structures shared by the reconciliation pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict


class PullRequestRecord(BaseModel):
    """A closed pull (or merge) request as returned by a provider.

    ``merge_commit`` is the commit that landed the change on the base branch;
    ``head_commit`` is the tip of the source branch, which is what lands when
    the request was rebased or fast-forwarded instead of merged.
    """

    model_config = ConfigDict(frozen=True)

    number: int
    title: str = ""
    author: str = ""
    merge_commit: Optional[str] = None
    head_commit: Optional[str] = None
    body: str = ""
    branch: str = ""
    url: str = ""
    updated_at: Optional[datetime] = None

    @property
    def landing_commit(self) -> Optional[str]:
        """Commit to look for in the range: merge commit, else head commit."""
        return self.merge_commit or self.head_commit or None


@dataclass(frozen=True)
class MatchedRecord:
    """A pull request bound to the commit it was found under."""

    commit: str
    record: PullRequestRecord


@dataclass
class ReconciliationState:
    """Mutable bookkeeping for a single reconciliation run."""

    page: int = 1
    not_found: int = 0
    pages_fetched: int = 0
    matches: Dict[str, PullRequestRecord] = field(default_factory=dict)
