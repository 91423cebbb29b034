"""Release note generation module."""

from .formatter import OUTPUT_MODES, ordered_matches, render
from .generator import Changelog, generate_changelog
from .models import MatchedRecord, PullRequestRecord, ReconciliationState
from .range import CommitRange, CommitSetIndex, RangeResolver
from .reconciler import DEFAULT_MAX_SKIPS, Reconciler
from .source import DEFAULT_PAGE_SIZE, PullRequestSource

__all__ = [
    "Changelog",
    "CommitRange",
    "CommitSetIndex",
    "DEFAULT_MAX_SKIPS",
    "DEFAULT_PAGE_SIZE",
    "MatchedRecord",
    "OUTPUT_MODES",
    "PullRequestRecord",
    "PullRequestSource",
    "RangeResolver",
    "ReconciliationState",
    "Reconciler",
    "generate_changelog",
    "ordered_matches",
    "render",
]
