"""Rendering matched pull requests in release order."""

import json
from typing import Iterable, List, Mapping

from ..errors import ConfigError
from .models import MatchedRecord, PullRequestRecord

OUTPUT_MODES = ("list", "structured")


def check_mode(mode: str) -> None:
    """Reject unknown output modes.

    Args:
        mode: Requested output mode

    Raises:
        ConfigError: If ``mode`` is not one of OUTPUT_MODES
    """
    if mode not in OUTPUT_MODES:
        raise ConfigError(f"Unknown output mode {mode!r}, expected one of {', '.join(OUTPUT_MODES)}")


def ordered_matches(order: Iterable[str], matches: Mapping[str, PullRequestRecord]) -> List[MatchedRecord]:
    """Select matched commits in range order.

    Args:
        order: Commit ids of the range, oldest first
        matches: Landing commit id to pull request

    Returns:
        One MatchedRecord per matched commit, oldest first
    """
    return [MatchedRecord(commit, matches[commit]) for commit in order if commit in matches]


def format_list(entries: Iterable[MatchedRecord]) -> List[str]:
    """One ``- <title> #<number> <author>`` line per entry.

    Args:
        entries: Matched records, oldest first

    Returns:
        Changelog lines
    """
    return [f"- {m.record.title} #{m.record.number} {m.record.author}" for m in entries]


def format_structured(entries: Iterable[MatchedRecord]) -> List[str]:
    """One JSON object per entry, including the commit it landed as."""
    lines = []
    for m in entries:
        data = m.record.model_dump(mode="json")
        data['commit'] = m.commit
        lines.append(json.dumps(data, ensure_ascii=False))
    return lines


FORMATTERS = {
    "list": format_list,
    "structured": format_structured,
}


def render(mode: str, order: Iterable[str], matches: Mapping[str, PullRequestRecord]) -> str:
    """Render matched pull requests oldest first in the requested mode.

    Raises:
        ConfigError: If ``mode`` is not a known output mode
    """
    check_mode(mode)
    lines = FORMATTERS[mode](ordered_matches(order, matches))
    return "\n".join(lines)
