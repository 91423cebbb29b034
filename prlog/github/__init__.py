"""GitHub pull request source."""

from .client import GitHubClient

__all__ = ["GitHubClient"]
