"""Local git access."""

from .repository import GitCommandError, GitRepository, parse_remote_slug

__all__ = ["GitCommandError", "GitRepository", "parse_remote_slug"]
