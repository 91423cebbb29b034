"""GitLab merge request source."""

from .client import GitLabClient

__all__ = ["GitLabClient"]
