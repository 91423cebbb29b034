"""GitLab merge request source using python-gitlab library."""

import logging
from typing import Any, Dict, List, Mapping, Optional

import gitlab
import requests
from dateutil import parser as date_parser
from gitlab.v4.objects import Project
from pydantic import ValidationError

from ..errors import ConfigError, FetchError
from ..releasenote.models import PullRequestRecord
from ..releasenote.source import DEFAULT_PAGE_SIZE, PullRequestSource, require_number

DEFAULT_HOST = "https://gitlab.com"
DEFAULT_TIMEOUT = 30.0


class GitLabClient(PullRequestSource):
    """Merged merge requests of one GitLab project and target branch."""

    def __init__(self, project: str, base: str, token: Optional[str] = None,
                 host: str = DEFAULT_HOST, page_size: int = DEFAULT_PAGE_SIZE,
                 timeout: float = DEFAULT_TIMEOUT, logger: Optional[logging.Logger] = None):
        """Initialize GitLab client.

        Args:
            project: Project path (``group/project``) or ID
            base: Target branch the merge requests were merged into
            token: Private access token
            host: GitLab host URL
            page_size: Merge requests per page (at most 100)
            timeout: Seconds before a page request is abandoned
            logger: Logger instance
        """
        super().__init__(page_size)
        self.project = project
        self.base = base
        self.logger = logger or logging.getLogger(__name__)

        self.gl = gitlab.Gitlab(url=host, private_token=token, timeout=timeout)
        self._project: Optional[Project] = None

    def _get_project(self) -> Project:
        """Get project instance with caching."""
        if self._project is None:
            self._project = self.gl.projects.get(self.project, lazy=True)
        return self._project

    def fetch_page(self, page: int) -> List[PullRequestRecord]:
        self.logger.debug(f"Fetching merge requests of {self.project} page {page}")
        try:
            mrs = self._get_project().mergerequests.list(
                state='merged',
                target_branch=self.base,
                order_by='updated_at',
                sort='desc',
                per_page=self.page_size,
                page=page,
                get_all=False,
            )
        except requests.Timeout as e:
            raise FetchError(f"Timed out fetching merge requests page {page} of {self.project}") from e
        except (gitlab.GitlabError, requests.RequestException) as e:
            raise FetchError(f"Error fetching merge requests page {page} of {self.project}: {e}") from e

        return [self._convert(mr.attributes) for mr in mrs]

    @staticmethod
    def _convert(attrs: Mapping[str, Any]) -> PullRequestRecord:
        """Convert merge request attributes to a record.

        Squash merges land as ``squash_commit_sha`` and fast-forward merges
        have no merge commit at all, leaving the head ``sha``.

        Raises:
            ConfigError: If the attributes are malformed
        """
        author: Dict[str, Any] = attrs.get('author') or {}
        updated_at = attrs.get('updated_at')

        try:
            return PullRequestRecord(
                number=require_number(attrs, 'iid'),
                title=attrs.get('title') or '',
                author=author.get('username') or '',
                merge_commit=attrs.get('merge_commit_sha') or attrs.get('squash_commit_sha') or None,
                head_commit=attrs.get('sha') or None,
                body=attrs.get('description') or '',
                branch=attrs.get('source_branch') or '',
                url=attrs.get('web_url') or '',
                updated_at=date_parser.isoparse(updated_at) if updated_at else None,
            )
        except (ValueError, ValidationError) as e:
            raise ConfigError(f"Malformed merge request !{attrs.get('iid')}: {e}") from e
