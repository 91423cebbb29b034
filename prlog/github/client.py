"""GitHub pull request source using the REST API through requests."""

import logging
from typing import Any, Dict, List, Optional

import requests
from dateutil import parser as date_parser
from pydantic import ValidationError

from ..errors import ConfigError, FetchError
from ..releasenote.models import PullRequestRecord
from ..releasenote.source import DEFAULT_PAGE_SIZE, PullRequestSource, require_number

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0


class GitHubClient(PullRequestSource):
    """Closed pull requests of one GitHub repository and base branch."""

    def __init__(self, project: str, base: str, token: Optional[str] = None,
                 api_url: str = DEFAULT_API_URL, page_size: int = DEFAULT_PAGE_SIZE,
                 timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None,
                 logger: Optional[logging.Logger] = None):
        """Initialize GitHub client.

        Args:
            project: Repository as ``owner/repo``
            base: Base branch the pull requests were merged into
            token: Personal access token (anonymous access when None)
            api_url: REST API root, e.g. for GitHub Enterprise
            page_size: Pull requests per page (at most 100)
            timeout: Seconds before a page request is abandoned
            session: Session to reuse, mainly for tests
            logger: Logger instance
        """
        super().__init__(page_size)
        self.project = project
        self.base = base
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

        self.session = session or requests.Session()
        self.session.headers.update({
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': '2022-11-28',
        })
        if token:
            self.session.headers['Authorization'] = f"Bearer {token}"

    def fetch_page(self, page: int) -> List[PullRequestRecord]:
        url = f"{self.api_url}/repos/{self.project}/pulls"
        params = {
            'state': 'closed',
            'base': self.base,
            'sort': 'updated',
            'direction': 'desc',
            'per_page': self.page_size,
            'page': page,
        }
        self.logger.debug(f"Fetching {url} page {page}")

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.Timeout as e:
            raise FetchError(f"Timed out fetching pull requests page {page} of {self.project}") from e
        except requests.RequestException as e:
            raise FetchError(f"Error fetching pull requests page {page} of {self.project}: {e}") from e

        if response.status_code != 200:
            raise FetchError(self._describe_failure(response, page))

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(f"Invalid JSON in pull requests page {page} of {self.project}") from e
        if not isinstance(data, list):
            raise FetchError(f"Unexpected response for pull requests page {page} of {self.project}")

        return [self._convert(item) for item in data]

    def _describe_failure(self, response: requests.Response, page: int) -> str:
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            reason = payload.get('message', '')
        else:
            reason = response.text[:200]
        if response.status_code in (403, 429) and response.headers.get('X-RateLimit-Remaining') == '0':
            reason = f"rate limit exceeded ({reason})" if reason else "rate limit exceeded"
        return (f"GitHub returned {response.status_code} for pull requests page {page} "
                f"of {self.project}: {reason}")

    @staticmethod
    def _convert(item: Dict[str, Any]) -> PullRequestRecord:
        """Convert a REST pull request object to a record.

        Pull requests closed without merging keep no commits, so they are
        skipped as unmatchable instead of matching through their head commit.

        Raises:
            ConfigError: If the object is malformed
        """
        if not isinstance(item, dict):
            raise ConfigError(f"Malformed pull request record: {item!r}")
        head = item.get('head') or {}
        user = item.get('user') or {}
        updated_at = item.get('updated_at')
        merged = item.get('merged_at') is not None

        try:
            return PullRequestRecord(
                number=require_number(item),
                title=item.get('title') or '',
                author=user.get('login') or '',
                merge_commit=(item.get('merge_commit_sha') or None) if merged else None,
                head_commit=(head.get('sha') or None) if merged else None,
                body=item.get('body') or '',
                branch=head.get('ref') or '',
                url=item.get('html_url') or '',
                updated_at=date_parser.isoparse(updated_at) if updated_at else None,
            )
        except (ValueError, ValidationError) as e:
            raise ConfigError(f"Malformed pull request #{item.get('number')}: {e}") from e
