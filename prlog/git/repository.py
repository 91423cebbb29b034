"""Local git repository access through the ``git`` executable."""

import logging
import re
import subprocess
from pathlib import Path
from typing import List, Optional, Union

GIT_TIMEOUT_SECONDS = 30

# scp-like (git@host:owner/repo.git) and URL (https://host/owner/repo) remotes
REMOTE_PATH_RE = re.compile(
    r'^(?:[a-z][a-z0-9+.-]*://)?(?:[^@/]+@)?[^:/]+(?::\d+)?[:/](?P<path>.+?)(?:\.git)?/?$'
)


class GitCommandError(Exception):
    """A git command exited with a non-zero status or could not be run."""

    def __init__(self, command: List[str], message: str, returncode: int = 1):
        super().__init__(f"{' '.join(command)}: {message}")
        self.command = command
        self.message = message
        self.returncode = returncode


def parse_remote_slug(url: str) -> Optional[str]:
    """Extract the ``owner/repo`` path from a git remote URL.

    Args:
        url: Remote URL in scp-like or URL form

    Returns:
        Path such as ``owner/repo`` (GitLab subgroups included), or None
    """
    match = REMOTE_PATH_RE.match(url.strip())
    if not match:
        return None
    path = match.group('path').strip('/')
    if '/' not in path:
        return None
    return path


class GitRepository:
    """Read-mostly wrapper around a local git checkout."""

    def __init__(self, path: Union[str, Path] = ".", logger: Optional[logging.Logger] = None,
                 timeout: float = GIT_TIMEOUT_SECONDS):
        """Initialize repository wrapper.

        Args:
            path: Working tree (or any directory inside it)
            logger: Logger instance
            timeout: Seconds before a git command is abandoned
        """
        self.path = Path(path)
        self.logger = logger or logging.getLogger(__name__)
        self.timeout = timeout

    def _run(self, *args: str) -> str:
        """Run a git command and return its stripped stdout."""
        command = ["git", *args]
        self.logger.debug(f"Running: {' '.join(command)}")
        try:
            proc = subprocess.run(
                command,
                cwd=self.path,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise GitCommandError(command, f"git executable not found: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise GitCommandError(command, f"timed out after {self.timeout}s") from e

        if proc.returncode != 0:
            raise GitCommandError(command, proc.stderr.strip() or "failed", proc.returncode)
        return proc.stdout.strip()

    def current_branch(self) -> str:
        """Name of the checked out branch (``HEAD`` when detached)."""
        return self._run("rev-parse", "--abbrev-ref", "HEAD")

    def resolve_commit(self, ref: str) -> Optional[str]:
        """Resolve a reference to a full commit id.

        Returns:
            Commit id, or None if the reference does not name a commit
        """
        try:
            return self._run("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}")
        except GitCommandError:
            return None

    def latest_tag(self, ref: str) -> Optional[str]:
        """Most recent tag reachable from ``ref``, or None if there is none."""
        try:
            return self._run("describe", "--tags", "--abbrev=0", ref) or None
        except GitCommandError as e:
            self.logger.debug(f"No tag reachable from {ref}: {e.message}")
            return None

    def tag_exists(self, name: str) -> bool:
        try:
            self._run("rev-parse", "--verify", "--quiet", f"refs/tags/{name}")
        except GitCommandError:
            return False
        return True

    def rev_list(self, *ranges: str) -> List[str]:
        """Commit ids in the given range expressions, oldest first.

        Uses topological order so merge history is walked the same way git
        itself interprets the range.
        """
        output = self._run("rev-list", "--reverse", "--topo-order", *ranges, "--")
        return [line for line in output.splitlines() if line]

    def remote_url(self, remote: str = "origin") -> Optional[str]:
        try:
            return self._run("remote", "get-url", remote) or None
        except GitCommandError:
            return None

    def remote_slug(self, remote: str = "origin") -> Optional[str]:
        """``owner/repo`` of the given remote, if it can be parsed."""
        url = self.remote_url(remote)
        if not url:
            return None
        return parse_remote_slug(url)

    def create_tag(self, name: str, message: str, ref: str = "HEAD") -> None:
        """Create an annotated tag.

        Args:
            name: Tag name
            message: Tag message
            ref: Commit to tag
        """
        self._run("tag", "-a", name, "-m", message, ref)
