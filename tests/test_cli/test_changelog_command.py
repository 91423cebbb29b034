"""Tests for the changelog CLI command."""

import json
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from click.testing import CliRunner

from prlog.cli.main import cli, create_source
from prlog.config import get_config
from prlog.errors import ConfigError
from prlog.github import GitHubClient
from prlog.gitlab import GitLabClient


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in ("GITHUB_TOKEN", "GITLAB_TOKEN", "PRLOG_PROJECT", "PRLOG_MODE",
                 "PRLOG_PROVIDER", "PRLOG_GITHUB_TOKEN", "PRLOG_BRANCH"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)


class TestChangelogCommand:
    """Test the changelog command wiring."""

    def setup_method(self) -> None:
        self.runner = CliRunner()

    def _invoke(self, repo, source, args):
        with patch("prlog.cli.changelog.GitRepository", return_value=repo), \
                patch("prlog.cli.main.create_source", return_value=source) as mock_create:
            result = self.runner.invoke(cli, ["changelog", *args])
        return result, mock_create

    def test_default_range(self, make_record, fake_repo, fake_source) -> None:
        repo = fake_repo(tags={"main": "v1.0.0"}, rev_lists={"v1.0.0..HEAD": ["c1", "c2"]})
        source = fake_source([[make_record(2, merge_commit="c2"), make_record(1, merge_commit="c1")]])

        result, mock_create = self._invoke(repo, source, [])

        assert result.exit_code == 0, result.output
        assert result.stdout == "- Change 1 #1 octocat\n- Change 2 #2 octocat\n"
        assert mock_create.call_args[0][2] == "main"

    def test_explicit_range_structured(self, make_record, fake_repo, fake_source) -> None:
        repo = fake_repo(rev_lists={"v1..v2": ["c1"]})
        source = fake_source([[make_record(1, merge_commit="c1")]])

        result, _ = self._invoke(repo, source, ["-r", "v1..v2", "-m", "structured", "-b", "release"])

        assert result.exit_code == 0, result.output
        entry = json.loads(result.stdout)
        assert entry["number"] == 1
        assert entry["commit"] == "c1"

    def test_options_reach_config(self, make_record, fake_repo, fake_source) -> None:
        repo = fake_repo(rev_lists={"a..b": ["c1"]})
        source = fake_source([[]])

        result, mock_create = self._invoke(
            repo, source,
            ["-r", "a..b", "--token", "cli-token", "--page-size", "25", "--project", "acme/other"],
        )

        assert result.exit_code == 0, result.output
        config = mock_create.call_args[0][0]
        assert config.github_token == "cli-token"
        assert config.page_size == 25
        assert config.project == "acme/other"

    def test_fetch_failure_no_output(self, make_record, fake_repo, fake_source) -> None:
        repo = fake_repo(rev_lists={"a..b": ["c1"]})
        source = fake_source([[make_record(1, merge_commit="c1")]], fail_on=2)

        result, _ = self._invoke(repo, source, ["-r", "a..b"])

        assert result.exit_code == 5
        assert "Change 1" not in result.output
        assert "connection reset" in result.output

    def test_unknown_mode(self, fake_repo, fake_source) -> None:
        result, _ = self._invoke(fake_repo(), fake_source([]), ["-m", "html"])

        assert result.exit_code == 2
        assert "Invalid configuration" in result.output

    def test_no_tag(self, fake_repo, fake_source) -> None:
        result, _ = self._invoke(fake_repo(tags={}), fake_source([]), [])

        assert result.exit_code == 3
        assert "No tag found" in result.output

    def test_empty_range(self, fake_repo, fake_source) -> None:
        repo = fake_repo(rev_lists={"v1..v1": []})

        result, _ = self._invoke(repo, fake_source([]), ["-r", "v1..v1"])

        assert result.exit_code == 4

    def test_empty_range_allowed(self, fake_repo, fake_source) -> None:
        repo = fake_repo(rev_lists={"v1..v1": []})

        result, _ = self._invoke(repo, fake_source([]), ["-r", "v1..v1", "--allow-empty"])

        assert result.exit_code == 0
        assert result.stdout == ""

    def test_create_tag(self, make_record, fake_repo, fake_source) -> None:
        repo = fake_repo(tags={"main": "v1.0.0"}, rev_lists={"v1.0.0..HEAD": ["c1"]})
        source = fake_source([[make_record(1, merge_commit="c1")]])

        result, _ = self._invoke(repo, source, ["--tag", "v1.1.0"])

        assert result.exit_code == 0, result.output
        assert repo.created_tags == [("v1.1.0", "v1.1.0\n\n- Change 1 #1 octocat\n", "HEAD")]

    def test_tag_explicit_range_at_newest_commit(self, make_record, fake_repo, fake_source) -> None:
        """A tag for an explicit range sits on the range's newest commit, not HEAD."""
        repo = fake_repo(rev_lists={"v0..v1": ["c1", "c2"]})
        source = fake_source([[make_record(1, merge_commit="c1")]])

        result, _ = self._invoke(repo, source, ["-r", "v0..v1", "--tag", "rel"])

        assert result.exit_code == 0, result.output
        assert [(name, ref) for name, _, ref in repo.created_tags] == [("rel", "c2")]

    def test_detached_head_without_branch(self, fake_repo, fake_source) -> None:
        repo = fake_repo(branch="HEAD", refs=["HEAD"], tags={"HEAD": "v1.0.0"})

        result, mock_create = self._invoke(repo, fake_source([]), [])

        assert result.exit_code == 3
        assert "Detached HEAD" in result.output
        mock_create.assert_not_called()

    def test_existing_tag_refused(self, fake_repo, fake_source) -> None:
        repo = fake_repo(tags={"main": "v1.0.0"})

        result, _ = self._invoke(repo, fake_source([]), ["--tag", "v1.0.0"])

        assert result.exit_code == 2
        assert "already exists" in result.output
        assert repo.created_tags == []

    def test_output_file(self, tmp_path: Path, make_record, fake_repo, fake_source) -> None:
        repo = fake_repo(rev_lists={"a..b": ["c1"]})
        source = fake_source([[make_record(1, merge_commit="c1")]])
        out = tmp_path / "CHANGES.md"

        result, _ = self._invoke(repo, source, ["-r", "a..b", "-o", str(out)])

        assert result.exit_code == 0, result.output
        assert out.read_text(encoding="utf-8") == "- Change 1 #1 octocat\n"
        assert result.stdout == ""


class TestCreateSource:
    """Test provider selection."""

    def test_provider_token_used(self, fake_repo) -> None:
        config = get_config(github_token="gh", gitlab_token="gl")

        source = create_source(config, fake_repo(), "main", Mock())

        assert source.session.headers["Authorization"] == "Bearer gh"

    def test_github_from_remote(self, fake_repo) -> None:
        source = create_source(get_config(), fake_repo(slug="acme/widget"), "main", Mock())

        assert isinstance(source, GitHubClient)
        assert source.project == "acme/widget"
        assert source.base == "main"

    @patch("prlog.gitlab.client.gitlab.Gitlab")
    def test_gitlab(self, mock_gitlab: Mock, fake_repo) -> None:
        config = get_config(provider="gitlab", project="group/sub/app", gitlab_token="t", page_size=40)

        source = create_source(config, fake_repo(), "develop", Mock())

        assert isinstance(source, GitLabClient)
        assert source.project == "group/sub/app"
        assert source.page_size == 40
        mock_gitlab.assert_called_once_with(url="https://gitlab.com", private_token="t", timeout=30.0)

    def test_missing_project(self, fake_repo) -> None:
        with pytest.raises(ConfigError, match="Project is required"):
            create_source(get_config(), fake_repo(slug=None), "main", Mock())


class TestOtherCommands:
    """Test init-config and version."""

    def test_init_config(self, tmp_path: Path) -> None:
        path = tmp_path / "prlog.json"

        result = CliRunner().invoke(cli, ["init-config", "--path", str(path)])

        assert result.exit_code == 0
        assert json.loads(path.read_text())["provider"] == "github"

    def test_version(self) -> None:
        result = CliRunner().invoke(cli, ["version"])

        assert result.exit_code == 0
        assert "prlog version" in result.output
