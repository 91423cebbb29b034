"""Main CLI entry point for prlog."""

import logging
import sys

import click

from .. import __version__
from ..config import Config, create_sample_config
from ..errors import ConfigError, PrlogError
from ..git import GitRepository
from ..github import GitHubClient
from ..gitlab import GitLabClient
from ..releasenote import PullRequestSource
from .changelog import changelog


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--config-file', '-c', help='Path to JSON configuration file')
@click.version_option(version=__version__, prog_name="prlog")
@click.pass_context
def cli(ctx, debug, config_file):
    """prlog - changelogs from the pull requests merged into a commit range."""

    # Logs go to stderr; stdout carries only the changelog
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config_file
    ctx.obj['logger'] = logging.getLogger('prlog')


def create_source(config: Config, repo: GitRepository, base: str,
                  logger: logging.Logger) -> PullRequestSource:
    """Create the pull request source for the configured provider.

    The project defaults to the path of the ``origin`` remote.
    """
    project = config.project or repo.remote_slug()
    if not project:
        raise ConfigError("Project is required. Use --project, PRLOG_PROJECT or config file")

    if config.provider == "gitlab":
        return GitLabClient(project, base, token=config.token, host=config.gitlab_host,
                            page_size=config.page_size, timeout=config.timeout, logger=logger)
    return GitHubClient(project, base, token=config.token, api_url=config.github_api_url,
                        page_size=config.page_size, timeout=config.timeout, logger=logger)


def fail(error: PrlogError) -> None:
    """Report a fatal error and exit with its code."""
    click.echo(f"Error: {error}", err=True)
    sys.exit(error.exit_code)


@cli.command()
@click.option('--path', '-p', default='prlog.json', help='Path for the config file')
def init_config(path):
    """Create a sample configuration file."""
    try:
        create_sample_config(path)
    except OSError as e:
        click.echo(f"Error creating config file: {e}", err=True)
        sys.exit(1)
    click.echo(f"Sample configuration file created at: {path}")
    click.echo("Please edit the file and add your token and project details.")


@cli.command()
def version():
    """Show version information."""
    click.echo(f"prlog version {__version__}")


cli.add_command(changelog)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == '__main__':
    main()
