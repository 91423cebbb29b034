"""Changelog command implementation."""

import click

from ..config import get_config
from ..errors import ConfigError, PrlogError, TraversalError
from ..git import GitCommandError, GitRepository
from ..releasenote import RangeResolver, generate_changelog


@click.command()
@click.option('--branch', '-b', help='Branch to generate the changelog for (default: current checkout)')
@click.option('--range', '-r', 'ranges', multiple=True,
              help='Explicit git range such as v1.0..v1.1 (repeatable, skips tag lookup)')
@click.option('--previous-release', '-P', is_flag=True,
              help='Changelog of the last tagged release instead of unreleased changes')
@click.option('--mode', '-m', help='Output mode: list or structured')
@click.option('--max-skips', type=int, help='Out-of-range pull requests tolerated before stopping')
@click.option('--page-size', type=int, help='Pull requests fetched per API call')
@click.option('--project', '-p', help='owner/repo override (default: origin remote)')
@click.option('--provider', help='Pull request provider: github or gitlab')
@click.option('--token', help='API token for the provider (overrides config)')
@click.option('--timeout', type=float, help='Seconds before an API call is abandoned')
@click.option('--keep', help='Pull request kept when two share a commit: first or last')
@click.option('--repo-path', default='.', help='Path to the local git repository')
@click.option('--output', '-o', help='Write the changelog to a file instead of stdout')
@click.option('--allow-empty', is_flag=True, help='Treat a range without commits as an empty changelog')
@click.option('--tag', '-t', help='Create an annotated tag at the range end with the changelog as message')
@click.pass_context
def changelog(ctx, branch, ranges, previous_release, mode, max_skips, page_size, project,
              provider, token, timeout, keep, repo_path, output, allow_empty, tag):
    """Generate a changelog from the pull requests merged into a commit range."""

    # Import here to avoid circular dependency
    from .main import create_source, fail

    logger = ctx.obj['logger']

    try:
        config = get_config(
            ctx.obj.get('config_file'),
            branch=branch,
            mode=mode,
            max_skips=max_skips,
            page_size=page_size,
            project=project,
            provider=provider,
            timeout=timeout,
            keep=keep,
        )
        if token:
            config = config.model_copy(update={f"{config.provider}_token": token})

        if tag and previous_release:
            raise ConfigError("--tag cannot be used with --previous-release")

        repo = GitRepository(repo_path, logger)
        if tag and repo.tag_exists(tag):
            raise ConfigError(f"Tag {tag} already exists")

        base = RangeResolver(repo, logger).branch_name(config.branch)
        source = create_source(config, repo, base, logger)

        try:
            result = generate_changelog(
                repo,
                source,
                ranges=list(ranges) or None,
                branch=base,
                previous_release=previous_release,
                mode=config.mode,
                max_skips=config.max_skips,
                keep=config.keep,
                logger=logger,
            )
        except TraversalError as e:
            if allow_empty and e.empty:
                logger.info(f"{e}, nothing to report")
                return
            raise

        if not result.text:
            logger.info("No pull requests matched the range")

        if tag:
            # Explicit ranges have no symbolic end: tag their newest commit
            ref = result.commit_range.end or result.index.ordered[-1]
            logger.info(f"Creating tag {tag} at {ref}")
            try:
                repo.create_tag(tag, f"{tag}\n\n{result.text}\n", ref)
            except GitCommandError as e:
                click.echo(f"Error creating tag {tag}: {e.message}", err=True)
                ctx.exit(1)

        if output:
            try:
                with open(output, 'w', encoding='utf-8') as f:
                    f.write(result.text + "\n" if result.text else "")
            except OSError as e:
                click.echo(f"Error writing to file {output}: {e}", err=True)
                ctx.exit(1)
            logger.info(f"Changelog saved to: {output}")
        elif result.text:
            click.echo(result.text)

    except PrlogError as e:
        fail(e)
