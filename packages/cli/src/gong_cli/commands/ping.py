"""ping command: remind pending reviewers of a pull request."""

from __future__ import annotations

import os
import subprocess

import click
from github import GithubException
from rich.console import Console

from gong_core.config import ConfigError
from gong_core.pinger import PullRequestNotFound, run_ping

console = Console()


def _detect_repo_from_git() -> str | None:
    """Try to detect the GitHub repo slug from the git remote URL."""
    try:
        result = subprocess.run(
            ["git", "remote", "get-url", "origin"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode != 0:
            return None
        url = result.stdout.strip()
        # https://github.com/owner/repo.git  →  owner/repo
        # git@github.com:owner/repo.git      →  owner/repo
        if "github.com" not in url:
            return None
        slug = url.split("github.com")[-1].lstrip("/:").removesuffix(".git")
        return slug if "/" in slug else None
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None


def _detect_repository() -> str | None:
    # GitHub Actions exposes the slug directly.
    return os.environ.get("GITHUB_REPOSITORY") or _detect_repo_from_git()


def _split_repository(repository: str) -> tuple[str, str]:
    parts = repository.split("/")
    if len(parts) != 2 or not all(parts):
        raise click.UsageError(f"Invalid repository format. Expected owner/repo, got {repository}")
    return parts[0], parts[1]


@click.command("ping")
@click.option(
    "--repository",
    "-r",
    default=None,
    help="Repository in the format owner/repo (auto-detected if not specified).",
)
@click.option("--pr", "pr_number", default=None, help="Pull Request number.")
@click.option(
    "--delay",
    "-d",
    type=int,
    default=None,
    help="Delay in seconds before pinging reviewers (default: 0, ping immediately).",
)
@click.option(
    "--enabled/--disabled",
    default=None,
    help="Enable or disable pinging (default: enabled).",
)
@click.pass_context
def ping_cmd(
    ctx,
    repository: str | None,
    pr_number: str | None,
    delay: int | None,
    enabled: bool | None,
):
    """Ping PR reviewers to remind them to review the Pull Request.

    \b
    Environment variables:
      GITHUB_TOKEN          GitHub token (or use --github-token / gh CLI)
      GONG_SLACK_WEBHOOK    Slack incoming webhook for the slack integration
      GONG_DELAY, GONG_ENABLED, GONG_REPOSITORY, GONG_PR
    """
    from gong_cli.auth import resolve_github_token
    from gong_cli.cli import _build_registry
    from gong_core.config import build_defaults, load_config, parse_rules

    obj = ctx.obj or {}

    try:
        config = load_config(
            obj.get("config_path", "~/.gong.yaml"),
            cli_overrides={
                "repository": repository,
                "pr": pr_number,
                "delay": delay,
                "enabled": enabled,
                "github_token": obj.get("github_token"),
            },
        )
        rules = parse_rules(config.get("rules"))
        defaults = build_defaults(config)
    except ConfigError as e:
        raise click.ClickException(str(e))

    repo = config.get("repository")
    if not repo:
        repo = _detect_repository()
        if not repo:
            raise click.UsageError(
                "Could not detect current repository. Please specify a repository using the --repository flag."
            )
        console.print(f"[dim]Using detected repository: {repo}[/dim]")
    _split_repository(repo)

    pr = config.get("pr")
    if not pr:
        raise click.UsageError("PR number must be specified.")
    if not str(pr).isdigit():
        raise click.UsageError(f"Invalid PR number: {pr}")

    config["github_token"] = resolve_github_token(config.get("github_token"))

    try:
        summary = run_ping(
            repo=repo,
            pr_number=str(pr),
            config=config,
            registry=_build_registry(config),
            dry_run=obj.get("dry_run", False),
            verbose=obj.get("verbose", False),
            rules=rules,
            defaults=defaults,
        )
    except PullRequestNotFound as e:
        console.print(f"[yellow]{e}[/yellow]")
        return
    except GithubException as e:
        raise click.ClickException(f"GitHub API error ({e.status}): {e.data}")

    if summary is not None and summary.errors:
        failed = ", ".join(sorted(summary.errors))
        console.print(f"[red]Some integrations failed: {failed}[/red]")
