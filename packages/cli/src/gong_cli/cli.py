"""CLI entry point for gong.

Commands:
  ping   - remind pending reviewers of a pull request
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from gong_cli.commands.ping import ping_cmd

console = Console()

_PACKAGE_LOGGERS = ("gong_core", "gong_integrations", "gong_cli")


def _configure_logging(verbose: bool) -> None:
    """Send log records to stderr through rich; DEBUG for our packages with --verbose."""
    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    level = logging.DEBUG if verbose else logging.INFO
    for name in _PACKAGE_LOGGERS:
        logging.getLogger(name).setLevel(level)


def _build_registry(config: dict) -> dict:
    """Instantiate every known integration, keyed by type name.

    This factory lives in cli.py so the ping pipeline in gong_core only sees a
    name → handler mapping and never imports a concrete channel.
    """
    from gong_integrations.actions import ActionsIntegration
    from gong_integrations.comment import CommentIntegration
    from gong_integrations.slack import SlackIntegration
    from gong_integrations.stdout import StdoutIntegration

    return {
        "stdout": StdoutIntegration(),
        "comment": CommentIntegration(token=config.get("github_token")),
        "slack": SlackIntegration(webhook_url=config.get("slack_webhook")),
        "actions": ActionsIntegration(),
    }


@click.group()
@click.version_option(
    version=importlib.metadata.version("gong"),
    prog_name="gong",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    default="~/.gong.yaml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="GONG_CONFIG",
)
@click.option("--github-token", default=None, help="GitHub token. Defaults to GITHUB_TOKEN or the gh CLI session.")
@click.option("--verbose", "-v", is_flag=True, envvar="GONG_VERBOSE", help="Display more verbose output.")
@click.option("--dry-run", is_flag=True, envvar="GONG_DRY_RUN", help="Compute notifications without sending them.")
@click.pass_context
def main(ctx: click.Context, config_path: str, github_token: str | None, verbose: bool, dry_run: bool):
    """gong is a CLI tool to ping pull request reviewers."""
    _configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["github_token"] = github_token
    ctx.obj["verbose"] = verbose
    ctx.obj["dry_run"] = dry_run


main.add_command(ping_cmd)
