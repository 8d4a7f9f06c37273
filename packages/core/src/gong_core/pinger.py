"""Ping pipeline: fetch review requests, apply rules, dispatch to integrations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping

from github import GithubException
from rich.console import Console

from gong_core.config import build_defaults, parse_rules
from gong_core.dispatch import Handler, dispatch
from gong_core.gh.pull_request import get_pull, get_pull_state, get_repo, get_review_requests
from gong_core.models import Defaults, PingContext, PingDecision, Rule
from gong_core.rules import apply_rules

console = Console()
logger = logging.getLogger(__name__)


class PullRequestNotFound(Exception):
    """The repository or pull request does not exist (HTTP 404)."""


@dataclass
class PingSummary:
    """Result of one run. Carries enough for the CLI to report and pick an exit code."""

    repo: str
    pr_number: str
    decisions: list[PingDecision] = field(default_factory=list)
    dispatched: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: dict[str, Exception] = field(default_factory=dict)

    @property
    def pinged(self) -> list[PingDecision]:
        return [d for d in self.decisions if d.should_ping]


def _not_found(e: GithubException) -> bool:
    return e.status == 404


def run_ping(
    repo: str,
    pr_number: str,
    config: dict,
    registry: Mapping[str, Handler],
    dry_run: bool = False,
    verbose: bool = False,
    now: datetime | None = None,
    repo_obj=None,
    rules: list[Rule] | None = None,
    defaults: Defaults | None = None,
) -> PingSummary | None:
    """Run the full ping pipeline for one pull request.

    rules and defaults are parsed from config when not given. Either way
    they are settled before GitHub is contacted, so a ConfigError never
    follows a fetch.

    Returns None on the informational early exits (PR closed or merged, no
    pending reviewers). Raises PullRequestNotFound when GitHub answers 404.
    """
    if rules is None:
        rules = parse_rules(config.get("rules"))
    if defaults is None:
        defaults = build_defaults(config)

    owner, name = repo.split("/", 1)
    context = PingContext(repo_owner=owner, repo_name=name, pr_number=pr_number, dry_run=dry_run, verbose=verbose)

    try:
        this_repo = repo_obj if repo_obj is not None else get_repo(repo, token=config.get("github_token"))
        this_pr = get_pull(this_repo, int(pr_number))
    except GithubException as e:
        if _not_found(e):
            raise PullRequestNotFound(
                f"Pull Request #{pr_number} was not found in {repo}. "
                "Please check if the PR number and repository are correct."
            )
        raise

    state = get_pull_state(this_pr)
    if not state.is_open:
        status = "merged" if state.is_merged else "closed"
        console.print(f"[yellow]Pull Request #{pr_number} is {status}. No need to ping reviewers.[/yellow]")
        return None

    logger.debug("Pull Request #%s is open. Proceeding with reviewer checks.", pr_number)

    try:
        requests = get_review_requests(this_pr)
    except GithubException as e:
        if _not_found(e):
            raise PullRequestNotFound(f"Pull Request #{pr_number} was not found in {repo}.")
        raise

    if not requests:
        console.print(f"[yellow]No reviewers found for PR #{pr_number}.[/yellow]")
        return None

    decisions = apply_rules(requests, rules, defaults, now=now)

    summary = PingSummary(repo=repo, pr_number=pr_number, decisions=decisions)

    if not summary.pinged:
        console.print("[yellow]No reviewers match the delay criteria. Nothing to ping.[/yellow]")
        return summary

    report = dispatch(decisions, registry, context)
    summary.dispatched = report.dispatched
    summary.skipped = report.skipped
    summary.errors = report.errors
    return summary
