"""actions integration: expose reviewers to later GitHub Actions steps.

Appends to the files named by GITHUB_OUTPUT and GITHUB_ENV:

    reviewers=alice,bob              GONG_REVIEWERS=alice,bob
    reviewersCount=2                 GONG_REVIEWERS_COUNT=2
    reviewersDetails<<EOF ... EOF    GONG_REVIEWERS_DETAILS<<EOF ... EOF
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from rich.console import Console

from gong_core.utils.format import decision_status, elapsed_label, reviewer_label
from gong_integrations.base import EMPTY_MESSAGE, BaseIntegration

if TYPE_CHECKING:
    from gong_core.models import PingContext, PingDecision

console = Console()

_DELIMITER = "EOF"


def split_reviewers(decisions: list[PingDecision], now: datetime | None = None) -> tuple[list[str], list[str]]:
    """Return (enabled, disabled) display strings. Disabled entries carry elapsed time and status."""
    if now is None:
        now = datetime.now(timezone.utc)
    enabled: list[str] = []
    disabled: list[str] = []
    for decision in decisions:
        label = reviewer_label(decision.request)
        if decision.should_ping:
            enabled.append(label)
        else:
            elapsed = elapsed_label(decision.request, now)
            disabled.append(f"{label} ({elapsed} ago, status: {decision_status(decision)})")
    return enabled, disabled


def _write_variables(path: str, names: tuple[str, str, str], enabled: list[str], disabled: list[str]) -> None:
    list_name, count_name, details_name = names
    details = [f"{r} (status: enabled)" for r in enabled] + disabled
    with open(path, "a", encoding="utf-8") as f:
        f.write(f"{list_name}={','.join(enabled)}\n")
        f.write(f"{count_name}={len(enabled)}\n")
        f.write(f"{details_name}<<{_DELIMITER}\n")
        f.write("\n".join(details) + "\n")
        f.write(f"{_DELIMITER}\n")


def format_summary(enabled: list[str], disabled: list[str]) -> str:
    if not enabled and not disabled:
        return EMPTY_MESSAGE
    lines = []
    if enabled:
        lines.append(f"Enabled reviewers ({len(enabled)}): {', '.join(enabled)}")
    if disabled:
        lines.append(f"Disabled/waiting reviewers ({len(disabled)}): {', '.join(disabled)}")
    return "\n".join(lines)


class ActionsIntegration(BaseIntegration):
    name = "actions"

    def run(self, decisions: list[PingDecision], context: PingContext, params: dict[str, str]) -> None:
        if context.dry_run:
            console.print(
                "[DRY RUN] Would write reviewer information to GitHub Actions environment variables", markup=False
            )
            return

        output_path = os.environ.get("GITHUB_OUTPUT")
        env_path = os.environ.get("GITHUB_ENV")
        if not output_path and not env_path:
            console.print(
                "GitHub Actions environment variables not detected. "
                "This integration is meant to be used in GitHub Actions."
            )
            return

        enabled, disabled = split_reviewers(decisions)

        if output_path:
            _write_variables(output_path, ("reviewers", "reviewersCount", "reviewersDetails"), enabled, disabled)
        if env_path:
            _write_variables(
                env_path, ("GONG_REVIEWERS", "GONG_REVIEWERS_COUNT", "GONG_REVIEWERS_DETAILS"), enabled, disabled
            )

        console.print("GitHub Actions Integration results:")
        console.print(format_summary(enabled, disabled), markup=False, highlight=False, soft_wrap=True)
