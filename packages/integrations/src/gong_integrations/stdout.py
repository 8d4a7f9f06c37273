"""stdout integration: print who is being pinged and who is still waiting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console

from gong_integrations.base import BaseIntegration

if TYPE_CHECKING:
    from gong_core.models import PingContext, PingDecision

console = Console()

DEFAULT_TEMPLATE = (
    '{% if active_reviewers %}Pinging: {{ active_reviewers | join(", ") }}{% endif %}'
    "{% if active_reviewers and disabled_reviewers %}\n{% endif %}"
    '{% if disabled_reviewers %}Not pinging: {{ disabled_reviewers | join(", ") }}{% endif %}'
    "{% if not active_reviewers and not disabled_reviewers %}No pending review requests.{% endif %}"
)


class StdoutIntegration(BaseIntegration):
    name = "stdout"
    default_template = DEFAULT_TEMPLATE
    include_full_info = True

    def run(self, decisions: list[PingDecision], context: PingContext, params: dict[str, str]) -> None:
        if context.dry_run:
            console.print("[DRY RUN] Would output reviewer information to stdout", markup=False)
            return
        console.print(self.format(decisions, context, params), markup=False, highlight=False, soft_wrap=True)
