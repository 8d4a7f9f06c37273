"""slack integration: send a reminder through a Slack incoming webhook."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import requests

from gong_integrations.base import BaseIntegration

if TYPE_CHECKING:
    from gong_core.models import PingContext, PingDecision

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL = "general"
_TIMEOUT = 10

DEFAULT_TEMPLATE = (
    "PR #{{ pr_number }} is waiting for review: <{{ pr_url }}|{{ repo_owner }}/{{ repo_name }}#{{ pr_number }}>\n"
    '{% if active_reviewers %}Reviewers: {{ active_reviewers | join(", ") }}{% endif %}'
)


def build_payload(channel: str, message: str, pr_url: str, pr_number: str) -> dict:
    """Build the incoming-webhook payload: a summary line plus one attachment."""
    return {
        "channel": channel,
        "text": f"Review requested on PR #{pr_number}",
        "attachments": [
            {
                "color": "#36a64f",
                "text": message,
                "author_name": "gong",
                "footer": "Sent via gong",
                "footer_icon": "https://github.com/favicon.ico",
                "actions": [
                    {
                        "type": "button",
                        "text": "View PR",
                        "url": pr_url,
                        "style": "primary",
                    }
                ],
            }
        ],
    }


class SlackIntegration(BaseIntegration):
    name = "slack"
    default_template = DEFAULT_TEMPLATE

    def __init__(self, webhook_url: str | None = None):
        self._webhook_url = webhook_url

    def run(self, decisions: list[PingDecision], context: PingContext, params: dict[str, str]) -> None:
        if not decisions:
            return

        channel = params.get("channel") or DEFAULT_CHANNEL

        if not self._webhook_url:
            logger.error("No Slack webhook URL found in configuration. Skipping Slack notifications.")
            return

        message = self.format(decisions, context, params)

        if context.dry_run:
            logger.info(
                "[DRY RUN] Would send Slack notification to channel %s via webhook for PR #%s in %s",
                channel,
                context.pr_number,
                context.repository,
            )
            logger.info("[DRY RUN] Message: %s", message)
            return

        logger.debug("Sending Slack notification to channel %s via webhook", channel)
        response = requests.post(
            self._webhook_url,
            json=build_payload(channel, message, context.pr_url, context.pr_number),
            timeout=_TIMEOUT,
        )
        response.raise_for_status()
