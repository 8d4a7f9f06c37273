"""comment integration: post a reminder comment on the pull request.

The comment carries a hidden marker so repeated runs (e.g. a scheduled
workflow) post it at most once per PR.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.console import Console

from gong_core.gh.pull_request import COMMENT_MARKER, get_pull, get_repo, has_marker_comment, post_issue_comment
from gong_integrations.base import EMPTY_MESSAGE, BaseIntegration

if TYPE_CHECKING:
    from gong_core.models import PingContext, PingDecision

console = Console()
logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = (
    "Awaiting reviews from: "
    "{% for r in active_reviewers %}{% if not loop.first %}, {% endif %}@{{ r }}{% endfor %}\n" + COMMENT_MARKER
)


class CommentIntegration(BaseIntegration):
    name = "comment"
    default_template = DEFAULT_TEMPLATE

    def __init__(self, token: str | None = None):
        self._token = token

    def format(self, decisions, context, params=None, now=None) -> str:
        if not decisions:
            return f"{EMPTY_MESSAGE}\n{COMMENT_MARKER}"
        body = super().format(decisions, context, params, now)
        if COMMENT_MARKER not in body:
            body = f"{body}\n{COMMENT_MARKER}"
        return body

    def run(self, decisions: list[PingDecision], context: PingContext, params: dict[str, str]) -> None:
        body = self.format(decisions, context, params)

        if context.dry_run:
            console.print(
                f"[DRY RUN] Would post GitHub comment:\n{body}", markup=False, highlight=False, soft_wrap=True
            )
            return

        pr = get_pull(get_repo(context.repository, token=self._token), int(context.pr_number))
        if has_marker_comment(pr):
            console.print("Comment already exists for this PR.")
            return

        post_issue_comment(pr, body)
        logger.info("Posted reminder comment on %s#%s", context.repository, context.pr_number)
