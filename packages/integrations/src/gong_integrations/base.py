"""Abstract integration interface.

Every output channel (stdout, PR comment, Slack, GitHub Actions) implements
this interface. The CLI registers instances by type name and the dispatcher
calls run() with the decisions routed to that type, so channels are swappable
without touching the pipeline.

Templates are Jinja2 strings rendered against TemplateData. A "template"
parameter on the integration overrides the channel's default template.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING

from jinja2 import Environment, StrictUndefined

from gong_core.utils.format import TemplateData, prepare_template_data

if TYPE_CHECKING:
    from gong_core.models import PingContext, PingDecision

_env = Environment(undefined=StrictUndefined, autoescape=False)

EMPTY_MESSAGE = "No pending review requests."


def render_template(template: str, data: TemplateData) -> str:
    """Render a Jinja2 template string. Raises jinja2.TemplateError on bad templates."""
    return _env.from_string(template).render(**data.as_dict())


class BaseIntegration(ABC):
    """A notification channel.

    Implementations must treat context.dry_run as "compute and report, but do
    not perform the side effect".
    """

    name: str = ""
    default_template: str = ""
    include_full_info: bool = False

    def template_for(self, params: dict[str, str] | None) -> str:
        if params and params.get("template"):
            return params["template"]
        return self.default_template

    def template_data(
        self,
        decisions: list[PingDecision],
        context: PingContext,
        now: datetime | None = None,
    ) -> TemplateData:
        full_info = self.include_full_info or (context is not None and context.verbose)
        return prepare_template_data(decisions, context, include_full_info=full_info, now=now)

    def format(
        self,
        decisions: list[PingDecision],
        context: PingContext,
        params: dict[str, str] | None = None,
        now: datetime | None = None,
    ) -> str:
        if not decisions:
            return EMPTY_MESSAGE
        return render_template(self.template_for(params), self.template_data(decisions, context, now))

    @abstractmethod
    def run(self, decisions: list[PingDecision], context: PingContext, params: dict[str, str]) -> None:
        """Deliver the notification for the decisions routed to this channel."""
