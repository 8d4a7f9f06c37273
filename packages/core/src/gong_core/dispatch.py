"""Route ping decisions to their integrations.

The registry is a plain mapping from integration type to handler, built by the
caller (the CLI builds the real one; tests pass fakes). Dispatch never aborts
on a single channel: unknown types are skipped with a warning and handler
errors are collected into the returned DispatchReport.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Protocol, Sequence

from gong_core.models import PingContext, PingDecision

logger = logging.getLogger(__name__)


class Handler(Protocol):
    def run(self, decisions: list[PingDecision], context: PingContext, params: dict[str, str]) -> None: ...


@dataclass
class DispatchReport:
    dispatched: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: dict[str, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def group_by_integration(decisions: Sequence[PingDecision]) -> dict[str, list[PingDecision]]:
    """Group ping-eligible decisions by integration type.

    A decision with several integrations appears in each of their groups.
    Groups and their members keep first-seen order.
    """
    groups: dict[str, list[PingDecision]] = {}
    for decision in decisions:
        if not decision.should_ping:
            continue
        for integration_type in decision.integration_types():
            group = groups.setdefault(integration_type, [])
            # The same type listed twice on one decision still routes it once.
            if not group or group[-1] is not decision:
                group.append(decision)
    return groups


def routed_to(decisions: Sequence[PingDecision], integration_type: str) -> list[PingDecision]:
    """Return every decision targeting integration_type, eligible or not."""
    return [d for d in decisions if integration_type in d.integration_types()]


def dispatch(
    decisions: Sequence[PingDecision],
    registry: Mapping[str, Handler],
    context: PingContext,
) -> DispatchReport:
    """Invoke each integration that has at least one reviewer to ping.

    Handlers receive all decisions routed to their type, including waiting and
    disabled ones, so they can render who is not being pinged.
    """
    report = DispatchReport()

    for integration_type, group in group_by_integration(decisions).items():
        handler = registry.get(integration_type)
        if handler is None:
            logger.warning("Unknown integration: %s, skipping associated reviewers", integration_type)
            report.skipped.append(integration_type)
            continue

        params = group[0].params_for(integration_type) or {}
        routed = routed_to(decisions, integration_type)
        logger.debug("Running integration %s for %d reviewer(s)", integration_type, len(group))

        try:
            handler.run(routed, context, params)
        except Exception as e:
            logger.error("Integration %s failed (%s): %s", integration_type, type(e).__name__, e)
            report.errors[integration_type] = e
            continue
        report.dispatched.append(integration_type)

    return report
