"""Formatting helpers and template data shared by all integrations."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Sequence

from gong_core.models import PingContext, PingDecision, ReviewRequest

_HOUR = 3600


def format_duration(seconds: float) -> str:
    """Format a duration as "2d 3h", "2d", "5h", "45m" or "just now"."""
    total_hours = int(seconds / _HOUR)
    days = total_hours // 24 if total_hours >= 0 else 0
    hours = total_hours % 24 if total_hours >= 0 else 0

    if days > 0:
        if hours > 0:
            return f"{days}d {hours}h"
        return f"{days}d"

    if hours > 0:
        return f"{hours}h"

    minutes = int(seconds / 60) % 60 if seconds > 0 else 0
    if minutes > 0:
        return f"{minutes}m"

    return "just now"


def _round_to_hour(seconds: float) -> float:
    # Halfway values round away from zero.
    hours = math.floor(abs(seconds) / _HOUR + 0.5)
    return math.copysign(hours * _HOUR, seconds)


def reviewer_label(request: ReviewRequest) -> str:
    if request.is_team:
        return f"{request.reviewer} (team)"
    return request.reviewer


def elapsed_label(request: ReviewRequest, now: datetime) -> str:
    """Time since the review was requested, rounded to the hour."""
    return format_duration(_round_to_hour((now - request.requested_at).total_seconds()))


def decision_status(decision: PingDecision) -> str:
    return "waiting" if decision.enabled else "disabled"


@dataclass
class TemplateData:
    """Values exposed to integration templates."""

    decisions: list[PingDecision] = field(default_factory=list)
    active_reviewers: list[str] = field(default_factory=list)
    disabled_reviewers: list[str] = field(default_factory=list)
    pr_number: str = ""
    repo_owner: str = ""
    repo_name: str = ""
    pr_url: str = ""

    def as_dict(self) -> dict:
        return {
            "decisions": self.decisions,
            "active_reviewers": self.active_reviewers,
            "disabled_reviewers": self.disabled_reviewers,
            "pr_number": self.pr_number,
            "repo_owner": self.repo_owner,
            "repo_name": self.repo_name,
            "pr_url": self.pr_url,
        }


def prepare_template_data(
    decisions: Sequence[PingDecision],
    context: PingContext | None = None,
    include_full_info: bool = False,
    now: datetime | None = None,
) -> TemplateData:
    """Split decisions into active and disabled reviewer display strings.

    Active entries are the bare label unless include_full_info is set.
    Disabled entries always carry elapsed time, delay and status.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    active: list[str] = []
    disabled: list[str] = []

    for decision in decisions:
        label = reviewer_label(decision.request)
        info = f"{label} ({elapsed_label(decision.request, now)} ago, delay: {decision.delay}s)"

        if decision.should_ping:
            active.append(info if include_full_info else label)
        else:
            disabled.append(f"{info}, status: {decision_status(decision)}")

    data = TemplateData(decisions=list(decisions), active_reviewers=active, disabled_reviewers=disabled)
    if context is not None:
        data.pr_number = context.pr_number
        data.repo_owner = context.repo_owner
        data.repo_name = context.repo_name
        data.pr_url = context.pr_url
    return data
