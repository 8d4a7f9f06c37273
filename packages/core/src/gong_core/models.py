"""Data model shared by the rule engine, the dispatcher and the integrations.

Kept free of GitHub and click imports so every layer can depend on it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ReviewRequest:
    """A pending request for a user or team to review a pull request."""

    reviewer: str
    requested_at: datetime
    is_team: bool = False
    pr_title: str = ""  # "" = no title match possible
    pr_author: str = ""


@dataclass(frozen=True)
class Integration:
    """A named output channel plus its channel-specific parameters."""

    type: str
    params: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Rule:
    """Per-reviewer override of the global delay, enabled flag and integrations.

    Patterns are shell globs. An empty pattern means the field is not part of
    the match test; every non-empty pattern must match for the rule to apply.
    An empty ``integrations`` list inherits the global integrations.
    """

    match_name: str = ""
    match_title: str = ""
    match_author: str = ""
    delay: int = 0
    enabled: bool = True
    integrations: tuple[Integration, ...] = ()

    def has_pattern(self) -> bool:
        return bool(self.match_name or self.match_title or self.match_author)


@dataclass(frozen=True)
class Defaults:
    """Global settings applied to every review request before rules."""

    delay: int = 0
    enabled: bool = True
    integrations: tuple[Integration, ...] = ()


@dataclass
class PingDecision:
    """Resolved outcome for one review request."""

    request: ReviewRequest
    delay: int
    enabled: bool
    integrations: list[Integration] = field(default_factory=list)
    should_ping: bool = False

    def integration_types(self) -> list[str]:
        return [i.type for i in self.integrations]

    def params_for(self, integration_type: str) -> dict[str, str] | None:
        """Return the parameters of the first integration of this type, or None."""
        for integration in self.integrations:
            if integration.type == integration_type:
                return integration.params
        return None


@dataclass(frozen=True)
class PingContext:
    """Request-scoped values passed through to every integration."""

    repo_owner: str
    repo_name: str
    pr_number: str
    dry_run: bool = False
    verbose: bool = False

    @property
    def repository(self) -> str:
        return f"{self.repo_owner}/{self.repo_name}"

    @property
    def pr_url(self) -> str:
        return f"https://github.com/{self.repo_owner}/{self.repo_name}/pull/{self.pr_number}"
