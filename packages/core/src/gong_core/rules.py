"""Rule matching and ping resolution.

For each review request the first rule whose patterns all match overrides the
global delay and enabled flag, and the global integrations when the rule lists
its own. The resolver then decides whether the reviewer is due a ping:

    should_ping = enabled and (delay <= 0 or elapsed_seconds >= delay)
"""

from __future__ import annotations

import fnmatch
import logging
from datetime import datetime, timezone
from typing import Iterable, Sequence

from gong_core.models import Defaults, PingDecision, ReviewRequest, Rule

logger = logging.getLogger(__name__)


def _is_valid_pattern(pattern: str) -> bool:
    """Return False for patterns with an unterminated character class."""
    i = 0
    n = len(pattern)
    while i < n:
        if pattern[i] == "[":
            j = i + 1
            if j < n and pattern[j] == "!":
                j += 1
            # A "]" right after "[" or "[!" is a literal member of the class.
            if j < n and pattern[j] == "]":
                j += 1
            while j < n and pattern[j] != "]":
                j += 1
            if j >= n:
                return False
            i = j
        i += 1
    return True


def glob_match(pattern: str, value: str) -> bool:
    """Case-sensitive shell glob match. Malformed patterns never match."""
    if not pattern or not value:
        return False
    if not _is_valid_pattern(pattern):
        logger.debug("Ignoring malformed pattern %r", pattern)
        return False
    return fnmatch.fnmatchcase(value, pattern)


def rule_applies(rule: Rule, request: ReviewRequest) -> bool:
    """AND together the match results of every non-empty pattern on the rule."""
    checks = []
    if rule.match_name:
        checks.append(glob_match(rule.match_name, request.reviewer))
    if rule.match_title:
        checks.append(glob_match(rule.match_title, request.pr_title))
    if rule.match_author:
        logger.debug("Checking if PR author %r matches pattern %r", request.pr_author, rule.match_author)
        checks.append(glob_match(rule.match_author, request.pr_author))
    return bool(checks) and all(checks)


def match_rule(request: ReviewRequest, rules: Iterable[Rule]) -> Rule | None:
    """Return the first applicable rule, in list order, or None."""
    for rule in rules:
        if rule_applies(rule, request):
            return rule
    return None


def resolve(request: ReviewRequest, rule: Rule | None, defaults: Defaults, now: datetime) -> PingDecision:
    """Combine the global defaults with the matched rule into a PingDecision."""
    delay = defaults.delay
    enabled = defaults.enabled
    integrations = list(defaults.integrations)

    if rule is not None:
        delay = rule.delay
        enabled = rule.enabled
        # An empty list on the rule inherits the global integrations.
        if rule.integrations:
            integrations = list(rule.integrations)

    elapsed = (now - request.requested_at).total_seconds()
    should_ping = enabled and (delay <= 0 or elapsed >= delay)

    return PingDecision(
        request=request,
        delay=delay,
        enabled=enabled,
        integrations=integrations,
        should_ping=should_ping,
    )


def apply_rules(
    requests: Sequence[ReviewRequest],
    rules: Sequence[Rule],
    defaults: Defaults,
    now: datetime | None = None,
) -> list[PingDecision]:
    """Resolve one PingDecision per review request, preserving input order."""
    if now is None:
        now = datetime.now(timezone.utc)

    decisions = []
    for request in requests:
        rule = match_rule(request, rules)
        if rule is not None:
            logger.debug("Reviewer %s matched rule %s", request.reviewer, rule)
        decision = resolve(request, rule, defaults, now)
        logger.debug(
            "Reviewer %s: delay=%ds enabled=%s should_ping=%s integrations=%s",
            request.reviewer,
            decision.delay,
            decision.enabled,
            decision.should_ping,
            decision.integration_types(),
        )
        decisions.append(decision)
    return decisions
