"""Tests for grouping decisions by integration and invoking handlers."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

from gong_core.dispatch import dispatch, group_by_integration, routed_to
from gong_core.models import Integration, PingContext, PingDecision, ReviewRequest

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
STDOUT = Integration(type="stdout")
SLACK = Integration(type="slack", params={"channel": "reviews"})
CONTEXT = PingContext(repo_owner="owner", repo_name="repo", pr_number="42")


def _decision(reviewer, integrations, should_ping=True, enabled=True):
    return PingDecision(
        request=ReviewRequest(reviewer=reviewer, requested_at=NOW),
        delay=0,
        enabled=enabled,
        integrations=list(integrations),
        should_ping=should_ping,
    )


class RecordingHandler:
    def __init__(self):
        self.calls = []

    def run(self, decisions, context, params):
        self.calls.append((decisions, context, params))


class FailingHandler:
    def run(self, decisions, context, params):
        raise RuntimeError("webhook down")


class TestGroupByIntegration:
    def test_fan_out_to_every_integration(self):
        bob = _decision("bob", [STDOUT, SLACK])
        groups = group_by_integration([bob])
        assert groups["stdout"] == [bob]
        assert groups["slack"] == [bob]
        assert groups["stdout"][0] is groups["slack"][0]

    def test_not_eligible_decisions_dropped(self):
        bob = _decision("bob", [STDOUT, SLACK], should_ping=False)
        assert group_by_integration([bob]) == {}

    def test_mixed_rules_and_globals(self):
        alice = _decision("alice", [STDOUT])
        bob = _decision("bob", [STDOUT, SLACK])
        groups = group_by_integration([alice, bob])
        assert groups == {"stdout": [alice, bob], "slack": [bob]}

    def test_insertion_order_stable(self):
        decisions = [_decision(name, [STDOUT]) for name in ("carol", "alice", "bob")]
        assert [d.request.reviewer for d in group_by_integration(decisions)["stdout"]] == ["carol", "alice", "bob"]

    def test_decision_without_integrations_not_dispatched(self):
        assert group_by_integration([_decision("alice", [])]) == {}

    def test_empty_input(self):
        assert group_by_integration([]) == {}

    def test_repeated_type_on_one_decision_routed_once(self):
        alice = _decision("alice", [STDOUT, SLACK, Integration(type="stdout", params={"template": "x"})])
        bob = _decision("bob", [STDOUT])
        groups = group_by_integration([alice, bob])
        assert groups["stdout"] == [alice, bob]
        assert groups["slack"] == [alice]

    def test_equal_but_distinct_decisions_both_kept(self):
        first = _decision("alice", [STDOUT])
        second = _decision("alice", [STDOUT])
        group = group_by_integration([first, second])["stdout"]
        assert len(group) == 2
        assert group[0] is first and group[1] is second


class TestRoutedTo:
    def test_includes_waiting_decisions(self):
        alice = _decision("alice", [STDOUT])
        bob = _decision("bob", [STDOUT], should_ping=False)
        carol = _decision("carol", [SLACK])
        assert routed_to([alice, bob, carol], "stdout") == [alice, bob]


class TestDispatch:
    def test_invokes_handler_per_group(self):
        stdout, slack = RecordingHandler(), RecordingHandler()
        alice = _decision("alice", [STDOUT])
        bob = _decision("bob", [STDOUT, SLACK])

        report = dispatch([alice, bob], {"stdout": stdout, "slack": slack}, CONTEXT)

        assert report.dispatched == ["stdout", "slack"]
        assert stdout.calls[0][0] == [alice, bob]
        assert slack.calls[0][0] == [bob]
        assert stdout.calls[0][1] is CONTEXT

    def test_handler_receives_waiting_reviewers_routed_to_it(self):
        stdout = RecordingHandler()
        alice = _decision("alice", [STDOUT])
        bob = _decision("bob", [STDOUT], should_ping=False)

        dispatch([alice, bob], {"stdout": stdout}, CONTEXT)

        assert stdout.calls[0][0] == [alice, bob]

    def test_group_with_only_waiting_reviewers_not_invoked(self):
        slack = RecordingHandler()
        bob = _decision("bob", [SLACK], should_ping=False)

        report = dispatch([bob], {"slack": slack}, CONTEXT)

        assert slack.calls == []
        assert report.dispatched == []

    def test_params_taken_from_integration(self):
        slack = RecordingHandler()
        dispatch([_decision("bob", [SLACK])], {"slack": slack}, CONTEXT)
        assert slack.calls[0][2] == {"channel": "reviews"}

    def test_unknown_integration_skipped_without_blocking_others(self, caplog):
        stdout = RecordingHandler()
        teams = Integration(type="teams")
        alice = _decision("alice", [teams, STDOUT])

        with caplog.at_level("WARNING"):
            report = dispatch([alice], {"stdout": stdout}, CONTEXT)

        assert report.skipped == ["teams"]
        assert report.dispatched == ["stdout"]
        assert len(stdout.calls) == 1
        assert "Unknown integration: teams" in caplog.text

    def test_handler_errors_collected_and_other_channels_still_run(self):
        stdout = RecordingHandler()
        alice = _decision("alice", [SLACK, STDOUT])

        report = dispatch([alice], {"slack": FailingHandler(), "stdout": stdout}, CONTEXT)

        assert isinstance(report.errors["slack"], RuntimeError)
        assert report.dispatched == ["stdout"]
        assert report.ok is False
        assert len(stdout.calls) == 1

    def test_works_with_mock_handlers(self):
        handler = MagicMock()
        decision = _decision("alice", [STDOUT])

        report = dispatch([decision], {"stdout": handler}, CONTEXT)

        handler.run.assert_called_once_with([decision], CONTEXT, {})
        assert report.ok is True

    def test_nothing_to_dispatch(self):
        report = dispatch([], {"stdout": RecordingHandler()}, CONTEXT)
        assert report.dispatched == []
        assert report.skipped == []
        assert report.errors == {}
