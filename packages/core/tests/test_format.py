"""Tests for duration formatting and template data preparation."""

from datetime import datetime, timedelta, timezone

import pytest

from gong_core.models import PingContext, PingDecision, ReviewRequest
from gong_core.utils.format import format_duration, prepare_template_data, reviewer_label

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestFormatDuration:
    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (30, "just now"),
            (45 * 60, "45m"),
            (5 * 3600, "5h"),
            (48 * 3600, "2d"),
            (50 * 3600, "2d 2h"),
            (0, "just now"),
            (-7200, "just now"),
        ],
    )
    def test_format(self, seconds, expected):
        assert format_duration(seconds) == expected


class TestReviewerLabel:
    def test_user(self):
        assert reviewer_label(ReviewRequest(reviewer="alice", requested_at=NOW)) == "alice"

    def test_team(self):
        assert reviewer_label(ReviewRequest(reviewer="core", requested_at=NOW, is_team=True)) == "core (team)"


def _decisions():
    return [
        PingDecision(
            request=ReviewRequest(reviewer="user1", requested_at=NOW - timedelta(hours=24)),
            delay=300,
            enabled=True,
            should_ping=True,
        ),
        PingDecision(
            request=ReviewRequest(reviewer="team1", requested_at=NOW - timedelta(hours=48), is_team=True),
            delay=600,
            enabled=False,
            should_ping=False,
        ),
        PingDecision(
            request=ReviewRequest(reviewer="carol", requested_at=NOW - timedelta(minutes=20)),
            delay=3600,
            enabled=True,
            should_ping=False,
        ),
    ]


class TestPrepareTemplateData:
    def test_full_info(self):
        data = prepare_template_data(_decisions(), include_full_info=True, now=NOW)
        assert data.active_reviewers == ["user1 (1d ago, delay: 300s)"]
        assert data.disabled_reviewers == [
            "team1 (team) (2d ago, delay: 600s), status: disabled",
            "carol (just now ago, delay: 3600s), status: waiting",
        ]

    def test_names_only(self):
        data = prepare_template_data(_decisions(), now=NOW)
        assert data.active_reviewers == ["user1"]
        assert len(data.disabled_reviewers) == 2
        assert "team1 (team)" in data.disabled_reviewers[0]

    def test_elapsed_rounded_to_nearest_hour(self):
        decision = PingDecision(
            request=ReviewRequest(reviewer="alice", requested_at=NOW - timedelta(hours=2, minutes=40)),
            delay=0,
            enabled=True,
            should_ping=True,
        )
        data = prepare_template_data([decision], include_full_info=True, now=NOW)
        assert data.active_reviewers == ["alice (3h ago, delay: 0s)"]

    def test_context_fields(self):
        context = PingContext(repo_owner="owner", repo_name="repo", pr_number="123")
        data = prepare_template_data(_decisions(), context, now=NOW)
        assert data.repo_owner == "owner"
        assert data.repo_name == "repo"
        assert data.pr_number == "123"
        assert data.pr_url == "https://github.com/owner/repo/pull/123"

    def test_empty(self):
        data = prepare_template_data([], now=NOW)
        assert data.active_reviewers == []
        assert data.disabled_reviewers == []

    def test_as_dict_exposes_template_names(self):
        data = prepare_template_data(_decisions(), now=NOW).as_dict()
        assert set(data) >= {"active_reviewers", "disabled_reviewers", "pr_url", "decisions"}
