from __future__ import annotations

from dataclasses import dataclass
from datetime import timezone

from github import Github

from gong_core.models import ReviewRequest

COMMENT_MARKER = "<!-- gong -->"


@dataclass
class PullState:
    is_closed: bool
    is_merged: bool

    @property
    def is_open(self) -> bool:
        return not (self.is_closed or self.is_merged)


def get_repo(repo_name: str, token: str | None):
    return Github(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_pull_state(pr) -> PullState:
    merged = bool(pr.merged)
    return PullState(is_closed=pr.state == "closed" and not merged, is_merged=merged)


def _aware(dt):
    # Older PyGithub releases return naive UTC datetimes.
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _request_times(pr) -> tuple[dict, dict]:
    """Return the latest review_requested timestamp per user login and per team name."""
    users: dict = {}
    teams: dict = {}
    for event in pr.as_issue().get_timeline():
        if event.event != "review_requested":
            continue
        data = event.raw_data or {}
        created_at = _aware(event.created_at)
        team = data.get("requested_team")
        reviewer = data.get("requested_reviewer")
        if team:
            teams[team.get("name")] = created_at
        elif reviewer:
            users[reviewer.get("login")] = created_at
    return users, teams


def get_review_requests(pr) -> list[ReviewRequest]:
    """Return the pending review requests on a PR, users first then teams.

    The request time comes from the most recent review_requested timeline
    event for that reviewer, falling back to the PR creation time.
    """
    users, teams = pr.get_review_requests()
    users = list(users)
    teams = list(teams)
    if not users and not teams:
        return []

    user_times, team_times = _request_times(pr)
    fallback = _aware(pr.created_at)
    title = pr.title or ""
    author = pr.user.login if pr.user is not None else ""

    requests = [
        ReviewRequest(
            reviewer=user.login,
            requested_at=user_times.get(user.login, fallback),
            pr_title=title,
            pr_author=author,
        )
        for user in users
    ]
    requests += [
        ReviewRequest(
            reviewer=team.name,
            requested_at=team_times.get(team.name, fallback),
            is_team=True,
            pr_title=title,
            pr_author=author,
        )
        for team in teams
    ]
    return requests


def has_marker_comment(pr, marker: str = COMMENT_MARKER) -> bool:
    """Return True if any issue comment on the PR contains the marker."""
    return any(marker in (c.body or "") for c in pr.get_issue_comments())


def post_issue_comment(pr, body: str):
    return pr.create_issue_comment(body)
