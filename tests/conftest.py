from datetime import UTC, datetime, timedelta

import pytest

from dora_metrics.domain.models import Commit

NOW = datetime(2026, 3, 2, 12, 0, 0, tzinfo=UTC)


def iso_ago(seconds: float, now: datetime = NOW) -> str:
    return (now - timedelta(seconds=seconds)).isoformat().replace("+00:00", "Z")


def make_commit(message: str, seconds_ago: float = 3600, sha: str = "abc1234def") -> Commit:
    return Commit(message=message, timestamp=iso_ago(seconds_ago), sha=sha, author="dev")


@pytest.fixture
def now():
    return NOW


class FakeTracker:
    """Tracker returning canned tasks keyed by id; records requested ids."""

    def __init__(self, tasks=None, errors=None):
        self.tasks = tasks or {}
        self.errors = errors or {}
        self.requested = []

    def get_task(self, task_id):
        self.requested.append(task_id)
        if task_id in self.errors:
            raise self.errors[task_id]
        return self.tasks.get(task_id)


class FakePullRequests:
    def __init__(self, pulls=None, first_commits=None, error=None):
        self.pulls = pulls or {}
        self.first_commits = first_commits or {}
        self.error = error

    def find_pull_request(self, commit_sha):
        if self.error is not None:
            raise self.error
        return self.pulls.get(commit_sha)

    def first_commit_time(self, pull_request):
        return self.first_commits.get(pull_request.number)
