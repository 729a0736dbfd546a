from datetime import timedelta

import pytest
from conftest import NOW, FakeTracker, make_commit

from dora_metrics.domain.metrics.aggregate import summarize
from dora_metrics.domain.metrics.cycle_time import (
    TASK_CREATED_FIELDS,
    cycle_time_sample,
    cycle_time_samples,
    task_created_at,
)
from dora_metrics.domain.metrics.intervals import MAX_CYCLE_TIME_SECONDS
from dora_metrics.domain.time_utils import to_unix_seconds


def iso_days_ago(days):
    return (NOW - timedelta(days=days)).isoformat()


def test_candidate_fields_in_order():
    assert TASK_CREATED_FIELDS == ("timestamp", "created", "createdAt")


def test_task_created_at_uses_first_present_field():
    task = {"timestamp": "", "created": iso_days_ago(2), "createdAt": iso_days_ago(9)}
    assert task_created_at(task) == NOW - timedelta(days=2)


def test_task_created_at_accepts_epoch_millis():
    millis = to_unix_seconds(NOW - timedelta(days=1)) * 1000
    assert task_created_at({"timestamp": millis}) == NOW - timedelta(days=1)


def test_task_created_at_invalid():
    assert task_created_at({"timestamp": "invalid-date"}) is None
    assert task_created_at({"title": "no dates"}) is None


def test_commit_without_task_is_left_out():
    tracker = FakeTracker()
    assert cycle_time_sample(make_commit("feat: no task id"), NOW, tracker) is None
    assert tracker.requested == []


def test_cycle_time_from_task_creation():
    tracker = FakeTracker(tasks={"TECH-123": {"timestamp": iso_days_ago(7)}})
    result = cycle_time_sample(make_commit("feat(TECH-123): add feature"), NOW, tracker)
    assert result.seconds == pytest.approx(7 * 86400)
    assert tracker.requested == ["TECH-123"]


@pytest.mark.parametrize(
    "tracker, reason",
    [
        (FakeTracker(), "task not found"),
        (FakeTracker(tasks={"TECH-123": {"timestamp": "invalid-date"}}), "invalid creation timestamp"),
        (FakeTracker(errors={"TECH-123": RuntimeError("502 Bad Gateway")}), "tracker error: 502 Bad Gateway"),
    ],
)
def test_non_fatal_skips(tracker, reason):
    result = cycle_time_sample(make_commit("feat(TECH-123): feature"), NOW, tracker)
    assert result.skip_reason == reason


def test_capped_at_180_days():
    tracker = FakeTracker(tasks={"TECH-123": {"timestamp": iso_days_ago(200)}})
    result = cycle_time_sample(make_commit("feat(TECH-123): feature"), NOW, tracker)
    assert result.seconds == MAX_CYCLE_TIME_SECONDS


def test_future_task_is_skipped():
    tracker = FakeTracker(tasks={"TECH-123": {"timestamp": (NOW + timedelta(seconds=1)).isoformat()}})
    assert not cycle_time_sample(make_commit("feat(TECH-123): feature"), NOW, tracker).ok


def test_mean_cycle_time_for_multiple_commits():
    tracker = FakeTracker(
        tasks={
            "TECH-1": {"timestamp": iso_days_ago(1)},
            "TECH-2": {"created": iso_days_ago(3)},
        }
    )
    commits = [
        make_commit("feat(TECH-1): feature 1", sha="abc0000"),
        make_commit("feat(TECH-2): feature 2", sha="def0000"),
        make_commit("chore: deps", sha="fed0000"),
    ]
    summary = summarize(cycle_time_samples(commits, NOW, tracker))
    assert summary.count == 2
    assert summary.mean_seconds == pytest.approx(2 * 86400)
