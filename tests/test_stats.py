from datetime import datetime, timezone

from lazytask.core import calculate_stats

from conftest import make_task


def test_counts_by_status_and_priority(sample_tasks):
    stats = calculate_stats(sample_tasks, now=datetime(2024, 3, 1, tzinfo=timezone.utc))
    assert stats.total == 4
    assert stats.by_status == {"todo": 2, "in-progress": 1, "done": 1}
    assert stats.by_priority == {"low": 1, "medium": 1, "high": 1, "critical": 1}
    assert stats.completion_rate == 25


def test_overdue_ignores_done_and_undated(sample_tasks):
    stats = calculate_stats(sample_tasks, now=datetime(2024, 3, 1, tzinfo=timezone.utc))
    assert stats.overdue == 1


def test_recent_activity_counts_last_seven_days(sample_tasks):
    stats = calculate_stats(sample_tasks, now=datetime(2024, 1, 3, tzinfo=timezone.utc))
    assert stats.recent_activity == 4
    assert stats.overdue == 0
    later = calculate_stats(sample_tasks, now=datetime(2024, 3, 1, tzinfo=timezone.utc))
    assert later.recent_activity == 0


def test_top_tags_are_most_common_first():
    tasks = [
        make_task(1, tags=["a", "b"]),
        make_task(2, tags=["b"]),
        make_task(3, tags=["c", "b", "a"]),
    ]
    assert calculate_stats(tasks).top_tags == [("b", 3), ("a", 2), ("c", 1)]


def test_empty_list():
    stats = calculate_stats([])
    assert stats.total == 0
    assert stats.completion_rate == 0
    assert stats.top_tags == []
