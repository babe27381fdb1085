# tests/test_stats_core.py

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from taskflow.domain.entities import HeatmapData, TaskEntity, UserEntity
from taskflow.errors import InvalidRange
from taskflow.stats_core import (
    MAX_HEATMAP_DAYS,
    completion_day,
    compute_heatmap,
    compute_user_stats,
    parse_date_range,
)

from .conftest import TODAY


def _task(task_id: int, due: date | None = None, completed: bool = False, completed_at=None):
    return TaskEntity(
        id=task_id,
        user_id=1,
        title=f"task {task_id}",
        due_date=due,
        completed=completed,
        completed_at=completed_at,
    )


def _user(**kw) -> UserEntity:
    base = dict(id=1, first_name="Sarah", last_name="Johnson", email="s@example.com")
    base.update(kw)
    return UserEntity(**base)


# ------------------------------
# compute_user_stats
# ------------------------------
def test_stats_for_empty_task_list_are_zero() -> None:
    stats = compute_user_stats([], None, today=TODAY)

    assert stats.tasks_today == 0
    assert stats.upcoming_tasks == 0
    assert stats.current_streak == 0
    assert stats.total_points == 0


def test_today_and_upcoming_do_not_overlap() -> None:
    tasks = [
        _task(1, TODAY),
        _task(2, TODAY),
        _task(3, TODAY + timedelta(days=1)),
        _task(4, TODAY + timedelta(days=6)),
        _task(5, TODAY + timedelta(days=7)),  # outside the window
        _task(6, TODAY - timedelta(days=1)),  # overdue, not counted
        _task(7, None),  # no due date
    ]

    stats = compute_user_stats(tasks, _user(), today=TODAY)

    assert stats.tasks_today == 2
    assert stats.upcoming_tasks == 2
    assert stats.tasks_today + stats.upcoming_tasks <= len(tasks)


def test_completed_tasks_are_not_counted() -> None:
    tasks = [
        _task(1, TODAY, completed=True, completed_at=datetime(2024, 3, 15, 8)),
        _task(2, TODAY + timedelta(days=2), completed=True, completed_at=datetime(2024, 3, 15, 8)),
        _task(3, TODAY + timedelta(days=2)),
    ]

    stats = compute_user_stats(tasks, _user(), today=TODAY)

    assert stats.tasks_today == 0
    assert stats.upcoming_tasks == 1


def test_streak_and_points_are_copied_from_user() -> None:
    user = _user(current_streak=4, longest_streak=9, total_points=42)

    stats = compute_user_stats([], user, today=TODAY)

    assert stats.current_streak == 4
    assert stats.total_points == 42
    assert stats.to_dict() == {
        "tasks_today": 0,
        "upcoming_tasks": 0,
        "current_streak": 4,
        "total_points": 42,
    }


# ------------------------------
# compute_heatmap
# ------------------------------
def test_heatmap_empty_tasks_is_dense_zero_range() -> None:
    out = compute_heatmap([], "2024-01-01", "2024-01-03")

    assert [h.to_dict() for h in out] == [
        {"date": "2024-01-01", "count": 0},
        {"date": "2024-01-02", "count": 0},
        {"date": "2024-01-03", "count": 0},
    ]


def test_heatmap_inverted_range_is_empty() -> None:
    assert compute_heatmap([], "2024-01-05", "2024-01-01") == []


def test_heatmap_single_day_range() -> None:
    out = compute_heatmap([], date(2024, 2, 29), date(2024, 2, 29))

    assert out == [HeatmapData(date=date(2024, 2, 29), count=0)]


def test_heatmap_buckets_completions_per_day() -> None:
    tasks = [
        _task(1, completed=True, completed_at=datetime(2024, 1, 2, 8, 0)),
        _task(2, completed=True, completed_at=datetime(2024, 1, 2, 23, 59)),
        _task(3, completed=True, completed_at=datetime(2024, 1, 3, 0, 1)),
        _task(4, completed=True, completed_at=datetime(2023, 12, 31, 12)),  # before range
        _task(5, completed=False, completed_at=None),
        _task(6, completed=True, completed_at=None),  # no timestamp, ignored
    ]

    out = compute_heatmap(tasks, "2024-01-01", "2024-01-04")

    assert [(h.date.isoformat(), h.count) for h in out] == [
        ("2024-01-01", 0),
        ("2024-01-02", 2),
        ("2024-01-03", 1),
        ("2024-01-04", 0),
    ]


def test_heatmap_reaches_last_representable_day() -> None:
    out = compute_heatmap([], "9999-12-30", "9999-12-31")

    assert [h.date for h in out] == [date(9999, 12, 30), date(9999, 12, 31)]


def test_heatmap_length_matches_range_and_is_sorted() -> None:
    tasks = [
        _task(i, completed=True, completed_at=datetime(2024, 1, 1) + timedelta(days=i * 3))
        for i in range(20)
    ]

    out = compute_heatmap(tasks, "2024-01-01", "2024-03-31")

    assert len(out) == 91
    days = [h.date for h in out]
    assert days == sorted(days)
    assert days[0] == date(2024, 1, 1)
    assert days[-1] == date(2024, 3, 31)


def test_heatmap_uses_utc_day_of_aware_timestamps() -> None:
    # 23:30 at UTC-5 on Jan 1 is already Jan 2 in UTC
    local = timezone(timedelta(hours=-5))
    aware = datetime(2024, 1, 1, 23, 30, tzinfo=local)

    assert completion_day(aware) == date(2024, 1, 2)

    out = compute_heatmap(
        [_task(1, completed=True, completed_at=aware)], "2024-01-01", "2024-01-02"
    )
    assert [h.count for h in out] == [0, 1]


# ------------------------------
# parse_date_range
# ------------------------------
@pytest.mark.parametrize(
    "start,end",
    [
        (None, "2024-01-01"),
        ("2024-01-01", ""),
        ("yesterday", "2024-01-01"),
        ("2024-13-01", "2024-12-31"),
    ],
)
def test_parse_date_range_rejects_missing_or_malformed(start, end) -> None:
    with pytest.raises(InvalidRange):
        parse_date_range(start, end)


def test_parse_date_range_accepts_iso_strings_and_dates() -> None:
    assert parse_date_range("2024-01-01", date(2024, 1, 31)) == (
        date(2024, 1, 1),
        date(2024, 1, 31),
    )


def test_parse_date_range_caps_span() -> None:
    start = date(2020, 1, 1)
    longest = start + timedelta(days=MAX_HEATMAP_DAYS - 1)

    assert parse_date_range(start, longest) == (start, longest)
    with pytest.raises(InvalidRange):
        parse_date_range(start, longest + timedelta(days=1))
    with pytest.raises(InvalidRange):
        parse_date_range("0001-01-01", "9999-12-31")
