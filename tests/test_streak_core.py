# tests/test_streak_core.py

from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from taskflow.adapters.memory_store import MemoryTaskFlowStore
from taskflow.errors import NotFound
from taskflow.streak_core import complete_task, next_streak_state

from .conftest import NOW, TODAY


class FailingActivityStore(MemoryTaskFlowStore):
    """Memory store whose activity log is down."""

    def append_activity(self, data):
        raise RuntimeError("activity log unavailable")


def _open_task(store, user_id: int, title: str = "Write report"):
    return store.create_task({"user_id": user_id, "title": title, "due_date": TODAY})


# ------------------------------
# next_streak_state
# ------------------------------
def test_first_completion_starts_streak(store, demo_user) -> None:
    state = next_streak_state(demo_user, TODAY)

    assert state == {
        "current_streak": 1,
        "longest_streak": 1,
        "total_points": 1,
        "last_task_date": TODAY,
    }


def test_completion_day_after_extends_streak(store, demo_user) -> None:
    user = store.update_user(
        demo_user.id,
        {"current_streak": 3, "longest_streak": 5, "last_task_date": TODAY - timedelta(days=1)},
    )

    state = next_streak_state(user, TODAY)

    assert state["current_streak"] == 4
    assert state["longest_streak"] == 5


def test_same_day_completion_keeps_streak(store, demo_user) -> None:
    user = store.update_user(
        demo_user.id,
        {"current_streak": 3, "longest_streak": 3, "total_points": 10, "last_task_date": TODAY},
    )

    state = next_streak_state(user, TODAY)

    assert state["current_streak"] == 3
    assert state["total_points"] == 11


def test_gap_resets_streak_to_one_and_keeps_longest(store, demo_user) -> None:
    user = store.update_user(
        demo_user.id,
        {"current_streak": 6, "longest_streak": 6, "last_task_date": TODAY - timedelta(days=3)},
    )

    state = next_streak_state(user, TODAY)

    assert state["current_streak"] == 1
    assert state["longest_streak"] == 6


# ------------------------------
# complete_task
# ------------------------------
def test_complete_task_marks_task_and_credits_user(store, demo_user) -> None:
    task = _open_task(store, demo_user.id)

    done = complete_task(store, task.id, now=NOW)

    assert done.completed is True
    assert done.completed_at == NOW

    user = store.get_user(demo_user.id)
    assert user.current_streak == 1
    assert user.longest_streak == 1
    assert user.total_points == 1
    assert user.last_task_date == TODAY


def test_complete_task_after_yesterday_increments_by_one(store, demo_user) -> None:
    store.update_user(
        demo_user.id,
        {"current_streak": 2, "longest_streak": 2, "last_task_date": TODAY - timedelta(days=1)},
    )
    task = _open_task(store, demo_user.id)

    complete_task(store, task.id, now=NOW)

    user = store.get_user(demo_user.id)
    assert user.current_streak == 3
    assert user.longest_streak == 3


def test_complete_task_after_three_day_gap_resets(store, demo_user) -> None:
    store.update_user(
        demo_user.id,
        {"current_streak": 5, "longest_streak": 8, "last_task_date": TODAY - timedelta(days=3)},
    )
    task = _open_task(store, demo_user.id)

    complete_task(store, task.id, now=NOW)

    user = store.get_user(demo_user.id)
    assert user.current_streak == 1
    assert user.longest_streak == 8


def test_recompleting_is_a_no_op(store, demo_user) -> None:
    task = _open_task(store, demo_user.id)
    first = complete_task(store, task.id, now=NOW)

    again = complete_task(store, task.id, now=NOW + timedelta(days=1))

    assert again.completed_at == first.completed_at
    user = store.get_user(demo_user.id)
    assert user.total_points == 1
    assert user.current_streak == 1
    assert len(store.list_activities(demo_user.id)) == 1


def test_complete_missing_task_raises_not_found(store) -> None:
    with pytest.raises(NotFound):
        complete_task(store, 999, now=NOW)


def test_missing_owner_still_completes_task(store) -> None:
    task = store.create_task({"user_id": 77, "title": "Orphan"})

    done = complete_task(store, task.id, now=NOW)

    assert done.completed is True
    assert store.get_user(77) is None


def test_activity_failure_does_not_undo_completion() -> None:
    store = FailingActivityStore()
    user = store.create_user({"first_name": "A", "last_name": "B", "email": "a@b.c"})
    task = _open_task(store, user.id)

    done = complete_task(store, task.id, now=NOW)

    assert done.completed is True
    assert store.get_task(task.id).completed is True
    assert store.get_user(user.id).total_points == 1


def test_completion_activity_is_recorded(store, demo_user) -> None:
    task = _open_task(store, demo_user.id, title="Morning workout")

    complete_task(store, task.id, now=NOW)

    [activity] = store.list_activities(demo_user.id)
    assert activity.type == "task_completed"
    assert activity.text == "Completed 'Morning workout' task"
    assert activity.timestamp == NOW


def test_seventh_day_emits_streak_milestone(store, demo_user) -> None:
    store.update_user(
        demo_user.id,
        {"current_streak": 6, "longest_streak": 6, "last_task_date": TODAY - timedelta(days=1)},
    )
    task = _open_task(store, demo_user.id)

    complete_task(store, task.id, now=NOW)

    types = [a.type for a in store.list_activities(demo_user.id)]
    assert sorted(types) == ["streak_milestone", "task_completed"]


def test_longest_streak_never_decreases_over_a_sequence(store, demo_user) -> None:
    # complete on days 0,1,2, skip, 5,6 then same-day repeats
    offsets = [0, 1, 2, 5, 6, 6, 6, 10]
    previous_longest = 0
    for i, offset in enumerate(offsets):
        task = _open_task(store, demo_user.id, title=f"t{i}")
        complete_task(store, task.id, now=NOW + timedelta(days=offset))

        user = store.get_user(demo_user.id)
        assert user.longest_streak >= previous_longest
        assert user.longest_streak >= user.current_streak
        previous_longest = user.longest_streak

    user = store.get_user(demo_user.id)
    assert user.longest_streak == 3
    assert user.current_streak == 1
    assert user.total_points == len(offsets)


def test_concurrent_completions_of_one_task_credit_once(store, demo_user) -> None:
    task = _open_task(store, demo_user.id)
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        complete_task(store, task.id, now=NOW)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    user = store.get_user(demo_user.id)
    assert user.total_points == 1
    assert user.current_streak == 1
