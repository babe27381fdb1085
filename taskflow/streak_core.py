# backend/taskflow/streak_core.py
import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional

from .domain.entities import TaskEntity, UserEntity
from .errors import NotFound
from .ports.store import TaskFlowStore

logger = logging.getLogger(__name__)

POINTS_PER_COMPLETION = 1
STREAK_MILESTONE_DAYS = 7


def next_streak_state(user: UserEntity, today: date) -> Dict[str, Any]:
    """
    User fields after one completion on `today`.

    Same day keeps the streak, the day after extends it by one, any longer
    gap (or no previous completion) restarts it at 1.
    """
    streak = int(user.current_streak or 0)
    last = user.last_task_date

    if last != today:
        if last == today - timedelta(days=1):
            streak += 1
        else:
            streak = 1

    return {
        "current_streak": streak,
        "longest_streak": max(int(user.longest_streak or 0), streak),
        "total_points": int(user.total_points or 0) + POINTS_PER_COMPLETION,
        "last_task_date": today,
    }


def _append_activity_safely(store: TaskFlowStore, entry: Dict[str, Any]) -> None:
    try:
        store.append_activity(entry)
    except Exception:
        logger.exception(
            "failed to append %s activity for user %s",
            entry.get("type"),
            entry.get("user_id"),
        )


def complete_task(
    store: TaskFlowStore, task_id: int, now: Optional[datetime] = None
) -> TaskEntity:
    """
    Completes a task and credits its owner.

    - NotFound if the task does not exist
    - completing an already completed task returns it unchanged
    - a missing owner only skips the streak/points update
    - activity entries are best effort, failures are logged
    """
    now = now or datetime.utcnow()
    today = now.date()

    task = store.get_task(task_id)
    if task is None:
        raise NotFound("task not found")

    user_before: Optional[UserEntity] = None
    user_after: Optional[UserEntity] = None

    with store.user_lock(task.user_id):
        # re-read under the lock, a concurrent request may have completed it
        task = store.get_task(task_id)
        if task is None:
            raise NotFound("task not found")
        if task.completed:
            logger.info("task %s already completed, nothing to do", task_id)
            return task

        task = store.mark_task_completed(task_id, now)
        if task is None:
            raise NotFound("task not found")

        user_before = store.get_user(task.user_id)
        if user_before is None:
            logger.warning(
                "task %s completed but owner %s is missing, streak not updated",
                task_id,
                task.user_id,
            )
        else:
            user_after = store.update_user(
                user_before.id, next_streak_state(user_before, today)
            )

    _append_activity_safely(
        store,
        {
            "user_id": task.user_id,
            "text": f"Completed '{task.title}' task",
            "type": "task_completed",
            "timestamp": now,
        },
    )

    if user_before and user_after:
        streak = user_after.current_streak
        if streak > user_before.current_streak and streak % STREAK_MILESTONE_DAYS == 0:
            _append_activity_safely(
                store,
                {
                    "user_id": user_after.id,
                    "text": f"Reached {streak}-day streak milestone!",
                    "type": "streak_milestone",
                    "timestamp": now,
                },
            )

    return task
