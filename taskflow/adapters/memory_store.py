# backend/taskflow/adapters/memory_store.py
import itertools
import logging
import threading
from contextlib import contextmanager
from dataclasses import fields, replace
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from taskflow.domain.entities import (
    ActivityEntity,
    CategoryEntity,
    TaskEntity,
    UserEntity,
)
from taskflow.ports.store import TaskFlowStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.utcnow()


def _field_names(entity_cls) -> set:
    return {f.name for f in fields(entity_cls)}


_USER_FIELDS = _field_names(UserEntity) - {"id"}
_CATEGORY_FIELDS = _field_names(CategoryEntity) - {"id"}
_TASK_FIELDS = _field_names(TaskEntity) - {"id", "category"}
_ACTIVITY_FIELDS = _field_names(ActivityEntity) - {"id"}


def _pick(data: Dict[str, Any], allowed: set) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k in allowed}


class MemoryTaskFlowStore(TaskFlowStore):
    """
    Process-local store.

    Every entity kind has its own id sequence. Returned entities are copies,
    so callers cannot mutate stored state behind the store's back.

    Thread-safety:
    - one lock guards the maps and id sequences
    - `user_lock` hands out one re-entrant lock per user id
    """

    def __init__(self) -> None:
        self._users: Dict[int, UserEntity] = {}
        self._categories: Dict[int, CategoryEntity] = {}
        self._tasks: Dict[int, TaskEntity] = {}
        self._activities: Dict[int, ActivityEntity] = {}

        self._ids = {
            "users": itertools.count(1),
            "categories": itertools.count(1),
            "tasks": itertools.count(1),
            "activities": itertools.count(1),
        }
        self._lock = threading.RLock()
        self._user_locks: Dict[int, threading.RLock] = {}

    def _next_id(self, kind: str) -> int:
        with self._lock:
            return next(self._ids[kind])

    # -- users ---------------------------------------------------------------
    def get_user(self, user_id: int) -> Optional[UserEntity]:
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user else None

    def get_user_by_email(self, email: str) -> Optional[UserEntity]:
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return replace(user)
        return None

    def create_user(self, data: Dict[str, Any]) -> UserEntity:
        values = _pick(data, _USER_FIELDS)
        values.setdefault("created_at", _utcnow())
        user = UserEntity(id=self._next_id("users"), **values)
        with self._lock:
            self._users[user.id] = user
        return replace(user)

    def update_user(self, user_id: int, changes: Dict[str, Any]) -> Optional[UserEntity]:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            updated = replace(user, **_pick(changes, _USER_FIELDS))
            self._users[user_id] = updated
            return replace(updated)

    # -- categories ----------------------------------------------------------
    def list_categories(self, user_id: int) -> List[CategoryEntity]:
        with self._lock:
            return [replace(c) for c in self._categories.values() if c.user_id == user_id]

    def get_category(self, category_id: int) -> Optional[CategoryEntity]:
        with self._lock:
            category = self._categories.get(category_id)
            return replace(category) if category else None

    def create_category(self, data: Dict[str, Any]) -> CategoryEntity:
        category = CategoryEntity(
            id=self._next_id("categories"), **_pick(data, _CATEGORY_FIELDS)
        )
        with self._lock:
            self._categories[category.id] = category
        return replace(category)

    def update_category(
        self, category_id: int, changes: Dict[str, Any]
    ) -> Optional[CategoryEntity]:
        with self._lock:
            category = self._categories.get(category_id)
            if category is None:
                return None
            updated = replace(category, **_pick(changes, _CATEGORY_FIELDS))
            self._categories[category_id] = updated
            return replace(updated)

    def delete_category(self, category_id: int) -> bool:
        with self._lock:
            return self._categories.pop(category_id, None) is not None

    # -- tasks ---------------------------------------------------------------
    def _with_category(self, task: TaskEntity) -> TaskEntity:
        category = None
        if task.category_id is not None:
            category = self._categories.get(task.category_id)
        return replace(task, category=replace(category) if category else None)

    def list_tasks(
        self,
        user_id: int,
        category_id: Optional[int] = None,
        completed: Optional[bool] = None,
        due_date: Optional[date] = None,
    ) -> List[TaskEntity]:
        with self._lock:
            rows = [t for t in self._tasks.values() if t.user_id == user_id]
            if category_id is not None:
                rows = [t for t in rows if t.category_id == category_id]
            if completed is not None:
                rows = [t for t in rows if t.completed == completed]
            if due_date is not None:
                rows = [t for t in rows if t.due_date == due_date]
            return [self._with_category(t) for t in rows]

    def get_task(self, task_id: int) -> Optional[TaskEntity]:
        with self._lock:
            task = self._tasks.get(task_id)
            return self._with_category(task) if task else None

    def create_task(self, data: Dict[str, Any]) -> TaskEntity:
        values = _pick(data, _TASK_FIELDS)
        values.setdefault("created_at", _utcnow())
        task = TaskEntity(id=self._next_id("tasks"), **values)
        with self._lock:
            self._tasks[task.id] = task
            return self._with_category(task)

    def update_task(self, task_id: int, changes: Dict[str, Any]) -> Optional[TaskEntity]:
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return None
            updated = replace(task, **_pick(changes, _TASK_FIELDS))
            self._tasks[task_id] = updated
            return self._with_category(updated)

    def delete_task(self, task_id: int) -> bool:
        with self._lock:
            return self._tasks.pop(task_id, None) is not None

    def mark_task_completed(
        self, task_id: int, completed_at: datetime
    ) -> Optional[TaskEntity]:
        return self.update_task(
            task_id, {"completed": True, "completed_at": completed_at}
        )

    # -- activities ----------------------------------------------------------
    def list_activities(self, user_id: int) -> List[ActivityEntity]:
        with self._lock:
            rows = [replace(a) for a in self._activities.values() if a.user_id == user_id]
        rows.sort(key=lambda a: (a.timestamp, a.id), reverse=True)
        return rows

    def append_activity(self, data: Dict[str, Any]) -> ActivityEntity:
        values = _pick(data, _ACTIVITY_FIELDS)
        if values.get("timestamp") is None:
            values["timestamp"] = _utcnow()
        activity = ActivityEntity(id=self._next_id("activities"), **values)
        with self._lock:
            self._activities[activity.id] = activity
        logger.debug("activity %s appended for user %s", activity.type, activity.user_id)
        return replace(activity)

    # -- concurrency ---------------------------------------------------------
    @contextmanager
    def user_lock(self, user_id: int):
        with self._lock:
            lock = self._user_locks.setdefault(user_id, threading.RLock())
        with lock:
            yield
