# backend/taskflow/adapters/sql_store.py
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from taskflow.domain.entities import (
    ActivityEntity,
    CategoryEntity,
    TaskEntity,
    UserEntity,
)
from taskflow.models.activity import Activity as ActivityModel
from taskflow.models.task import Category as CategoryModel
from taskflow.models.task import Task as TaskModel
from taskflow.models.user import User as UserModel
from taskflow.ports.store import TaskFlowStore

# nesting depth of user_lock() blocks, kept per scoped session
_LOCK_DEPTH = "taskflow.user_lock_depth"

_USER_COLUMNS = {
    "first_name",
    "last_name",
    "email",
    "profile_image",
    "current_streak",
    "longest_streak",
    "total_points",
    "last_task_date",
}
_CATEGORY_COLUMNS = {"user_id", "name", "color"}
_TASK_COLUMNS = {
    "user_id",
    "category_id",
    "title",
    "description",
    "start_date",
    "due_date",
    "completed",
    "completed_at",
}
_ACTIVITY_COLUMNS = {"user_id", "text", "type", "timestamp"}


def _assign(model, changes: Dict[str, Any], allowed: set) -> None:
    for key, value in changes.items():
        if key in allowed:
            setattr(model, key, value)


# ------------------------------
# Model -> entity
# ------------------------------
def _user_to_entity(m: UserModel) -> UserEntity:
    return UserEntity(
        id=m.id,
        first_name=m.first_name,
        last_name=m.last_name or "",
        email=m.email,
        profile_image=m.profile_image,
        current_streak=int(m.current_streak or 0),
        longest_streak=int(m.longest_streak or 0),
        total_points=int(m.total_points or 0),
        last_task_date=m.last_task_date,
        created_at=m.created_at,
    )


def _category_to_entity(m: CategoryModel) -> CategoryEntity:
    return CategoryEntity(id=m.id, user_id=m.user_id, name=m.name, color=m.color)


def _task_to_entity(m: TaskModel, category: Optional[CategoryModel]) -> TaskEntity:
    return TaskEntity(
        id=m.id,
        user_id=m.user_id,
        title=m.title,
        description=m.description,
        category_id=m.category_id,
        start_date=m.start_date,
        due_date=m.due_date,
        completed=bool(m.completed),
        completed_at=m.completed_at,
        created_at=m.created_at,
        category=_category_to_entity(category) if category else None,
    )


def _activity_to_entity(m: ActivityModel) -> ActivityEntity:
    return ActivityEntity(
        id=m.id, user_id=m.user_id, text=m.text, type=m.type, timestamp=m.timestamp
    )


class SqlTaskFlowStore(TaskFlowStore):
    """
    Flask-SQLAlchemy backed store.

    Each write commits on its own, except inside `user_lock()` where writes
    are only flushed and the whole block commits (or rolls back) on exit.
    """

    def __init__(self, db) -> None:
        self._db = db

    @property
    def _session(self):
        return self._db.session()

    def _in_lock(self) -> bool:
        return self._session.info.get(_LOCK_DEPTH, 0) > 0

    def _commit(self) -> None:
        try:
            if self._in_lock():
                self._session.flush()
            else:
                self._session.commit()
        except Exception:
            self._session.rollback()
            raise

    def _get(self, model, ident):
        # inside user_lock() rows are read with FOR UPDATE: a plain read would
        # see the transaction's snapshot, not what the previous holder committed
        return self._session.get(
            model, ident, populate_existing=True, with_for_update=self._in_lock()
        )

    # -- users ---------------------------------------------------------------
    def get_user(self, user_id: int) -> Optional[UserEntity]:
        m = self._get(UserModel, user_id)
        return _user_to_entity(m) if m else None

    def get_user_by_email(self, email: str) -> Optional[UserEntity]:
        m = UserModel.query.filter_by(email=email).first()
        return _user_to_entity(m) if m else None

    def create_user(self, data: Dict[str, Any]) -> UserEntity:
        m = UserModel()
        _assign(m, data, _USER_COLUMNS)
        self._session.add(m)
        self._commit()
        return _user_to_entity(m)

    def update_user(self, user_id: int, changes: Dict[str, Any]) -> Optional[UserEntity]:
        m = self._get(UserModel, user_id)
        if m is None:
            return None
        _assign(m, changes, _USER_COLUMNS)
        self._commit()
        return _user_to_entity(m)

    # -- categories ----------------------------------------------------------
    def list_categories(self, user_id: int) -> List[CategoryEntity]:
        rows = (
            CategoryModel.query.filter_by(user_id=user_id)
            .order_by(CategoryModel.id.asc())
            .all()
        )
        return [_category_to_entity(c) for c in rows]

    def get_category(self, category_id: int) -> Optional[CategoryEntity]:
        m = self._get(CategoryModel, category_id)
        return _category_to_entity(m) if m else None

    def create_category(self, data: Dict[str, Any]) -> CategoryEntity:
        m = CategoryModel()
        _assign(m, data, _CATEGORY_COLUMNS)
        self._session.add(m)
        self._commit()
        return _category_to_entity(m)

    def update_category(
        self, category_id: int, changes: Dict[str, Any]
    ) -> Optional[CategoryEntity]:
        m = self._get(CategoryModel, category_id)
        if m is None:
            return None
        _assign(m, changes, _CATEGORY_COLUMNS)
        self._commit()
        return _category_to_entity(m)

    def delete_category(self, category_id: int) -> bool:
        m = self._get(CategoryModel, category_id)
        if m is None:
            return False
        self._session.delete(m)
        self._commit()
        return True

    # -- tasks ---------------------------------------------------------------
    def _categories_for(self, tasks: Iterable[TaskModel]) -> Dict[int, CategoryModel]:
        ids = {t.category_id for t in tasks if t.category_id is not None}
        if not ids:
            return {}
        rows = CategoryModel.query.filter(CategoryModel.id.in_(ids)).all()
        return {c.id: c for c in rows}

    def _to_entities(self, rows: List[TaskModel]) -> List[TaskEntity]:
        categories = self._categories_for(rows)
        return [_task_to_entity(t, categories.get(t.category_id)) for t in rows]

    def list_tasks(
        self,
        user_id: int,
        category_id: Optional[int] = None,
        completed: Optional[bool] = None,
        due_date: Optional[date] = None,
    ) -> List[TaskEntity]:
        q = TaskModel.query.filter(TaskModel.user_id == user_id)
        if category_id is not None:
            q = q.filter(TaskModel.category_id == category_id)
        if completed is not None:
            q = q.filter(TaskModel.completed.is_(completed))
        if due_date is not None:
            q = q.filter(TaskModel.due_date == due_date)

        rows = q.order_by(TaskModel.id.asc()).all()
        return self._to_entities(rows)

    def get_task(self, task_id: int) -> Optional[TaskEntity]:
        m = self._get(TaskModel, task_id)
        if m is None:
            return None
        return self._to_entities([m])[0]

    def create_task(self, data: Dict[str, Any]) -> TaskEntity:
        m = TaskModel(completed=False)
        _assign(m, data, _TASK_COLUMNS)
        self._session.add(m)
        self._commit()
        return self._to_entities([m])[0]

    def update_task(self, task_id: int, changes: Dict[str, Any]) -> Optional[TaskEntity]:
        m = self._get(TaskModel, task_id)
        if m is None:
            return None
        _assign(m, changes, _TASK_COLUMNS)
        self._commit()
        return self._to_entities([m])[0]

    def delete_task(self, task_id: int) -> bool:
        m = self._get(TaskModel, task_id)
        if m is None:
            return False
        self._session.delete(m)
        self._commit()
        return True

    def mark_task_completed(
        self, task_id: int, completed_at: datetime
    ) -> Optional[TaskEntity]:
        return self.update_task(
            task_id, {"completed": True, "completed_at": completed_at}
        )

    # -- activities ----------------------------------------------------------
    def list_activities(self, user_id: int) -> List[ActivityEntity]:
        rows = (
            ActivityModel.query.filter_by(user_id=user_id)
            .order_by(ActivityModel.timestamp.desc(), ActivityModel.id.desc())
            .all()
        )
        return [_activity_to_entity(a) for a in rows]

    def append_activity(self, data: Dict[str, Any]) -> ActivityEntity:
        m = ActivityModel(timestamp=data.get("timestamp") or datetime.utcnow())
        _assign(m, data, _ACTIVITY_COLUMNS - {"timestamp"})
        self._session.add(m)
        self._commit()
        return _activity_to_entity(m)

    # -- concurrency ---------------------------------------------------------
    @contextmanager
    def user_lock(self, user_id: int):
        session = self._session
        depth = session.info.get(_LOCK_DEPTH, 0)
        if depth == 0:
            # close any read transaction opened before the lock so its
            # snapshot does not outlive it; pending writes are kept
            pending = session.new or session.dirty or session.deleted
            if session.in_transaction() and not pending:
                session.commit()
            # row lock on MySQL/Postgres; SQLite serializes writers on its own
            (
                session.query(UserModel)
                .filter(UserModel.id == user_id)
                .with_for_update()
                .populate_existing()
                .first()
            )

        session.info[_LOCK_DEPTH] = depth + 1
        try:
            yield
        except Exception:
            session.info[_LOCK_DEPTH] = depth
            if depth == 0:
                session.rollback()
            raise
        session.info[_LOCK_DEPTH] = depth
        if depth == 0:
            self._commit()
