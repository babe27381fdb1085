# backend/taskflow/ports/store.py
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from taskflow.domain.entities import (
    ActivityEntity,
    CategoryEntity,
    TaskEntity,
    UserEntity,
)


class TaskFlowStore(ABC):
    """
    Storage port used by the stats and streak cores and by the HTTP routes.

    Lookups of missing rows return None (or False for deletes) instead of
    raising. Ids are references only: a task may point at a category that no
    longer exists, in which case `TaskEntity.category` is None.
    """

    # -- users ---------------------------------------------------------------
    @abstractmethod
    def get_user(self, user_id: int) -> Optional[UserEntity]:
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[UserEntity]:
        pass

    @abstractmethod
    def create_user(self, data: Dict[str, Any]) -> UserEntity:
        pass

    @abstractmethod
    def update_user(self, user_id: int, changes: Dict[str, Any]) -> Optional[UserEntity]:
        pass

    # -- categories ----------------------------------------------------------
    @abstractmethod
    def list_categories(self, user_id: int) -> List[CategoryEntity]:
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[CategoryEntity]:
        pass

    @abstractmethod
    def create_category(self, data: Dict[str, Any]) -> CategoryEntity:
        pass

    @abstractmethod
    def update_category(
        self, category_id: int, changes: Dict[str, Any]
    ) -> Optional[CategoryEntity]:
        pass

    @abstractmethod
    def delete_category(self, category_id: int) -> bool:
        """Deletes the category only; tasks keep their (now dangling) id."""
        pass

    # -- tasks ---------------------------------------------------------------
    @abstractmethod
    def list_tasks(
        self,
        user_id: int,
        category_id: Optional[int] = None,
        completed: Optional[bool] = None,
        due_date: Optional[date] = None,
    ) -> List[TaskEntity]:
        pass

    @abstractmethod
    def get_task(self, task_id: int) -> Optional[TaskEntity]:
        pass

    @abstractmethod
    def create_task(self, data: Dict[str, Any]) -> TaskEntity:
        pass

    @abstractmethod
    def update_task(self, task_id: int, changes: Dict[str, Any]) -> Optional[TaskEntity]:
        pass

    @abstractmethod
    def delete_task(self, task_id: int) -> bool:
        pass

    @abstractmethod
    def mark_task_completed(
        self, task_id: int, completed_at: datetime
    ) -> Optional[TaskEntity]:
        pass

    # -- activities ----------------------------------------------------------
    @abstractmethod
    def list_activities(self, user_id: int) -> List[ActivityEntity]:
        """Newest first."""
        pass

    @abstractmethod
    def append_activity(self, data: Dict[str, Any]) -> ActivityEntity:
        pass

    # -- concurrency ---------------------------------------------------------
    @abstractmethod
    def user_lock(self, user_id: int) -> AbstractContextManager:
        """
        Serializes read-modify-write sequences on one user's state.

        Writes made inside the block become visible together when it exits.
        """
        pass
