# backend/taskflow/domain/entities.py
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class UserEntity:
    id: int
    first_name: str
    last_name: str
    email: str
    profile_image: Optional[str] = None
    current_streak: int = 0
    longest_streak: int = 0
    total_points: int = 0
    last_task_date: Optional[date] = None
    created_at: Optional[datetime] = None

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "name": self.name,
            "email": self.email,
            "profile_image": self.profile_image,
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "total_points": self.total_points,
            "last_task_date": _iso(self.last_task_date),
        }


@dataclass
class CategoryEntity:
    id: int
    user_id: int
    name: str
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "color": self.color,
        }


@dataclass
class TaskEntity:
    """
    A task as the core sees it.

    `category_id` is a weak reference: `category` is the resolved row, or None
    when the task has no category or the category was deleted.
    """

    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    category_id: Optional[int] = None
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    completed: bool = False
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    category: Optional[CategoryEntity] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "category_id": self.category_id,
            "category": self.category.to_dict() if self.category else None,
            "start_date": _iso(self.start_date),
            "due_date": _iso(self.due_date),
            "completed": self.completed,
            "completed_at": _iso(self.completed_at),
            "created_at": _iso(self.created_at),
        }


@dataclass
class ActivityEntity:
    id: int
    user_id: int
    text: str
    type: str
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "text": self.text,
            "type": self.type,
            "timestamp": _iso(self.timestamp),
        }


@dataclass(frozen=True)
class UserStats:
    tasks_today: int
    upcoming_tasks: int
    current_streak: int
    total_points: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tasks_today": self.tasks_today,
            "upcoming_tasks": self.upcoming_tasks,
            "current_streak": self.current_streak,
            "total_points": self.total_points,
        }


@dataclass(frozen=True)
class HeatmapData:
    date: date
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date.isoformat(), "count": self.count}
