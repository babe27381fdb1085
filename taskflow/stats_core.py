# backend/taskflow/stats_core.py
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, List, Optional, Tuple, Union

from .domain.entities import HeatmapData, TaskEntity, UserEntity, UserStats
from .errors import InvalidRange

UPCOMING_WINDOW_DAYS = 7
# longest heatmap range served in one call
MAX_HEATMAP_DAYS = 5 * 366

DateLike = Union[date, str]


def _parse_day(raw, label: str) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not raw:
        raise InvalidRange(f"{label} is required")
    try:
        return date.fromisoformat(str(raw).strip())
    except ValueError:
        raise InvalidRange(f"invalid {label}: {raw!r}, expected YYYY-MM-DD")


def parse_date_range(start_raw, end_raw) -> Tuple[date, date]:
    """
    Parses the two ends of a heatmap range.

    Raises InvalidRange when either end is missing or not an ISO date. An
    inverted range is NOT an error here, compute_heatmap() turns it into []. A
    range longer than MAX_HEATMAP_DAYS is rejected.
    """
    start = _parse_day(start_raw, "start_date")
    end = _parse_day(end_raw, "end_date")
    if (end - start).days >= MAX_HEATMAP_DAYS:
        raise InvalidRange(f"date range must be at most {MAX_HEATMAP_DAYS} days")
    return start, end


def completion_day(completed_at: datetime) -> date:
    """UTC calendar day of a completion timestamp (naive values are UTC)."""
    if completed_at.tzinfo is not None:
        completed_at = completed_at.astimezone(timezone.utc)
    return completed_at.date()


def compute_user_stats(
    tasks: Iterable[TaskEntity],
    user: Optional[UserEntity],
    today: Optional[date] = None,
) -> UserStats:
    """
    Dashboard counters for one user.

    tasks_today    open tasks due today
    upcoming_tasks open tasks due in the next six days (today excluded)

    Streak and points are read from the user record as stored.
    """
    today = today or date.today()
    window = {today + timedelta(days=i) for i in range(UPCOMING_WINDOW_DAYS)}

    tasks_today = 0
    upcoming = 0
    for task in tasks:
        if task.completed or task.due_date is None:
            continue
        if task.due_date == today:
            tasks_today += 1
        elif task.due_date in window:
            upcoming += 1

    return UserStats(
        tasks_today=tasks_today,
        upcoming_tasks=upcoming,
        current_streak=int(user.current_streak or 0) if user else 0,
        total_points=int(user.total_points or 0) if user else 0,
    )


def compute_heatmap(
    tasks: Iterable[TaskEntity],
    start_date: DateLike,
    end_date: DateLike,
) -> List[HeatmapData]:
    start, end = parse_date_range(start_date, end_date)
    if start > end:
        return []

    counts = Counter(
        completion_day(t.completed_at)
        for t in tasks
        if t.completed and t.completed_at is not None
    )

    out: List[HeatmapData] = []
    for offset in range((end - start).days + 1):
        day = start + timedelta(days=offset)
        out.append(HeatmapData(date=day, count=counts.get(day, 0)))
    return out
