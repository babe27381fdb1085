# backend/taskflow/routes/task_routes.py
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from ..errors import NotFound, ValidationFailure
from ..streak_core import complete_task as complete_task_core
from .helpers import (
    current_user_id,
    get_store,
    json_object,
    parse_bool_arg,
    parse_date_field,
    require_text,
    safe_int_or_none,
)

tasks_bp = Blueprint("tasks", __name__)

EDITABLE_FIELDS = ("title", "description", "category_id", "start_date", "due_date")


# ------------------------------
# Helpers
# ------------------------------
def _owned_task(task_id: int, user_id: int):
    task = get_store().get_task(task_id)
    if not task or task.user_id != user_id:
        raise NotFound("task not found")
    return task


def _category_ref(raw: Any, user_id: int):
    """Validates a category reference at write time; None clears it."""
    if raw is None or raw == "":
        return None
    category_id = safe_int_or_none(raw)
    if category_id is None:
        raise ValidationFailure("category_id must be an integer")
    category = get_store().get_category(category_id)
    if not category or category.user_id != user_id:
        raise NotFound("category not found")
    return category_id


def _task_fields(data: Dict[str, Any], user_id: int) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    if "title" in data:
        fields["title"] = require_text(data, "title")
    if "description" in data:
        description = data.get("description")
        if description is not None and not isinstance(description, str):
            raise ValidationFailure("description must be a string")
        fields["description"] = description or None
    if "category_id" in data:
        fields["category_id"] = _category_ref(data.get("category_id"), user_id)
    if "start_date" in data:
        fields["start_date"] = parse_date_field(data.get("start_date"), "start_date")
    if "due_date" in data:
        fields["due_date"] = parse_date_field(data.get("due_date"), "due_date")

    start, due = fields.get("start_date"), fields.get("due_date")
    if start and due and start > due:
        raise ValidationFailure("start_date must not be after due_date")
    return fields


# ------------------------------
# GET /api/tasks?category_id=&completed=&date=
# ------------------------------
@tasks_bp.route("", methods=["GET"])
def list_tasks():
    user_id = current_user_id()

    raw_category = request.args.get("category_id")
    category_id = safe_int_or_none(raw_category)
    if raw_category and category_id is None:
        raise ValidationFailure("category_id must be an integer")

    completed = parse_bool_arg(request.args.get("completed"), "completed")
    due_date = parse_date_field(request.args.get("date"), "date")

    rows = get_store().list_tasks(
        user_id, category_id=category_id, completed=completed, due_date=due_date
    )
    return jsonify({"tasks": [t.to_dict() for t in rows]}), 200


@tasks_bp.route("/<int:task_id>", methods=["GET"])
def get_task(task_id: int):
    task = _owned_task(task_id, current_user_id())
    return jsonify({"task": task.to_dict()}), 200


# ------------------------------
# POST /api/tasks
# ------------------------------
@tasks_bp.route("", methods=["POST"])
def create_task():
    """
    Body:
    {
      "title": "Review project proposal",
      "description": "...",          (optional)
      "category_id": 1,              (optional)
      "start_date": "2024-05-01",    (optional)
      "due_date": "2024-05-02"       (optional)
    }
    """
    user_id = current_user_id()
    data = json_object()

    if "title" not in data:
        raise ValidationFailure("title is required")
    if "completed" in data or "completed_at" in data:
        raise ValidationFailure("tasks are created open, use /complete")

    fields = _task_fields(data, user_id)
    fields["user_id"] = user_id

    task = get_store().create_task(fields)
    current_app.logger.info(f"[tasks] user_id={user_id} created task_id={task.id}")
    return jsonify({"task": task.to_dict()}), 201


# ------------------------------
# PATCH /api/tasks/<id>
# ------------------------------
@tasks_bp.route("/<int:task_id>", methods=["PATCH"])
def update_task(task_id: int):
    user_id = current_user_id()
    existing = _owned_task(task_id, user_id)
    data = json_object()

    unknown = set(data) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationFailure(f"fields cannot be changed: {', '.join(sorted(unknown))}")

    fields = _task_fields(data, user_id)
    start = fields.get("start_date", existing.start_date)
    due = fields.get("due_date", existing.due_date)
    if start and due and start > due:
        raise ValidationFailure("start_date must not be after due_date")

    task = get_store().update_task(task_id, fields) if fields else existing
    if task is None:
        raise NotFound("task not found")
    return jsonify({"task": task.to_dict()}), 200


@tasks_bp.route("/<int:task_id>", methods=["DELETE"])
def delete_task(task_id: int):
    user_id = current_user_id()
    _owned_task(task_id, user_id)

    if not get_store().delete_task(task_id):
        raise NotFound("task not found")
    return jsonify({"message": "task deleted"}), 200


# ------------------------------
# POST /api/tasks/<id>/complete
# ------------------------------
@tasks_bp.route("/<int:task_id>/complete", methods=["POST"])
def complete_task(task_id: int):
    """
    Marks the task done and updates the owner's streak and points.
    Completing an already completed task changes nothing.
    """
    user_id = current_user_id()
    _owned_task(task_id, user_id)

    store = get_store()
    task = complete_task_core(store, task_id)
    user = store.get_user(user_id)

    return jsonify(
        {
            "task": task.to_dict(),
            "user": user.to_dict() if user else None,
        }
    ), 200
