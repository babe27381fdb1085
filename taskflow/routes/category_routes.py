# backend/taskflow/routes/category_routes.py
import re

from flask import Blueprint, current_app, jsonify

from ..errors import NotFound, ValidationFailure
from .helpers import current_user_id, get_store, json_object, require_text

categories_bp = Blueprint("categories", __name__)

DEFAULT_COLOR = "#3B82F6"
_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


def _parse_color(raw) -> str:
    if not isinstance(raw, str) or not _HEX_COLOR.match(raw):
        raise ValidationFailure("color must look like #RRGGBB")
    return raw.upper()


def _owned_category(category_id: int, user_id: int):
    category = get_store().get_category(category_id)
    if not category or category.user_id != user_id:
        raise NotFound("category not found")
    return category


@categories_bp.route("", methods=["GET"])
def list_categories():
    user_id = current_user_id()
    rows = get_store().list_categories(user_id)
    return jsonify({"categories": [c.to_dict() for c in rows]}), 200


@categories_bp.route("", methods=["POST"])
def create_category():
    """
    Body: { "name": "Work", "color": "#3B82F6" }
    """
    user_id = current_user_id()
    data = json_object()

    name = require_text(data, "name", 100)
    color = _parse_color(data["color"]) if data.get("color") else DEFAULT_COLOR

    store = get_store()
    category = store.create_category({"user_id": user_id, "name": name, "color": color})

    try:
        store.append_activity(
            {
                "user_id": user_id,
                "text": f"Created new category '{category.name}'",
                "type": "category_created",
            }
        )
    except Exception:
        current_app.logger.exception("[categories] activity append failed")

    return jsonify({"category": category.to_dict()}), 201


@categories_bp.route("/<int:category_id>", methods=["PATCH"])
def update_category(category_id: int):
    user_id = current_user_id()
    _owned_category(category_id, user_id)
    data = json_object()

    changes = {}
    if "name" in data:
        changes["name"] = require_text(data, "name", 100)
    if "color" in data:
        changes["color"] = _parse_color(data.get("color"))

    category = get_store().update_category(category_id, changes)
    if category is None:
        raise NotFound("category not found")
    return jsonify({"category": category.to_dict()}), 200


@categories_bp.route("/<int:category_id>", methods=["DELETE"])
def delete_category(category_id: int):
    """Tasks in the category keep their category_id and read back without one."""
    user_id = current_user_id()
    _owned_category(category_id, user_id)

    if not get_store().delete_category(category_id):
        raise NotFound("category not found")
    return jsonify({"message": "category deleted"}), 200
