# backend/taskflow/routes/user_routes.py
from flask import Blueprint, current_app, jsonify, request

from ..errors import NotFound, ValidationFailure
from ..stats_core import compute_heatmap, compute_user_stats, parse_date_range
from .helpers import current_user_id, get_store, json_object, require_text

user_bp = Blueprint("user", __name__)

PROFILE_FIELDS = ("first_name", "last_name", "profile_image")


def _load_current_user():
    user_id = current_user_id()
    user = get_store().get_user(user_id)
    if not user:
        raise NotFound("user not found")
    return user


# -----------------------------
# Users
# -----------------------------
@user_bp.route("/users", methods=["POST"])
def create_user():
    """
    Body: { "first_name": "...", "last_name": "...", "email": "...",
            "profile_image": "https://..." (optional) }

    Sign-in is handled by the identity provider; this only provisions the
    local profile that tokens refer to.
    """
    data = json_object()

    first_name = require_text(data, "first_name", 100)
    last_name = (data.get("last_name") or "").strip()
    email = require_text(data, "email").lower()
    if "@" not in email:
        raise ValidationFailure("invalid email")

    store = get_store()
    if store.get_user_by_email(email):
        raise ValidationFailure("email already in use")

    user = store.create_user(
        {
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "profile_image": data.get("profile_image"),
        }
    )
    current_app.logger.info(f"[users] created user_id={user.id}")
    return jsonify({"user": user.to_dict()}), 201


@user_bp.route("/user", methods=["GET"])
def get_current_user():
    return jsonify({"user": _load_current_user().to_dict()}), 200


@user_bp.route("/user", methods=["PATCH"])
def update_current_user():
    user = _load_current_user()
    data = json_object()

    changes = {}
    if "first_name" in data:
        changes["first_name"] = require_text(data, "first_name", 100)
    if "last_name" in data:
        changes["last_name"] = (data.get("last_name") or "").strip()
    if "profile_image" in data:
        changes["profile_image"] = data.get("profile_image") or None

    unknown = set(data) - set(PROFILE_FIELDS)
    if unknown:
        raise ValidationFailure(f"fields cannot be changed: {', '.join(sorted(unknown))}")

    updated = get_store().update_user(user.id, changes) if changes else user
    if updated is None:
        raise NotFound("user not found")
    return jsonify({"user": updated.to_dict()}), 200


# -----------------------------
# Dashboard data
# -----------------------------
@user_bp.route("/user/stats", methods=["GET"])
def user_stats():
    user = _load_current_user()
    tasks = get_store().list_tasks(user.id)
    stats = compute_user_stats(tasks, user)
    return jsonify({"stats": stats.to_dict()}), 200


@user_bp.route("/user/heatmap", methods=["GET"])
def user_heatmap():
    """
    GET /api/user/heatmap?start_date=2024-01-01&end_date=2024-03-31

    One entry per day of the inclusive range, days without completions
    included with count 0. An inverted range answers with [].
    """
    user_id = current_user_id()
    start, end = parse_date_range(
        request.args.get("start_date"), request.args.get("end_date")
    )

    tasks = get_store().list_tasks(user_id, completed=True)
    heatmap = compute_heatmap(tasks, start, end)
    return jsonify({"heatmap": [h.to_dict() for h in heatmap]}), 200


@user_bp.route("/user/activities", methods=["GET"])
def user_activities():
    user_id = current_user_id()
    activities = get_store().list_activities(user_id)
    return jsonify({"activities": [a.to_dict() for a in activities]}), 200
