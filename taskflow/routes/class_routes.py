# backend/taskflow/routes/class_routes.py
from datetime import date, datetime, time, timedelta

from flask import Blueprint, current_app, jsonify, request

from .. import db
from ..errors import NotFound, ValidationFailure
from ..models.booking import Booking, Language, LanguageClass
from .helpers import current_user_id, get_store

classes_bp = Blueprint("classes", __name__)

LEVELS = ("Beginner", "Intermediate", "Advanced")
FEW_SPOTS_THRESHOLD = 2

# [start_hour, end_hour) of each time-of-day filter
TIME_OF_DAY_HOURS = {
    "morning": (0, 12),
    "afternoon": (12, 17),
    "evening": (17, 24),
}


# ------------------------------
# Helpers
# ------------------------------
def _class_status(current_students: int, max_students: int) -> str:
    remaining = max_students - current_students
    if remaining <= 0:
        return "full"
    if remaining <= FEW_SPOTS_THRESHOLD:
        return "few_spots"
    return "available"


def _in_time_of_day(cls: LanguageClass, bucket: str) -> bool:
    if cls.next_session is None:
        return False
    start_hour, end_hour = TIME_OF_DAY_HOURS[bucket]
    return start_hour <= cls.next_session.hour < end_hour


# ------------------------------
# GET /api/languages
# ------------------------------
@classes_bp.route("/languages", methods=["GET"])
def list_languages():
    rows = Language.query.order_by(Language.name.asc()).all()
    return jsonify({"languages": [lang.to_dict() for lang in rows]}), 200


# ------------------------------
# GET /api/classes?language=Spanish&level=Beginner&time_of_day=Morning
# ------------------------------
@classes_bp.route("/classes", methods=["GET"])
def list_classes():
    language = (request.args.get("language") or "").strip()
    level = (request.args.get("level") or "").strip()
    time_of_day = (request.args.get("time_of_day") or "").strip().lower()

    if level and level not in LEVELS:
        raise ValidationFailure(f"level must be one of {', '.join(LEVELS)}")
    if time_of_day and time_of_day not in TIME_OF_DAY_HOURS:
        raise ValidationFailure("time_of_day must be Morning, Afternoon or Evening")

    q = LanguageClass.query
    if language:
        q = q.join(Language, LanguageClass.language_id == Language.id).filter(
            Language.name == language
        )
    if level:
        q = q.filter(LanguageClass.level == level)

    rows = q.order_by(LanguageClass.next_session.asc(), LanguageClass.id.asc()).all()
    if time_of_day:
        rows = [c for c in rows if _in_time_of_day(c, time_of_day)]

    return jsonify({"classes": [c.to_dict() for c in rows]}), 200


@classes_bp.route("/classes/<int:class_id>", methods=["GET"])
def get_class(class_id: int):
    cls = db.session.get(LanguageClass, class_id)
    if not cls:
        raise NotFound("class not found")
    return jsonify({"class": cls.to_dict()}), 200


# ------------------------------
# POST /api/classes/<id>/book
# ------------------------------
@classes_bp.route("/classes/<int:class_id>/book", methods=["POST"])
def book_class(class_id: int):
    user_id = current_user_id()

    try:
        # lock the class row so two bookings cannot take the last seat
        cls = (
            LanguageClass.query.filter(LanguageClass.id == class_id)
            .with_for_update()
            .first()
        )
        if not cls:
            raise NotFound("class not found")

        current = int(cls.current_students or 0)
        if current >= cls.max_students:
            raise ValidationFailure("Class is full")
        if cls.next_session is None:
            raise ValidationFailure("Class has no upcoming session")

        booking = Booking(
            user_id=user_id,
            class_id=cls.id,
            session_date=cls.next_session,
            status="booked",
        )
        db.session.add(booking)

        cls.current_students = current + 1
        cls.status = _class_status(cls.current_students, cls.max_students)
        db.session.commit()

    except (NotFound, ValidationFailure):
        db.session.rollback()
        raise
    except Exception:
        db.session.rollback()
        current_app.logger.exception(f"[classes] booking failed class_id={class_id}")
        return jsonify({"message": "Failed to book class"}), 500

    try:
        get_store().append_activity(
            {"user_id": user_id, "text": f"Booked {cls.title}", "type": "booked"}
        )
    except Exception:
        current_app.logger.exception("[classes] activity append failed")

    return jsonify({"booking": booking.to_dict()}), 201


# ------------------------------
# GET /api/user/bookings
# ------------------------------
@classes_bp.route("/user/bookings", methods=["GET"])
def user_bookings():
    user_id = current_user_id()
    rows = (
        Booking.query.filter_by(user_id=user_id)
        .order_by(Booking.session_date.asc())
        .all()
    )
    return jsonify({"bookings": [b.to_dict() for b in rows]}), 200


# ------------------------------
# GET /api/user/class-stats
# ------------------------------
@classes_bp.route("/user/class-stats", methods=["GET"])
def user_class_stats():
    """
    Returns:
    {
      "stats": {
        "active_classes": 2,
        "hours_this_week": 3,
        "streak": "7 days",
        "available_classes": 12
      }
    }
    """
    user_id = current_user_id()
    user = get_store().get_user(user_id)
    if not user:
        raise NotFound("user not found")

    today = date.today()
    week_start = datetime.combine(today - timedelta(days=6), time.min)
    week_end = datetime.combine(today, time.max)

    booked = Booking.query.filter_by(user_id=user_id, status="booked").all()
    minutes_this_week = sum(
        int(b.language_class.duration or 0)
        for b in booked
        if b.language_class and week_start <= b.session_date <= week_end
    )

    available = LanguageClass.query.filter(LanguageClass.status != "full").count()

    stats = {
        "active_classes": len(booked),
        "hours_this_week": minutes_this_week // 60,
        "streak": f"{user.current_streak} days",
        "available_classes": int(available),
    }
    return jsonify({"stats": stats}), 200
