# backend/script/seed_demo_data.py
"""
Seed a demo user with categories, tasks, activities and a small class
catalogue, then print a development access token for that user.

Usage:
    python script/seed_demo_data.py
    DATABASE_URL=sqlite:///taskflow.db python script/seed_demo_data.py
"""
import os
import sys
from datetime import date, datetime, timedelta
from decimal import Decimal

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from flask_jwt_extended import create_access_token  # noqa: E402

from taskflow import create_app, db  # noqa: E402
from taskflow.models.booking import Instructor, Language, LanguageClass  # noqa: E402
from taskflow.routes.helpers import get_store  # noqa: E402

DEMO_EMAIL = "sarah.johnson@example.com"


def seed_tasks(store):
    existing = store.get_user_by_email(DEMO_EMAIL)
    if existing:
        print(f"[seed] demo user already present (id={existing.id})")
        return existing

    now = datetime.utcnow()
    today = date.today()
    tomorrow = today + timedelta(days=1)
    next_week = today + timedelta(days=7)

    user = store.create_user(
        {
            "first_name": "Sarah",
            "last_name": "Johnson",
            "email": DEMO_EMAIL,
            "current_streak": 7,
            "longest_streak": 14,
            "total_points": 150,
            "last_task_date": today,
        }
    )

    categories = {}
    for name, color in (
        ("Work", "#3B82F6"),
        ("Personal", "#10B981"),
        ("Health", "#F59E0B"),
        ("Learning", "#8B5CF6"),
    ):
        categories[name] = store.create_category(
            {"user_id": user.id, "name": name, "color": color}
        )

    tasks = [
        ("Review project proposal", "Go through the Q4 proposal and provide feedback", "Work", today, now - timedelta(hours=2)),
        ("Morning workout", "30-minute cardio session", "Health", today, now - timedelta(hours=6)),
        ("Call dentist for appointment", "Schedule cleaning appointment for next month", "Personal", today, None),
        ("Team standup meeting", "Daily team sync at 9:00 AM", "Work", tomorrow, None),
        ("Grocery shopping", "Buy ingredients for weekend dinner party", "Personal", tomorrow, None),
        ("Complete React course module", "Finish the advanced hooks chapter", "Learning", next_week, None),
        ("Quarterly review presentation", "Prepare slides for Q4 performance review", "Work", next_week, None),
    ]
    for title, description, category, due, completed_at in tasks:
        task = store.create_task(
            {
                "user_id": user.id,
                "title": title,
                "description": description,
                "category_id": categories[category].id,
                "start_date": due,
                "due_date": due,
            }
        )
        if completed_at:
            # seeded history, so no streak/points side effects
            store.mark_task_completed(task.id, completed_at)

    for text, kind, ago in (
        ("Completed 'Review project proposal' task", "task_completed", timedelta(hours=2)),
        ("Completed 'Morning workout' task", "task_completed", timedelta(hours=6)),
        ("Reached 7-day streak milestone!", "streak_milestone", timedelta(days=1)),
        ("Created new category 'Learning'", "category_created", timedelta(days=3)),
    ):
        store.append_activity(
            {"user_id": user.id, "text": text, "type": kind, "timestamp": now - ago}
        )

    print(f"[seed] created demo user id={user.id}")
    return user


def seed_classes():
    if Language.query.first():
        print("[seed] class catalogue already present")
        return

    spanish = Language(name="Spanish", code="es")
    french = Language(name="French", code="fr")
    maria = Instructor(first_name="Maria", last_name="Garcia", rating=Decimal("4.9"), review_count=127)
    pierre = Instructor(first_name="Pierre", last_name="Dubois", rating=Decimal("4.7"), review_count=89)
    db.session.add_all([spanish, french, maria, pierre])
    db.session.flush()

    base = datetime.combine(date.today() + timedelta(days=1), datetime.min.time())
    db.session.add_all(
        [
            LanguageClass(
                title="Conversational Spanish",
                description="Everyday conversation practice",
                instructor_id=maria.id,
                language_id=spanish.id,
                level="Beginner",
                duration=60,
                price=Decimal("25.00"),
                max_students=8,
                current_students=3,
                distance=Decimal("1.2"),
                next_session=base + timedelta(hours=9),
                status="available",
                rating=Decimal("4.8"),
                review_count=42,
            ),
            LanguageClass(
                title="French Grammar Intensive",
                description="Tenses, moods and agreement",
                instructor_id=pierre.id,
                language_id=french.id,
                level="Intermediate",
                duration=90,
                price=Decimal("35.00"),
                max_students=6,
                current_students=5,
                distance=Decimal("2.5"),
                next_session=base + timedelta(hours=18),
                status="few_spots",
                rating=Decimal("4.6"),
                review_count=18,
            ),
        ]
    )
    db.session.commit()
    print("[seed] created class catalogue")


def main():
    app = create_app()
    with app.app_context():
        user = seed_tasks(get_store())
        seed_classes()
        token = create_access_token(identity=str(user.id))
        print(f"[seed] dev token for user {user.id}:\n{token}")


if __name__ == "__main__":
    main()
