# backend/taskflow/models/task.py
from datetime import datetime
from .. import db
from .columns import BigId


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(BigId, primary_key=True)
    user_id = db.Column(db.BigInteger, db.ForeignKey("users.id"), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    color = db.Column(db.String(20), nullable=False, default="#3B82F6")


class Task(db.Model):
    __tablename__ = "tasks"

    id = db.Column(BigId, primary_key=True)
    user_id = db.Column(db.BigInteger, db.ForeignKey("users.id"), nullable=False, index=True)
    # no FK: categories can be deleted while tasks still point at them
    category_id = db.Column(db.BigInteger, index=True)

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    start_date = db.Column(db.Date)
    due_date = db.Column(db.Date, index=True)

    completed = db.Column(db.Boolean, nullable=False, default=False)
    completed_at = db.Column(db.DateTime)  # UTC
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
