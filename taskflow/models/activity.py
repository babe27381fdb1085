# backend/taskflow/models/activity.py
from datetime import datetime
from .. import db
from .columns import BigId


class Activity(db.Model):
    """Append-only feed entry; rows are never updated or deleted."""

    __tablename__ = "activities"

    id = db.Column(BigId, primary_key=True)
    user_id = db.Column(db.BigInteger, db.ForeignKey("users.id"), nullable=False, index=True)
    text = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(50), nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
