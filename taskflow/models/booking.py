# backend/taskflow/models/booking.py
from .. import db
from .columns import BigId


def _num(value):
    return float(value) if value is not None else None


# -----------------------------
# Instructors & languages
# -----------------------------
class Instructor(db.Model):
    __tablename__ = "instructors"

    id = db.Column(BigId, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    profile_image = db.Column(db.String(255))
    rating = db.Column(db.Numeric(2, 1))
    review_count = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "profile_image": self.profile_image,
            "rating": _num(self.rating),
            "review_count": self.review_count or 0,
        }


class Language(db.Model):
    __tablename__ = "languages"

    id = db.Column(BigId, primary_key=True)
    name = db.Column(db.String(50), nullable=False)
    code = db.Column(db.String(10), nullable=False)

    def to_dict(self):
        return {"id": self.id, "name": self.name, "code": self.code}


# -----------------------------
# Classes & bookings
# -----------------------------
class LanguageClass(db.Model):
    __tablename__ = "classes"

    id = db.Column(BigId, primary_key=True)
    title = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text)
    instructor_id = db.Column(db.BigInteger, db.ForeignKey("instructors.id"), nullable=False)
    language_id = db.Column(db.BigInteger, db.ForeignKey("languages.id"), nullable=False)
    level = db.Column(
        db.Enum("Beginner", "Intermediate", "Advanced", name="class_level"),
        nullable=False,
    )
    duration = db.Column(db.Integer, nullable=False)  # minutes
    price = db.Column(db.Numeric(10, 2), nullable=False)
    max_students = db.Column(db.Integer, nullable=False)
    current_students = db.Column(db.Integer, nullable=False, default=0)
    distance = db.Column(db.Numeric(3, 1))  # miles
    next_session = db.Column(db.DateTime)
    status = db.Column(
        db.Enum("available", "few_spots", "full", name="class_status"),
        nullable=False,
        default="available",
    )
    rating = db.Column(db.Numeric(2, 1))
    review_count = db.Column(db.Integer, nullable=False, default=0)

    instructor = db.relationship("Instructor", backref="classes")
    language = db.relationship("Language", backref="classes")

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "instructor_id": self.instructor_id,
            "language_id": self.language_id,
            "level": self.level,
            "duration": self.duration,
            "price": _num(self.price),
            "max_students": self.max_students,
            "current_students": self.current_students or 0,
            "distance": _num(self.distance),
            "next_session": self.next_session.isoformat() if self.next_session else None,
            "status": self.status,
            "rating": _num(self.rating),
            "review_count": self.review_count or 0,
            "instructor": self.instructor.to_dict() if self.instructor else None,
            "language": self.language.to_dict() if self.language else None,
        }


class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(BigId, primary_key=True)
    user_id = db.Column(db.BigInteger, db.ForeignKey("users.id"), nullable=False, index=True)
    class_id = db.Column(db.BigInteger, db.ForeignKey("classes.id"), nullable=False)
    session_date = db.Column(db.DateTime, nullable=False)
    status = db.Column(
        db.Enum("booked", "completed", "cancelled", name="booking_status"),
        nullable=False,
        default="booked",
    )

    language_class = db.relationship("LanguageClass", backref="bookings")

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "class_id": self.class_id,
            "session_date": self.session_date.isoformat() if self.session_date else None,
            "status": self.status,
            "class": self.language_class.to_dict() if self.language_class else None,
        }
