import uuid

from extensions import db
from models.enums import EXAM_TYPES
from utils.clock import utcnow


class ExamSession(db.Model):
    __tablename__ = "exam_sessions"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(150), nullable=False)
    academic_year = db.Column(db.String(9), nullable=False)
    exam_type = db.Column(db.Enum(*EXAM_TYPES, name="exam_type"), nullable=False)

    submission_start = db.Column(db.DateTime, nullable=False)
    submission_end = db.Column(db.DateTime, nullable=False)
    review_start = db.Column(db.DateTime, nullable=False)
    review_end = db.Column(db.DateTime, nullable=False)
    access_start = db.Column(db.DateTime, nullable=False)
    access_end = db.Column(db.DateTime, nullable=False)

    is_active = db.Column(db.Boolean, default=True)
    is_locked = db.Column(db.Boolean, default=False)

    created_by = db.Column(
        db.String(36),
        db.ForeignKey("users.id"),
        nullable=False
    )
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        data = {
            "id": self.id,
            "name": self.name,
            "academic_year": self.academic_year,
            "exam_type": self.exam_type,
            "is_active": self.is_active,
            "is_locked": self.is_locked,
            "created_by": self.created_by,
        }
        for window in ("submission", "review", "access"):
            for edge in ("start", "end"):
                value = getattr(self, f"{window}_{edge}")
                data[f"{window}_{edge}"] = value.isoformat() if value else None
        return data

    def __repr__(self):
        return f"<ExamSession {self.name} {self.academic_year}>"
