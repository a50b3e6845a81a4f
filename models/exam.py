import uuid

from extensions import db
from models.enums import EXAM_STATUSES, EXAM_TYPES
from utils.clock import utcnow


class Exam(db.Model):
    __tablename__ = "exams"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    subject_id = db.Column(
        db.String(36),
        db.ForeignKey("subjects.id"),
        nullable=False
    )
    exam_type = db.Column(db.Enum(*EXAM_TYPES, name="exam_type"), nullable=False)

    paper_id = db.Column(
        db.String(36),
        db.ForeignKey("exam_papers.id"),
        nullable=True
    )

    scheduled_date = db.Column(db.DateTime, nullable=False)
    unlock_time = db.Column(db.DateTime, nullable=False)
    status = db.Column(
        db.Enum(*EXAM_STATUSES, name="exam_status"),
        nullable=False,
        default="scheduled"
    )
    created_at = db.Column(db.DateTime, default=utcnow)

    subject = db.relationship("Subject", lazy=True)

    __table_args__ = (
        db.UniqueConstraint("subject_id", "exam_type", name="unique_subject_exam"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "subject_id": self.subject_id,
            "subject_name": self.subject.name if self.subject else None,
            "subject_code": self.subject.code if self.subject else None,
            "exam_type": self.exam_type,
            "paper_id": self.paper_id,
            "scheduled_date": self.scheduled_date.isoformat(),
            "unlock_time": self.unlock_time.isoformat(),
            "status": self.status,
        }

    def __repr__(self):
        return f"<Exam {self.subject_id} {self.exam_type}>"
