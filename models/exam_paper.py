import uuid

from extensions import db
from models.enums import EXAM_TYPES, PAPER_STATUSES
from utils.clock import utcnow


def selection_key_for(subject_id, exam_type):
    return f"{subject_id}:{exam_type}"


class ExamPaper(db.Model):
    __tablename__ = "exam_papers"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    subject_id = db.Column(
        db.String(36),
        db.ForeignKey("subjects.id"),
        nullable=False
    )

    exam_type = db.Column(db.Enum(*EXAM_TYPES, name="exam_type"), nullable=False)
    set_name = db.Column(db.String(50), nullable=False)
    status = db.Column(
        db.Enum(*PAPER_STATUSES, name="paper_status"),
        nullable=False,
        default="pending_review"
    )
    deadline = db.Column(db.DateTime, nullable=False)

    uploaded_by = db.Column(
        db.String(36),
        db.ForeignKey("users.id"),
        nullable=False
    )
    uploaded_at = db.Column(db.DateTime, default=utcnow)

    version = db.Column(db.Integer, nullable=False, default=1)
    is_selected = db.Column(db.Boolean, nullable=False, default=False)

    # Set only on the selected paper of a (subject, exam type) group.
    # NULLs never collide, so the unique index allows one selected row per group.
    selection_key = db.Column(db.String(80), unique=True, nullable=True)

    file_path = db.Column(db.String(255), nullable=True)
    feedback = db.Column(db.Text, nullable=True)

    approved_by = db.Column(
        db.String(36),
        db.ForeignKey("users.id"),
        nullable=True
    )
    approved_at = db.Column(db.DateTime, nullable=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    subject = db.relationship("Subject", backref="papers", lazy=True)
    uploader = db.relationship("User", foreign_keys=[uploaded_by])

    __table_args__ = (
        db.Index("ix_exam_papers_group", "subject_id", "exam_type"),
        db.CheckConstraint("version >= 1", name="ck_exam_papers_version"),
    )

    def __repr__(self):
        return f"<ExamPaper {self.id} {self.status}>"
