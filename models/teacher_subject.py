from extensions import db
from utils.clock import utcnow


class TeacherSubject(db.Model):
    __tablename__ = "teacher_subjects"

    id = db.Column(db.Integer, primary_key=True)

    teacher_id = db.Column(
        db.String(36),
        db.ForeignKey("users.id"),
        nullable=False
    )

    subject_id = db.Column(
        db.String(36),
        db.ForeignKey("subjects.id"),
        nullable=False
    )

    assigned_at = db.Column(db.DateTime, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint("teacher_id", "subject_id", name="unique_teacher_subject"),
    )

    def __repr__(self):
        return f"<TeacherSubject teacher={self.teacher_id} subject={self.subject_id}>"
