# models/subjects.py
import uuid

from extensions import db
from utils.clock import utcnow


class Subject(db.Model):
    __tablename__ = "subjects"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    code = db.Column(db.String(20), nullable=False, unique=True)
    name = db.Column(db.String(100), nullable=False)
    semester = db.Column(db.Integer, nullable=False)
    department_id = db.Column(
        db.String(36),
        db.ForeignKey("departments.id"),
        nullable=False
    )
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "semester": self.semester,
            "department_id": self.department_id,
        }

    def __repr__(self):
        return f"<Subject {self.code}>"
