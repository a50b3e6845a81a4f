import uuid

from extensions import db
from utils.clock import utcnow


class Department(db.Model):
    __tablename__ = "departments"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    code = db.Column(db.String(20), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    users = db.relationship("User", backref="department", lazy=True)
    subjects = db.relationship("Subject", backref="department", lazy=True)

    def __repr__(self):
        return f"<Department {self.code}>"
