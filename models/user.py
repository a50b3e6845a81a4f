import uuid

from extensions import db
from flask_login import UserMixin
from utils.clock import utcnow


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = db.Column(db.String(255), unique=True, nullable=False)
    full_name = db.Column(db.String(150), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)

    department_id = db.Column(
        db.String(36),
        db.ForeignKey("departments.id"),
        nullable=True
    )

    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    role_assignment = db.relationship(
        "UserRole",
        uselist=False,
        backref="user",
        cascade="all, delete-orphan"
    )

    @property
    def role(self):
        # Role lives in user_roles so it can be reassigned without touching the profile
        return self.role_assignment.role if self.role_assignment else None

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "department_id": self.department_id,
            "role": self.role,
            "is_active": self.is_active,
        }

    def __repr__(self):
        return f"<User {self.email}>"
