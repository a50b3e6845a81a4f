import uuid

from extensions import db
from models.enums import NOTIFICATION_TYPES
from utils.clock import utcnow


class Notification(db.Model):
    __tablename__ = "notifications"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    created_by = db.Column(
        db.String(36),
        db.ForeignKey("users.id"),
        nullable=True
    )

    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type = db.Column(
        db.Enum(*NOTIFICATION_TYPES, name="notification_type"),
        nullable=False,
        default="info"
    )

    target_roles = db.Column(db.JSON, nullable=False)
    target_departments = db.Column(db.JSON, nullable=True)

    # Single recipient for fan-out rows
    user_id = db.Column(
        db.String(36),
        db.ForeignKey("users.id"),
        nullable=True
    )

    is_read = db.Column(db.Boolean, nullable=False, default=False)
    expires_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "created_by": self.created_by,
            "title": self.title,
            "message": self.message,
            "type": self.type,
            "target_roles": self.target_roles,
            "target_departments": self.target_departments,
            "user_id": self.user_id,
            "is_read": self.is_read,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Notification {self.title!r} to={self.user_id}>"
