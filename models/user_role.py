from extensions import db
from models.enums import APP_ROLES


class UserRole(db.Model):
    __tablename__ = "user_roles"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(
        db.String(36),
        db.ForeignKey("users.id"),
        unique=True,
        nullable=False
    )

    role = db.Column(db.Enum(*APP_ROLES, name="app_role"), nullable=False)

    def __repr__(self):
        return f"<UserRole {self.user_id}={self.role}>"
