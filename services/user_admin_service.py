"""Account management behind the admin-users handler."""
import logging

from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import generate_password_hash

from extensions import db
from models import (
    Department, ExamPaper, ExamSession, Notification, TeacherSubject, User, UserRole
)
from models.enums import APP_ROLES
from services.audit_service import record_audit
from utils.errors import ReferentialIntegrityError, StoreError, ValidationError
from utils.validation import require_choice, require_text

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def normalize_email(email):
    email = require_text(email, "Email", max_length=255).lower()
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        raise ValidationError("Email address is not valid")
    return email


def validate_password(password):
    password = password or ""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return password


def _check_department(role, department_id, user_id=None):
    if department_id and not db.session.get(Department, department_id):
        raise ValidationError("Department not found")
    if role in ("teacher", "hod") and not department_id:
        raise ValidationError(f"A {role} account needs a department")

    if role == "hod":
        # one HOD per department
        existing = (
            User.query
            .join(UserRole, UserRole.user_id == User.id)
            .filter(
                User.department_id == department_id,
                UserRole.role == "hod",
                User.is_active.is_(True),
                User.id != (user_id or "")
            )
            .first()
        )
        if existing:
            raise ValidationError(
                f"An HOD for the requested department already exists ({existing.email})."
            )


def create_user(actor, email, password, full_name, role, department_id=None):
    email = normalize_email(email)
    password = validate_password(password)
    full_name = require_text(full_name, "Full name", max_length=150)
    require_choice(role, APP_ROLES, "role")
    department_id = department_id or None
    _check_department(role, department_id)

    if User.query.filter_by(email=email).first():
        raise ValidationError("A user with this email address has already been registered")

    user = User(
        email=email,
        full_name=full_name,
        password_hash=generate_password_hash(password),
        department_id=department_id,
        is_active=True
    )
    user.role_assignment = UserRole(role=role)
    try:
        db.session.add(user)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("User create failed for %s", email)
        raise ValidationError(f"Failed to create user: {exc.__class__.__name__}")

    logger.info("User %s (%s) created by %s", user.id, role, actor.user_id)
    record_audit(actor.user_id, "create_user", "user", user.id, {"email": email, "role": role})
    return user


def update_user(actor, user_id, email, full_name, role, department_id=None, password=None):
    user = db.session.get(User, user_id or "")
    if not user:
        raise ValidationError("User not found")

    email = normalize_email(email)
    full_name = require_text(full_name, "Full name", max_length=150)
    require_choice(role, APP_ROLES, "role")
    department_id = department_id or None
    _check_department(role, department_id, user_id=user.id)

    clash = User.query.filter(User.email == email, User.id != user.id).first()
    if clash:
        raise ValidationError("A user with this email address has already been registered")

    user.email = email
    user.full_name = full_name
    user.department_id = department_id
    if password:
        user.password_hash = generate_password_hash(validate_password(password))

    if user.role_assignment:
        user.role_assignment.role = role
    else:
        user.role_assignment = UserRole(role=role)

    if role != "teacher":
        TeacherSubject.query.filter_by(teacher_id=user.id).delete(synchronize_session=False)

    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("User update failed for %s", user_id)
        raise ValidationError(f"Failed to update user: {exc.__class__.__name__}")

    record_audit(actor.user_id, "update_user", "user", user.id, {"email": email, "role": role})
    return user


def delete_user(actor, user_id):
    user = db.session.get(User, user_id or "")
    if not user:
        raise ValidationError("User not found")
    if user.id == actor.user_id:
        raise ValidationError("You cannot delete your own account")

    papers = ExamPaper.query.filter(
        (ExamPaper.uploaded_by == user.id) | (ExamPaper.approved_by == user.id)
    ).count()
    sessions = ExamSession.query.filter_by(created_by=user.id).count()
    if papers or sessions:
        raise ReferentialIntegrityError(
            "User is linked to exam papers or sessions and cannot be deleted"
        )

    email = user.email
    try:
        TeacherSubject.query.filter_by(teacher_id=user.id).delete(synchronize_session=False)
        Notification.query.filter_by(user_id=user.id).delete(synchronize_session=False)
        Notification.query.filter_by(created_by=user.id).update(
            {Notification.created_by: None}, synchronize_session=False
        )
        db.session.delete(user)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("User delete failed for %s", user_id)
        raise StoreError()

    logger.info("User %s deleted by %s", user_id, actor.user_id)
    record_audit(actor.user_id, "delete_user", "user", user_id, {"email": email})


def list_users():
    users = User.query.order_by(User.full_name).all()
    return [u.to_dict() for u in users]
