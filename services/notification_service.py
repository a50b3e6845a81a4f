import logging

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import Notification, Subject, TeacherSubject, User, UserRole
from models.enums import APP_ROLES, NOTIFICATION_TYPES
from utils.clock import utcnow
from utils.errors import AuthorizationError, StoreError, ValidationError
from utils.validation import parse_datetime, require_choice, require_text

logger = logging.getLogger(__name__)

TARGET_MODES = ("department", "subjects")


def resolve_teacher_ids(department_id, target_mode, subject_ids=None):
    """Teacher ids reached by a department or subject scoped alert, deduplicated."""
    require_choice(target_mode, TARGET_MODES, "target mode")

    if target_mode == "subjects":
        if subject_ids is None:
            return []
        if not isinstance(subject_ids, (list, tuple)) or not all(isinstance(s, str) for s in subject_ids):
            raise ValidationError("Subject ids must be a list of ids")
        if not subject_ids:
            return []
        rows = (
            db.session.query(TeacherSubject.teacher_id)
            .join(Subject, TeacherSubject.subject_id == Subject.id)
            .filter(
                TeacherSubject.subject_id.in_(subject_ids),
                Subject.department_id == department_id
            )
            .all()
        )
    else:
        rows = (
            db.session.query(User.id)
            .join(UserRole, UserRole.user_id == User.id)
            .filter(User.department_id == department_id, UserRole.role == "teacher")
            .all()
        )

    seen = set()
    teacher_ids = []
    for (teacher_id,) in rows:
        if teacher_id not in seen:
            seen.add(teacher_id)
            teacher_ids.append(teacher_id)
    return teacher_ids


def _sender_department(sender, department_id):
    if sender.role != "hod" or not sender.department_id:
        raise AuthorizationError("Only HODs can send department alerts")
    department_id = department_id or sender.department_id
    if department_id != sender.department_id:
        raise AuthorizationError("You can only alert your own department")
    return department_id


def count_recipients(sender, target_mode, department_id=None, subject_ids=None):
    department_id = _sender_department(sender, department_id)
    return len(resolve_teacher_ids(department_id, target_mode, subject_ids))


def broadcast(sender, title, message, notification_type, target_mode, department_id=None, subject_ids=None):
    """
    Send one notification row per resolved teacher.

    Each recipient gets their own row so read state is tracked per person.
    Returns the number of recipients; zero means nothing was written.
    """
    department_id = _sender_department(sender, department_id)
    title = require_text(title, "Title", max_length=200)
    message = require_text(
        message, "Message",
        max_length=current_app.config["NOTIFICATION_MESSAGE_LIMIT"]
    )
    require_choice(notification_type, NOTIFICATION_TYPES, "notification type")

    teacher_ids = resolve_teacher_ids(department_id, target_mode, subject_ids)
    if not teacher_ids:
        return 0

    try:
        db.session.add_all([
            Notification(
                created_by=sender.user_id,
                title=title,
                message=message,
                type=notification_type,
                target_roles=["teacher"],
                target_departments=[department_id],
                user_id=teacher_id
            ) for teacher_id in teacher_ids
        ])
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Broadcast from %s failed", sender.user_id)
        raise StoreError()

    logger.info("Broadcast from %s reached %d teacher(s)", sender.user_id, len(teacher_ids))
    return len(teacher_ids)


def create_notification(sender, title, message, target_roles, target_departments=None,
                        notification_type="info", expires_at=None, user_id=None):
    if sender.role not in ("admin", "hod"):
        raise AuthorizationError("You cannot publish notifications")

    title = require_text(title, "Title", max_length=200)
    message = require_text(
        message, "Message",
        max_length=current_app.config["NOTIFICATION_MESSAGE_LIMIT"]
    )
    require_choice(notification_type, NOTIFICATION_TYPES, "notification type")
    if not target_roles:
        raise ValidationError("At least one target role is required")
    for role in target_roles:
        require_choice(role, APP_ROLES, "target role")
    if expires_at:
        expires_at = parse_datetime(expires_at, "Expiry")

    notification = Notification(
        created_by=sender.user_id,
        title=title,
        message=message,
        type=notification_type,
        target_roles=list(target_roles),
        target_departments=list(target_departments) if target_departments else None,
        expires_at=expires_at or None,
        user_id=user_id
    )
    try:
        db.session.add(notification)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Notification create by %s failed", sender.user_id)
        raise StoreError()
    return notification


def is_visible_to(notification, actor, now=None, include_read=False):
    now = now or utcnow()
    if actor.role not in (notification.target_roles or []):
        return False
    if not include_read and notification.is_read:
        return False
    if notification.user_id and notification.user_id != actor.user_id:
        return False
    if notification.expires_at and notification.expires_at <= now:
        return False
    if not notification.target_departments:
        return True
    if not actor.department_id:
        return False
    return actor.department_id in notification.target_departments


def list_notifications(actor, limit=6, include_read=False):
    # target_roles is a JSON list, so role matching happens in Python
    candidates = (
        Notification.query
        .filter((Notification.user_id.is_(None)) | (Notification.user_id == actor.user_id))
        .order_by(Notification.created_at.desc())
        .all()
    )
    now = utcnow()
    visible = [n for n in candidates if is_visible_to(n, actor, now, include_read)]
    return visible[:limit]


def list_sent_notifications(sender, limit=6):
    return (
        Notification.query
        .filter_by(created_by=sender.user_id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
        .all()
    )


def set_read_state(actor, notification_id, is_read):
    notification = db.session.get(Notification, notification_id)
    if not notification or not is_visible_to(notification, actor, include_read=True):
        raise AuthorizationError("Notification not found")

    notification.is_read = bool(is_read)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise StoreError()
    return notification


def resend_notification(sender, notification_id):
    original = db.session.get(Notification, notification_id)
    if not original or original.created_by != sender.user_id or not original.user_id:
        raise AuthorizationError("Notification not found")

    copy = Notification(
        created_by=sender.user_id,
        title=original.title,
        message=original.message,
        type=original.type,
        target_roles=list(original.target_roles),
        target_departments=list(original.target_departments) if original.target_departments else None,
        user_id=original.user_id
    )
    try:
        db.session.add(copy)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise StoreError()
    return copy
