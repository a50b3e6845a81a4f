"""Teacher roster changes behind the hod-teachers handler."""
import logging

from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import generate_password_hash

from extensions import db
from models import TeacherSubject, User, UserRole
from services.audit_service import record_audit
from services.user_admin_service import normalize_email, validate_password
from utils.errors import AuthorizationError, StoreError, ValidationError
from utils.validation import require_text

logger = logging.getLogger(__name__)


def _hod_department(actor):
    if actor.role != "hod":
        raise AuthorizationError()
    if not actor.department_id:
        raise ValidationError("HOD department not set")
    return actor.department_id


def _commit(what):
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Roster %s failed", what)
        raise StoreError()


def add_teacher(actor, email, full_name=None, password=None):
    """
    Attach an existing teacher to the HOD's department, or create one.

    Returns ``(status, teacher_id)`` where status is ``attached`` or ``created``.
    """
    department_id = _hod_department(actor)
    email = normalize_email(email)

    existing = User.query.filter_by(email=email).first()
    if existing:
        if existing.role != "teacher":
            raise AuthorizationError("Only teacher accounts can be added")
        if existing.department_id and existing.department_id != department_id:
            raise AuthorizationError("Teacher belongs to another department")

        existing.department_id = department_id
        _commit("attach")
        record_audit(actor.user_id, "attach_teacher", "user", existing.id, {"department_id": department_id})
        return "attached", existing.id

    full_name = (full_name or "").strip()
    password = (password or "").strip()
    if not full_name or not password:
        raise ValidationError("Full name and password are required for new accounts")
    full_name = require_text(full_name, "Full name", max_length=150)

    teacher = User(
        email=email,
        full_name=full_name,
        password_hash=generate_password_hash(validate_password(password)),
        department_id=department_id,
        is_active=True
    )
    teacher.role_assignment = UserRole(role="teacher")
    db.session.add(teacher)
    _commit("create")

    logger.info("Teacher %s created in department %s", teacher.id, department_id)
    record_audit(actor.user_id, "create_teacher", "user", teacher.id, {"department_id": department_id})
    return "created", teacher.id


def remove_teacher(actor, teacher_id):
    """Detach a teacher from the department and drop their subject assignments."""
    department_id = _hod_department(actor)
    teacher_id = require_text(teacher_id, "Teacher ID")

    teacher = db.session.get(User, teacher_id)
    if not teacher or teacher.department_id != department_id:
        raise AuthorizationError("Teacher is not in your department")
    if teacher.role != "teacher":
        raise AuthorizationError("Only teacher accounts can be removed")

    teacher.department_id = None
    TeacherSubject.query.filter_by(teacher_id=teacher_id).delete(synchronize_session=False)
    _commit("remove")

    logger.info("Teacher %s removed from department %s", teacher_id, department_id)
    record_audit(actor.user_id, "remove_teacher", "user", teacher_id, {"department_id": department_id})


def list_department_teachers(actor):
    department_id = _hod_department(actor)
    teachers = (
        User.query
        .join(UserRole, UserRole.user_id == User.id)
        .filter(User.department_id == department_id, UserRole.role == "teacher")
        .order_by(User.full_name)
        .all()
    )
    assignments = {}
    if teachers:
        rows = TeacherSubject.query.filter(
            TeacherSubject.teacher_id.in_([t.id for t in teachers])
        ).all()
        for row in rows:
            assignments.setdefault(row.teacher_id, []).append(row.subject_id)

    return [
        {
            "id": t.id,
            "full_name": t.full_name,
            "email": t.email,
            "subject_ids": sorted(assignments.get(t.id, [])),
        } for t in teachers
    ]
