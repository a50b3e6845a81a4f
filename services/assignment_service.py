import logging

from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import Subject, TeacherSubject, User, UserRole
from utils.errors import AuthorizationError, StoreError, ValidationError

logger = logging.getLogger(__name__)


def _department_subject_ids(department_id):
    rows = db.session.query(Subject.id).filter_by(department_id=department_id).all()
    return {row[0] for row in rows}


def _department_teacher_ids(department_id):
    rows = (
        db.session.query(User.id)
        .join(UserRole, UserRole.user_id == User.id)
        .filter(User.department_id == department_id, UserRole.role == "teacher")
        .all()
    )
    return {row[0] for row in rows}


def _require_hod(actor):
    if actor.role != "hod" or not actor.department_id:
        raise AuthorizationError("Only the department HOD can assign subjects")


def _apply_diff(pairs_to_add, pairs_to_remove):
    try:
        for teacher_id, subject_id in pairs_to_add:
            db.session.add(TeacherSubject(teacher_id=teacher_id, subject_id=subject_id))
        for teacher_id, subject_id in pairs_to_remove:
            TeacherSubject.query.filter_by(
                teacher_id=teacher_id, subject_id=subject_id
            ).delete(synchronize_session=False)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Assignment update failed")
        raise StoreError()


def set_teacher_subjects(actor, teacher_id, subject_ids):
    """Make a teacher's assignment set equal to ``subject_ids``."""
    _require_hod(actor)
    if teacher_id not in _department_teacher_ids(actor.department_id):
        raise AuthorizationError("Teacher is not in your department")

    wanted = set(subject_ids or [])
    if not wanted <= _department_subject_ids(actor.department_id):
        raise ValidationError("Subjects must belong to your department")

    current = {
        row.subject_id for row in TeacherSubject.query.filter_by(teacher_id=teacher_id).all()
    }
    _apply_diff(
        [(teacher_id, s) for s in sorted(wanted - current)],
        [(teacher_id, s) for s in sorted(current - wanted)]
    )
    return sorted(wanted)


def set_subject_teachers(actor, subject_id, teacher_ids):
    """Make a subject's teacher set equal to ``teacher_ids``."""
    _require_hod(actor)
    if subject_id not in _department_subject_ids(actor.department_id):
        raise AuthorizationError("Subject is not in your department")

    wanted = set(teacher_ids or [])
    if not wanted <= _department_teacher_ids(actor.department_id):
        raise ValidationError("Teachers must belong to your department")

    current = {
        row.teacher_id for row in TeacherSubject.query.filter_by(subject_id=subject_id).all()
    }
    _apply_diff(
        [(t, subject_id) for t in sorted(wanted - current)],
        [(t, subject_id) for t in sorted(current - wanted)]
    )
    return sorted(wanted)
