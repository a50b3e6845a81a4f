import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from extensions import db
from models import Department, Subject, User
from utils.errors import ReferentialIntegrityError, StoreError, ValidationError
from utils.validation import require_text

logger = logging.getLogger(__name__)


def list_departments():
    departments = Department.query.order_by(Department.name).all()

    subject_counts = dict(
        db.session.query(Subject.department_id, func.count(Subject.id))
        .group_by(Subject.department_id)
        .all()
    )
    user_counts = dict(
        db.session.query(User.department_id, func.count(User.id))
        .filter(User.department_id.isnot(None))
        .group_by(User.department_id)
        .all()
    )

    return [
        {
            "id": d.id,
            "name": d.name,
            "code": d.code,
            "created_at": d.created_at.isoformat() if d.created_at else None,
            "subjects_count": subject_counts.get(d.id, 0),
            "users_count": user_counts.get(d.id, 0),
        } for d in departments
    ]


def create_department(name, code):
    name = require_text(name, "Department name", max_length=100)
    code = require_text(code, "Department code", max_length=20).upper()

    if Department.query.filter_by(code=code).first():
        raise ValidationError(f"Department code '{code}' already exists.")

    department = Department(name=name, code=code)
    try:
        db.session.add(department)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Department create failed for %s", code)
        raise StoreError()
    return department


def delete_department(department_id):
    department = db.session.get(Department, department_id)
    if not department:
        raise ValidationError("Department not found")

    linked_users = User.query.filter_by(department_id=department_id).count()
    linked_subjects = Subject.query.filter_by(department_id=department_id).count()
    if linked_users or linked_subjects:
        raise ReferentialIntegrityError(
            f"Department still has {linked_users} user(s) and {linked_subjects} subject(s)"
        )

    try:
        db.session.delete(department)
        db.session.commit()
    except IntegrityError:
        # something got linked between the check and the delete
        db.session.rollback()
        raise ReferentialIntegrityError("Department is still referenced and cannot be deleted")
    except SQLAlchemyError:
        db.session.rollback()
        raise StoreError()


def list_subjects(department_id=None):
    query = Subject.query
    if department_id:
        query = query.filter_by(department_id=department_id)
    return [s.to_dict() for s in query.order_by(Subject.semester, Subject.name).all()]


def create_subject(name, code, semester, department_id):
    name = require_text(name, "Subject name", max_length=100)
    code = require_text(code, "Subject code", max_length=20)
    try:
        semester = int(semester)
    except (TypeError, ValueError):
        raise ValidationError("Semester must be a valid number.")
    if semester < 1:
        raise ValidationError("Semester must be a positive number.")

    if not db.session.get(Department, department_id or ""):
        raise ValidationError("Department not found")
    if Subject.query.filter_by(code=code).first():
        raise ValidationError(f"Subject code '{code}' already exists.")

    subject = Subject(name=name, code=code, semester=semester, department_id=department_id)
    try:
        db.session.add(subject)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise StoreError()
    return subject
