"""
Shared fixtures.

The app fixture never leaves an app context pushed, so every test client
request gets a fresh ``g`` and resolves its own bearer token. Tests that call
services directly ask for ``ctx`` instead.
"""
from contextlib import nullcontext
from datetime import datetime
from types import SimpleNamespace

import pytest
from flask import has_app_context
from werkzeug.security import generate_password_hash

from app import create_app
from config.config import TestConfig
from extensions import db
from models import Department, ExamPaper, Subject, TeacherSubject, User, UserRole
from services.actor import Actor
from services.auth_service import create_token
from tests.helpers import PASSWORD


@pytest.fixture
def app(tmp_path):
    app = create_app(TestConfig)
    app.config["UPLOAD_FOLDER"] = str(tmp_path / "papers")

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield


def app_scope(app):
    # reuse the pushed context so fixtures and the test share one session
    return nullcontext() if has_app_context() else app.app_context()


def _make_user(email, full_name, role, department_id=None, is_active=True):
    user = User(
        email=email,
        full_name=full_name,
        password_hash=generate_password_hash(PASSWORD),
        department_id=department_id,
        is_active=is_active
    )
    user.role_assignment = UserRole(role=role)
    db.session.add(user)
    db.session.flush()
    return user


@pytest.fixture
def portal(app):
    """Two departments, three subjects and one account per role (plus spares)."""
    with app_scope(app):
        cse = Department(code="CSE", name="Computer Science")
        ece = Department(code="ECE", name="Electronics")
        db.session.add_all([cse, ece])
        db.session.flush()

        dbms = Subject(code="CS301", name="Database Systems", semester=3, department_id=cse.id)
        os_subject = Subject(code="CS302", name="Operating Systems", semester=3, department_id=cse.id)
        signals = Subject(code="EC301", name="Signals and Systems", semester=3, department_id=ece.id)
        db.session.add_all([dbms, os_subject, signals])
        db.session.flush()

        admin = _make_user("admin@college.edu", "Asha Admin", "admin")
        exam_cell = _make_user("examcell@college.edu", "Ravi Examcell", "exam_cell")
        hod = _make_user("hod.cse@college.edu", "Meera Hod", "hod", cse.id)
        ece_hod = _make_user("hod.ece@college.edu", "Kiran Hod", "hod", ece.id)
        teacher = _make_user("anil@college.edu", "Anil Kumar", "teacher", cse.id)
        teacher2 = _make_user("divya@college.edu", "Divya Rao", "teacher", cse.id)
        ece_teacher = _make_user("suresh@college.edu", "Suresh Babu", "teacher", ece.id)
        unattached = _make_user("new.teacher@college.edu", "Nisha Patel", "teacher")

        db.session.add_all([
            TeacherSubject(teacher_id=teacher.id, subject_id=dbms.id),
            TeacherSubject(teacher_id=teacher.id, subject_id=os_subject.id),
            TeacherSubject(teacher_id=teacher2.id, subject_id=dbms.id),
            TeacherSubject(teacher_id=ece_teacher.id, subject_id=signals.id),
        ])
        db.session.commit()

        users = {
            "admin": admin, "exam_cell": exam_cell, "hod": hod, "ece_hod": ece_hod,
            "teacher": teacher, "teacher2": teacher2, "ece_teacher": ece_teacher,
            "unattached": unattached,
        }
        return SimpleNamespace(
            cse=cse.id,
            ece=ece.id,
            dbms=dbms.id,
            os=os_subject.id,
            signals=signals.id,
            **{name: u.id for name, u in users.items()},
            actors={
                name: Actor(user_id=u.id, role=u.role, department_id=u.department_id)
                for name, u in users.items()
            }
        )


@pytest.fixture
def auth(app):
    """Bearer headers for a user id."""
    def _headers(user_id):
        with app_scope(app):
            token = create_token(db.session.get(User, user_id))
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def make_paper(app):
    """Insert a paper row directly, bypassing upload. Returns its id."""
    def _make(subject_id, teacher_id, exam_type="mid_term", set_name="Set A",
              status="pending_review", **fields):
        with app_scope(app):
            paper = ExamPaper(
                subject_id=subject_id,
                uploaded_by=teacher_id,
                exam_type=exam_type,
                set_name=set_name,
                status=status,
                deadline=datetime(2030, 1, 15, 10, 0),
                file_path=fields.pop("file_path", f"{teacher_id}/{set_name}.pdf"),
                **fields
            )
            db.session.add(paper)
            db.session.commit()
            return paper.id
    return _make

