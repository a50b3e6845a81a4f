import logging
from io import BytesIO

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import Department, Exam, ExamPaper, ExamSession, Subject
from models.enums import EXAM_STATUSES, EXAM_TYPES
from utils.errors import AuthorizationError, StoreError, ValidationError
from utils.validation import parse_datetime, require_choice, require_text

logger = logging.getLogger(__name__)

SESSION_WINDOWS = ("submission", "review", "access")
SCHEDULE_COLUMNS = [
    "Department", "Subject Code", "Subject", "Semester",
    "Exam Type", "Scheduled", "Unlocks At", "Status"
]


def _require_role(actor, *roles):
    if actor.role not in roles:
        raise AuthorizationError("You are not allowed to manage exam schedules")


def _commit(what):
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Exam schedule %s failed", what)
        raise StoreError()


# =========================================================
# EXAM SESSIONS
# =========================================================

def _apply_session_fields(session, data):
    if "name" in data:
        session.name = require_text(data.get("name"), "Session name", max_length=150)
    if "academic_year" in data:
        session.academic_year = require_text(data.get("academic_year"), "Academic year", max_length=9)
    if "exam_type" in data:
        session.exam_type = require_choice(data.get("exam_type"), EXAM_TYPES, "exam type")
    for window in SESSION_WINDOWS:
        for edge in ("start", "end"):
            field = f"{window}_{edge}"
            if field in data:
                setattr(session, field, parse_datetime(data.get(field), field.replace("_", " ").capitalize()))
    if "is_active" in data:
        session.is_active = bool(data.get("is_active"))
    if "is_locked" in data:
        session.is_locked = bool(data.get("is_locked"))

    for window in SESSION_WINDOWS:
        start = getattr(session, f"{window}_start")
        end = getattr(session, f"{window}_end")
        if start is None or end is None:
            raise ValidationError(f"The {window} window needs a start and an end")
        if start >= end:
            raise ValidationError(f"The {window} window must start before it ends")


def list_sessions(actor):
    _require_role(actor, "admin", "exam_cell")
    sessions = ExamSession.query.order_by(ExamSession.created_at.desc()).all()
    return [s.to_dict() for s in sessions]


def create_session(actor, data):
    _require_role(actor, "admin", "exam_cell")
    required = ["name", "academic_year", "exam_type"] + [
        f"{w}_{e}" for w in SESSION_WINDOWS for e in ("start", "end")
    ]
    missing = [field for field in required if not data.get(field)]
    if missing:
        raise ValidationError(f"Missing fields: {', '.join(missing)}")

    session = ExamSession(created_by=actor.user_id, is_active=True, is_locked=False)
    _apply_session_fields(session, data)
    db.session.add(session)
    _commit("session create")
    return session


def update_session(actor, session_id, data):
    _require_role(actor, "admin", "exam_cell")
    session = db.session.get(ExamSession, session_id)
    if not session:
        raise ValidationError("Exam session not found")
    _apply_session_fields(session, data)
    _commit("session update")
    return session


def delete_session(actor, session_id):
    _require_role(actor, "admin", "exam_cell")
    session = db.session.get(ExamSession, session_id)
    if not session:
        raise ValidationError("Exam session not found")
    db.session.delete(session)
    _commit("session delete")


# =========================================================
# EXAM SCHEDULE
# =========================================================

def schedule_exam(actor, paper_id, scheduled_date, unlock_time):
    """Schedule the exam that will use a selected and locked paper."""
    _require_role(actor, "exam_cell")
    scheduled_date = parse_datetime(scheduled_date, "Scheduled date")
    unlock_time = parse_datetime(unlock_time, "Unlock time")
    if unlock_time >= scheduled_date:
        raise ValidationError("Unlock time must be before the scheduled date")

    paper = db.session.get(ExamPaper, paper_id or "")
    if not paper or paper.status != "locked" or not paper.is_selected:
        raise ValidationError("Only a selected and locked paper can be scheduled")

    exam = Exam.query.filter_by(subject_id=paper.subject_id, exam_type=paper.exam_type).first()
    if exam and exam.status != "scheduled":
        raise ValidationError(f"This exam is already {exam.status.replace('_', ' ')}")
    if not exam:
        exam = Exam(subject_id=paper.subject_id, exam_type=paper.exam_type)
        db.session.add(exam)

    exam.paper_id = paper.id
    exam.scheduled_date = scheduled_date
    exam.unlock_time = unlock_time
    exam.status = "scheduled"
    _commit("schedule")

    logger.info("Exam %s/%s scheduled for %s", paper.subject_id, paper.exam_type, scheduled_date)
    return exam


def update_exam_status(actor, exam_id, status):
    _require_role(actor, "exam_cell")
    require_choice(status, EXAM_STATUSES, "exam status")
    exam = db.session.get(Exam, exam_id)
    if not exam:
        raise ValidationError("Exam not found")
    exam.status = status
    _commit("status update")
    return exam


def list_schedule(actor, include_archived=False):
    _require_role(actor, "exam_cell", "admin")
    query = Exam.query
    if not include_archived:
        query = query.filter(Exam.status != "archived")
    return [e.to_dict() for e in query.order_by(Exam.scheduled_date).all()]


def _schedule_rows():
    rows = (
        db.session.query(Exam, Subject, Department)
        .join(Subject, Exam.subject_id == Subject.id)
        .join(Department, Subject.department_id == Department.id)
        .filter(Exam.status != "archived")
        .order_by(Exam.scheduled_date)
        .all()
    )
    return [
        [
            department.code,
            subject.code,
            subject.name,
            subject.semester,
            exam.exam_type.replace("_", " ").title(),
            exam.scheduled_date.strftime("%Y-%m-%d %H:%M"),
            exam.unlock_time.strftime("%Y-%m-%d %H:%M"),
            exam.status.replace("_", " ").title(),
        ] for exam, subject, department in rows
    ]


def export_schedule_xlsx(actor):
    _require_role(actor, "exam_cell", "admin")
    df = pd.DataFrame(_schedule_rows(), columns=SCHEDULE_COLUMNS)

    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Exam Schedule")
    output.seek(0)
    return output


def export_schedule_pdf(actor):
    _require_role(actor, "exam_cell", "admin")

    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=landscape(A4))
    styles = getSampleStyleSheet()
    elements = [Paragraph("Examination Schedule", styles["Title"]), Spacer(1, 12)]

    rows = _schedule_rows()
    if rows:
        table = Table([SCHEDULE_COLUMNS] + [[str(cell) for cell in row] for row in rows])
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
            ("ALIGN", (0, 0), (-1, -1), "CENTER"),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("BOTTOMPADDING", (0, 0), (-1, 0), 12),
            ("BACKGROUND", (0, 1), (-1, -1), colors.beige),
            ("GRID", (0, 0), (-1, -1), 1, colors.black),
        ]))
        elements.append(table)
    else:
        elements.append(Paragraph("No exams scheduled", styles["Normal"]))

    doc.build(elements)
    buffer.seek(0)
    return buffer
