import logging
import uuid

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import ExamPaper, Subject, TeacherSubject
from models.enums import EXAM_TYPES
from services.audit_service import record_audit
from services.paper_lifecycle import next_status
from services.storage import get_storage
from utils.errors import AuthorizationError, StoreError, ValidationError
from utils.validation import parse_datetime, require_choice, require_text

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"


def validate_paper_file(filename, header, size, max_size):
    """Reject anything that is not a PDF within the size cap."""
    if not filename:
        raise ValidationError("PDF file required")
    if not filename.lower().endswith(".pdf"):
        raise ValidationError("Only PDF files are allowed")
    if size == 0:
        raise ValidationError("Uploaded file is empty")
    if size > max_size:
        limit_mb = max_size // (1024 * 1024)
        raise ValidationError(f"File exceeds the {limit_mb}MB limit")
    if not header.startswith(PDF_MAGIC):
        raise ValidationError("File is not a valid PDF document")


def assigned_subject_ids(teacher_id):
    rows = db.session.query(TeacherSubject.subject_id).filter_by(teacher_id=teacher_id).all()
    return {row[0] for row in rows}


def teacher_subjects(actor):
    if actor.role != "teacher":
        raise AuthorizationError("Only teachers have subject assignments")
    subjects = (
        Subject.query
        .join(TeacherSubject, TeacherSubject.subject_id == Subject.id)
        .filter(TeacherSubject.teacher_id == actor.user_id)
        .order_by(Subject.semester, Subject.name)
        .all()
    )
    return [s.to_dict() for s in subjects]


def _next_version(actor, subject_id, exam_type, set_name):
    current = db.session.query(func.max(ExamPaper.version)).filter(
        ExamPaper.uploaded_by == actor.user_id,
        ExamPaper.subject_id == subject_id,
        ExamPaper.exam_type == exam_type,
        ExamPaper.set_name == set_name
    ).scalar()
    return (current or 0) + 1


def upload_paper(actor, subject_id, exam_type, set_name, deadline, file):
    """
    Store a teacher's paper and create its record in ``pending_review``.

    Every check runs before the blob or the row is written. If the row
    cannot be saved the blob is removed again.
    """
    if actor.role != "teacher":
        raise AuthorizationError("Only teachers can upload papers")

    subject_id = require_text(subject_id, "Subject")
    require_choice(exam_type, EXAM_TYPES, "exam type")
    set_name = require_text(set_name, "Set name", max_length=50)
    deadline = parse_datetime(deadline, "Deadline")

    max_size = current_app.config["MAX_PAPER_SIZE"]
    filename = getattr(file, "filename", None) if file else None
    # one byte past the cap is enough to know it is too big
    data = file.read(max_size + 1) if filename else b""
    validate_paper_file(filename, data[:len(PDF_MAGIC)], len(data), max_size)

    if subject_id not in assigned_subject_ids(actor.user_id):
        raise AuthorizationError("You are not assigned to this subject")

    paper_id = str(uuid.uuid4())
    storage_key = f"{actor.user_id}/{paper_id}.pdf"
    storage = get_storage()

    try:
        storage.save(storage_key, data)
    except OSError:
        logger.exception("Blob write failed for paper %s", paper_id)
        raise StoreError("Failed to upload file. Please try again.")

    paper = ExamPaper(
        id=paper_id,
        subject_id=subject_id,
        exam_type=exam_type,
        set_name=set_name,
        deadline=deadline,
        file_path=storage_key,
        uploaded_by=actor.user_id,
        version=_next_version(actor, subject_id, exam_type, set_name),
        status=next_status(None, "upload")
    )
    try:
        db.session.add(paper)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        storage.remove(storage_key)
        logger.exception("Paper record insert failed for %s", paper_id)
        raise StoreError("Failed to save paper record. Please try again.")

    logger.info("Paper %s uploaded by %s (v%s)", paper_id, actor.user_id, paper.version)
    record_audit(
        actor.user_id, "upload", "paper", paper_id,
        {
            "subject_id": subject_id,
            "exam_type": exam_type,
            "set_name": set_name,
            "file_name": filename,
            "file_size": len(data),
        }
    )
    return paper
