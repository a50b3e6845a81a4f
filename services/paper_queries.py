from extensions import db
from models import Department, ExamPaper, Subject
from services.anonymizer import anonymize_for_review
from services.storage import get_storage
from utils.errors import AuthorizationError

REVIEW_STATUSES = ("pending_review", "approved", "rejected", "locked")


def _iso(value):
    return value.isoformat() if value else None


def list_review_papers(actor):
    if actor.role != "hod" or not actor.department_id:
        raise AuthorizationError("Only the department HOD can review papers")

    papers = (
        ExamPaper.query
        .join(Subject, ExamPaper.subject_id == Subject.id)
        .filter(
            Subject.department_id == actor.department_id,
            ExamPaper.status.in_(REVIEW_STATUSES)
        )
        .order_by(ExamPaper.uploaded_at.desc(), ExamPaper.id)
        .all()
    )
    return anonymize_for_review(papers)


def teacher_paper_dict(paper):
    subject = paper.subject
    return {
        "id": paper.id,
        "subject_id": paper.subject_id,
        "subject_name": subject.name if subject else "Unknown Subject",
        "subject_code": subject.code if subject else "",
        "department_id": subject.department_id if subject else None,
        "exam_type": paper.exam_type,
        "set_name": paper.set_name,
        "status": paper.status,
        "uploaded_by": paper.uploaded_by,
        "deadline": _iso(paper.deadline),
        "uploaded_at": _iso(paper.uploaded_at),
        "version": paper.version,
        "feedback": paper.feedback,
        "approved_at": _iso(paper.approved_at),
    }


def list_teacher_papers(actor):
    if actor.role != "teacher":
        raise AuthorizationError("Only teachers have submissions")

    # rejected papers are replaced by a new upload, not tracked here
    papers = ExamPaper.query.filter(
        ExamPaper.uploaded_by == actor.user_id,
        ExamPaper.status != "rejected"
    ).order_by(ExamPaper.uploaded_at.desc(), ExamPaper.id).all()
    return [teacher_paper_dict(p) for p in papers]


def list_selected_papers(actor):
    if actor.role != "exam_cell":
        raise AuthorizationError("Only the examination cell can access locked papers")

    rows = (
        db.session.query(ExamPaper, Subject, Department)
        .join(Subject, ExamPaper.subject_id == Subject.id)
        .join(Department, Subject.department_id == Department.id)
        .filter(ExamPaper.status == "locked", ExamPaper.is_selected.is_(True))
        .order_by(Department.name, Subject.semester, Subject.name)
        .all()
    )
    return [
        {
            "id": paper.id,
            "subject_id": subject.id,
            "subject_name": subject.name,
            "subject_code": subject.code,
            "semester": subject.semester,
            "department": department.name,
            "exam_type": paper.exam_type,
            "set_name": paper.set_name,
            "version": paper.version,
            "approved_at": _iso(paper.approved_at),
        } for paper, subject, department in rows
    ]


def _can_open(actor, paper):
    if actor.role == "teacher":
        return paper.uploaded_by == actor.user_id
    if actor.role == "hod":
        return bool(actor.department_id) and paper.subject.department_id == actor.department_id
    if actor.role == "exam_cell":
        return paper.status == "locked" and paper.is_selected
    return False


def open_paper_file(actor, paper_id):
    """Return (absolute path, download name) for a paper the actor may read."""
    paper = db.session.get(ExamPaper, paper_id)
    if not paper or not paper.file_path or not _can_open(actor, paper):
        raise AuthorizationError("You are not allowed to open this paper")

    path = get_storage().path_for(paper.file_path)
    download_name = f"{paper.subject.code}_{paper.exam_type}_{paper.set_name}_v{paper.version}.pdf"
    return path, download_name
