"""
Paper review workflow.

``next_status`` is the whole state machine; the guarded operations below load
the paper, check the actor, ask ``next_status`` for the new state and write it.

    (new) --upload--> pending_review --approve--> approved --select--> locked
                            |                        |
                            +--reject--> rejected <--+ cascade_reject

Nothing leaves ``locked`` and nothing returns to ``pending_review``; a
replacement paper is a new upload.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import ExamPaper, Subject
from models.enums import EXAM_TYPES
from models.exam_paper import selection_key_for
from services.audit_service import record_audit
from utils.clock import utcnow
from utils.errors import (
    AuthorizationError, InvalidTransitionError, StoreError, ValidationError
)

logger = logging.getLogger(__name__)

TRANSITIONS = {
    (None, "upload"): "pending_review",
    ("pending_review", "approve"): "approved",
    ("pending_review", "reject"): "rejected",
    ("approved", "select"): "locked",
    ("approved", "cascade_reject"): "rejected",
}

CASCADE_FEEDBACK = "Another paper was selected for this exam"


def next_status(current, event):
    try:
        return TRANSITIONS[(current, event)]
    except KeyError:
        raise InvalidTransitionError(
            f"Cannot {event.replace('_', ' ')} a paper that is {current or 'new'}"
        )


def _require_hod(actor):
    if actor.role != "hod" or not actor.department_id:
        raise AuthorizationError("Only the department HOD can review papers")


def _load_department_paper(actor, paper_id):
    # Missing and out-of-department papers look the same to the caller
    paper = (
        ExamPaper.query
        .join(Subject, ExamPaper.subject_id == Subject.id)
        .filter(
            ExamPaper.id == paper_id,
            Subject.department_id == actor.department_id
        )
        .with_for_update(of=ExamPaper)
        .first()
    )
    if not paper:
        raise AuthorizationError("You are not allowed to act on this paper")
    return paper


def _commit(action, paper_id):
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Store error during %s of paper %s", action, paper_id)
        raise StoreError()


def approve_paper(actor, paper_id):
    _require_hod(actor)
    paper = _load_department_paper(actor, paper_id)

    paper.status = next_status(paper.status, "approve")
    paper.approved_by = actor.user_id
    paper.approved_at = utcnow()
    _commit("approve", paper_id)

    logger.info("Paper %s approved by %s", paper_id, actor.user_id)
    record_audit(
        actor.user_id, "approve", "paper", paper_id,
        {"action": "Paper approved by HOD"}
    )
    return paper


def reject_paper(actor, paper_id, feedback):
    _require_hod(actor)
    if not isinstance(feedback, str) or not feedback.strip():
        raise ValidationError("Feedback is required when rejecting a paper")
    feedback = feedback.strip()

    paper = _load_department_paper(actor, paper_id)
    paper.status = next_status(paper.status, "reject")
    paper.feedback = feedback
    _commit("reject", paper_id)

    logger.info("Paper %s rejected by %s", paper_id, actor.user_id)
    record_audit(
        actor.user_id, "reject", "paper", paper_id,
        {"action": "Paper rejected by HOD", "feedback": feedback}
    )
    return paper


def select_paper(actor, paper_id, subject_id, exam_type):
    """
    Select an approved paper for its exam and lock it.

    Runs as one transaction over the (subject, exam type) group:
    clear every other selection, lock the target, then reject the
    other approved papers. Pending and already rejected papers are left
    alone. The unique ``selection_key`` column backs this up at the
    storage layer if two selections race.
    """
    _require_hod(actor)
    if exam_type not in EXAM_TYPES:
        raise ValidationError(f"Invalid exam type: {exam_type!r}")

    paper = _load_department_paper(actor, paper_id)
    if paper.subject_id != subject_id or paper.exam_type != exam_type:
        raise ValidationError("Paper does not belong to this subject and exam type")

    if paper.status == "locked" and paper.is_selected:
        # Replay of a selection that already went through
        return paper

    new_status = next_status(paper.status, "select")
    group_key = selection_key_for(subject_id, exam_type)

    others = ExamPaper.query.filter(
        ExamPaper.subject_id == subject_id,
        ExamPaper.exam_type == exam_type,
        ExamPaper.id != paper.id
    )
    siblings = others.with_for_update().all()

    if any(s.is_selected and s.status == "locked" for s in siblings):
        raise InvalidTransitionError("Another paper is already selected and locked for this exam")

    cascaded = [s.id for s in siblings if s.status == "approved"]
    for sibling in siblings:
        if sibling.status == "approved":
            next_status(sibling.status, "cascade_reject")

    try:
        # 1. clear any other selection in the group
        others.update(
            {ExamPaper.is_selected: False, ExamPaper.selection_key: None},
            synchronize_session=False
        )

        # 2. select and lock the target
        paper.is_selected = True
        paper.selection_key = group_key
        paper.status = new_status
        db.session.flush()

        # 3. reject the approved siblings
        if cascaded:
            others.filter(
                ExamPaper.id.in_(cascaded),
                ExamPaper.status == "approved"
            ).update(
                {ExamPaper.status: "rejected", ExamPaper.feedback: CASCADE_FEEDBACK},
                synchronize_session=False
            )

        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Selection of paper %s failed, nothing was applied", paper_id)
        raise StoreError("Selection failed, no paper was changed. Please try again")

    logger.info(
        "Paper %s selected for %s; %d sibling(s) rejected",
        paper_id, group_key, len(cascaded)
    )
    record_audit(
        actor.user_id, "select", "paper", paper_id,
        {"action": "Paper selected and locked by HOD", "rejected_papers": cascaded}
    )
    return paper
