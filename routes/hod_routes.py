from flask import Blueprint, jsonify, request

from services.assignment_service import set_subject_teachers, set_teacher_subjects
from services.department_service import list_subjects
from services.notification_service import (
    broadcast, count_recipients, list_sent_notifications, resend_notification
)
from services.paper_lifecycle import approve_paper, reject_paper, select_paper
from services.paper_queries import list_review_papers
from services.roster_service import list_department_teachers
from utils.decorators import current_actor, role_required

hod_bp = Blueprint("hod", __name__, url_prefix="/hod")


def paper_state(paper):
    return {
        "id": paper.id,
        "status": paper.status,
        "is_selected": paper.is_selected,
        "feedback": paper.feedback,
    }

# =========================================================
# PAPER REVIEW
# =========================================================

@hod_bp.route("/papers")
@role_required("hod")
def review_papers():
    return jsonify(list_review_papers(current_actor()))


@hod_bp.route("/papers/<paper_id>/approve", methods=["POST"])
@role_required("hod")
def approve(paper_id):
    paper = approve_paper(current_actor(), paper_id)
    return jsonify({"status": "success", "message": "Paper approved successfully", "paper": paper_state(paper)})


@hod_bp.route("/papers/<paper_id>/reject", methods=["POST"])
@role_required("hod")
def reject(paper_id):
    data = request.get_json(silent=True) or {}
    paper = reject_paper(current_actor(), paper_id, data.get("feedback"))
    return jsonify({"status": "success", "message": "Paper rejected with feedback", "paper": paper_state(paper)})


@hod_bp.route("/papers/<paper_id>/select", methods=["POST"])
@role_required("hod")
def select(paper_id):
    data = request.get_json(silent=True) or {}
    paper = select_paper(
        current_actor(),
        paper_id,
        data.get("subject_id"),
        data.get("exam_type")
    )
    return jsonify({"status": "success", "message": "Paper selected and locked", "paper": paper_state(paper)})

# =========================================================
# DEPARTMENT: SUBJECTS, TEACHERS, ASSIGNMENTS
# =========================================================

@hod_bp.route("/subjects")
@role_required("hod")
def department_subjects():
    return jsonify(list_subjects(current_actor().department_id))


@hod_bp.route("/teachers")
@role_required("hod")
def department_teachers():
    return jsonify(list_department_teachers(current_actor()))


@hod_bp.route("/teachers/<teacher_id>/subjects", methods=["PUT"])
@role_required("hod")
def assign_subjects(teacher_id):
    data = request.get_json(silent=True) or {}
    subject_ids = set_teacher_subjects(current_actor(), teacher_id, data.get("subject_ids", []))
    return jsonify({"status": "success", "subject_ids": subject_ids})


@hod_bp.route("/subjects/<subject_id>/teachers", methods=["PUT"])
@role_required("hod")
def assign_teachers(subject_id):
    data = request.get_json(silent=True) or {}
    teacher_ids = set_subject_teachers(current_actor(), subject_id, data.get("teacher_ids", []))
    return jsonify({"status": "success", "teacher_ids": teacher_ids})

# =========================================================
# ALERTS
# =========================================================

@hod_bp.route("/alerts/recipients", methods=["POST"])
@role_required("hod")
def alert_recipients():
    data = request.get_json(silent=True) or {}
    count = count_recipients(
        current_actor(),
        data.get("target_mode", "department"),
        subject_ids=data.get("subject_ids")
    )
    return jsonify({"recipient_count": count})


@hod_bp.route("/alerts", methods=["POST"])
@role_required("hod")
def send_alert():
    data = request.get_json(silent=True) or {}
    count = broadcast(
        current_actor(),
        data.get("title"),
        data.get("message"),
        data.get("type", "info"),
        data.get("target_mode", "department"),
        subject_ids=data.get("subject_ids")
    )
    if count == 0:
        return jsonify({"error": "No teachers match the selected criteria.", "recipient_count": 0}), 400
    return jsonify({"status": "success", "recipient_count": count})


@hod_bp.route("/alerts")
@role_required("hod")
def sent_alerts():
    limit = request.args.get("limit", 6, type=int)
    sent = list_sent_notifications(current_actor(), limit=limit)
    return jsonify([n.to_dict() for n in sent if "teacher" in (n.target_roles or [])])


@hod_bp.route("/alerts/<notification_id>/resend", methods=["POST"])
@role_required("hod")
def resend_alert(notification_id):
    notification = resend_notification(current_actor(), notification_id)
    return jsonify({"status": "success", "notification": notification.to_dict()})
