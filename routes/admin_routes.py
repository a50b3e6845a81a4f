from flask import Blueprint, current_app, jsonify, request

from services.department_service import (
    create_department, create_subject, delete_department, list_departments, list_subjects
)
from services.notification_service import create_notification, list_sent_notifications
from services.stats_service import admin_stats
from services.user_admin_service import list_users
from utils.decorators import current_actor, role_required

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")

# Account create/update/delete lives in the privileged /functions/admin-users handler.
# Admins have no access to paper content or paper state.


@admin_bp.route("/stats")
@role_required("admin")
def stats():
    return jsonify(admin_stats(current_app.config["AUDIT_RECENT_LIMIT"]))


@admin_bp.route("/users")
@role_required("admin")
def users():
    return jsonify(list_users())

# =========================================================
# DEPARTMENTS
# =========================================================

@admin_bp.route("/departments")
@role_required("admin")
def departments():
    return jsonify(list_departments())


@admin_bp.route("/departments", methods=["POST"])
@role_required("admin")
def add_department():
    data = request.get_json(silent=True) or {}
    department = create_department(data.get("name"), data.get("code"))
    return jsonify({"status": "success", "id": department.id}), 201


@admin_bp.route("/departments/<department_id>", methods=["DELETE"])
@role_required("admin")
def remove_department(department_id):
    delete_department(department_id)
    return jsonify({"status": "deleted"})

# =========================================================
# SUBJECTS
# =========================================================

@admin_bp.route("/subjects")
@role_required("admin")
def subjects():
    return jsonify(list_subjects(request.args.get("department_id")))


@admin_bp.route("/subjects", methods=["POST"])
@role_required("admin")
def add_subject():
    data = request.get_json(silent=True) or {}
    subject = create_subject(
        data.get("name"),
        data.get("code"),
        data.get("semester"),
        data.get("department_id")
    )
    return jsonify({"status": "success", "subject": subject.to_dict()}), 201

# =========================================================
# ANNOUNCEMENTS
# =========================================================

@admin_bp.route("/notifications", methods=["POST"])
@role_required("admin")
def announce():
    data = request.get_json(silent=True) or {}
    notification = create_notification(
        current_actor(),
        data.get("title"),
        data.get("message"),
        data.get("target_roles") or [],
        target_departments=data.get("target_departments"),
        notification_type=data.get("type", "info"),
        expires_at=data.get("expires_at")
    )
    return jsonify({"status": "success", "notification": notification.to_dict()}), 201


@admin_bp.route("/notifications")
@role_required("admin")
def sent_notifications():
    limit = request.args.get("limit", 6, type=int)
    return jsonify([n.to_dict() for n in list_sent_notifications(current_actor(), limit=limit)])
