"""
Privileged account handlers.

Both endpoints take a bearer token, look the caller's role up in
``user_roles`` and only then read the JSON body. Responses follow a fixed
contract: 401 plain text without a valid token, 403 plain text for the wrong
role, 400 ``{"error": ...}`` for anything the action rejects, 200 otherwise.
"""
import logging

from flask import Blueprint, jsonify, request

from services.actor import Actor
from services.auth_service import user_from_token
from services.roster_service import add_teacher, remove_teacher
from services.user_admin_service import create_user, delete_user, update_user
from utils.errors import AuthorizationError, PortalError

logger = logging.getLogger(__name__)

function_bp = Blueprint("functions", __name__, url_prefix="/functions")


def bearer_caller():
    header = request.headers.get("Authorization", "")
    token = header.replace("Bearer ", "", 1).strip()
    if not token:
        return None
    return user_from_token(token)


def error_response(exc):
    # 403 only for authorization failures; every other rejection is a 400
    status = 403 if isinstance(exc, AuthorizationError) else 400
    return jsonify({"error": exc.message}), status


@function_bp.route("/admin-users", methods=["POST"])
def admin_users():
    caller = bearer_caller()
    if not caller:
        return "Unauthorized", 401
    if caller.role != "admin":
        return "Forbidden", 403

    actor = Actor.from_user(caller)
    body = request.get_json(silent=True) or {}
    action = body.get("action")

    try:
        if action == "create":
            user = create_user(
                actor,
                body.get("email"),
                body.get("password"),
                body.get("fullName"),
                body.get("role"),
                body.get("departmentId")
            )
            return jsonify({"success": True, "userId": user.id})

        if action == "update":
            update_user(
                actor,
                body.get("userId"),
                body.get("email"),
                body.get("fullName"),
                body.get("role"),
                body.get("departmentId"),
                password=body.get("password")
            )
            return jsonify({"success": True})

        if action == "delete":
            delete_user(actor, body.get("userId"))
            return jsonify({"success": True})
    except PortalError as exc:
        logger.warning("admin-users %s rejected: %s", action, exc.message)
        return error_response(exc)

    return jsonify({"error": "Invalid action"}), 400


@function_bp.route("/hod-teachers", methods=["POST"])
def hod_teachers():
    caller = bearer_caller()
    if not caller:
        return "Unauthorized", 401
    if caller.role != "hod":
        return "Forbidden", 403

    actor = Actor.from_user(caller)
    body = request.get_json(silent=True) or {}
    action = body.get("action")

    try:
        if action == "add":
            status, teacher_id = add_teacher(
                actor,
                body.get("email"),
                full_name=body.get("fullName"),
                password=body.get("password")
            )
            return jsonify({"success": True, "status": status, "teacherId": teacher_id})

        if action == "remove":
            remove_teacher(actor, body.get("teacherId"))
            return jsonify({"success": True})
    except PortalError as exc:
        logger.warning("hod-teachers %s rejected: %s", action, exc.message)
        return error_response(exc)

    return jsonify({"error": "Invalid action"}), 400
