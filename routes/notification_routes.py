from flask import Blueprint, jsonify, request
from flask_login import login_required

from services.notification_service import list_notifications, set_read_state
from utils.decorators import current_actor

notification_bp = Blueprint("notifications", __name__, url_prefix="/notifications")


@notification_bp.route("")
@login_required
def inbox():
    limit = request.args.get("limit", 6, type=int)
    include_read = request.args.get("include_read", "").lower() in ("1", "true", "yes")
    rows = list_notifications(current_actor(), limit=limit, include_read=include_read)
    return jsonify([n.to_dict() for n in rows])


@notification_bp.route("/<notification_id>/read", methods=["POST"])
@login_required
def mark_read(notification_id):
    data = request.get_json(silent=True) or {}
    notification = set_read_state(current_actor(), notification_id, data.get("is_read", True))
    return jsonify({"status": "success", "is_read": notification.is_read})
