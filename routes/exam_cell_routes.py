from flask import Blueprint, jsonify, request, send_file

from services import exam_schedule_service as schedule
from services.paper_queries import list_selected_papers
from utils.decorators import current_actor, role_required

exam_cell_bp = Blueprint("exam_cell", __name__, url_prefix="/exam-cell")


@exam_cell_bp.route("/papers")
@role_required("exam_cell")
def selected_papers():
    return jsonify(list_selected_papers(current_actor()))

# =========================================================
# EXAM SCHEDULE
# =========================================================

@exam_cell_bp.route("/exams")
@role_required("exam_cell", "admin")
def exams():
    include_archived = request.args.get("include_archived", "").lower() in ("1", "true", "yes")
    return jsonify(schedule.list_schedule(current_actor(), include_archived=include_archived))


@exam_cell_bp.route("/exams", methods=["POST"])
@role_required("exam_cell")
def schedule_exam():
    data = request.get_json(silent=True) or {}
    exam = schedule.schedule_exam(
        current_actor(),
        data.get("paper_id"),
        data.get("scheduled_date"),
        data.get("unlock_time")
    )
    return jsonify({"status": "success", "exam": exam.to_dict()}), 201


@exam_cell_bp.route("/exams/<exam_id>/status", methods=["POST"])
@role_required("exam_cell")
def exam_status(exam_id):
    data = request.get_json(silent=True) or {}
    exam = schedule.update_exam_status(current_actor(), exam_id, data.get("status"))
    return jsonify({"status": "success", "exam": exam.to_dict()})


@exam_cell_bp.route("/exams/export.xlsx")
@role_required("exam_cell", "admin")
def export_xlsx():
    output = schedule.export_schedule_xlsx(current_actor())
    return send_file(
        output,
        mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        as_attachment=True,
        download_name="exam_schedule.xlsx"
    )


@exam_cell_bp.route("/exams/export.pdf")
@role_required("exam_cell", "admin")
def export_pdf():
    buffer = schedule.export_schedule_pdf(current_actor())
    return send_file(
        buffer,
        mimetype="application/pdf",
        as_attachment=True,
        download_name="exam_schedule.pdf"
    )

# =========================================================
# EXAM SESSIONS
# =========================================================

@exam_cell_bp.route("/sessions")
@role_required("exam_cell", "admin")
def sessions():
    return jsonify(schedule.list_sessions(current_actor()))


@exam_cell_bp.route("/sessions", methods=["POST"])
@role_required("exam_cell", "admin")
def create_session():
    session = schedule.create_session(current_actor(), request.get_json(silent=True) or {})
    return jsonify({"status": "success", "session": session.to_dict()}), 201


@exam_cell_bp.route("/sessions/<session_id>", methods=["PATCH"])
@role_required("exam_cell", "admin")
def update_session(session_id):
    session = schedule.update_session(current_actor(), session_id, request.get_json(silent=True) or {})
    return jsonify({"status": "success", "session": session.to_dict()})


@exam_cell_bp.route("/sessions/<session_id>", methods=["DELETE"])
@role_required("exam_cell", "admin")
def delete_session(session_id):
    schedule.delete_session(current_actor(), session_id)
    return jsonify({"status": "deleted"})
