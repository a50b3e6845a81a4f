from flask import Blueprint, jsonify, request

from services.paper_queries import list_teacher_papers, teacher_paper_dict
from services.paper_upload import teacher_subjects, upload_paper
from utils.decorators import current_actor, role_required

teacher_bp = Blueprint("teacher", __name__, url_prefix="/teacher")


@teacher_bp.route("/subjects")
@role_required("teacher")
def subjects():
    return jsonify(teacher_subjects(current_actor()))


@teacher_bp.route("/papers", methods=["POST"])
@role_required("teacher")
def upload():
    paper = upload_paper(
        current_actor(),
        subject_id=request.form.get("subject_id"),
        exam_type=request.form.get("exam_type"),
        set_name=request.form.get("set_name"),
        deadline=request.form.get("deadline"),
        file=request.files.get("file")
    )
    return jsonify({"status": "success", "paper": teacher_paper_dict(paper)}), 201


@teacher_bp.route("/papers")
@role_required("teacher")
def submissions():
    return jsonify(list_teacher_papers(current_actor()))
