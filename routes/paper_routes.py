from flask import Blueprint, jsonify, send_file
from flask_login import login_required

from services.paper_queries import open_paper_file
from utils.decorators import current_actor

paper_bp = Blueprint("papers", __name__, url_prefix="/papers")


@paper_bp.route("/<paper_id>/file")
@login_required
def download_paper(paper_id):
    try:
        path, download_name = open_paper_file(current_actor(), paper_id)
    except FileNotFoundError:
        return jsonify({"error": "File not found on server"}), 404

    return send_file(
        path,
        mimetype="application/pdf",
        as_attachment=True,
        download_name=download_name
    )
