import io
import os

PASSWORD = "password123"
PDF_BYTES = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\n%%EOF\n"


def stored_files(app):
    root = app.config["UPLOAD_FOLDER"]
    found = []
    for dirpath, _, filenames in os.walk(root):
        found.extend(os.path.join(dirpath, name) for name in filenames)
    return found


def paper_form(subject_id, content=PDF_BYTES, filename="paper.pdf", exam_type="mid_term", set_name="Set A"):
    return {
        "subject_id": subject_id,
        "exam_type": exam_type,
        "set_name": set_name,
        "deadline": "2030-01-15T10:00:00",
        "file": (io.BytesIO(content), filename),
    }
