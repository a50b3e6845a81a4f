import pytest

from models import AuditLog, ExamPaper
from services.paper_upload import validate_paper_file
from tests.helpers import PDF_BYTES, paper_form, stored_files
from utils.errors import ValidationError


def upload(client, headers, form):
    return client.post("/teacher/papers", data=form, headers=headers, content_type="multipart/form-data")


def paper_count(app):
    with app.app_context():
        return ExamPaper.query.count()


class TestUpload:
    def test_upload_creates_pending_paper(self, app, client, portal, auth):
        resp = upload(client, auth(portal.teacher), paper_form(portal.dbms))

        assert resp.status_code == 201
        paper = resp.get_json()["paper"]
        assert paper["status"] == "pending_review"
        assert paper["version"] == 1
        assert paper["uploaded_by"] == portal.teacher

        files = stored_files(app)
        assert len(files) == 1
        with open(files[0], "rb") as fh:
            assert fh.read() == PDF_BYTES

        with app.app_context():
            entry = AuditLog.query.filter_by(action="upload").one()
            assert entry.entity_id == paper["id"]

    def test_reupload_bumps_version(self, client, portal, auth):
        headers = auth(portal.teacher)
        upload(client, headers, paper_form(portal.dbms))
        resp = upload(client, headers, paper_form(portal.dbms))

        assert resp.get_json()["paper"]["version"] == 2

    def test_version_is_per_set(self, client, portal, auth):
        headers = auth(portal.teacher)
        upload(client, headers, paper_form(portal.dbms, set_name="Set A"))
        resp = upload(client, headers, paper_form(portal.dbms, set_name="Set B"))

        assert resp.get_json()["paper"]["version"] == 1

    def test_unassigned_subject_is_forbidden(self, app, client, portal, auth):
        resp = upload(client, auth(portal.teacher), paper_form(portal.signals))

        assert resp.status_code == 403
        assert stored_files(app) == []
        assert paper_count(app) == 0

    def test_non_pdf_is_rejected_before_any_write(self, app, client, portal, auth):
        form = paper_form(portal.dbms, content=b"PK\x03\x04 not a pdf", filename="paper.docx")
        resp = upload(client, auth(portal.teacher), form)

        assert resp.status_code == 400
        assert stored_files(app) == []
        assert paper_count(app) == 0

    def test_pdf_name_without_pdf_content_is_rejected(self, app, client, portal, auth):
        form = paper_form(portal.dbms, content=b"<html>surprise</html>")
        resp = upload(client, auth(portal.teacher), form)

        assert resp.status_code == 400
        assert stored_files(app) == []

    def test_oversize_is_rejected_before_any_write(self, app, client, portal, auth):
        app.config["MAX_PAPER_SIZE"] = 16
        form = paper_form(portal.dbms, content=PDF_BYTES + b"x" * 64)
        resp = upload(client, auth(portal.teacher), form)

        assert resp.status_code == 400
        assert "limit" in resp.get_json()["error"]
        assert stored_files(app) == []
        assert paper_count(app) == 0

    def test_missing_fields(self, client, portal, auth):
        form = paper_form(portal.dbms)
        del form["deadline"]
        resp = upload(client, auth(portal.teacher), form)

        assert resp.status_code == 400

    def test_missing_file(self, client, portal, auth):
        form = paper_form(portal.dbms)
        del form["file"]
        resp = upload(client, auth(portal.teacher), form)

        assert resp.status_code == 400

    def test_hod_cannot_upload(self, client, portal, auth):
        resp = upload(client, auth(portal.hod), paper_form(portal.dbms))
        assert resp.status_code == 403

    def test_requires_login(self, client, portal):
        resp = upload(client, {}, paper_form(portal.dbms))
        assert resp.status_code == 401


class TestValidatePaperFile:
    def test_exact_cap_is_allowed(self):
        validate_paper_file("a.pdf", b"%PDF-", 100, 100)

    def test_one_byte_over_is_refused(self):
        with pytest.raises(ValidationError):
            validate_paper_file("a.pdf", b"%PDF-", 101, 100)

    def test_extension_is_case_insensitive(self):
        validate_paper_file("FINAL.PDF", b"%PDF-", 10, 100)

    def test_empty_file(self):
        with pytest.raises(ValidationError):
            validate_paper_file("a.pdf", b"", 0, 100)


class TestTeacherViews:
    def test_subjects_are_assigned_ones(self, client, portal, auth):
        resp = client.get("/teacher/subjects", headers=auth(portal.teacher))

        assert resp.status_code == 200
        assert {s["id"] for s in resp.get_json()} == {portal.dbms, portal.os}

    def test_rejected_papers_are_never_listed(self, client, portal, auth, make_paper):
        make_paper(portal.dbms, portal.teacher, set_name="Set A")
        make_paper(portal.dbms, portal.teacher, set_name="Set B", status="rejected", feedback="Redo")
        headers = auth(portal.teacher)

        default = client.get("/teacher/papers", headers=headers).get_json()
        asked = client.get("/teacher/papers?include_rejected=true", headers=headers).get_json()

        assert [p["status"] for p in default] == ["pending_review"]
        assert [p["status"] for p in asked] == ["pending_review"]


class TestDownload:
    def _uploaded(self, client, portal, auth):
        resp = upload(client, auth(portal.teacher), paper_form(portal.dbms))
        return resp.get_json()["paper"]["id"]

    def test_owner_can_download(self, client, portal, auth):
        paper_id = self._uploaded(client, portal, auth)
        resp = client.get(f"/papers/{paper_id}/file", headers=auth(portal.teacher))

        assert resp.status_code == 200
        assert resp.data.startswith(b"%PDF-")
        assert "CS301_mid_term" in resp.headers["Content-Disposition"]

    def test_department_hod_can_download(self, client, portal, auth):
        paper_id = self._uploaded(client, portal, auth)
        assert client.get(f"/papers/{paper_id}/file", headers=auth(portal.hod)).status_code == 200

    @pytest.mark.parametrize("who", ["teacher2", "ece_hod", "exam_cell", "admin"])
    def test_others_are_forbidden(self, client, portal, auth, who):
        paper_id = self._uploaded(client, portal, auth)
        resp = client.get(f"/papers/{paper_id}/file", headers=auth(getattr(portal, who)))
        assert resp.status_code == 403

    def test_missing_blob_is_404(self, client, portal, auth, make_paper):
        paper_id = make_paper(portal.dbms, portal.teacher, file_path="gone/away.pdf")
        resp = client.get(f"/papers/{paper_id}/file", headers=auth(portal.teacher))
        assert resp.status_code == 404


def test_failed_row_insert_removes_blob(app, client, portal, auth, monkeypatch):
    from sqlalchemy.exc import OperationalError
    from sqlalchemy.orm import Session

    def failing_commit(self):
        raise OperationalError("INSERT INTO exam_papers", {}, Exception("connection lost"))

    monkeypatch.setattr(Session, "commit", failing_commit)

    resp = upload(client, auth(portal.teacher), paper_form(portal.dbms))

    assert resp.status_code == 503
    assert stored_files(app) == []
