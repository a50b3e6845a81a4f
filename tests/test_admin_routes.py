from extensions import db
from models import Department
from services.stats_service import admin_stats


def test_stats_on_empty_database(ctx):
    stats = admin_stats()

    assert stats["total_users"] == 0
    assert stats["total_papers"] == 0
    assert stats["users_by_role"] == []
    assert stats["papers_by_status"] == []
    assert stats["recent_audit_logs"] == []


class TestStats:
    def test_counts_and_recent_activity(self, client, portal, auth, make_paper):
        paper_id = make_paper(portal.dbms, portal.teacher)
        client.post(f"/hod/papers/{paper_id}/approve", headers=auth(portal.hod))

        resp = client.get("/admin/stats", headers=auth(portal.admin))

        assert resp.status_code == 200
        stats = resp.get_json()
        assert stats["total_users"] == 8
        assert stats["total_departments"] == 2
        assert stats["total_subjects"] == 3
        roles = {row["role"]: row["count"] for row in stats["users_by_role"]}
        assert roles == {"admin": 1, "exam_cell": 1, "hod": 2, "teacher": 4}
        assert stats["papers_by_status"] == [{"status": "approved", "count": 1}]

        latest = stats["recent_audit_logs"][0]
        assert latest["action"] == "approve"
        assert latest["user_name"] == "Meera Hod"

    def test_deleted_actor_shows_as_unknown(self, client, portal, auth):
        client.post(
            "/functions/hod-teachers",
            json={"action": "add", "email": "gone@college.edu", "fullName": "Gone Soon", "password": "s3cretpass"},
            headers=auth(portal.hod)
        )
        # the HOD's own account goes away; its audit entries stay
        client.post("/functions/admin-users", json={"action": "delete", "userId": portal.hod},
                    headers=auth(portal.admin))

        stats = client.get("/admin/stats", headers=auth(portal.admin)).get_json()
        names = {e["action"]: e["user_name"] for e in stats["recent_audit_logs"]}
        assert names["create_teacher"] == "Unknown"

    def test_admin_only(self, client, portal, auth):
        assert client.get("/admin/stats", headers=auth(portal.exam_cell)).status_code == 403


class TestDepartments:
    def test_create_and_list(self, client, portal, auth):
        headers = auth(portal.admin)
        resp = client.post("/admin/departments", json={"name": "Mechanical", "code": "mech"}, headers=headers)
        assert resp.status_code == 201

        rows = client.get("/admin/departments", headers=headers).get_json()
        by_code = {r["code"]: r for r in rows}
        assert by_code["MECH"]["subjects_count"] == 0
        assert by_code["CSE"]["subjects_count"] == 2
        assert by_code["CSE"]["users_count"] == 3

    def test_duplicate_code(self, client, portal, auth):
        resp = client.post("/admin/departments", json={"name": "Dup", "code": "CSE"}, headers=auth(portal.admin))
        assert resp.status_code == 400

    def test_delete_referenced_department_is_refused(self, app, client, portal, auth):
        resp = client.delete(f"/admin/departments/{portal.cse}", headers=auth(portal.admin))

        assert resp.status_code == 409
        assert resp.get_json()["code"] == "REFERENTIAL_INTEGRITY"
        with app.app_context():
            assert db.session.get(Department, portal.cse) is not None

    def test_delete_empty_department(self, app, client, portal, auth):
        headers = auth(portal.admin)
        new_id = client.post(
            "/admin/departments", json={"name": "Civil", "code": "CIV"}, headers=headers
        ).get_json()["id"]

        assert client.delete(f"/admin/departments/{new_id}", headers=headers).status_code == 200
        with app.app_context():
            assert db.session.get(Department, new_id) is None


class TestSubjects:
    def test_create_subject(self, client, portal, auth):
        resp = client.post(
            "/admin/subjects",
            json={"name": "Compilers", "code": "CS401", "semester": 4, "department_id": portal.cse},
            headers=auth(portal.admin)
        )
        assert resp.status_code == 201
        assert resp.get_json()["subject"]["semester"] == 4

    def test_bad_semester(self, client, portal, auth):
        resp = client.post(
            "/admin/subjects",
            json={"name": "Compilers", "code": "CS401", "semester": "fourth", "department_id": portal.cse},
            headers=auth(portal.admin)
        )
        assert resp.status_code == 400

    def test_filter_by_department(self, client, portal, auth):
        rows = client.get(f"/admin/subjects?department_id={portal.ece}", headers=auth(portal.admin)).get_json()
        assert [r["code"] for r in rows] == ["EC301"]


def test_announcement_reaches_target_role(client, portal, auth):
    resp = client.post(
        "/admin/notifications",
        json={"title": "Holiday", "message": "Campus closed Monday", "target_roles": ["hod", "exam_cell"]},
        headers=auth(portal.admin)
    )
    assert resp.status_code == 201

    assert len(client.get("/notifications", headers=auth(portal.hod)).get_json()) == 1
    assert len(client.get("/notifications", headers=auth(portal.exam_cell)).get_json()) == 1
    assert client.get("/notifications", headers=auth(portal.teacher)).get_json() == []


def test_user_list(client, portal, auth):
    rows = client.get("/admin/users", headers=auth(portal.admin)).get_json()
    assert len(rows) == 8
    assert all("password_hash" not in r for r in rows)
