from datetime import datetime
from types import SimpleNamespace

import pytest

from services.anonymizer import anonymize_for_review, review_projection
from services.paper_lifecycle import reject_paper
from services.paper_queries import list_review_papers, list_selected_papers, list_teacher_papers
from utils.errors import AuthorizationError


def fake_paper(paper_id, subject_id="s1", exam_type="mid_term", uploaded_by="teacher-1"):
    return SimpleNamespace(
        id=paper_id,
        subject_id=subject_id,
        subject=SimpleNamespace(name="Database Systems", code="CS301"),
        exam_type=exam_type,
        set_name="Set A",
        status="pending_review",
        deadline=datetime(2030, 1, 15),
        uploaded_at=datetime(2029, 12, 1),
        uploaded_by=uploaded_by,
        file_path=f"{uploaded_by}/{paper_id}.pdf",
        version=1,
        is_selected=False,
        feedback=None,
    )


class TestAnonymizer:
    def test_labels_count_per_group(self):
        papers = [
            fake_paper("p1"),
            fake_paper("p2", exam_type="end_term"),
            fake_paper("p3"),
            fake_paper("p4", subject_id="s2"),
        ]

        labels = {row["id"]: row["anonymous_id"] for row in anonymize_for_review(papers)}

        assert labels == {
            "p1": "Submission 1",
            "p2": "Submission 1",
            "p3": "Submission 2",
            "p4": "Submission 1",
        }

    def test_labels_are_stable_for_the_same_list(self):
        papers = [fake_paper("p1"), fake_paper("p2"), fake_paper("p3")]
        assert anonymize_for_review(papers) == anonymize_for_review(papers)

    def test_projection_hides_the_uploader(self):
        row = review_projection(fake_paper("p1", uploaded_by="secret-teacher"), "Submission 1")

        assert "uploaded_by" not in row
        assert "file_path" not in row
        assert "secret-teacher" not in repr(row)
        assert row["has_file"] is True

    def test_missing_subject_falls_back(self):
        paper = fake_paper("p1")
        paper.subject = None
        assert review_projection(paper, "Submission 1")["subject_name"] == "Unknown Subject"


class TestReviewList:
    def test_hod_sees_own_department_only(self, ctx, portal, make_paper):
        mine = make_paper(portal.dbms, portal.teacher)
        make_paper(portal.signals, portal.ece_teacher)

        rows = list_review_papers(portal.actors["hod"])

        assert [r["id"] for r in rows] == [mine]
        assert all("uploaded_by" not in r for r in rows)

    def test_locked_papers_stay_visible(self, ctx, portal, make_paper):
        locked = make_paper(portal.dbms, portal.teacher, status="locked", is_selected=True)
        ids = {r["id"] for r in list_review_papers(portal.actors["hod"])}
        assert locked in ids

    def test_teacher_cannot_list_review_queue(self, ctx, portal):
        with pytest.raises(AuthorizationError):
            list_review_papers(portal.actors["teacher"])


class TestTeacherList:
    def test_rejected_papers_are_excluded(self, ctx, portal, make_paper):
        kept = make_paper(portal.dbms, portal.teacher, set_name="Set A")
        dropped = make_paper(portal.dbms, portal.teacher, set_name="Set B")
        reject_paper(portal.actors["hod"], dropped, "Wrong pattern")

        visible = [p["id"] for p in list_teacher_papers(portal.actors["teacher"])]

        assert visible == [kept]
        assert dropped not in visible

    def test_teacher_sees_only_own_uploads(self, ctx, portal, make_paper):
        make_paper(portal.dbms, portal.teacher2)
        assert list_teacher_papers(portal.actors["teacher"]) == []


def test_exam_cell_sees_only_selected_locked(ctx, portal, make_paper):
    make_paper(portal.dbms, portal.teacher, status="approved")
    locked = make_paper(portal.os, portal.teacher, status="locked", is_selected=True)

    rows = list_selected_papers(portal.actors["exam_cell"])

    assert [r["id"] for r in rows] == [locked]
    assert rows[0]["department"] == "Computer Science"
    assert "uploaded_by" not in rows[0]
