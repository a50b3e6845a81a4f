"""Identity-free projection of papers for HOD review."""


def _iso(value):
    return value.isoformat() if value else None


def review_projection(paper, label):
    subject = getattr(paper, "subject", None)
    return {
        "id": paper.id,
        "subject_id": paper.subject_id,
        "subject_name": subject.name if subject else "Unknown Subject",
        "subject_code": subject.code if subject else "",
        "exam_type": paper.exam_type,
        "set_name": paper.set_name,
        "status": paper.status,
        "deadline": _iso(paper.deadline),
        "uploaded_at": _iso(paper.uploaded_at),
        "version": paper.version,
        "is_selected": bool(paper.is_selected),
        "feedback": paper.feedback,
        # the storage key embeds the uploader id, so only say whether a file exists
        "has_file": bool(paper.file_path),
        "anonymous_id": label,
    }


def anonymize_for_review(papers):
    """
    Label papers ``Submission 1..n`` within each (subject, exam type) group.

    Labels follow the order of ``papers`` and are recomputed on every call,
    so they only hold while the underlying list is unchanged.
    """
    counters = {}
    rows = []
    for paper in papers:
        key = (paper.subject_id, paper.exam_type)
        counters[key] = counters.get(key, 0) + 1
        rows.append(review_projection(paper, f"Submission {counters[key]}"))
    return rows
