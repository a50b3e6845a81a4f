from sqlalchemy import func

from extensions import db
from models import AuditLog, Department, ExamPaper, Subject, User, UserRole


def admin_stats(recent_limit=20):
    """Counts for the admin dashboard plus the latest audit entries with actor names."""
    users_by_role = [
        {"role": role, "count": count}
        for role, count in db.session.query(UserRole.role, func.count(UserRole.id))
        .group_by(UserRole.role)
        .order_by(UserRole.role)
        .all()
    ]
    papers_by_status = [
        {"status": status, "count": count}
        for status, count in db.session.query(ExamPaper.status, func.count(ExamPaper.id))
        .group_by(ExamPaper.status)
        .order_by(ExamPaper.status)
        .all()
    ]

    logs = (
        AuditLog.query
        .order_by(AuditLog.created_at.desc())
        .limit(recent_limit)
        .all()
    )
    user_ids = {log.user_id for log in logs}
    names = {}
    if user_ids:
        names = dict(
            db.session.query(User.id, User.full_name)
            .filter(User.id.in_(user_ids))
            .all()
        )

    recent_audit_logs = []
    for log in logs:
        entry = log.to_dict()
        entry["user_name"] = names.get(log.user_id, "Unknown")
        recent_audit_logs.append(entry)

    return {
        "total_users": User.query.count(),
        "total_departments": Department.query.count(),
        "total_subjects": Subject.query.count(),
        "total_papers": ExamPaper.query.count(),
        "users_by_role": users_by_role,
        "papers_by_status": papers_by_status,
        "recent_audit_logs": recent_audit_logs,
    }
