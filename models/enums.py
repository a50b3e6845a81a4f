# Closed value sets. Adding a value needs a migration and a matching UI change.

APP_ROLES = ("teacher", "hod", "exam_cell", "admin")

PAPER_STATUSES = (
    "draft",
    "submitted",
    "pending_review",
    "approved",
    "rejected",
    "locked",
)

EXAM_TYPES = ("mid_term", "end_term", "practical", "internal")

EXAM_STATUSES = ("scheduled", "in_progress", "completed", "archived")

NOTIFICATION_TYPES = ("info", "warning", "critical", "success")
