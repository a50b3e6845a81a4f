"""initial portal schema

Revision ID: 3f9a1c2d7b10
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f9a1c2d7b10"
down_revision = None
branch_labels = None
depends_on = None

APP_ROLES = ("teacher", "hod", "exam_cell", "admin")
PAPER_STATUSES = ("draft", "submitted", "pending_review", "approved", "rejected", "locked")
EXAM_TYPES = ("mid_term", "end_term", "practical", "internal")
EXAM_STATUSES = ("scheduled", "in_progress", "completed", "archived")
NOTIFICATION_TYPES = ("info", "warning", "critical", "success")


def upgrade():
    op.create_table(
        "departments",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("code", sa.String(length=20), nullable=False, unique=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(length=150), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["department_id"], ["departments.id"]),
    )
    op.create_table(
        "user_roles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=36), nullable=False, unique=True),
        sa.Column("role", sa.Enum(*APP_ROLES, name="app_role"), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
    )
    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("code", sa.String(length=20), nullable=False, unique=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["department_id"], ["departments.id"]),
    )
    op.create_table(
        "teacher_subjects",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("teacher_id", sa.String(length=36), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("assigned_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["teacher_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"]),
        sa.UniqueConstraint("teacher_id", "subject_id", name="unique_teacher_subject"),
    )
    op.create_table(
        "exam_papers",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("exam_type", sa.Enum(*EXAM_TYPES, name="exam_type"), nullable=False),
        sa.Column("set_name", sa.String(length=50), nullable=False),
        sa.Column("status", sa.Enum(*PAPER_STATUSES, name="paper_status"), nullable=False),
        sa.Column("deadline", sa.DateTime(), nullable=False),
        sa.Column("uploaded_by", sa.String(length=36), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("is_selected", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("selection_key", sa.String(length=80), nullable=True, unique=True),
        sa.Column("file_path", sa.String(length=255), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("approved_by", sa.String(length=36), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"]),
        sa.ForeignKeyConstraint(["uploaded_by"], ["users.id"]),
        sa.ForeignKeyConstraint(["approved_by"], ["users.id"]),
        sa.CheckConstraint("version >= 1", name="ck_exam_papers_version"),
    )
    op.create_index("ix_exam_papers_group", "exam_papers", ["subject_id", "exam_type"])
    op.create_table(
        "notifications",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("created_by", sa.String(length=36), nullable=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.Enum(*NOTIFICATION_TYPES, name="notification_type"), nullable=False),
        sa.Column("target_roles", sa.JSON(), nullable=False),
        sa.Column("target_departments", sa.JSON(), nullable=True),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
    )
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.String(length=36), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])
    op.create_table(
        "exam_sessions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("academic_year", sa.String(length=9), nullable=False),
        sa.Column("exam_type", sa.Enum(*EXAM_TYPES, name="exam_type"), nullable=False),
        sa.Column("submission_start", sa.DateTime(), nullable=False),
        sa.Column("submission_end", sa.DateTime(), nullable=False),
        sa.Column("review_start", sa.DateTime(), nullable=False),
        sa.Column("review_end", sa.DateTime(), nullable=False),
        sa.Column("access_start", sa.DateTime(), nullable=False),
        sa.Column("access_end", sa.DateTime(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("is_locked", sa.Boolean(), nullable=True),
        sa.Column("created_by", sa.String(length=36), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
    )
    op.create_table(
        "exams",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("exam_type", sa.Enum(*EXAM_TYPES, name="exam_type"), nullable=False),
        sa.Column("paper_id", sa.String(length=36), nullable=True),
        sa.Column("scheduled_date", sa.DateTime(), nullable=False),
        sa.Column("unlock_time", sa.DateTime(), nullable=False),
        sa.Column("status", sa.Enum(*EXAM_STATUSES, name="exam_status"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"]),
        sa.ForeignKeyConstraint(["paper_id"], ["exam_papers.id"]),
        sa.UniqueConstraint("subject_id", "exam_type", name="unique_subject_exam"),
    )


def downgrade():
    op.drop_table("exams")
    op.drop_table("exam_sessions")
    op.drop_index("ix_audit_logs_created_at", table_name="audit_logs")
    op.drop_index("ix_audit_logs_user_id", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_table("notifications")
    op.drop_index("ix_exam_papers_group", table_name="exam_papers")
    op.drop_table("exam_papers")
    op.drop_table("teacher_subjects")
    op.drop_table("subjects")
    op.drop_table("user_roles")
    op.drop_table("users")
    op.drop_table("departments")
