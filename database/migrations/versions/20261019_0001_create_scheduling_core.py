"""create scheduling core

Revision ID: 20261019_0001
Revises: None
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


user_role_enum = sa.Enum("student", "teacher", "admin", name="user_role")
user_status_enum = sa.Enum("active", "inactive", name="user_status")
employment_type_enum = sa.Enum("full-time", "part-time", name="employment_type")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("status", user_status_enum, nullable=False, server_default="active"),
        sa.Column("honorific", sa.String(length=10), nullable=True),
        sa.Column("employee_id", sa.String(length=50), nullable=True),
        sa.Column("employment_type", employment_type_enum, nullable=True),
        sa.Column("is_overloaded", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("employee_id", name="uq_users_employee_id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "courses",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("abbreviation", sa.String(length=10), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("name", name="uq_courses_name"),
    )
    op.create_index("ix_courses_abbreviation", "courses", ["abbreviation"], unique=True)

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("department", sa.String(length=200), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("has_lab", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("lecture_units", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("lab_units", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("required_hours", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_subjects_code", "subjects", ["code"], unique=True)

    op.create_table(
        "subject_offerings",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("course_ids", sa.JSON(), nullable=False),
        sa.Column("year_level", sa.Integer(), nullable=False),
        sa.Column("semester", sa.String(length=10), nullable=False),
        sa.Column("academic_year", sa.String(length=9), nullable=False),
        sa.Column("assigned_teachers", sa.JSON(), nullable=False),
        sa.Column("preferred_rooms", sa.JSON(), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_subject_offerings_subject_id", "subject_offerings", ["subject_id"])
    op.create_index(
        "ix_subject_offerings_term",
        "subject_offerings",
        ["subject_id", "year_level", "semester", "academic_year"],
    )

    op.create_table(
        "schedules",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("academic_year", sa.String(length=9), nullable=False),
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("course_name", sa.String(length=200), nullable=False),
        sa.Column("course_abbreviation", sa.String(length=10), nullable=False),
        sa.Column("year_level", sa.String(length=1), nullable=False),
        sa.Column("semester", sa.String(length=10), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_by", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_schedules_is_active", "schedules", ["is_active"])
    op.create_index("ix_schedules_context", "schedules", ["course_id", "year_level", "semester", "academic_year"])
    op.create_index("ix_schedules_term", "schedules", ["academic_year", "semester"])

    op.create_table(
        "schedule_events",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "schedule_id",
            sa.String(length=36),
            sa.ForeignKey("schedules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("day", sa.String(length=10), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("subject_name", sa.String(length=200), nullable=True),
        sa.Column("subject_code", sa.String(length=50), nullable=True),
        sa.Column("session_type", sa.String(length=10), nullable=False, server_default="lecture"),
        sa.Column("room", sa.String(length=100), nullable=True),
        sa.Column("teacher_id", sa.String(length=36), nullable=True),
        sa.Column("teacher_name", sa.String(length=200), nullable=True),
    )
    op.create_index("ix_schedule_events_schedule_id", "schedule_events", ["schedule_id"])
    op.create_index("ix_schedule_events_subject_id", "schedule_events", ["subject_id"])
    op.create_index("ix_schedule_events_teacher_id", "schedule_events", ["teacher_id"])
    op.create_index("ix_schedule_events_slot", "schedule_events", ["day", "start_time"])

    op.create_table(
        "teacher_workloads",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("teacher_id", sa.String(length=36), nullable=False),
        sa.Column("academic_year", sa.String(length=9), nullable=False),
        sa.Column("semester", sa.String(length=10), nullable=False),
        sa.Column("teacher_name", sa.String(length=200), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("employment_type", sa.String(length=20), nullable=False, server_default="full-time"),
        sa.Column("is_overloaded", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("max_unit_limit", sa.Integer(), nullable=False, server_default="24"),
        sa.Column("teaching_assignments", sa.JSON(), nullable=False),
        sa.Column("total_assignment_units", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_schedule_units", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_courses", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("summary", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("teacher_id", "academic_year", "semester", name="uq_teacher_workloads_teacher_term"),
    )
    op.create_index("ix_teacher_workloads_teacher_id", "teacher_workloads", ["teacher_id"])

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.String(length=36), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_activity_logs_entity", "activity_logs", ["entity_type", "entity_id"])


def downgrade() -> None:
    op.drop_index("ix_activity_logs_entity", table_name="activity_logs")
    op.drop_table("activity_logs")
    op.drop_index("ix_teacher_workloads_teacher_id", table_name="teacher_workloads")
    op.drop_table("teacher_workloads")
    op.drop_index("ix_schedule_events_slot", table_name="schedule_events")
    op.drop_index("ix_schedule_events_teacher_id", table_name="schedule_events")
    op.drop_index("ix_schedule_events_subject_id", table_name="schedule_events")
    op.drop_index("ix_schedule_events_schedule_id", table_name="schedule_events")
    op.drop_table("schedule_events")
    op.drop_index("ix_schedules_term", table_name="schedules")
    op.drop_index("ix_schedules_context", table_name="schedules")
    op.drop_index("ix_schedules_is_active", table_name="schedules")
    op.drop_table("schedules")
    op.drop_index("ix_subject_offerings_term", table_name="subject_offerings")
    op.drop_index("ix_subject_offerings_subject_id", table_name="subject_offerings")
    op.drop_table("subject_offerings")
    op.drop_index("ix_subjects_code", table_name="subjects")
    op.drop_table("subjects")
    op.drop_index("ix_courses_abbreviation", table_name="courses")
    op.drop_table("courses")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    employment_type_enum.drop(op.get_bind(), checkfirst=True)
    user_status_enum.drop(op.get_bind(), checkfirst=True)
    user_role_enum.drop(op.get_bind(), checkfirst=True)
