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


timetable_status_enum = sa.Enum("draft", "pending", "approved", "published", "rejected", name="timetable_status")
generation_status_enum = sa.Enum("success", "partial_success", "failed", "timeout", name="generation_status")


def upgrade() -> None:
    op.create_table(
        "departments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("working_days", sa.JSON(), nullable=False),
        sa.Column("slot_labels", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_departments_code", "departments", ["code"], unique=True)

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("credits", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("teaching_hours", sa.Integer(), nullable=True),
        sa.Column("max_students", sa.Integer(), nullable=True),
        sa.Column("faculty_id", sa.String(length=36), nullable=True),
        sa.Column("equipment_required", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_subjects_code", "subjects", ["code"], unique=True)
    op.create_index("ix_subjects_department_id", "subjects", ["department_id"])
    op.create_index("ix_subjects_semester", "subjects", ["semester"])

    op.create_table(
        "faculty",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("max_weekly_hours", sa.Integer(), nullable=True),
        sa.Column("subjects_assigned", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_faculty_email", "faculty", ["email"], unique=True)
    op.create_index("ix_faculty_department_id", "faculty", ["department_id"])

    op.create_table(
        "classrooms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("department_id", sa.String(length=36), nullable=True),
        sa.Column("facilities", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_classrooms_name", "classrooms", ["name"], unique=True)
    op.create_index("ix_classrooms_department_id", "classrooms", ["department_id"])

    op.create_table(
        "timetable_versions",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("label", sa.String(length=100), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("academic_year", sa.String(length=20), nullable=False),
        sa.Column("status", timetable_status_enum, nullable=False),
        sa.Column(
            "parent_id",
            sa.String(length=36),
            sa.ForeignKey("timetable_versions.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("assignments", sa.JSON(), nullable=False),
        sa.Column("summary", sa.JSON(), nullable=False),
        sa.Column("fitness_score", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_timetable_versions_label", "timetable_versions", ["label"])
    op.create_index("ix_timetable_versions_department_id", "timetable_versions", ["department_id"])
    op.create_index("ix_timetable_versions_status", "timetable_versions", ["status"])
    op.create_index("ix_timetable_versions_parent_id", "timetable_versions", ["parent_id"])

    op.create_table(
        "constraint_sets",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("department_id", sa.String(length=36), nullable=True),
        sa.Column("hard_constraints", sa.JSON(), nullable=False),
        sa.Column("soft_constraints", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("name", "department_id", name="uq_constraint_sets_name_department"),
    )
    op.create_index("ix_constraint_sets_department_id", "constraint_sets", ["department_id"])

    op.create_table(
        "generation_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("academic_year", sa.String(length=20), nullable=False),
        sa.Column("solver", sa.String(length=40), nullable=False),
        sa.Column("status", generation_status_enum, nullable=False),
        sa.Column("execution_ms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("option_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("best_fitness", sa.Float(), nullable=True),
        sa.Column("unresolved_sessions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("fixed_collisions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("input_counts", sa.JSON(), nullable=False),
        sa.Column("error_message", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_generation_logs_department_id", "generation_logs", ["department_id"])
    op.create_index("ix_generation_logs_status", "generation_logs", ["status"])


def downgrade() -> None:
    op.drop_index("ix_generation_logs_status", table_name="generation_logs")
    op.drop_index("ix_generation_logs_department_id", table_name="generation_logs")
    op.drop_table("generation_logs")

    op.drop_index("ix_constraint_sets_department_id", table_name="constraint_sets")
    op.drop_table("constraint_sets")

    op.drop_index("ix_timetable_versions_parent_id", table_name="timetable_versions")
    op.drop_index("ix_timetable_versions_status", table_name="timetable_versions")
    op.drop_index("ix_timetable_versions_department_id", table_name="timetable_versions")
    op.drop_index("ix_timetable_versions_label", table_name="timetable_versions")
    op.drop_table("timetable_versions")

    op.drop_index("ix_classrooms_department_id", table_name="classrooms")
    op.drop_index("ix_classrooms_name", table_name="classrooms")
    op.drop_table("classrooms")

    op.drop_index("ix_faculty_department_id", table_name="faculty")
    op.drop_index("ix_faculty_email", table_name="faculty")
    op.drop_table("faculty")

    op.drop_index("ix_subjects_semester", table_name="subjects")
    op.drop_index("ix_subjects_department_id", table_name="subjects")
    op.drop_index("ix_subjects_code", table_name="subjects")
    op.drop_table("subjects")

    op.drop_index("ix_departments_code", table_name="departments")
    op.drop_table("departments")

    generation_status_enum.drop(op.get_bind(), checkfirst=True)
    timetable_status_enum.drop(op.get_bind(), checkfirst=True)
