"""create timetable entries and audit logs

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    day_of_week = sa.Enum(
        "Monday",
        "Tuesday",
        "Wednesday",
        "Thursday",
        "Friday",
        "Saturday",
        "Sunday",
        name="day_of_week",
    )

    op.create_table(
        "timetable_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("section_id", sa.Integer(), sa.ForeignKey("sections.id", ondelete="RESTRICT"), nullable=False),
        sa.Column(
            "professor_id",
            sa.Integer(),
            sa.ForeignKey("professors.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("room_id", sa.Integer(), sa.ForeignKey("rooms.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("day_of_week", day_of_week, nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_timetable_entries_subject_id", "timetable_entries", ["subject_id"])
    op.create_index("ix_timetable_entries_section_id", "timetable_entries", ["section_id"])
    op.create_index("ix_timetable_entries_professor_id", "timetable_entries", ["professor_id"])
    op.create_index("ix_timetable_entries_room_id", "timetable_entries", ["room_id"])
    op.create_index("ix_timetable_entries_day_start", "timetable_entries", ["day_of_week", "start_time"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("actor_id", sa.String(length=36), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.String(length=100), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_index("ix_timetable_entries_day_start", table_name="timetable_entries")
    op.drop_index("ix_timetable_entries_room_id", table_name="timetable_entries")
    op.drop_index("ix_timetable_entries_professor_id", table_name="timetable_entries")
    op.drop_index("ix_timetable_entries_section_id", table_name="timetable_entries")
    op.drop_index("ix_timetable_entries_subject_id", table_name="timetable_entries")
    op.drop_table("timetable_entries")
    sa.Enum(name="day_of_week").drop(op.get_bind(), checkfirst=True)
