"""Initial schema: courses, units, test specs and the progress ledger.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY, ENUM, UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

unit_kind = ENUM("article", "video", "exercise", name="unit_kind", create_type=False)
progress_status = ENUM(
    "not_started", "in_progress", "completed", name="progress_status", create_type=False
)


def upgrade() -> None:
    bind = op.get_bind()
    unit_kind.create(bind, checkfirst=True)
    progress_status.create(bind, checkfirst=True)

    op.create_table(
        "courses",
        sa.Column(
            "course_id",
            UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), server_default="", nullable=False),
        sa.Column("difficulty", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), server_default="0", nullable=False),
        sa.Column("created_by", UUID(as_uuid=True), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
        sa.PrimaryKeyConstraint("course_id", name="pk_courses"),
    )

    op.create_table(
        "units",
        sa.Column(
            "unit_id",
            UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column(
            "course_id",
            UUID(as_uuid=True),
            sa.ForeignKey(
                "courses.course_id",
                ondelete="CASCADE",
                name="fk_units_course_id_courses",
            ),
            nullable=True,
        ),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), server_default="", nullable=False),
        sa.Column("kind", unit_kind, nullable=False),
        sa.Column("position", sa.Integer(), server_default="0", nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("video_url", sa.Text(), nullable=True),
        sa.Column("initial_code", sa.Text(), nullable=True),
        sa.Column("language", sa.Text(), nullable=True),
        sa.Column("instructions", sa.Text(), nullable=True),
        sa.Column(
            "technologies", ARRAY(sa.Text()), server_default="{}", nullable=False
        ),
        sa.Column("difficulty", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
        sa.PrimaryKeyConstraint("unit_id", name="pk_units"),
    )
    op.create_index("idx_units_course_id_position", "units", ["course_id", "position"])
    op.create_index("idx_units_kind", "units", ["kind"])

    op.create_table(
        "test_specs",
        sa.Column(
            "test_id",
            UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column(
            "unit_id",
            UUID(as_uuid=True),
            sa.ForeignKey(
                "units.unit_id", ondelete="CASCADE", name="fk_test_specs_unit_id_units"
            ),
            nullable=False,
        ),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("test_code", sa.Text(), nullable=False),
        sa.Column("failure_message", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
        sa.PrimaryKeyConstraint("test_id", name="pk_test_specs"),
    )
    op.create_index("idx_test_specs_unit_id", "test_specs", ["unit_id"])

    op.create_table(
        "progress_records",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column(
            "unit_id",
            UUID(as_uuid=True),
            sa.ForeignKey(
                "units.unit_id",
                ondelete="CASCADE",
                name="fk_progress_records_unit_id_units",
            ),
            nullable=False,
        ),
        sa.Column("status", progress_status, nullable=False),
        sa.Column("code", sa.Text(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_progress_records"),
        sa.UniqueConstraint(
            "user_id", "unit_id", name="uq_progress_records_user_unit"
        ),
        sa.CheckConstraint(
            "(status = 'completed') = (completed_at IS NOT NULL)",
            name="ck_progress_records_completed_iff_completed_at",
        ),
    )
    op.create_index(
        "idx_progress_records_user_updated",
        "progress_records",
        ["user_id", "updated_at"],
    )


def downgrade() -> None:
    op.drop_table("progress_records")
    op.drop_table("test_specs")
    op.drop_table("units")
    op.drop_table("courses")
    progress_status.drop(op.get_bind(), checkfirst=True)
    unit_kind.drop(op.get_bind(), checkfirst=True)
