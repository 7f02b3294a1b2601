"""SQLAlchemy Core table definitions for the database schema."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY, UUID

from .enums import progress_status_enum, unit_kind_enum

# Naming convention for constraints (helps Alembic generate better names)
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=convention)


# =====================================================
# 1. COURSES
# =====================================================
courses = Table(
    "courses",
    metadata,
    Column(
        "course_id",
        UUID(as_uuid=True),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
    ),
    Column("title", Text, nullable=False),
    Column("description", Text, nullable=False, server_default=""),
    Column("difficulty", Text),
    Column("sort_order", Integer, nullable=False, server_default="0"),
    # Identity provider user id of the author
    Column("created_by", UUID(as_uuid=True)),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now()),
)


# =====================================================
# 2. UNITS (course modules and standalone exercises)
# =====================================================
units = Table(
    "units",
    metadata,
    Column(
        "unit_id",
        UUID(as_uuid=True),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
    ),
    # NULL for standalone exercises
    Column(
        "course_id",
        UUID(as_uuid=True),
        ForeignKey("courses.course_id", ondelete="CASCADE"),
        nullable=True,
    ),
    Column("title", Text, nullable=False),
    Column("description", Text, nullable=False, server_default=""),
    Column("kind", unit_kind_enum, nullable=False),
    Column("position", Integer, nullable=False, server_default="0"),
    Column("content", Text),
    Column("video_url", Text),
    # Exercise payload
    Column("initial_code", Text),
    Column("language", Text),
    Column("instructions", Text),
    Column("technologies", ARRAY(Text), nullable=False, server_default="{}"),
    Column("difficulty", Text),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now()),
    Index("idx_units_course_id_position", "course_id", "position"),
    Index("idx_units_kind", "kind"),
)


# =====================================================
# 3. TEST SPECS
# =====================================================
test_specs = Table(
    "test_specs",
    metadata,
    Column(
        "test_id",
        UUID(as_uuid=True),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
    ),
    Column(
        "unit_id",
        UUID(as_uuid=True),
        ForeignKey("units.unit_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("description", Text, nullable=False),
    Column("test_code", Text, nullable=False),
    Column("failure_message", Text),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Index("idx_test_specs_unit_id", "unit_id"),
)


# =====================================================
# 4. PROGRESS RECORDS
# =====================================================
progress_records = Table(
    "progress_records",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    # Identity provider user id (no local users table)
    Column("user_id", UUID(as_uuid=True), nullable=False),
    Column(
        "unit_id",
        UUID(as_uuid=True),
        ForeignKey("units.unit_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("status", progress_status_enum, nullable=False),
    # Last submitted code snapshot
    Column("code", Text),
    Column("completed_at", DateTime(timezone=True), nullable=True),
    Column(
        "created_at", DateTime(timezone=True), server_default=func.now(), nullable=False
    ),
    Column(
        "updated_at", DateTime(timezone=True), server_default=func.now(), nullable=False
    ),
    UniqueConstraint("user_id", "unit_id", name="uq_progress_records_user_unit"),
    Index("idx_progress_records_user_updated", "user_id", "updated_at"),
    CheckConstraint(
        "(status = 'completed') = (completed_at IS NOT NULL)",
        name="completed_iff_completed_at",
    ),
)
