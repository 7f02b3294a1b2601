"""SQLAlchemy enum definitions for the database schema."""

import enum

from sqlalchemy import Enum as SQLEnum


# =====================================================
# Python Enum Classes
# =====================================================


class UserRole(str, enum.Enum):
    student = "student"
    author = "author"
    admin = "admin"


class UnitKind(str, enum.Enum):
    article = "article"
    video = "video"
    exercise = "exercise"


class ProgressStatus(str, enum.Enum):
    not_started = "not_started"
    in_progress = "in_progress"
    completed = "completed"


# =====================================================
# SQLAlchemy Enum Types
# These reference PostgreSQL types created by migration 001 (create_type=False)
# =====================================================

unit_kind_enum = SQLEnum(UnitKind, name="unit_kind", create_type=False, native_enum=True)
progress_status_enum = SQLEnum(
    ProgressStatus, name="progress_status", create_type=False, native_enum=True
)
