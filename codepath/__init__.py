"""
Core business logic - platform-agnostic.
Used by the web API; never reads request state itself,
callers pass user ids and roles explicitly.
"""

# Database (SQLAlchemy)
from .database import get_connection, get_transaction, get_engine, close_engine, is_configured

# Enums
from .enums import UserRole, UnitKind, ProgressStatus

# Catalog reads
from .queries import (
    UnitNotFoundError, CourseNotFoundError,
    load_unit, get_test_specs, list_exercise_units, count_exercise_units,
    load_course, get_course_module_ids, reorder_course_modules,
)

# Grading
from .grading import (
    TestSpec, SubmissionResult, ExecutionOutcome, Sandbox, SubprocessSandbox,
    run_tests, all_passed, neutralize_submission,
)

# Progress ledger (async functions - must be awaited)
from .progress import (
    mark_unit_complete, record_attempt,
    get_user_progress_records, get_completed_unit_ids, get_recent_units,
)

# Summaries and recommendations
from .summary import compute_streak, build_progress_summary, get_progress_summary
from .recommendations import mastered_technologies, rank_units, recommend_units
from .course_progress import (
    CourseHasNoModulesError, compute_course_progress, get_course_progress,
)

__all__ = [
    # Database (SQLAlchemy)
    'get_connection', 'get_transaction', 'get_engine', 'close_engine', 'is_configured',
    # Enums
    'UserRole', 'UnitKind', 'ProgressStatus',
    # Catalog
    'UnitNotFoundError', 'CourseNotFoundError',
    'load_unit', 'get_test_specs', 'list_exercise_units', 'count_exercise_units',
    'load_course', 'get_course_module_ids', 'reorder_course_modules',
    # Grading
    'TestSpec', 'SubmissionResult', 'ExecutionOutcome', 'Sandbox', 'SubprocessSandbox',
    'run_tests', 'all_passed', 'neutralize_submission',
    # Progress ledger (async)
    'mark_unit_complete', 'record_attempt',
    'get_user_progress_records', 'get_completed_unit_ids', 'get_recent_units',
    # Summaries and recommendations
    'compute_streak', 'build_progress_summary', 'get_progress_summary',
    'mastered_technologies', 'rank_units', 'recommend_units',
    'CourseHasNoModulesError', 'compute_course_progress', 'get_course_progress',
]
