"""Read helpers for the catalog (courses, units, test specs)."""

from .courses import (
    CourseNotFoundError,
    get_course_module_ids,
    load_course,
    reorder_course_modules,
)
from .units import (
    UnitNotFoundError,
    count_exercise_units,
    get_test_specs,
    list_exercise_units,
    load_unit,
)

__all__ = [
    "CourseNotFoundError",
    "get_course_module_ids",
    "load_course",
    "reorder_course_modules",
    "UnitNotFoundError",
    "count_exercise_units",
    "get_test_specs",
    "list_exercise_units",
    "load_unit",
]
