"""Exercise grading: sandboxed execution of submissions against test specs."""

from .runner import (
    SubmissionResult,
    TestSpec,
    all_passed,
    get_default_sandbox,
    run_tests,
)
from .sandbox import (
    TIMEOUT_ERROR,
    ExecutionOutcome,
    Sandbox,
    SubprocessSandbox,
    neutralize_submission,
)

__all__ = [
    "SubmissionResult",
    "TestSpec",
    "all_passed",
    "get_default_sandbox",
    "run_tests",
    "TIMEOUT_ERROR",
    "ExecutionOutcome",
    "Sandbox",
    "SubprocessSandbox",
    "neutralize_submission",
]
