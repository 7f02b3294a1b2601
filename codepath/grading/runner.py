"""Run a submission against an exercise's test specs.

Every test gets its own sandbox evaluation. Evaluations run concurrently
(bounded by GRADER_MAX_CONCURRENCY) and the result list always lines up
one-to-one with the input tests, whatever individual tests do.
"""

import asyncio
import logging
from dataclasses import asdict, dataclass
from typing import Any
from uuid import UUID

from codepath.config import get_grader_max_concurrency, get_grader_timeout_ms

from .sandbox import ExecutionOutcome, Sandbox, SubprocessSandbox

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TestSpec:
    """Author-defined validation logic for one exercise."""

    __test__ = False  # not a pytest test class

    test_id: UUID | None
    unit_id: UUID | None
    description: str
    test_code: str
    failure_message: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "TestSpec":
        return cls(
            test_id=row.get("test_id"),
            unit_id=row.get("unit_id"),
            description=row["description"],
            test_code=row["test_code"],
            failure_message=row.get("failure_message"),
        )


@dataclass(frozen=True)
class SubmissionResult:
    passed: bool
    message: str
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


_default_sandbox: Sandbox | None = None


def get_default_sandbox() -> Sandbox:
    """Get or create the process-wide SubprocessSandbox."""
    global _default_sandbox
    if _default_sandbox is None:
        _default_sandbox = SubprocessSandbox()
    return _default_sandbox


def _to_result(spec: TestSpec, outcome: ExecutionOutcome) -> SubmissionResult:
    if outcome.passed:
        return SubmissionResult(passed=True, message=spec.description)

    error = outcome.error
    if outcome.assertion_failed and spec.failure_message:
        error = spec.failure_message
    return SubmissionResult(passed=False, message=spec.description, error=error)


async def run_tests(
    submission_code: str,
    tests: list[TestSpec],
    *,
    sandbox: Sandbox | None = None,
    timeout_ms: int | None = None,
    max_concurrency: int | None = None,
) -> list[SubmissionResult]:
    """Evaluate `submission_code` against each test spec.

    Returns exactly one SubmissionResult per test, in input order. A test
    that crashes, fails to parse or times out yields a failed result and
    never prevents the remaining tests from running.
    """
    if not tests:
        return []

    sandbox = sandbox or get_default_sandbox()
    if timeout_ms is None:
        timeout_ms = get_grader_timeout_ms()
    semaphore = asyncio.Semaphore(max_concurrency or get_grader_max_concurrency())

    async def run_one(spec: TestSpec) -> ExecutionOutcome:
        async with semaphore:
            return await sandbox.execute(submission_code, spec.test_code, timeout_ms)

    outcomes = await asyncio.gather(
        *(run_one(spec) for spec in tests), return_exceptions=True
    )

    results = []
    for spec, outcome in zip(tests, outcomes):
        if isinstance(outcome, BaseException):
            # Sandboxes are not supposed to raise; fold it into the result anyway
            logger.error(
                "Sandbox raised for test %s: %r", spec.test_id or spec.description, outcome
            )
            outcome = ExecutionOutcome(
                passed=False, error=str(outcome) or type(outcome).__name__
            )
        results.append(_to_result(spec, outcome))

    passed = sum(1 for r in results if r.passed)
    logger.info("Graded submission: %d/%d tests passed", passed, len(results))
    return results


def all_passed(results: list[SubmissionResult]) -> bool:
    """True when at least one test ran and every test passed."""
    return bool(results) and all(r.passed for r in results)
