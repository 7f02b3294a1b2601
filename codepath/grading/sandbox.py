"""Sandbox executor for untrusted exercise submissions.

Callers depend on the narrow `Sandbox` protocol: submission source, test
source and a time budget go in, an `ExecutionOutcome` comes out, and no
exception ever comes back. `SubprocessSandbox` is the default implementation.
Each evaluation gets its own interpreter process (``python -I``), with CPU
and address-space rlimits, and the process is killed outright when the time
budget runs out.

`neutralize_submission` is a best-effort source filter applied on top of
process isolation. It is not a security boundary on its own: Python offers
plenty of ways to reach a blocked capability without spelling its name.
"""

import asyncio
import io
import json
import logging
import math
import re
import sys
import tokenize
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import sentry_sdk

from codepath.config import get_grader_timeout_ms, get_sandbox_memory_mb

logger = logging.getLogger(__name__)

HARNESS_PATH = Path(__file__).with_name("harness.py")

TIMEOUT_ERROR = "Timeout exceeded"

# Identifiers that reach the process, module system, filesystem or network
DENYLISTED_IDENTIFIERS = (
    "import",
    "__import__",
    "__builtins__",
    "__loader__",
    "__spec__",
    "__subclasses__",
    "__globals__",
    "__code__",
    "exec",
    "eval",
    "compile",
    "open",
    "globals",
    "locals",
    "breakpoint",
    "input",
    "os",
    "sys",
    "subprocess",
    "socket",
    "shutil",
    "pathlib",
)

_DENYLIST_PATTERN = re.compile(
    r"\b(" + "|".join(re.escape(name) for name in DENYLISTED_IDENTIFIERS) + r")\b"
)


@dataclass(frozen=True)
class ExecutionOutcome:
    """Verdict for one submission/test pair."""

    passed: bool
    error: str | None = None
    # True when the check itself failed (assert / returned False), as opposed
    # to a crash, syntax error or timeout
    assertion_failed: bool = False


class Sandbox(Protocol):
    async def execute(
        self, submission_code: str, test_code: str, timeout_ms: int
    ) -> ExecutionOutcome: ...


def neutralize_submission(code: str) -> str:
    """Rename denylisted identifiers so they no longer resolve.

    `import os` becomes `_blocked_import _blocked_os`, which fails to compile;
    `open(path)` becomes `_blocked_open(path)`, which fails with NameError.
    Only name tokens are rewritten, so string literals and comments are kept
    as written. Source the tokenizer rejects is filtered textually instead.
    """
    try:
        tokens = list(tokenize.generate_tokens(io.StringIO(code).readline))
    except (tokenize.TokenError, SyntaxError):
        return _DENYLIST_PATTERN.sub(r"_blocked_\1", code)

    lines = io.StringIO(code).readlines()
    blocked = [
        tok.start
        for tok in tokens
        if tok.type == tokenize.NAME and tok.string in DENYLISTED_IDENTIFIERS
    ]
    # Splice right to left so earlier columns on the same line stay valid
    for row, col in sorted(blocked, reverse=True):
        line = lines[row - 1]
        lines[row - 1] = f"{line[:col]}_blocked_{line[col:]}"
    return "".join(lines)


class SubprocessSandbox:
    """Evaluate each test in a fresh, killable interpreter process."""

    def __init__(
        self,
        python_executable: str | None = None,
        memory_mb: int | None = None,
    ):
        self.python_executable = python_executable or sys.executable
        self.memory_mb = memory_mb if memory_mb is not None else get_sandbox_memory_mb()

    async def execute(
        self, submission_code: str, test_code: str, timeout_ms: int | None = None
    ) -> ExecutionOutcome:
        if timeout_ms is None:
            timeout_ms = get_grader_timeout_ms()
        try:
            return await self._run(submission_code, test_code, timeout_ms)
        except Exception as e:
            # Sandbox infrastructure failure (spawn error, broken pipe, ...)
            logger.exception("Sandbox execution failed")
            sentry_sdk.capture_exception(e)
            return ExecutionOutcome(passed=False, error=str(e) or type(e).__name__)

    async def _run(
        self, submission_code: str, test_code: str, timeout_ms: int
    ) -> ExecutionOutcome:
        timeout_s = max(timeout_ms, 1) / 1000
        payload = json.dumps(
            {
                "submission": neutralize_submission(submission_code),
                "test": test_code,
                "cpu_seconds": math.ceil(timeout_s) + 1,
                "memory_mb": self.memory_mb,
            }
        ).encode()

        proc = await asyncio.create_subprocess_exec(
            self.python_executable,
            "-I",
            str(HARNESS_PATH),
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env={},
        )
        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(payload), timeout=timeout_s
            )
        except asyncio.TimeoutError:
            return ExecutionOutcome(passed=False, error=TIMEOUT_ERROR)
        finally:
            # Also reached when the grading request itself is cancelled
            if proc.returncode is None:
                proc.kill()
                await proc.wait()

        return _parse_verdict(stdout, stderr, proc.returncode)


def _parse_verdict(stdout: bytes, stderr: bytes, returncode: int | None) -> ExecutionOutcome:
    lines = stdout.decode(errors="replace").strip().splitlines()
    if lines:
        try:
            verdict = json.loads(lines[-1])
            return ExecutionOutcome(
                passed=bool(verdict.get("passed")),
                error=verdict.get("error"),
                assertion_failed=bool(verdict.get("assertion_failed")),
            )
        except (json.JSONDecodeError, AttributeError):
            pass

    # No verdict: killed by an rlimit or crashed in the interpreter itself
    detail = stderr.decode(errors="replace").strip().splitlines()
    reason = detail[-1] if detail else f"exit code {returncode}"
    return ExecutionOutcome(passed=False, error=f"Sandbox terminated: {reason}")
