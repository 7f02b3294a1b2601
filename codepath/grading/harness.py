"""Child-process entry point for the subprocess sandbox.

Run as a script (``python -I harness.py``), never imported by the server.
Reads one JSON payload from stdin:

    {"submission": str, "test": str, "cpu_seconds": int, "memory_mb": int}

and writes one JSON verdict line to stdout:

    {"passed": bool, "error": str | null, "assertion_failed": bool}

The submission and the check run in fresh namespaces with a reduced set of
builtins. Anything the submission prints is captured and dropped so it cannot
corrupt the verdict line.
"""

import builtins
import io
import json
import sys
import textwrap
from types import SimpleNamespace

try:
    import resource
except ImportError:  # not available on Windows
    resource = None

BLOCKED_BUILTINS = frozenset(
    {
        "__import__",
        "breakpoint",
        "compile",
        "eval",
        "exec",
        "exit",
        "globals",
        "help",
        "input",
        "locals",
        "open",
        "quit",
        "vars",
    }
)


def _safe_builtins() -> dict:
    return {
        name: value
        for name, value in vars(builtins).items()
        if name not in BLOCKED_BUILTINS
    }


def _apply_limits(cpu_seconds: int, memory_mb: int) -> None:
    if resource is None:
        return
    resource.setrlimit(resource.RLIMIT_CPU, (cpu_seconds, cpu_seconds))
    memory_bytes = memory_mb * 1024 * 1024
    resource.setrlimit(resource.RLIMIT_AS, (memory_bytes, memory_bytes))


def _exported_callable(namespace: dict):
    """`solution` if the submission defines it, else its last top-level callable."""
    candidate = namespace.get("solution")
    if callable(candidate):
        return candidate
    exported = None
    for name, value in namespace.items():
        if not name.startswith("_") and callable(value):
            exported = value
    return exported


def _describe(exc: BaseException) -> str:
    message = str(exc)
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


def evaluate(submission: str, test: str) -> dict:
    """Run `test` against `submission`, returning the verdict dict."""
    safe_builtins = _safe_builtins()

    namespace = {"__builtins__": safe_builtins, "__name__": "submission"}
    try:
        exec(compile(submission, "<submission>", "exec"), namespace)
    except BaseException as exc:  # noqa: BLE001 - any failure is a verdict
        return {"passed": False, "error": _describe(exc), "assertion_failed": False}

    exports = {
        name: value
        for name, value in namespace.items()
        if not name.startswith("_")
    }
    solution = _exported_callable(namespace)

    body = textwrap.indent(textwrap.dedent(test).strip() or "pass", "    ")
    check_source = f"def check(solution, submission):\n{body}\n"
    check_namespace = {"__builtins__": safe_builtins}
    try:
        exec(compile(check_source, "<test>", "exec"), check_namespace)
        result = check_namespace["check"](solution, SimpleNamespace(**exports))
    except AssertionError as exc:
        return {
            "passed": False,
            "error": str(exc) or "Assertion failed",
            "assertion_failed": True,
        }
    except BaseException as exc:  # noqa: BLE001
        return {"passed": False, "error": _describe(exc), "assertion_failed": False}

    if result is False:
        return {"passed": False, "error": "Check returned False", "assertion_failed": True}
    return {"passed": True, "error": None, "assertion_failed": False}


def main() -> None:
    payload = json.loads(sys.stdin.read())
    _apply_limits(int(payload.get("cpu_seconds", 5)), int(payload.get("memory_mb", 512)))

    real_stdout = sys.stdout
    sys.stdout = io.StringIO()
    sys.stderr = io.StringIO()
    try:
        verdict = evaluate(payload["submission"], payload["test"])
    finally:
        sys.stdout = real_stdout

    real_stdout.write(json.dumps(verdict) + "\n")
    real_stdout.flush()


if __name__ == "__main__":
    main()
