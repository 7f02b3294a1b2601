"""
Centralized configuration for the CodePath learning platform.

Environment-aware settings shared by main.py, the web API and the grader.
"""

import os


def is_dev_mode() -> bool:
    """Check if running in development mode (--dev flag or DEV_MODE env)."""
    return os.getenv("DEV_MODE", "").lower() in ("true", "1", "yes")


def is_production() -> bool:
    """Check if running in the production environment."""
    return os.getenv("ENVIRONMENT", "").lower() == "production"


def get_api_port() -> int:
    """Get API server port from env or default."""
    return int(os.getenv("API_PORT", "8000"))


def get_frontend_url() -> str:
    """Get frontend URL, falling back to the local dev server."""
    return os.environ.get("FRONTEND_URL", "http://localhost:3000").rstrip("/")


def get_allowed_origins() -> list[str]:
    """
    Get list of allowed CORS origins.

    Includes localhost variants for dev and the configured frontend URL.
    """
    hosts = ["localhost", "127.0.0.1"]
    ports = [3000, get_api_port()]
    origins = [f"http://{host}:{port}" for host in hosts for port in ports]

    frontend_url = get_frontend_url()
    if frontend_url not in origins:
        origins.append(frontend_url)

    return origins


def get_jwt_secret() -> str | None:
    """Secret used by the identity provider to sign access tokens."""
    return os.environ.get("JWT_SECRET")


def get_jwt_audience() -> str | None:
    """Expected `aud` claim. When unset the audience is not checked."""
    return os.environ.get("JWT_AUDIENCE") or None


def get_grader_timeout_ms() -> int:
    """Time budget for a single test evaluation."""
    return int(os.getenv("GRADER_TIMEOUT_MS", "5000"))


def get_grader_max_concurrency() -> int:
    """Max sandbox processes in flight for one grading request."""
    return max(1, int(os.getenv("GRADER_MAX_CONCURRENCY", "4")))


def get_sandbox_memory_mb() -> int:
    """Address-space cap for a sandbox process."""
    return int(os.getenv("SANDBOX_MEMORY_MB", "512"))


# Required environment variables for production
# Format: (name, description, required_in_dev)
REQUIRED_ENV_VARS = [
    ("DATABASE_URL", "PostgreSQL connection string", True),
    ("JWT_SECRET", "Identity provider JWT secret", True),
    ("SENTRY_DSN", "Sentry DSN for error reporting", False),
]


def check_required_env_vars() -> tuple[bool, list[str]]:
    """
    Check that required environment variables are set.

    Returns:
        (all_ok, warnings): Tuple of success flag and list of warning messages
    """
    warnings = []
    errors = []
    in_dev = is_dev_mode()

    for name, description, required_in_dev in REQUIRED_ENV_VARS:
        value = os.environ.get(name)

        if not value:
            if is_production():
                errors.append(f"  ✗ {name}: Not set ({description})")
            elif required_in_dev or not in_dev:
                warnings.append(f"  ⚠ {name}: Not set ({description})")

    if errors:
        for error in errors:
            print(error)
        return False, warnings

    return True, warnings
