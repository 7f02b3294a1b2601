"""
Backend entry point.

Architecture:
- One Python process, one asyncio event loop
- FastAPI serves the web frontend; grading spawns short-lived sandbox
  processes per test, everything durable lives in Postgres

We use FastAPI's lifespan to manage startup/shutdown, which gives us
uvicorn's signal handling and --reload for free.

Run with: python main.py [--port PORT]
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

project_root = Path(__file__).parent

# Load .env.local first (if exists), then .env as fallback
# .env.local is gitignored and used for local dev overrides
load_dotenv(project_root / ".env.local")
load_dotenv()

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from codepath.config import (
    check_required_env_vars,
    get_allowed_origins,
    get_api_port,
)
from codepath.database import close_engine
from web_api.routes.courses import router as courses_router
from web_api.routes.grading import router as grading_router
from web_api.routes.progress import router as progress_router
from web_api.routes.users import router as users_router

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

if os.environ.get("SENTRY_DSN"):
    sentry_sdk.init(
        dsn=os.environ["SENTRY_DSN"],
        environment=os.environ.get("ENVIRONMENT", "development"),
        traces_sample_rate=0.0,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan context manager: env checks on start, pool cleanup on stop."""
    ok, warnings = check_required_env_vars()
    for warning in warnings:
        logger.warning("Missing environment variable:%s", warning)
    if not ok:
        raise RuntimeError("Required environment variables are missing")

    yield

    await close_engine()  # Close database connections


app = FastAPI(
    title="CodePath Learning Platform API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(grading_router)
app.include_router(progress_router)
app.include_router(users_router)
app.include_router(courses_router)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    """Database failures surface as 500s; nothing is retried."""
    logger.exception(
        "Database error on %s %s", request.method, request.url.path, exc_info=exc
    )
    sentry_sdk.capture_exception(exc)
    return JSONResponse(status_code=500, content={"detail": "Database error"})


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="CodePath Learning Platform Server")
    parser.add_argument(
        "--port",
        type=int,
        default=get_api_port(),
        help="Port to run the server on (default: 8000)",
    )
    args = parser.parse_args()

    # Pass app object directly (not string) to avoid module reimport issues
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=args.port,
    )
