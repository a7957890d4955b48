"""
Student Registry - FastAPI Application Entry Point.

This is the main application module that:
1. Sets up structured JSON logging
2. Implements request ID middleware (X-Request-ID header)
3. Owns the auth state channel shared by all session contexts
4. Registers the page routes and the not-found / unavailable pages
5. Provides a health check endpoint

The application follows a modular architecture:
- routes/: HTTP endpoints, one thin function per screen action
- controllers/: screen logic (list, create, edit, landing, login)
- services/: validation, student store, auth, session context
- models/: SQLAlchemy ORM models
- templates/: Jinja2 pages
"""

import time
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import config
from app.errors import StoreError
from app.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from app.routes import pages, records
from app.database import DATABASE_URL, create_tables
from app.services.auth import AuthStateChannel
from app.web import templates

# Import all models so they are registered with Base.metadata
from app.models import Student, User, AuthSession  # noqa: F401

# ──────────────────────────────────────────────────────────────
# Initialize structured logging BEFORE anything else
# ──────────────────────────────────────────────────────────────
setup_logging()
logger = get_logger("http")

# Auto-create tables for SQLite local development
if DATABASE_URL.startswith("sqlite"):
    logger.info("Using SQLite, creating tables directly")
    create_tables()

app = FastAPI(
    title=config.APP_TITLE,
    description="Cadastro de alunos: listar, cadastrar, editar e excluir.",
    version=config.APP_VERSION,
    docs_url=None,
    redoc_url=None,
)

# Single channel for SIGNED_IN / SIGNED_OUT events
app.state.auth_events = AuthStateChannel()


# ──────────────────────────────────────────────────────────────
# Request ID Middleware
#
# Generates a unique UUID per incoming request, stores it in a
# context variable for every log entry, returns it in the
# X-Request-ID header and logs start/end with latency.
# ──────────────────────────────────────────────────────────────
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    req_id = generate_request_id()
    request_id_var.set(req_id)

    start_time = time.time()

    log_with_context(logger, "INFO",
        f"Request started: {request.method} {request.url.path}",
        context={"request_id": req_id},
        extra_data={
            "ip": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent", ""),
            "query_params": dict(request.query_params)
        })

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    response.headers["X-Request-ID"] = req_id

    log_with_context(logger, "INFO",
        f"Request completed: {request.method} {request.url.path} → {response.status_code}",
        context={"request_id": req_id},
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "status_code": response.status_code
        })

    return response


# ──────────────────────────────────────────────────────────────
# Error pages
# ──────────────────────────────────────────────────────────────
@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    """Catch-all page for unknown routes; other HTTP errors keep the default handler."""
    if exc.status_code != 404:
        return await http_exception_handler(request, exc)

    log_with_context(logger, "WARNING",
        f"404 Error: User attempted to access non-existent route: {request.url.path}")
    return templates.TemplateResponse(
        request, "not_found.html",
        {"app_title": config.APP_TITLE, "path": request.url.path},
        status_code=404,
    )


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    """A store failure outside any screen (e.g. while resolving the session)."""
    log_with_context(logger, "ERROR",
        f"Unhandled store error on {request.url.path}: {exc.code}")
    return templates.TemplateResponse(
        request, "unavailable.html",
        {"app_title": config.APP_TITLE, "message": exc.message},
        status_code=503,
    )


# ──────────────────────────────────────────────────────────────
# Register routes
# ──────────────────────────────────────────────────────────────
app.include_router(pages.router, tags=["Pages"])
app.include_router(records.router, tags=["Records"])


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint for container health checks and monitoring."""
    return {"status": "healthy", "service": "student-registry", "version": config.APP_VERSION}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, access_log=False)
