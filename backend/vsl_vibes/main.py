"""
VSL Vibes Backend API
FastAPI application that turns video sales letter scripts into styled slide
decks and exports them as images, archives or videos.

This is the main entry point that wires together all routes and services.
"""

import os
import uuid
from collections import defaultdict, deque
from contextlib import asynccontextmanager
from pathlib import Path
from time import monotonic
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import (
    API_DESCRIPTION,
    API_TITLE,
    API_VERSION,
    CORS_ORIGINS,
    MAX_REQUEST_BODY_BYTES,
    PROJECT_DATA_DIR,
)
from .core import (
    LOCAL_VIDEO_TOOLS,
    clear_context,
    credential_report,
    directory_is_writable,
    get_logger,
    missing_runtime_tools,
    parse_bool_env,
    set_request_id,
    setup_logging,
)
from .core.exceptions import VslVibesError
from .routes import generation_router, media_router, projects_router, render_router
from .routes.errors import http_status_for
from .services.infrastructure.orchestration import StartupManager

# Initialize logging
log_level = os.getenv("LOG_LEVEL", "INFO")
log_file = os.getenv("LOG_FILE")
use_json_logs = os.getenv("JSON_LOGS", "false").lower() == "true"

setup_logging(
    level=log_level,
    log_file=Path(log_file) if log_file else None,
    use_json=use_json_logs,
)

logger = get_logger(__name__, service="api")
logger.info("Starting VSL Vibes API", extra={
    "log_level": log_level,
    "json_logs": use_json_logs,
})

# Runtime protection controls
MAX_BODY_BYTES = int(os.getenv("MAX_REQUEST_BODY_BYTES", str(MAX_REQUEST_BODY_BYTES)))
RATE_LIMIT_ENABLED = parse_bool_env(os.getenv("RATE_LIMIT_ENABLED"), default=True)
RATE_LIMIT_REQUESTS = int(os.getenv("RATE_LIMIT_REQUESTS_PER_MINUTE", "600"))
RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))
RATE_LIMIT_EXEMPT_PATHS = {"/", "/health"}
_rate_limit_buckets: dict[str, deque[float]] = defaultdict(deque)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    manager = StartupManager(_app)
    await manager.run_startup()
    try:
        yield
    finally:
        await manager.run_shutdown()


# Create FastAPI app
app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    lifespan=lifespan,
)


def is_rate_limited(client_ip: str, now: float) -> bool:
    """Sliding-window request count per client."""
    bucket = _rate_limit_buckets[client_ip]
    window_start = now - RATE_LIMIT_WINDOW_SECONDS
    while bucket and bucket[0] < window_start:
        bucket.popleft()
    if len(bucket) >= RATE_LIMIT_REQUESTS:
        return True
    bucket.append(now)
    return False


SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "no-referrer",
    "X-Frame-Options": "DENY",
}


def rejection_for(request: Request, client_ip: str) -> Optional[JSONResponse]:
    """Body-size and rate-limit guard; returns the error response or None."""
    declared = request.headers.get("content-length")
    if declared:
        if not declared.isdigit():
            return JSONResponse(status_code=400, content={"detail": "Invalid Content-Length header"})
        if int(declared) > MAX_BODY_BYTES:
            limit_mb = MAX_BODY_BYTES // (1024 * 1024)
            return JSONResponse(status_code=413, content={"detail": f"Request body too large. Max allowed: {limit_mb}MB"})

    if not RATE_LIMIT_ENABLED or request.url.path in RATE_LIMIT_EXEMPT_PATHS:
        return None
    if is_rate_limited(client_ip, monotonic()):
        logger.warning("Rate limit exceeded", extra={"client": client_ip})
        return JSONResponse(status_code=429, content={"detail": "Rate limit exceeded. Please retry later."})
    return None


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Tag the request with an id, apply request guards and harden the response."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    set_request_id(request_id)
    client_ip = request.client.host if request.client else "unknown"
    route = f"{request.method} {request.url.path}"
    logger.info(route, extra={"client": client_ip})

    try:
        response = rejection_for(request, client_ip) or await call_next(request)
        response.headers["X-Request-ID"] = request_id
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        logger.info(f"{route} -> {response.status_code}", extra={"status_code": response.status_code})
        return response
    finally:
        clear_context()


@app.exception_handler(VslVibesError)
async def domain_error_handler(_request: Request, exc: VslVibesError):
    """Last line of defence for domain errors a route did not translate."""
    status_code = http_status_for(exc)
    logger.error("Unhandled domain error", extra={"error": str(exc), "status_code": status_code})
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(generation_router)
app.include_router(media_router)
app.include_router(render_router)
app.include_router(projects_router)


@app.get("/")
async def root():
    """Root endpoint - API info"""
    return {
        "message": "VSL Vibes API - Turn scripts into slide decks",
        "version": API_VERSION,
    }


@app.get("/health")
async def health_check():
    """
    Health check endpoint for container orchestration.

    Reports which provider credentials are configured, whether local video
    tools are installed and whether the project store is writable. Only an
    unwritable project store makes the service unhealthy (503).
    """
    runtime_report = getattr(app.state, "runtime_report", None)
    checks = {
        "credentials": credential_report(),
        "local_video_tools": {
            "tools": list(LOCAL_VIDEO_TOOLS),
            "missing": missing_runtime_tools(LOCAL_VIDEO_TOOLS),
        },
        "project_store": {
            "path": str(PROJECT_DATA_DIR),
            "writable": directory_is_writable(PROJECT_DATA_DIR),
        },
    }
    if runtime_report is not None:
        checks["runtime_startup"] = runtime_report

    healthy = checks["project_store"]["writable"]
    body = {"status": "healthy" if healthy else "unhealthy", "checks": checks}
    if not healthy:
        logger.warning("Health check: project store not writable", extra={"path": str(PROJECT_DATA_DIR)})
        return JSONResponse(status_code=503, content=body)
    return body
