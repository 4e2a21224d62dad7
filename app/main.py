# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the To-do API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload --port 5000
# =============================================================================

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.auth import routes as auth_routes
from app.config import settings
from app.dependencies import init_resources
from app.exceptions import (
    TodoAppException,
    todo_app_exception_handler,
    validation_exception_handler,
)
from app.middleware import request_logging_middleware
from app.rate_limit import AUTH, GENERAL, rate_limit
from app.routers import health, profile, todos

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


async def metrics_reset_loop(app: FastAPI, interval: float):
    """
    Background task that closes the metrics window every `interval` seconds.

    Alert thresholds apply per window, so each reset re-arms them.
    """
    logger.info(f"Metrics window reset every {interval:.0f}s")
    try:
        while True:
            await asyncio.sleep(interval)
            app.state.metrics.reset()
    except asyncio.CancelledError:
        logger.info("Metrics reset task cancelled")
        raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown:
    - Startup: Log configuration, start the metrics reset task
    - Shutdown: Stop the metrics reset task
    """
    # Startup
    logger.info(f"Starting To-do API in {settings.ENVIRONMENT} mode")
    logger.info(f"Store backend: {settings.STORE_BACKEND}")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    reset_task = asyncio.create_task(
        metrics_reset_loop(app, settings.METRICS_RESET_INTERVAL_SECONDS)
    )

    yield

    # Shutdown
    logger.info("Shutting down To-do API")
    reset_task.cancel()
    try:
        await reset_task
    except asyncio.CancelledError:
        pass


# Create FastAPI application
app = FastAPI(
    title="To-do API",
    description="""
## To-do List API

Register, log in with a bearer token, and manage your own todos and profile.

### Quick Start

```bash
# 1. Register
curl -X POST http://localhost:5000/api/auth/register \\
  -H "Content-Type: application/json" \\
  -d '{"email": "me@example.com", "password": "Passw0rd"}'

# 2. Create a todo
curl -X POST http://localhost:5000/api/todos \\
  -H "Authorization: Bearer <token>" \\
  -H "Content-Type: application/json" \\
  -d '{"title": "Buy milk"}'
```

Every response uses the envelope `{"success": bool, "message"?, "data"?}`.
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Registration, login and token checks",
        },
        {
            "name": "Todos",
            "description": "Create and manage your todos",
        },
        {
            "name": "Profile",
            "description": "Your profile, preferences and statistics",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)

init_resources(app, settings)


# =============================================================================
# Middleware
# =============================================================================

app.middleware("http")(request_logging_middleware)

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(TodoAppException)
async def handle_todo_app_exception(request: Request, exc: TodoAppException):
    """Handle custom To-do API exceptions."""
    return await todo_app_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    """Handle malformed request bodies."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    """Unknown paths and framework HTTP errors use the same envelope."""
    if exc.status_code == 404:
        message = f"Not found - {request.url.path}"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    request.app.state.sink.capture_exception(
        exc, tags={"path": request.url.path, "method": request.method}
    )
    message = "An unexpected error occurred" if settings.is_production else str(exc)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": message,
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/auth",
    tags=["Auth"],
    dependencies=[Depends(rate_limit(GENERAL)), Depends(rate_limit(AUTH))],
)

# Todo endpoints
app.include_router(
    todos.router,
    prefix="/api/todos",
    tags=["Todos"],
    dependencies=[Depends(rate_limit(GENERAL))],
)

# Profile endpoints
app.include_router(
    profile.router,
    prefix="/api/profile",
    tags=["Profile"],
    dependencies=[Depends(rate_limit(GENERAL))],
)

# Health check endpoints (never rate limited)
app.include_router(
    health.router,
    tags=["Health"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "success": True,
        "name": "To-do API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }
