# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the ArtFolio session service.
# It configures the FastAPI application with middleware, routers, and handlers,
# and owns the single SessionController for the lifetime of the process.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.auth import routes as auth_routes
from app.config import settings
from app.dependencies import create_session_controller
from app.exceptions import (
    ArtFolioException,
    artfolio_exception_handler,
    validation_exception_handler,
)
from app.routers import health, profile
from app.websocket import routes as websocket_routes
from app.websocket import websocket_manager
from lib.supabase_client import SupabaseClient

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: build the session controller, hook WebSocket push, restore session
    - Shutdown: tear the controller down and drop the Supabase client
    """
    logger.info(f"Starting ArtFolio session service in {settings.ENVIRONMENT} mode")

    controller = await create_session_controller()
    unwatch = controller.watch(websocket_manager.publish_snapshot)
    app.state.session_controller = controller
    snapshot = await controller.initialize()
    logger.info(f"Session controller ready: {snapshot.state.value}")

    yield

    logger.info("Shutting down ArtFolio session service")
    unwatch()
    await controller.teardown()
    app.state.session_controller = None
    SupabaseClient.reset()


# Create FastAPI application
app = FastAPI(
    title="ArtFolio Session API",
    description="""
## Session and profile state for the ArtFolio web client

Holds the signed-in artist or collector, their profile, and a live
subscription that keeps the profile in sync with the database.

### Sign-up flow

1. `POST /api/v1/auth/signup` - email a magic link
2. `POST /api/v1/auth/callback` or `POST /api/v1/auth/otp/verify` - open the link / enter the code
3. `POST /api/v1/auth/signup/complete` - set password, account type and bio

### Live state

Connect to `ws://host/ws/session` to receive every state change.
""",
    version=health.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Sign-up, sign-in, sign-out and session state",
        },
        {
            "name": "Profile",
            "description": "The signed-in user's profile",
        },
        {
            "name": "WebSocket",
            "description": "Real-time session updates",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

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

@app.exception_handler(ArtFolioException)
async def handle_artfolio_exception(request: Request, exc: ArtFolioException):
    """Handle custom ArtFolio exceptions."""
    return await artfolio_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Handle request body validation errors."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

app.include_router(
    profile.router,
    prefix="/api/v1/profile",
    tags=["Profile"]
)

app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

app.include_router(
    websocket_routes.router,
    tags=["WebSocket"]
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
        "name": "ArtFolio Session API",
        "version": health.VERSION,
        "docs": "/docs",
        "health": "/api/v1/health",
    }
