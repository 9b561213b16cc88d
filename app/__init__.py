# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package exposes the session controller to the web client:
# - main.py: App entry point, lifespan, middleware setup, error handlers
# - config.py: Environment variable loading and settings
# - exceptions.py: Error taxonomy and exception handlers
# - dependencies.py: Controller construction and injection
# - routers/: HTTP endpoints (auth, profile, health)
# - websocket/: Push of session snapshots to connected clients
#
# The app layer is thin - it handles HTTP concerns and delegates
# business logic to the core/ package.
# =============================================================================
