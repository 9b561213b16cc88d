# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - profile.py: Read/update the signed-in user's profile
#
# Auth endpoints live in app/auth/routes.py.
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import profile

__all__ = [
    "health",
    "profile",
]
