# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# HTTP surface of the session controller.
#
# Usage:
#   from app.auth import SessionControllerDep, require_user
#
#   @router.get("/protected")
#   async def protected(controller: SessionControllerDep):
#       return {"user_id": require_user(controller, "protected").id}
# =============================================================================

from app.auth.dependencies import (
    SessionControllerDep,
    get_session_controller,
    require_user,
)

__all__ = [
    "SessionControllerDep",
    "get_session_controller",
    "require_user",
]
