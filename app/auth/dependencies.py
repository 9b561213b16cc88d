# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for the session controller.
#
# The controller is created once in the app lifespan and stored on
# app.state; routes receive it through Depends instead of a module global.
#
# Usage:
#   from app.auth import SessionControllerDep
#
#   @router.get("/protected")
#   async def protected(controller: SessionControllerDep):
#       user = require_user(controller)
# =============================================================================

import logging
from typing import Annotated

from fastapi import Depends
from starlette.requests import HTTPConnection

from app.exceptions import AuthServiceError, NotAuthenticatedError
from core.models import AuthUser
from core.services import SessionController

logger = logging.getLogger(__name__)


def get_session_controller(connection: HTTPConnection) -> SessionController:
    """
    Return the controller owned by the running application.

    Works for both HTTP requests and WebSocket connections.

    Raises:
        AuthServiceError: If the application has not started the controller
    """
    controller = getattr(connection.app.state, "session_controller", None)
    if controller is None:
        logger.error("Session controller requested before application startup")
        raise AuthServiceError(
            "Session controller is not running",
            code="CONTROLLER_UNAVAILABLE",
            suggestion="Wait for application startup to finish",
        )
    return controller


SessionControllerDep = Annotated[SessionController, Depends(get_session_controller)]


def require_user(controller: SessionController, operation: str) -> AuthUser:
    """
    Return the signed-in user or fail the request.

    Raises:
        NotAuthenticatedError: No session is active
    """
    user = controller.current_user
    if user is None:
        raise NotAuthenticatedError(operation)
    return user
