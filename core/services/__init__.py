# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .ports import AuthGateway, ProfileStore
from .reconciliation import ReconcileAction, ReconcileResult, reconcile
from .route_guard import REDIRECT_PATHS, RouteDecision, evaluate_access
from .session_controller import SessionController

__all__ = [
    "AuthGateway",
    "ProfileStore",
    "ReconcileAction",
    "ReconcileResult",
    "reconcile",
    "REDIRECT_PATHS",
    "RouteDecision",
    "evaluate_access",
    "SessionController",
]
