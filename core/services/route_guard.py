# =============================================================================
# core/services/route_guard.py - Protected Route Decision
# =============================================================================
# Where a protected page should send the user, based only on a snapshot:
#
#   still loading                  -> WAIT
#   no user                        -> LOGIN
#   no profile / no password yet   -> SET_PASSWORD
#   otherwise                      -> ALLOW
# =============================================================================

from enum import Enum

from core.models import SessionSnapshot


class RouteDecision(str, Enum):
    WAIT = "wait"
    LOGIN = "login"
    SET_PASSWORD = "set_password"
    ALLOW = "allow"


REDIRECT_PATHS: dict[RouteDecision, str | None] = {
    RouteDecision.WAIT: None,
    RouteDecision.LOGIN: "/login",
    RouteDecision.SET_PASSWORD: "/set-password",
    RouteDecision.ALLOW: None,
}


def evaluate_access(snapshot: SessionSnapshot) -> RouteDecision:
    """Decide whether a protected page may render for this snapshot."""
    if snapshot.is_loading:
        return RouteDecision.WAIT
    if snapshot.user is None:
        return RouteDecision.LOGIN
    if snapshot.profile is None or not snapshot.profile.password_set:
        return RouteDecision.SET_PASSWORD
    return RouteDecision.ALLOW
