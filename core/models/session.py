# =============================================================================
# core/models/session.py - Session Schemas
# =============================================================================
# These models describe authentication state as the rest of the application
# sees it:
# - AuthSession: the provider's login session (tokens stay opaque here)
# - AuthUser: the identity part of a session that readers are allowed to see
# - AuthState: lifecycle of the session controller
# - SessionSnapshot: immutable read model handed to observers
# - SignUpConfirmation: result of requesting a sign-up magic link
# =============================================================================

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .profile import Profile


class AuthState(str, Enum):
    """
    Lifecycle states of the session controller.

    Flow: initializing -> unauthenticated <-> authenticated
    """
    INITIALIZING = "initializing"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class AuthUser(BaseModel):
    """
    Authenticated identity, without credentials.

    This is the minimal user info exposed to readers of the controller.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    email: str | None = None


class AuthSession(BaseModel):
    """
    A login session issued by the auth service.

    Tokens are carried so the adapter can restore or refresh the session;
    the controller never looks inside them.
    """
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1, description="Subject identifier")
    email: str | None = None
    access_token: str = Field(default="", repr=False)
    refresh_token: str = Field(default="", repr=False)
    expires_at: int | None = None

    @property
    def user(self) -> AuthUser:
        return AuthUser(id=self.user_id, email=self.email)


class SessionSnapshot(BaseModel):
    """
    Point-in-time view of the session controller.

    Returned by every controller operation and pushed to observers after
    each state change.

    Example:
        {
            "state": "authenticated",
            "user": {"id": "u1", "email": "a@x.com"},
            "profile": {"id": "u1", "name": "Ann", ...},
            "is_loading": false,
            "profile_loaded": true
        }
    """
    model_config = ConfigDict(frozen=True)

    state: AuthState = AuthState.INITIALIZING
    user: AuthUser | None = None
    profile: Profile | None = None
    is_loading: bool = True

    @property
    def profile_loaded(self) -> bool:
        return self.profile is not None

    @property
    def is_authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED

    def to_payload(self) -> dict:
        """JSON-safe dict used by the HTTP and WebSocket layers."""
        payload = self.model_dump(mode="json", by_alias=True)
        payload["profile_loaded"] = self.profile_loaded
        return payload


class SignUpConfirmation(BaseModel):
    """Opaque confirmation that a sign-up link was dispatched."""
    model_config = ConfigDict(frozen=True)

    email: str
    redirect_to: str
    message_id: str | None = None
