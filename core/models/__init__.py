# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - profile.py: Profile row and partial update schemas
# - session.py: Auth session, controller state and snapshot schemas
# - events.py: Realtime profile change events (tagged union)
# =============================================================================

from .profile import (
    AccountCategory,
    CertificatePreference,
    Profile,
    ProfileUpdate,
)

from .session import (
    AuthSession,
    AuthState,
    AuthUser,
    SessionSnapshot,
    SignUpConfirmation,
)

from .events import (
    ProfileDeleted,
    ProfileEvent,
    ProfileEventKind,
    ProfileUpdated,
    profile_event_adapter,
)

__all__ = [
    # Profile
    "AccountCategory",
    "CertificatePreference",
    "Profile",
    "ProfileUpdate",
    # Session
    "AuthSession",
    "AuthState",
    "AuthUser",
    "SessionSnapshot",
    "SignUpConfirmation",
    # Events
    "ProfileDeleted",
    "ProfileEvent",
    "ProfileEventKind",
    "ProfileUpdated",
    "profile_event_adapter",
]
