# =============================================================================
# core/services/ports.py - External Service Contracts
# =============================================================================
# Contracts the session controller relies on. lib/supabase_client.py provides
# the production implementations; tests supply in-memory fakes.
#
# Every implementation must raise only the exceptions in app/exceptions.py.
# =============================================================================

from typing import Any, Callable, Protocol

from core.models import AuthSession, Profile, ProfileEvent, SignUpConfirmation

SessionListener = Callable[[AuthSession | None], None]
ProfileEventListener = Callable[[ProfileEvent], None]
Unregister = Callable[[], None]


class AuthGateway(Protocol):
    """Authentication provider (sessions, passwords, magic links)."""

    async def get_current_session(self) -> AuthSession | None:
        """Return the persisted session, if it is still valid. Raises AuthServiceError."""
        ...

    def on_session_change(self, callback: SessionListener) -> Unregister:
        """Register a listener for sign-in/sign-out/refresh. Returns an unregister function."""
        ...

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """Raises InvalidCredentialsError or AuthServiceError."""
        ...

    async def sign_in_with_link(self, email: str, redirect_to: str) -> SignUpConfirmation:
        """Send a passwordless login link. Raises AuthServiceError."""
        ...

    async def register_password(self, email: str, password: str) -> AuthSession:
        """Set the password of the signed-in account. Raises CredentialError."""
        ...

    async def invalidate_session(self) -> None:
        """Sign out server-side. Raises AuthServiceError."""
        ...

    async def verify_otp(self, email: str, token: str) -> AuthSession:
        """Exchange an emailed one-time code for a session. Raises InvalidCredentialsError."""
        ...

    async def set_session(self, access_token: str, refresh_token: str) -> AuthSession:
        """Install tokens delivered through a magic-link fragment. Raises AuthServiceError."""
        ...

    async def exchange_code_for_session(self, auth_code: str) -> AuthSession:
        """Complete a PKCE magic-link callback. Raises AuthServiceError."""
        ...


class ProfileStore(Protocol):
    """The profiles table and its realtime change feed."""

    async def get_by_id(self, profile_id: str) -> Profile | None:
        """Raises ProfileFetchError on transport failure."""
        ...

    async def find_by_email(self, email: str) -> Profile | None:
        """Raises ProfileFetchError on transport failure."""
        ...

    async def upsert(self, profile_id: str, fields: dict[str, Any]) -> Profile:
        """Insert or merge-overwrite the row. Raises ProfilePersistError."""
        ...

    async def update(self, profile_id: str, fields: dict[str, Any]) -> Profile:
        """Update exactly the row with this id. Raises ProfilePersistError."""
        ...

    async def subscribe(self, profile_id: str, callback: ProfileEventListener) -> Any:
        """Start delivering change events for one row. Returns an opaque handle."""
        ...

    async def unsubscribe(self, handle: Any) -> None:
        """Stop a subscription created by subscribe()."""
        ...
