# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# Boundary adapters between the session controller and Supabase:
# - SupabaseClient: shared async client (one per process)
# - SupabaseAuthGateway: Supabase Auth behind the AuthGateway contract
# - SupabaseProfileStore: the profiles table + realtime feed behind the
#   ProfileStore contract
#
# Every provider error (supabase auth errors, PostgREST APIError, httpx
# transport errors) is translated here into app.exceptions classes, and raw
# realtime payloads are translated into ProfileEvent values. Nothing past this
# module sees a provider-specific shape.
#
# Usage:
#   client = await SupabaseClient.get_client()
#   auth = SupabaseAuthGateway(client)
#   profiles = SupabaseProfileStore(client)
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient, AuthApiError, AuthError, AuthRetryableError, acreate_client
from supabase.lib.client_options import AsyncClientOptions

from app.config import settings
from app.exceptions import (
    AuthServiceError,
    CredentialError,
    InvalidCredentialsError,
    ProfileFetchError,
    ProfilePersistError,
)
from core.models import (
    AuthSession,
    Profile,
    ProfileDeleted,
    ProfileEvent,
    ProfileUpdated,
    SignUpConfirmation,
)
from lib.utils import normalize_uuid

# Set up logging for this module
logger = logging.getLogger(__name__)

# Auth API statuses that mean "the credentials were wrong", not "the service failed"
CREDENTIAL_REJECTION_STATUSES = {400, 401, 403, 422}


class SupabaseClient:
    """
    Shared async Supabase client.

    Uses the anon key: the service acts as the signed-in end user and Row
    Level Security scopes every query to that user.
    """

    _instance: AsyncClient | None = None

    @classmethod
    async def get_client(cls) -> AsyncClient:
        """
        Get or create the shared async Supabase client.

        Raises:
            AuthServiceError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = await acreate_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_ANON_KEY,
                    options=AsyncClientOptions(
                        auto_refresh_token=True,
                        persist_session=True,
                        postgrest_client_timeout=settings.SUPABASE_TIMEOUT_SECONDS,
                    ),
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise AuthServiceError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_ANON_KEY in your .env file",
                ) from e
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Forget the shared client (used on shutdown and in tests)."""
        cls._instance = None


# =============================================================================
# Translation Helpers
# =============================================================================

def _error_message(error: Exception) -> str:
    return getattr(error, "message", None) or str(error)


def session_from_provider(session: Any) -> AuthSession:
    """Convert a supabase auth Session into an AuthSession."""
    user = session.user
    return AuthSession(
        user_id=normalize_uuid(user.id),
        email=getattr(user, "email", None),
        access_token=session.access_token or "",
        refresh_token=session.refresh_token or "",
        expires_at=getattr(session, "expires_at", None),
    )


def profile_event_from_payload(payload: dict[str, Any]) -> ProfileEvent | None:
    """
    Translate a realtime postgres_changes payload into a ProfileEvent.

    Accepts both the python realtime shape
        {"data": {"type": "UPDATE", "record": {...}, "old_record": {...}}}
    and the flattened shape
        {"eventType": "UPDATE", "new": {...}, "old": {...}}

    Returns:
        ProfileUpdated for INSERT/UPDATE, ProfileDeleted for DELETE,
        None for anything unrecognised
    """
    data = payload.get("data") if isinstance(payload.get("data"), dict) else payload
    kind = str(data.get("type") or data.get("eventType") or "").upper()
    record = data.get("record") or data.get("new") or {}
    old_record = data.get("old_record") or data.get("old") or {}

    if kind in ("INSERT", "UPDATE") and record.get("id"):
        return ProfileUpdated(profile=Profile.from_db_row(record))

    if kind == "DELETE":
        profile_id = old_record.get("id") or record.get("id")
        if profile_id:
            return ProfileDeleted(profile_id=normalize_uuid(profile_id))

    return None


# =============================================================================
# Auth Gateway
# =============================================================================

class SupabaseAuthGateway:
    """Supabase Auth exposed through the AuthGateway contract."""

    def __init__(self, client: AsyncClient):
        self._client = client

    async def get_current_session(self) -> AuthSession | None:
        try:
            session = await self._client.auth.get_session()
        except (AuthError, httpx.HTTPError) as e:
            raise AuthServiceError(f"Failed to read current session: {_error_message(e)}") from e
        return session_from_provider(session) if session else None

    def on_session_change(
        self,
        callback: Callable[[AuthSession | None], None],
    ) -> Callable[[], None]:
        def handle(event: Any, session: Any) -> None:
            logger.debug(f"Auth state change: {event}")
            callback(session_from_provider(session) if session and session.user else None)

        subscription = self._client.auth.on_auth_state_change(handle)
        return subscription.unsubscribe

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        try:
            response = await self._client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthApiError as e:
            if e.status in CREDENTIAL_REJECTION_STATUSES:
                raise InvalidCredentialsError(_error_message(e)) from e
            raise AuthServiceError(f"Sign-in failed: {_error_message(e)}") from e
        except (AuthError, httpx.HTTPError) as e:
            raise AuthServiceError(f"Sign-in failed: {_error_message(e)}") from e

        if response.session is None:
            raise InvalidCredentialsError("Sign-in returned no session")
        return session_from_provider(response.session)

    async def sign_in_with_link(self, email: str, redirect_to: str) -> SignUpConfirmation:
        try:
            response = await self._client.auth.sign_in_with_otp(
                {"email": email, "options": {"email_redirect_to": redirect_to}}
            )
        except (AuthError, httpx.HTTPError) as e:
            raise AuthServiceError(
                f"Failed to send sign-in link: {_error_message(e)}",
                details={"email": email},
            ) from e

        return SignUpConfirmation(
            email=email,
            redirect_to=redirect_to,
            message_id=getattr(response, "message_id", None),
        )

    async def register_password(self, email: str, password: str) -> AuthSession:
        try:
            await self._client.auth.update_user({"password": password})
            session = await self._client.auth.get_session()
        except httpx.HTTPError as e:
            raise AuthServiceError(f"Failed to set password: {e}") from e
        except AuthRetryableError as e:
            raise AuthServiceError(f"Failed to set password: {_error_message(e)}") from e
        except AuthError as e:
            # Weak password, reused password, or no verified session
            raise CredentialError(_error_message(e)) from e

        if session is None:
            raise CredentialError("No verified session; open the sign-up link first")
        return session_from_provider(session)

    async def invalidate_session(self) -> None:
        try:
            await self._client.auth.sign_out()
        except (AuthError, httpx.HTTPError) as e:
            raise AuthServiceError(f"Remote sign-out failed: {_error_message(e)}") from e

    async def verify_otp(self, email: str, token: str) -> AuthSession:
        try:
            response = await self._client.auth.verify_otp(
                {"email": email, "token": token, "type": "email"}
            )
        except AuthApiError as e:
            if e.status in CREDENTIAL_REJECTION_STATUSES:
                raise InvalidCredentialsError(_error_message(e)) from e
            raise AuthServiceError(f"Code verification failed: {_error_message(e)}") from e
        except (AuthError, httpx.HTTPError) as e:
            raise AuthServiceError(f"Code verification failed: {_error_message(e)}") from e

        if response.session is None:
            raise InvalidCredentialsError("Code verification returned no session")
        return session_from_provider(response.session)

    async def set_session(self, access_token: str, refresh_token: str) -> AuthSession:
        try:
            response = await self._client.auth.set_session(access_token, refresh_token)
        except (AuthError, httpx.HTTPError) as e:
            raise AuthServiceError(
                f"Magic link session was rejected: {_error_message(e)}",
                code="LINK_REJECTED",
            ) from e

        if response.session is None:
            raise AuthServiceError("Magic link produced no session", code="LINK_REJECTED")
        return session_from_provider(response.session)

    async def exchange_code_for_session(self, auth_code: str) -> AuthSession:
        try:
            response = await self._client.auth.exchange_code_for_session(
                {"auth_code": auth_code}
            )
        except (AuthError, httpx.HTTPError) as e:
            raise AuthServiceError(
                f"Magic link code was rejected: {_error_message(e)}",
                code="LINK_REJECTED",
            ) from e

        if response.session is None:
            raise AuthServiceError("Magic link produced no session", code="LINK_REJECTED")
        return session_from_provider(response.session)


# =============================================================================
# Profile Store
# =============================================================================

@dataclass
class ProfileSubscription:
    """Handle for one realtime channel watching one profile row."""
    profile_id: str
    channel: Any


class SupabaseProfileStore:
    """The profiles table and its realtime change feed."""

    def __init__(
        self,
        client: AsyncClient,
        table: str | None = None,
        channel_name: str | None = None,
    ):
        self._client = client
        self._table = table or settings.PROFILES_TABLE
        self._channel_name = channel_name or settings.PROFILE_CHANNEL

    async def _select_one(self, column: str, value: str) -> Profile | None:
        try:
            response = await (
                self._client.table(self._table)
                .select("*")
                .eq(column, value)
                .limit(1)
                .execute()
            )
        except (APIError, httpx.HTTPError) as e:
            raise ProfileFetchError(
                _error_message(e),
                details={"column": column, "table": self._table},
            ) from e

        rows = response.data or []
        return Profile.from_db_row(rows[0]) if rows else None

    async def get_by_id(self, profile_id: str) -> Profile | None:
        return await self._select_one("id", normalize_uuid(profile_id))

    async def find_by_email(self, email: str) -> Profile | None:
        return await self._select_one("email", email)

    async def upsert(self, profile_id: str, fields: dict[str, Any]) -> Profile:
        profile_id = normalize_uuid(profile_id)
        row = {**fields, "id": profile_id}
        try:
            response = await (
                self._client.table(self._table)
                .upsert(row, on_conflict="id")
                .execute()
            )
        except (APIError, httpx.HTTPError) as e:
            raise ProfilePersistError(
                _error_message(e),
                details={"profile_id": profile_id},
            ) from e

        if not response.data:
            raise ProfilePersistError(
                "Upsert returned no row",
                details={"profile_id": profile_id},
            )
        logger.debug(f"Upserted profile {profile_id}")
        return Profile.from_db_row(response.data[0])

    async def update(self, profile_id: str, fields: dict[str, Any]) -> Profile:
        profile_id = normalize_uuid(profile_id)
        try:
            response = await (
                self._client.table(self._table)
                .update(fields)
                .eq("id", profile_id)
                .execute()
            )
        except (APIError, httpx.HTTPError) as e:
            raise ProfilePersistError(
                _error_message(e),
                details={"profile_id": profile_id, "fields": sorted(fields)},
            ) from e

        # RLS hides rows the caller may not touch, which shows up as zero rows
        if not response.data:
            raise ProfilePersistError(
                "No profile row was updated",
                details={"profile_id": profile_id},
            )
        logger.debug(f"Updated profile {profile_id}: {sorted(fields)}")
        return Profile.from_db_row(response.data[0])

    async def subscribe(
        self,
        profile_id: str,
        callback: Callable[[ProfileEvent], None],
    ) -> ProfileSubscription:
        profile_id = normalize_uuid(profile_id)

        def handle(payload: dict[str, Any], *args: Any) -> None:
            try:
                event = profile_event_from_payload(payload)
            except ValueError as e:
                logger.warning(f"Dropping malformed profile change payload: {e}")
                return
            if event is None:
                logger.debug(f"Ignoring profile change payload: {payload}")
                return
            callback(event)

        try:
            channel = self._client.channel(f"{self._channel_name}:{profile_id}")
            channel.on_postgres_changes(
                "*",
                callback=handle,
                table=self._table,
                schema="public",
                filter=f"id=eq.{profile_id}",
            )
            await channel.subscribe()
        except Exception as e:
            raise AuthServiceError(
                f"Failed to subscribe to profile changes: {e}",
                code="REALTIME_SUBSCRIBE_FAILED",
                details={"profile_id": profile_id},
            ) from e

        return ProfileSubscription(profile_id=profile_id, channel=channel)

    async def unsubscribe(self, handle: ProfileSubscription) -> None:
        try:
            await self._client.remove_channel(handle.channel)
        except Exception as e:
            raise AuthServiceError(
                f"Failed to remove profile subscription: {e}",
                code="REALTIME_UNSUBSCRIBE_FAILED",
                details={"profile_id": handle.profile_id},
            ) from e
