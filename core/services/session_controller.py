# =============================================================================
# core/services/session_controller.py - Session / Profile State Controller
# =============================================================================
# Owns the current auth session, the matching profile row and the realtime
# subscription that keeps that profile in sync. The presentation layer reads
# snapshots and calls the operations below; it never mutates state itself.
#
# State machine:
#   initializing -> unauthenticated | authenticated (profile loaded or not)
#
# Consistency rules:
# - `_generation` changes whenever the signed-in subject changes (new user or
#   cleared). Any async result started under an older generation is dropped.
# - Subscription swaps run under `_subscription_lock`; at most one handle is
#   live and it always belongs to the current subject.
# - Operation failures propagate to the caller. Failures in passive paths
#   (auth listener, realtime delivery, observers) are logged and leave the
#   last known good state in place.
#
# Usage:
#   controller = SessionController(auth_gateway, profile_store,
#                                  signup_redirect_url=settings.signup_redirect_url)
#   await controller.initialize()
#   await controller.sign_in("ann@example.com", "secret")
#   controller.current_profile.name  # "Ann"
#   await controller.teardown()
# =============================================================================

import asyncio
import logging
from typing import Any, Callable, Coroutine

from app.exceptions import (
    ArtFolioException,
    AuthServiceError,
    DuplicateAccountError,
    NotAuthenticatedError,
    ProfileFetchError,
    ProfileNotFoundError,
)
from core.models import (
    AccountCategory,
    AuthSession,
    AuthState,
    AuthUser,
    Profile,
    ProfileEvent,
    ProfileUpdate,
    SessionSnapshot,
    SignUpConfirmation,
)
from core.services.ports import AuthGateway, ProfileStore
from core.services.reconciliation import ReconcileAction, reconcile
from lib.utils import normalize_email, parse_auth_callback

logger = logging.getLogger(__name__)

SnapshotObserver = Callable[[SessionSnapshot], None]


class SessionController:
    """
    Reactive holder of the signed-in user and their profile.

    One instance per process, constructed explicitly and passed to whoever
    needs it. Call initialize() once before use and teardown() on shutdown.
    """

    def __init__(
        self,
        auth: AuthGateway,
        profiles: ProfileStore,
        signup_redirect_url: str,
    ):
        self._auth = auth
        self._profiles = profiles
        self._signup_redirect_url = signup_redirect_url

        self._state = AuthState.INITIALIZING
        self._session: AuthSession | None = None
        self._profile: Profile | None = None
        self._is_loading = True

        self._generation = 0
        self._subscription: Any = None
        self._subscription_user_id: str | None = None
        self._subscription_lock = asyncio.Lock()

        self._unregister_listener: Callable[[], None] | None = None
        self._tasks: set[asyncio.Task] = set()
        self._observers: list[SnapshotObserver] = []

    # -------------------------------------------------------------------------
    # Read Side
    # -------------------------------------------------------------------------

    @property
    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            state=self._state,
            user=self._session.user if self._session else None,
            profile=self._profile,
            is_loading=self._is_loading,
        )

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def current_user(self) -> AuthUser | None:
        return self._session.user if self._session else None

    @property
    def current_profile(self) -> Profile | None:
        return self._profile

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def subscribed_user_id(self) -> str | None:
        """Subject id of the live profile subscription, if any."""
        return self._subscription_user_id

    def watch(self, observer: SnapshotObserver) -> Callable[[], None]:
        """
        Register an observer called with a fresh snapshot after every change.

        Returns:
            Function that removes the observer again
        """
        self._observers.append(observer)

        def unwatch() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unwatch

    def _notify(self) -> None:
        snapshot = self.snapshot
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception:
                logger.exception("Session observer raised; continuing with the others")

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def initialize(self) -> SessionSnapshot:
        """
        Register the auth listener and restore any persisted session.

        Always ends with is_loading False. A failing provider is logged and
        treated as "no session".
        """
        if self._unregister_listener is None:
            self._unregister_listener = self._auth.on_session_change(self._on_session_change)

        generation = self._generation
        try:
            session = await self._auth.get_current_session()
        except ArtFolioException as e:
            logger.error(f"Could not restore session on startup: {e}")
            session = None

        if generation != self._generation:
            logger.debug("Startup session check superseded by a session change")
        elif session is None:
            logger.info("No persisted session found")
            self._clear_local()
        else:
            logger.info(f"Restored session for user {session.user_id}")
            await self._adopt_session(session)

        if self._is_loading and generation == self._generation:
            self._is_loading = False
            self._notify()
        return self.snapshot

    async def teardown(self) -> None:
        """Unregister the auth listener, cancel listener work and drop the subscription."""
        if self._unregister_listener is not None:
            self._unregister_listener()
            self._unregister_listener = None

        pending = [task for task in self._tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        await self._drop_subscription()
        logger.info("Session controller torn down")

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def sign_up(self, email: str) -> SignUpConfirmation:
        """
        Start passwordless sign-up by emailing a magic link.

        Raises:
            DuplicateAccountError: A profile already uses this email
            AuthServiceError: The duplicate check failed or the link could not be sent
        """
        email = normalize_email(email)
        try:
            existing = await self._profiles.find_by_email(email)
        except ProfileFetchError as e:
            raise AuthServiceError(
                f"Could not check for an existing account: {e.message}",
                code="SIGNUP_LOOKUP_FAILED",
                suggestion="Try signing up again in a moment",
            ) from e

        if existing is not None:
            logger.info(f"Sign-up refused, profile {existing.id} already uses this email")
            raise DuplicateAccountError(email)

        confirmation = await self._auth.sign_in_with_link(email, self._signup_redirect_url)
        logger.info(f"Sign-up link sent (redirect: {self._signup_redirect_url})")
        return confirmation

    async def complete_sign_up(
        self,
        email: str,
        password: str,
        account_category: AccountCategory | str,
        biography: str | None,
        name: str | None = None,
    ) -> Profile:
        """
        Set the account password and create or replace the profile row.

        Re-running it for the same account overwrites the supplied fields
        (upsert), it never creates a second row.

        Raises:
            CredentialError: The password was rejected
            ProfilePersistError: The profile write failed (state unchanged)
        """
        category = AccountCategory(account_category)
        generation = self._generation

        session = await self._auth.register_password(email, password)

        fields: dict[str, Any] = {
            "email": normalize_email(session.email or email),
            "password_set": True,
            "user_type": category.value,
            "bio": biography,
        }
        if name is not None:
            fields["name"] = name

        profile = await self._profiles.upsert(session.user_id, fields)
        logger.info(f"Completed sign-up for user {session.user_id} as {category.value}")

        # The auth listener may already have adopted this same subject while
        # the password was being set; only another subject or a sign-out wins.
        if self._session is not None:
            superseded = self._session.user_id != session.user_id
        else:
            superseded = generation != self._generation
        if superseded:
            logger.debug(f"Identity changed during sign-up of {session.user_id}; not applying profile")
            return profile

        if self._session is None or self._session.user_id != session.user_id:
            self._generation += 1
        generation = self._generation
        self._session = session
        self._profile = profile

        await self._ensure_subscription(session.user_id, generation)
        if generation == self._generation:
            self._state = AuthState.AUTHENTICATED
            self._is_loading = False
            self._notify()
        return profile

    async def sign_in(self, email: str, password: str) -> SessionSnapshot:
        """
        Sign in with email and password, then load the profile.

        Raises:
            InvalidCredentialsError: The pair was rejected
            AuthServiceError: Provider or transport failure
            ProfileNotFoundError: Signed in, but no profile row could be loaded.
                The session is kept so the caller can route to sign-up completion.
        """
        session = await self._auth.sign_in_with_password(normalize_email(email), password)
        logger.info(f"Signed in user {session.user_id}")

        applied, fetch_error = await self._adopt_session(session)
        if not applied:
            logger.info(f"Sign-in of {session.user_id} was superseded before its profile loaded")
            return self.snapshot

        if self._profile is None:
            raise ProfileNotFoundError(session.user_id) from fetch_error
        return self.snapshot

    async def sign_out(self) -> SessionSnapshot:
        """
        Clear local state immediately, then sign out server-side.

        Raises:
            AuthServiceError: Remote sign-out failed. Local state stays cleared.
        """
        user_id = self._session.user_id if self._session else None
        self._clear_local()
        await self._drop_subscription()
        logger.info(f"Signed out user {user_id}")

        await self._auth.invalidate_session()
        return self.snapshot

    async def update_profile(self, changes: ProfileUpdate | dict[str, Any]) -> Profile:
        """
        Update the signed-in user's own profile row.

        The server's echoed row replaces the in-memory profile.

        Raises:
            NotAuthenticatedError: No session (the store is not contacted)
            ProfilePersistError: The update was rejected (state unchanged)
        """
        if self._session is None:
            raise NotAuthenticatedError("update_profile")
        if not isinstance(changes, ProfileUpdate):
            changes = ProfileUpdate.model_validate(changes)

        user_id = self._session.user_id
        generation = self._generation
        profile = await self._profiles.update(user_id, changes.to_columns())

        if generation != self._generation:
            logger.debug(f"Dropping stale profile update echo for user {user_id}")
            return profile

        self._profile = profile
        self._notify()
        return profile

    async def refresh_profile(self) -> Profile:
        """
        Re-read the signed-in user's profile from the store.

        Raises:
            NotAuthenticatedError: No session
            ProfileNotFoundError: The row does not exist
            ProfileFetchError: The read failed
        """
        if self._session is None:
            raise NotAuthenticatedError("refresh_profile")

        user_id = self._session.user_id
        generation = self._generation
        profile = await self._profiles.get_by_id(user_id)
        if profile is None:
            raise ProfileNotFoundError(user_id)

        if generation == self._generation:
            self._profile = profile
            self._notify()
        return profile

    async def verify_otp(self, email: str, token: str) -> SessionSnapshot:
        """
        Sign in with the one-time code from a sign-up email.

        The profile may not exist yet; that is the normal mid-signup case.

        Raises:
            InvalidCredentialsError: Wrong or expired code
        """
        session = await self._auth.verify_otp(normalize_email(email), token.strip())
        logger.info(f"Verified one-time code for user {session.user_id}")
        await self._adopt_session(session)
        return self.snapshot

    async def complete_link_sign_in(self, callback_url: str) -> SessionSnapshot:
        """
        Consume a magic-link callback URL (token fragment or PKCE code).

        Raises:
            AuthServiceError: The link carried an error, no credentials, or
                the provider refused them
        """
        params = parse_auth_callback(callback_url)
        if params.error_description:
            raise AuthServiceError(
                params.error_description,
                code="LINK_REJECTED",
                suggestion="Request a new sign-up link",
            )

        if params.has_tokens:
            session = await self._auth.set_session(params.access_token, params.refresh_token)
        elif params.has_code:
            session = await self._auth.exchange_code_for_session(params.auth_code)
        else:
            raise AuthServiceError(
                "Callback URL carries no session tokens or code",
                code="LINK_TOKENS_MISSING",
                suggestion="Open the most recent link from your email",
            )

        logger.info(f"Magic link accepted for user {session.user_id}")
        await self._adopt_session(session)
        return self.snapshot

    # -------------------------------------------------------------------------
    # Session Adoption
    # -------------------------------------------------------------------------

    async def _adopt_session(
        self,
        session: AuthSession,
        refetch: bool = True,
    ) -> tuple[bool, ProfileFetchError | None]:
        """
        Make `session` current, load its profile and subscribe to its row.

        Returns:
            (applied, fetch_error). applied is False when a newer identity
            change superseded this one while it was loading.
        """
        current = self._session
        same_subject = current is not None and current.user_id == session.user_id

        # Token refresh for a fully loaded subject: nothing to reload
        if (
            same_subject
            and not refetch
            and self._profile is not None
            and self._subscription_user_id == session.user_id
        ):
            self._session = session
            return True, None

        if not same_subject:
            self._generation += 1
            self._profile = None
        generation = self._generation
        self._session = session
        self._is_loading = True
        self._notify()

        fetch_error: ProfileFetchError | None = None
        try:
            profile = await self._profiles.get_by_id(session.user_id)
        except ProfileFetchError as e:
            profile = None
            fetch_error = e

        if generation != self._generation:
            logger.debug(f"Discarding stale profile fetch for user {session.user_id}")
            return False, fetch_error

        if profile is not None:
            self._profile = profile
        elif fetch_error is not None:
            logger.warning(f"Profile fetch failed for user {session.user_id}: {fetch_error}")
        else:
            logger.info(f"User {session.user_id} has no profile yet")

        await self._ensure_subscription(session.user_id, generation)
        if generation != self._generation:
            return False, fetch_error

        self._state = AuthState.AUTHENTICATED
        self._is_loading = False
        self._notify()
        return True, fetch_error

    def _clear_local(self) -> None:
        """Forget session and profile and move to unauthenticated, synchronously."""
        self._generation += 1
        self._session = None
        self._profile = None
        self._state = AuthState.UNAUTHENTICATED
        self._is_loading = False
        self._notify()

    # -------------------------------------------------------------------------
    # Profile Subscription
    # -------------------------------------------------------------------------

    async def _ensure_subscription(self, user_id: str, generation: int) -> None:
        async with self._subscription_lock:
            if generation != self._generation:
                return
            if self._subscription is not None and self._subscription_user_id == user_id:
                return

            await self._release_subscription_locked()
            try:
                handle = await self._profiles.subscribe(user_id, self._on_profile_event)
            except ArtFolioException as e:
                logger.error(f"Could not subscribe to profile changes for {user_id}: {e}")
                return

            if generation != self._generation:
                logger.debug(f"Subscription for {user_id} superseded while connecting")
                await self._unsubscribe_handle(handle)
                return

            self._subscription = handle
            self._subscription_user_id = user_id
            logger.debug(f"Subscribed to profile changes for {user_id}")

    async def _drop_subscription(self) -> None:
        async with self._subscription_lock:
            await self._release_subscription_locked()

    async def _release_subscription_locked(self) -> None:
        handle = self._subscription
        if handle is None:
            return
        user_id = self._subscription_user_id
        self._subscription = None
        self._subscription_user_id = None
        await self._unsubscribe_handle(handle)
        logger.debug(f"Unsubscribed from profile changes for {user_id}")

    async def _unsubscribe_handle(self, handle: Any) -> None:
        try:
            await self._profiles.unsubscribe(handle)
        except ArtFolioException as e:
            logger.warning(f"Failed to remove profile subscription: {e}")

    # -------------------------------------------------------------------------
    # Passive Event Handlers
    # -------------------------------------------------------------------------

    def _on_profile_event(self, event: ProfileEvent) -> None:
        """Apply one realtime profile event (called by the profile store)."""
        active_user_id = self._session.user_id if self._session else None
        result = reconcile(active_user_id, self._profile, event)

        if result.action == ReconcileAction.REPLACE:
            self._profile = result.profile
            logger.debug(f"Profile {event.profile_id} replaced from realtime update")
            self._notify()
        elif result.action == ReconcileAction.INVALIDATE:
            logger.warning(f"Profile {event.profile_id} was deleted; signing out")
            self._clear_local()
            self._spawn(self._drop_subscription())
            self._spawn(self._invalidate_quietly())
        else:
            logger.debug(f"Ignoring {event.kind} event for profile {event.profile_id}")

    def _on_session_change(self, session: AuthSession | None) -> None:
        """Auth listener callback; the real work runs as a task."""
        self._spawn(self._handle_session_change(session))

    async def _handle_session_change(self, session: AuthSession | None) -> None:
        try:
            if session is None:
                if self._session is None and self._state == AuthState.UNAUTHENTICATED:
                    return
                logger.info("Session ended outside the controller")
                self._clear_local()
                await self._drop_subscription()
            else:
                await self._adopt_session(session, refetch=False)
        except ArtFolioException as e:
            logger.error(f"Failed to apply session change: {e}")

    async def _invalidate_quietly(self) -> None:
        try:
            await self._auth.invalidate_session()
        except AuthServiceError as e:
            logger.warning(f"Remote sign-out after profile deletion failed: {e}")

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Background session task failed: {error!r}")
