# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# Builds the objects the application owns for its whole lifetime.
# =============================================================================

import logging

from app.config import settings
from core.services import SessionController
from lib.supabase_client import SupabaseAuthGateway, SupabaseClient, SupabaseProfileStore

logger = logging.getLogger(__name__)


async def create_session_controller() -> SessionController:
    """
    Build the session controller on top of the shared Supabase client.

    The caller owns the instance and must call initialize() / teardown().
    """
    client = await SupabaseClient.get_client()
    logger.debug("Creating session controller")
    return SessionController(
        auth=SupabaseAuthGateway(client),
        profiles=SupabaseProfileStore(client),
        signup_redirect_url=settings.signup_redirect_url,
    )
