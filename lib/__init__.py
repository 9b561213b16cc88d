# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Supabase Auth / profiles adapters for the controller
# - utils.py: Shared utilities (UUID/email normalization, callback parsing)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import (
    SupabaseAuthGateway,
    SupabaseClient,
    SupabaseProfileStore,
    profile_event_from_payload,
)
from lib.utils import (
    AuthCallbackParams,
    normalize_email,
    normalize_uuid,
    parse_auth_callback,
)

__all__ = [
    # Supabase
    "SupabaseAuthGateway",
    "SupabaseClient",
    "SupabaseProfileStore",
    "profile_event_from_payload",
    # Utils
    "AuthCallbackParams",
    "normalize_email",
    "normalize_uuid",
    "parse_auth_callback",
]
