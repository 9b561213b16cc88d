# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas (profile, session, realtime events)
# - services/: Session controller, realtime reconciliation, route guard
#
# Code in this package should NOT define routes or talk to Supabase directly.
# Supabase adapters live in lib/, HTTP concerns live in app/.
# =============================================================================
