# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the ArtFolio session service:
# - test_session_controller.py: Controller operations, ordering and realtime
# - test_reconciliation.py: Realtime reconciliation and route guard rules
# - test_models.py: Unit tests for Pydantic model validation
# - test_supabase_client.py: Supabase adapters against a mocked client
# - test_api.py: HTTP and WebSocket endpoints through TestClient
#
# Run tests with: pytest
# =============================================================================
