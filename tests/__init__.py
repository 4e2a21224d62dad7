# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the To-do API:
# - test_models.py / test_validation.py: Input rules and response shapes
# - test_tokens.py: Token issuing and verification
# - test_memory_store.py / test_supabase_store.py: Store backends
# - test_repositories.py: Owner-scoped data access
# - test_*_api.py: Endpoint tests through the FastAPI TestClient
# - test_metrics_alerts.py / test_webhooks.py / test_observability.py
#
# Run tests with: pytest
# =============================================================================
