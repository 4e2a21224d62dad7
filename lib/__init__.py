# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - store.py: DocumentStore interface and store errors
# - memory_store.py: In-process store for development and tests
# - supabase_client.py: Supabase-backed store for production
# - security.py: Password hashing (passlib)
# - observability.py: Breadcrumb/exception/message sinks
# - webhooks.py: Slack/Teams/Discord/custom webhook delivery
# - utils.py: Shared utilities (error handling, UUIDs, time)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.store import DocumentStore, DuplicateKeyError, StoreError
from lib.memory_store import InMemoryStore
from lib.security import PasswordHasher
from lib.observability import LoggingSink, ObservabilitySink, SafeSink
from lib.utils import ApplicationError, parse_uuid

__all__ = [
    # Store
    "DocumentStore",
    "DuplicateKeyError",
    "StoreError",
    "InMemoryStore",
    # Security
    "PasswordHasher",
    # Observability
    "ObservabilitySink",
    "LoggingSink",
    "SafeSink",
    # Utils
    "ApplicationError",
    "parse_uuid",
]
