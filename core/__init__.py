# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the domain logic behind the API:
# - models/: Pydantic schemas for input validation and responses
# - validation.py: One validation function per request shape
# - repositories.py: Owner-scoped access to stored records
# - services/: Tokens, auth, todos and profiles
# - metrics.py / alerts.py: Advisory counters and threshold alerts
#
# Routes stay thin; everything they do beyond HTTP lives here.
# =============================================================================
