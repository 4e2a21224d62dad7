# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated user resolved from a verified access token.

    Carries identity only; the password hash never leaves the store.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
