# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for registration, login and token checks.
#
# Register and login return the token and the public user alongside the
# usual envelope fields:
#   {"success": true, "message": "...", "token": "...", "user": {...}}
# =============================================================================

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, status

from app.auth.dependencies import CurrentUser
from app.dependencies import AuthServiceDep, StoreDep
from app.exceptions import UnauthenticatedError
from core.models import UserPublic
from core.repositories import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter()

JsonBody = Annotated[Any, Body()]


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(auth: AuthServiceDep, payload: JsonBody = None) -> dict:
    """
    Register a new user and return an access token.

    Raises:
        400: If the input is invalid or the email is already registered
    """
    user, token = auth.register(payload)
    return {
        "success": True,
        "message": "User registered successfully",
        "token": token,
        "user": user.model_dump(by_alias=True, mode="json"),
    }


@router.post("/login")
def login(auth: AuthServiceDep, payload: JsonBody = None) -> dict:
    """
    Exchange email and password for an access token.

    Raises:
        400: If email or password is missing
        401: If the credentials are wrong
    """
    user, token = auth.login(payload)
    return {
        "success": True,
        "message": "Login successful",
        "token": token,
        "user": user.model_dump(by_alias=True, mode="json"),
    }


@router.get("/me")
def get_current_user_info(user: CurrentUser, store: StoreDep) -> dict:
    """
    Get the current authenticated user.

    Raises:
        401: If not authenticated
    """
    row = UserRepository(store).find_by_id(user.id)
    if row is None:
        # Removed after the gate resolved it
        raise UnauthenticatedError("Not authorized, token failed", reason="user_not_found")
    return {
        "success": True,
        "data": UserPublic.model_validate(row).model_dump(by_alias=True, mode="json"),
    }


@router.get("/verify")
def verify_token(user: CurrentUser) -> dict:
    """
    Verify that the current token is valid.

    Useful for checking if a stored token is still valid.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "success": True,
        "data": {
            "valid": True,
            "userId": user.id,
            "email": user.email,
        },
    }
