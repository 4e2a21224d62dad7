# =============================================================================
# core/services/auth_service.py - Registration & Login
# =============================================================================
# Creates users and exchanges credentials for access tokens.
# Separates HTTP concerns from credential storage and hashing.
# =============================================================================

import logging
from typing import Any

from app.exceptions import ConflictError, InvalidCredentialsError
from core.metrics import Metric, MetricsRecorder
from core.models import UserPublic
from core.repositories import UserRepository
from core.services.token_service import TokenService
from core.validation import validate_login, validate_registration
from lib.observability import ObservabilitySink
from lib.security import PasswordHasher
from lib.store import DocumentStore, DuplicateKeyError

logger = logging.getLogger(__name__)


class AuthService:
    """
    Service for registration and login.

    Both operations return the public user view and a fresh token.
    """

    def __init__(
        self,
        store: DocumentStore,
        tokens: TokenService,
        hasher: PasswordHasher,
        metrics: MetricsRecorder,
        sink: ObservabilitySink,
    ):
        self.users = UserRepository(store)
        self.tokens = tokens
        self.hasher = hasher
        self.metrics = metrics
        self.sink = sink

    def register(self, payload: Any) -> tuple[UserPublic, str]:
        """
        Register a new user.

        Args:
            payload: Raw request body {email, password}

        Returns:
            (public user, access token)

        Raises:
            ValidationFailedError: If email or password break the rules
            ConflictError: If the email is already registered
        """
        data = validate_registration(payload)

        try:
            row = self.users.create(data.email, self.hasher.hash(data.password))
        except DuplicateKeyError:
            self.metrics.increment(Metric.DUPLICATE_EMAILS)
            self.sink.add_breadcrumb(
                "auth", "Duplicate registration attempt", level="warning",
                data={"email_domain": data.email.split("@")[-1]},
            )
            logger.info("Registration rejected: email already registered")
            raise ConflictError() from None

        self.metrics.increment(Metric.USER_REGISTRATIONS)
        self.sink.add_breadcrumb("auth", "User registered", data={"user_id": row["id"]})
        return UserPublic.model_validate(row), self.tokens.issue(row["id"])

    def login(self, payload: Any) -> tuple[UserPublic, str]:
        """
        Exchange email and password for a token.

        Unknown email and wrong password fail the same way.

        Raises:
            ValidationFailedError: If email or password is missing
            InvalidCredentialsError: If the credentials don't match a user
        """
        data = validate_login(payload)
        self.metrics.increment(Metric.LOGIN_ATTEMPTS)

        row = self.users.find_by_email(data.email)
        if row is None or not self.hasher.verify(data.password, row.get("password_hash")):
            self.metrics.increment(Metric.LOGIN_FAILURES)
            self.sink.add_breadcrumb("auth", "Login failed", level="warning")
            raise InvalidCredentialsError()

        self.metrics.increment(Metric.LOGIN_SUCCESSES)
        self.sink.add_breadcrumb("auth", "User logged in", data={"user_id": row["id"]})
        logger.info(f"User {row['id']} logged in")
        return UserPublic.model_validate(row), self.tokens.issue(row["id"])
