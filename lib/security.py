# =============================================================================
# lib/security.py - Password Hashing
# =============================================================================
# Salted password hashing with passlib. The first configured scheme hashes
# new passwords; the others are still accepted for verification so stored
# hashes keep working when the default changes.
# =============================================================================

from passlib.context import CryptContext


class PasswordHasher:
    """
    Hash and verify passwords.

    Example:
        hasher = PasswordHasher(["pbkdf2_sha256"])
        stored = hasher.hash("Passw0rd")
        hasher.verify("Passw0rd", stored)  # True
    """

    def __init__(self, schemes: list[str] | None = None):
        self._context = CryptContext(
            schemes=schemes or ["pbkdf2_sha256"],
            deprecated="auto",
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str | None) -> bool:
        """Return False for a missing or unrecognized hash instead of raising."""
        if not password_hash:
            return False
        try:
            return self._context.verify(password, password_hash)
        except ValueError:
            return False
