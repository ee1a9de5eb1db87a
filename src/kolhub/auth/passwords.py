"""bcrypt password hashing and the account password policy."""

from __future__ import annotations

import re

import bcrypt

PASSWORD_PATTERN = re.compile(
    r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[!@#$%^&*(),.?":{}|<>]).{8,}$'
)

PASSWORD_POLICY_MESSAGE = (
    "Password must be at least 8 characters long, contain uppercase and lowercase "
    "letters, a number, and a special character."
)

# bcrypt only reads the first 72 bytes and rejects longer input.
MAX_PASSWORD_BYTES = 72
PASSWORD_TOO_LONG_MESSAGE = f"Password must be at most {MAX_PASSWORD_BYTES} bytes long."


def meets_password_policy(password: object) -> bool:
    """At least 8 characters with a lowercase, an uppercase, a digit and a symbol."""
    return isinstance(password, str) and PASSWORD_PATTERN.match(password) is not None


def fits_hash_limit(password: str) -> bool:
    return len(password.encode("utf-8")) <= MAX_PASSWORD_BYTES


class PasswordHasher:
    """Hash and verify passwords with bcrypt.

    Args:
        rounds: bcrypt cost factor (log2 of the iteration count).
    """

    def __init__(self, rounds: int = 10) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self._rounds)).decode(
            "utf-8"
        )

    def verify(self, password: str, hashed: str) -> bool:
        """Return ``True`` when *password* matches *hashed*.

        A malformed stored hash counts as a mismatch.
        """
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            return False
