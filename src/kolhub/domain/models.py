"""Pydantic v2 models for domain data structures shared across layers."""

from pydantic import BaseModel, ConfigDict

from kolhub.domain.types import UserRole


class ValidationResult(BaseModel):
    """Outcome of a field validator.

    Validators never raise for bad input; they report the first problem found
    in ``message`` and leave it ``None`` when the payload is valid.
    """

    model_config = ConfigDict(frozen=True)

    valid: bool
    message: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        """Build a passing result."""
        return cls(valid=True)

    @classmethod
    def fail(cls, message: str) -> "ValidationResult":
        """Build a failing result carrying *message*."""
        return cls(valid=False, message=message)


class Principal(BaseModel):
    """The authenticated caller, decoded from a bearer token."""

    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        """Whether the caller holds the ADMIN role."""
        return self.role is UserRole.ADMIN
