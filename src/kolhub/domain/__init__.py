"""Domain types, models, and errors for the KOL campaign backend."""

from kolhub.domain.errors import (
    ApiError,
    ConflictError,
    GatewayError,
    KolHubError,
    RecordNotFoundError,
)
from kolhub.domain.models import Principal, ValidationResult
from kolhub.domain.types import (
    AGE_RANGE_VALUES,
    NICHE_VALUES,
    ROLE_VALUES,
    AgeRange,
    Niche,
    UserRole,
    is_integer,
    is_number,
)

__all__ = [
    "AGE_RANGE_VALUES",
    "NICHE_VALUES",
    "ROLE_VALUES",
    "AgeRange",
    "ApiError",
    "ConflictError",
    "GatewayError",
    "KolHubError",
    "Niche",
    "Principal",
    "RecordNotFoundError",
    "UserRole",
    "ValidationResult",
    "is_integer",
    "is_number",
]
