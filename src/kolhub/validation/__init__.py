"""Pure field validators for KOL and KOL type payloads."""

from kolhub.validation.kol import KOL_NUMERIC_FIELDS, KOL_REQUIRED_FIELDS, validate_kol
from kolhub.validation.kol_type import MAX_NOT_GREATER, validate_kol_type

__all__ = [
    "KOL_NUMERIC_FIELDS",
    "KOL_REQUIRED_FIELDS",
    "MAX_NOT_GREATER",
    "validate_kol",
    "validate_kol_type",
]
