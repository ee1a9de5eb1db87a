"""Domain enumerations for users, KOL profiles, and campaign targeting."""

from enum import StrEnum


class UserRole(StrEnum):
    """Roles a user account can hold."""

    ADMIN = "ADMIN"
    KOL_MANAGER = "KOL_MANAGER"
    BRAND = "BRAND"


class Niche(StrEnum):
    """Content niches a KOL can be categorized under."""

    FASHION = "FASHION"
    BEAUTY = "BEAUTY"
    TECH = "TECH"
    PARENTING = "PARENTING"
    LIFESTYLE = "LIFESTYLE"
    FOOD = "FOOD"
    HEALTH = "HEALTH"
    EDUCATION = "EDUCATION"
    FINANCIAL = "FINANCIAL"


class AgeRange(StrEnum):
    """Audience age buckets."""

    AGE_13_17 = "AGE_13_17"
    AGE_18_24 = "AGE_18_24"
    AGE_25_34 = "AGE_25_34"
    AGE_35_44 = "AGE_35_44"
    AGE_45_54 = "AGE_45_54"
    AGE_55_PLUS = "AGE_55_PLUS"


NICHE_VALUES: tuple[str, ...] = tuple(n.value for n in Niche)
AGE_RANGE_VALUES: tuple[str, ...] = tuple(a.value for a in AgeRange)
ROLE_VALUES: tuple[str, ...] = tuple(r.value for r in UserRole)

# SQLite stores integers as signed 64-bit values.
INTEGER_MIN = -(2**63)
INTEGER_MAX = 2**63 - 1


def is_number(value: object) -> bool:
    """Return ``True`` for ints and floats, excluding booleans.

    Ints outside the signed 64-bit range are rejected.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return INTEGER_MIN <= value <= INTEGER_MAX
    return isinstance(value, float)


def is_integer(value: object) -> bool:
    """Return ``True`` for ints within the signed 64-bit range, excluding booleans."""
    return isinstance(value, int) and not isinstance(value, bool) and is_number(value)
