"""Relational persistence: SQLite schema and the injected query gateway."""

from kolhub.persistence.gateway import Gateway, Where
from kolhub.persistence.schema import RELATIONS, TABLE_COLUMNS, close_db, init_db

__all__ = [
    "RELATIONS",
    "TABLE_COLUMNS",
    "Gateway",
    "Where",
    "close_db",
    "init_db",
]
