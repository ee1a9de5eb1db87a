"""SQLite schema for the KOL campaign backend.

Provides ``init_db()`` which opens the database (WAL mode, foreign keys on)
and creates every table idempotently, plus the table registry the gateway
uses to whitelist column names before they reach SQL text.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

_DDL: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT NOT NULL UNIQUE,
        email TEXT NOT NULL UNIQUE,
        password TEXT NOT NULL,
        role TEXT NOT NULL CHECK (role IN ('ADMIN', 'KOL_MANAGER', 'BRAND')),
        created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS kol_types (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE,
        min_followers INTEGER NOT NULL,
        max_followers INTEGER
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS kols (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        niche TEXT NOT NULL,
        followers INTEGER NOT NULL,
        engagement_rate REAL NOT NULL,
        reach INTEGER NOT NULL,
        rate_card REAL NOT NULL,
        audience_male REAL NOT NULL,
        audience_female REAL NOT NULL,
        audience_age_range TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS campaigns (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER REFERENCES users (id) ON DELETE SET NULL,
        name TEXT NOT NULL,
        kol_type_id INTEGER NOT NULL REFERENCES kol_types (id),
        target_niche TEXT NOT NULL,
        target_engagement REAL NOT NULL,
        target_reach INTEGER NOT NULL,
        target_gender TEXT NOT NULL,
        target_gender_min REAL NOT NULL,
        target_age_range TEXT NOT NULL,
        start_date TEXT NOT NULL,
        end_date TEXT NOT NULL,
        created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS campaign_kol (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        campaign_id INTEGER NOT NULL REFERENCES campaigns (id) ON DELETE CASCADE,
        kol_id INTEGER NOT NULL REFERENCES kols (id) ON DELETE CASCADE,
        UNIQUE (campaign_id, kol_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS kol_reports (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        campaign_id INTEGER NOT NULL REFERENCES campaigns (id) ON DELETE CASCADE,
        kol_id INTEGER NOT NULL REFERENCES kols (id) ON DELETE CASCADE,
        like_count INTEGER NOT NULL,
        comment_count INTEGER NOT NULL,
        share_count INTEGER NOT NULL,
        save_count INTEGER NOT NULL,
        engagement REAL NOT NULL,
        reach INTEGER NOT NULL,
        er REAL NOT NULL,
        cpe REAL NOT NULL,
        UNIQUE (campaign_id, kol_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_campaign_kol_campaign ON campaign_kol (campaign_id)",
    "CREATE INDEX IF NOT EXISTS idx_kol_reports_campaign ON kol_reports (campaign_id)",
    "CREATE INDEX IF NOT EXISTS idx_campaigns_created ON campaigns (created_at)",
)

# Column whitelist per table.  The gateway refuses any identifier not listed
# here, so user-supplied keys can never reach SQL text.
TABLE_COLUMNS: dict[str, frozenset[str]] = {
    "users": frozenset({"id", "username", "email", "password", "role", "created_at"}),
    "kol_types": frozenset({"id", "name", "min_followers", "max_followers"}),
    "kols": frozenset({
        "id", "name", "niche", "followers", "engagement_rate", "reach",
        "rate_card", "audience_male", "audience_female", "audience_age_range",
    }),
    "campaigns": frozenset({
        "id", "user_id", "name", "kol_type_id", "target_niche",
        "target_engagement", "target_reach", "target_gender",
        "target_gender_min", "target_age_range", "start_date", "end_date",
        "created_at",
    }),
    "campaign_kol": frozenset({"id", "campaign_id", "kol_id"}),
    "kol_reports": frozenset({
        "id", "campaign_id", "kol_id", "like_count", "comment_count",
        "share_count", "save_count", "engagement", "reach", "er", "cpe",
    }),
}

# (table, relation name) -> (foreign-key column, target table)
RELATIONS: dict[tuple[str, str], tuple[str, str]] = {
    ("campaigns", "kol_type"): ("kol_type_id", "kol_types"),
    ("campaigns", "owner"): ("user_id", "users"),
    ("campaign_kol", "kol"): ("kol_id", "kols"),
    ("kol_reports", "kol"): ("kol_id", "kols"),
}


def init_db(db_path: Path | str) -> sqlite3.Connection:
    """Open the database and create all tables if they do not already exist.

    Pass ``":memory:"`` for a throwaway database (used by the test suite).

    Args:
        db_path: Path to the SQLite database file, or ``":memory:"``.

    Returns:
        An open sqlite3.Connection with foreign keys enforced.
    """
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    if str(db_path) != ":memory:":
        conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")

    for statement in _DDL:
        conn.execute(statement)

    conn.commit()
    return conn


def close_db(conn: sqlite3.Connection) -> None:
    """Close the database connection.

    Args:
        conn: The database connection to close.
    """
    conn.close()
