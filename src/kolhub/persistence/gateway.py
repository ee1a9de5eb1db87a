"""SQLite-backed persistence gateway.

Mirrors the store pattern used for every table: accepts an open
``sqlite3.Connection``, uses parameterized queries exclusively, and commits
synchronously after writes.  Table and column identifiers are checked against
``TABLE_COLUMNS`` before they are interpolated into SQL text.

The gateway is constructed once per process and passed explicitly to every
handler, so tests can build one over an in-memory database (or substitute a
fake with the same methods).
"""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager, suppress
from dataclasses import dataclass, field
from typing import Any

import structlog

from kolhub.domain.errors import ConflictError, GatewayError, RecordNotFoundError
from kolhub.persistence.schema import RELATIONS, TABLE_COLUMNS

logger = structlog.get_logger()


@dataclass(frozen=True)
class Where:
    """A filter over a single table.

    All populated clauses are combined with ``AND``.

    Attributes:
        equals: Column -> value equality (``None`` becomes ``IS NULL``).
        not_equals: Column -> value inequality.
        within: Column -> allowed values (``IN (...)``).
        search: Case-insensitive substring matched against ``search_columns``
            (any column may match).  Ignored when empty.
        search_columns: Columns searched by ``search``.
        any_of: Groups of column -> value equalities; a row matches when it
            matches every pair of at least one group.
    """

    equals: Mapping[str, Any] = field(default_factory=dict)
    not_equals: Mapping[str, Any] = field(default_factory=dict)
    within: Mapping[str, Sequence[Any]] = field(default_factory=dict)
    search: str = ""
    search_columns: tuple[str, ...] = ()
    any_of: tuple[Mapping[str, Any], ...] = ()

    def columns(self) -> set[str]:
        """Every column this filter references."""
        names = set(self.equals) | set(self.not_equals) | set(self.within)
        names.update(self.search_columns)
        for group in self.any_of:
            names.update(group)
        return names


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class Gateway:
    """Query/command primitives over the backend's relational store.

    Every public method is serialized by a re-entrant lock so one connection
    can be shared by the request thread pool.  Writes commit immediately
    unless they run inside :meth:`transaction`.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialize with an open database connection.

        Args:
            conn: An open sqlite3.Connection whose database already has the
                  backend schema (see ``init_db``).
        """
        self._conn = conn
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._depth = 0

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[Gateway]:
        """Group several writes into one atomic unit.

        Nested use joins the outermost transaction.  Any exception rolls back
        every write made inside the block and is re-raised.
        """
        with self._lock:
            self._depth += 1
            try:
                yield self
            except BaseException:
                if self._depth == 1:
                    self._conn.rollback()
                raise
            else:
                if self._depth == 1:
                    self._conn.commit()
            finally:
                self._depth -= 1

    def ping(self) -> None:
        """Run a trivial query; raises ``GatewayError`` if the store is unusable."""
        self._execute("SELECT 1")

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def find_unique(self, table: str, key: int) -> dict[str, Any] | None:
        """Fetch one row by primary key, or ``None`` when absent."""
        return self.find_first(table, Where(equals={"id": key}))

    def find_first(self, table: str, where: Where | None = None) -> dict[str, Any] | None:
        """Fetch the first row matching *where*, or ``None``."""
        rows = self.find_many(table, where, take=1)
        return rows[0] if rows else None

    def find_many(
        self,
        table: str,
        where: Where | None = None,
        *,
        skip: int = 0,
        take: int | None = None,
        order_by: Sequence[tuple[str, str]] = (),
        columns: Sequence[str] | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch rows matching *where*.

        Args:
            table: Table name.
            where: Optional filter.
            skip: Number of rows to skip (offset).
            take: Maximum number of rows to return; ``None`` for all.
            order_by: ``(column, "asc" | "desc")`` pairs.
            columns: Subset of columns to select; ``None`` selects all.

        Returns:
            A list of dicts, one per row.
        """
        selected = list(columns) if columns else []
        self._check_columns(table, [*selected, *(col for col, _ in order_by)])
        select_sql = ", ".join(selected) if selected else "*"
        where_sql, params = self._where(table, where)

        sql = f"SELECT {select_sql} FROM {table}{where_sql}"
        if order_by:
            parts = []
            for column, direction in order_by:
                if direction.lower() not in ("asc", "desc"):
                    raise ValueError(f"Invalid sort direction: {direction!r}")
                parts.append(f"{column} {direction.upper()}")
            sql += " ORDER BY " + ", ".join(parts)
        if take is not None or skip:
            sql += " LIMIT ? OFFSET ?"
            params.extend([take if take is not None else -1, skip])

        cursor = self._execute(sql, params)
        return [dict(row) for row in cursor.fetchall()]

    def count(self, table: str, where: Where | None = None) -> int:
        """Count rows matching *where*."""
        where_sql, params = self._where(table, where)
        cursor = self._execute(f"SELECT COUNT(*) FROM {table}{where_sql}", params)
        return int(cursor.fetchone()[0])

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def create(self, table: str, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Insert one row and return it as stored.

        Raises:
            ConflictError: If a uniqueness or foreign-key constraint fails.
        """
        with self.transaction():
            cursor = self._insert(table, fields, ignore=False)
            created = self.find_unique(table, cursor.lastrowid)
        if created is None:
            raise GatewayError(f"Inserted row in '{table}' could not be read back")
        return created

    def create_many(
        self,
        table: str,
        rows: Iterable[Mapping[str, Any]],
        *,
        skip_duplicates: bool = False,
    ) -> int:
        """Insert several rows in one transaction.

        With ``skip_duplicates`` a row that collides with a unique constraint
        is silently skipped (``INSERT OR IGNORE``); foreign-key violations
        still fail the whole batch.

        Returns:
            The number of rows actually inserted.
        """
        inserted = 0
        with self.transaction():
            for row in rows:
                cursor = self._insert(table, row, ignore=skip_duplicates)
                inserted += max(cursor.rowcount, 0)
        return inserted

    def update(
        self,
        table: str,
        key: int,
        fields: Mapping[str, Any],
        *,
        connect: Mapping[str, int] | None = None,
    ) -> dict[str, Any]:
        """Update one row by primary key and return it as stored.

        Args:
            table: Table name.
            key: Primary key of the row to update.
            fields: Column -> new value assignments.
            connect: Relation name -> target id.  Each relation is resolved
                to its foreign-key column (see ``RELATIONS``) after checking
                that the target row exists.

        Raises:
            RecordNotFoundError: If the row or a connect target is missing.
            ConflictError: If a constraint fails.
        """
        assignments = dict(fields)
        with self.transaction():
            for relation, target_id in (connect or {}).items():
                try:
                    column, target_table = RELATIONS[(table, relation)]
                except KeyError:
                    raise ValueError(f"Unknown relation {relation!r} on '{table}'") from None
                if self.find_unique(target_table, target_id) is None:
                    raise RecordNotFoundError(target_table, target_id)
                assignments[column] = target_id

            if not assignments:
                raise ValueError("update() called with nothing to assign")
            self._check_columns(table, assignments)

            set_sql = ", ".join(f"{column} = ?" for column in assignments)
            cursor = self._execute(
                f"UPDATE {table} SET {set_sql} WHERE id = ?",
                [*assignments.values(), key],
            )
            if cursor.rowcount == 0:
                raise RecordNotFoundError(table, key)
            updated = self.find_unique(table, key)
        if updated is None:
            raise RecordNotFoundError(table, key)
        return updated

    def delete(self, table: str, key: int) -> None:
        """Delete one row by primary key.

        Raises:
            RecordNotFoundError: If no such row exists.
        """
        with self.transaction():
            cursor = self._execute(f"DELETE FROM {table} WHERE id = ?", [key])
            if cursor.rowcount == 0:
                raise RecordNotFoundError(table, key)

    def delete_many(self, table: str, where: Where) -> int:
        """Delete every row matching *where* and return how many were removed."""
        where_sql, params = self._where(table, where)
        if not where_sql:
            raise ValueError("delete_many() requires a non-empty filter")
        with self.transaction():
            cursor = self._execute(f"DELETE FROM {table}{where_sql}", params)
        return max(cursor.rowcount, 0)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _insert(self, table: str, fields: Mapping[str, Any], *, ignore: bool) -> sqlite3.Cursor:
        self._check_columns(table, fields)
        columns = list(fields)
        verb = "INSERT OR IGNORE" if ignore else "INSERT"
        if columns:
            placeholders = ", ".join("?" for _ in columns)
            sql = f"{verb} INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"
        else:
            sql = f"{verb} INTO {table} DEFAULT VALUES"
        return self._execute(sql, [fields[c] for c in columns])

    def _where(self, table: str, where: Where | None) -> tuple[str, list[Any]]:
        if where is None:
            self._check_columns(table, ())
            return "", []
        self._check_columns(table, where.columns())

        conditions: list[str] = []
        params: list[Any] = []

        for column, value in where.equals.items():
            if value is None:
                conditions.append(f"{column} IS NULL")
            else:
                conditions.append(f"{column} = ?")
                params.append(value)

        for column, value in where.not_equals.items():
            conditions.append(f"{column} IS NOT ?")
            params.append(value)

        for column, values in where.within.items():
            values = list(values)
            if not values:
                conditions.append("0")
                continue
            conditions.append(f"{column} IN ({', '.join('?' for _ in values)})")
            params.extend(values)

        if where.search and where.search_columns:
            pattern = f"%{_escape_like(where.search.lower())}%"
            matches = [f"LOWER({column}) LIKE ? ESCAPE '\\'" for column in where.search_columns]
            conditions.append("(" + " OR ".join(matches) + ")")
            params.extend(pattern for _ in where.search_columns)

        if where.any_of:
            groups = []
            for group in where.any_of:
                groups.append("(" + " AND ".join(f"{column} = ?" for column in group) + ")")
                params.extend(group.values())
            conditions.append("(" + " OR ".join(groups) + ")")

        if not conditions:
            return "", params
        return " WHERE " + " AND ".join(conditions), params

    @staticmethod
    def _check_columns(table: str, columns: Iterable[str]) -> None:
        allowed = TABLE_COLUMNS.get(table)
        if allowed is None:
            raise ValueError(f"Unknown table: {table!r}")
        unknown = [c for c in columns if c not in allowed]
        if unknown:
            raise ValueError(f"Unknown column(s) for '{table}': {', '.join(sorted(unknown))}")

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        with self._lock:
            try:
                cursor = self._conn.execute(sql, params)
            except sqlite3.IntegrityError as exc:
                logger.warning("Constraint violation", error=str(exc))
                if self._depth == 0:
                    self._conn.rollback()
                raise ConflictError(str(exc)) from exc
            except sqlite3.Error as exc:
                logger.error("Database statement failed", error=str(exc))
                if self._depth == 0:
                    with suppress(sqlite3.ProgrammingError):
                        self._conn.rollback()
                raise GatewayError(str(exc)) from exc
            except OverflowError as exc:
                # Raised while binding an int outside SQLite's 64-bit range.
                logger.warning("Parameter out of range", error=str(exc))
                if self._depth == 0:
                    self._conn.rollback()
                raise GatewayError(str(exc)) from exc
            if self._depth == 0 and not sql.lstrip().upper().startswith("SELECT"):
                self._conn.commit()
            return cursor
