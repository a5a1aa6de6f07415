"""Thin database access layer over any DB-API 2.0 connection."""

from __future__ import annotations

import re
from typing import Any

_PLACEHOLDER = re.compile(r"\$(\d+)")
_SUPPORTED_STYLES = {"qmark", "numeric", "named", "format", "pyformat"}


class Database:
    """Runs queries written with ``$1``-style placeholders on a DB-API connection.

    The placeholders are rewritten for the driver's ``paramstyle``; every
    statement is committed as soon as it has run.
    """

    def __init__(self, connection: Any, paramstyle: str = "pyformat") -> None:
        if paramstyle not in _SUPPORTED_STYLES:
            raise ValueError(f"unsupported paramstyle: {paramstyle!r}")
        self._connection = connection
        self.paramstyle = paramstyle

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def connection(self) -> Any:
        if self._connection is None:
            raise RuntimeError("database is closed")
        return self._connection

    def _translate(self, query: str, args: tuple) -> tuple[str, Any]:
        def argument(match: re.Match) -> Any:
            index = int(match.group(1))
            if not 1 <= index <= len(args):
                raise ValueError(f"no argument for placeholder ${index}")
            return args[index - 1]

        if self.paramstyle == "numeric":
            for match in _PLACEHOLDER.finditer(query):
                argument(match)
            return _PLACEHOLDER.sub(r":\1", query), list(args)
        if self.paramstyle == "named":
            params = {}

            def named(match: re.Match) -> str:
                params[f"p{match.group(1)}"] = argument(match)
                return f":p{match.group(1)}"

            return _PLACEHOLDER.sub(named, query), params

        ordered: list[Any] = []
        marker = "?"
        if self.paramstyle in ("format", "pyformat"):
            query = query.replace("%", "%%")
            marker = "%s"

        def positional(match: re.Match) -> str:
            ordered.append(argument(match))
            return marker

        return _PLACEHOLDER.sub(positional, query), ordered

    def _run(self, query: str, args: tuple, fetch: bool) -> tuple[list[dict], int]:
        sql, params = self._translate(query, args)
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql, params)
            rows: list[dict] = []
            if fetch and cursor.description is not None:
                names = [column[0] for column in cursor.description]
                rows = [dict(zip(names, row)) for row in cursor.fetchall()]
            rowcount = cursor.rowcount
        finally:
            cursor.close()
        self.connection.commit()
        return rows, rowcount

    def fetch_one(self, query: str, *args: Any) -> dict | None:
        """Return the first row as a dict, or None when there is none."""
        rows, _ = self._run(query, args, fetch=True)
        return rows[0] if rows else None

    def fetch_all(self, query: str, *args: Any) -> list[dict]:
        """Return every row as a dict."""
        rows, _ = self._run(query, args, fetch=True)
        return rows

    def fetch_value(self, query: str, *args: Any) -> Any:
        """Return the first column of the first row, or None."""
        row = self.fetch_one(query, *args)
        if row is None:
            return None
        return next(iter(row.values()), None)

    def execute(self, query: str, *args: Any) -> int:
        """Run a statement and return the number of affected rows."""
        _, rowcount = self._run(query, args, fetch=False)
        return rowcount

    def health(self) -> None:
        """Raise if the database does not answer a trivial query."""
        cursor = self.connection.cursor()
        try:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        finally:
            cursor.close()

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None


class FilterBuilder:
    """Builds matching SELECT and COUNT queries from optional filters.

    Conditions name their argument with ``{p}``, which becomes the next
    ``$N`` placeholder.
    """

    def __init__(self, base_query: str, count_query: str) -> None:
        self._query = base_query
        self._count_query = count_query
        self._args: list[Any] = []
        self._order: str | None = None

    @property
    def args(self) -> list[Any]:
        return list(self._args)

    def add(self, condition: str, value: Any) -> "FilterBuilder":
        placeholder = f"${len(self._args) + 1}"
        clause = " AND " + condition.format(p=placeholder)
        self._query += clause
        self._count_query += clause
        self._args.append(value)
        return self

    def order_by(self, clause: str) -> "FilterBuilder":
        self._order = clause
        return self

    def count_sql(self) -> tuple[str, list[Any]]:
        return self._count_query, list(self._args)

    def select_sql(self, limit: int, offset: int) -> tuple[str, list[Any]]:
        query = self._query
        if self._order:
            query += " ORDER BY " + self._order
        n = len(self._args) + 1
        query += f" LIMIT ${n} OFFSET ${n + 1}"
        return query, [*self._args, limit, offset]