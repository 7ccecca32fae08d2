"""Connection handling and query helpers for the SQL-backed stores."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Sequence

from sqlalchemy import create_engine, event
from sqlalchemy import text as sql_text
from sqlalchemy.engine import Engine, Row, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from ..models import HealthChecker

_log = logging.getLogger(__name__)

_MATCH_FIRST_CAP = re.compile(r"(.)([A-Z][a-z]+)")
_MATCH_ALL_CAP = re.compile(r"([a-z0-9])([A-Z])")
_PLACEHOLDER = re.compile(r"\$(\d+)")


class StoreError(Exception):
    """A database operation failed."""


def to_snake_case(text: str) -> str:
    """Convert a CamelCase identifier to snake_case."""
    snake = _MATCH_FIRST_CAP.sub(r"\1_\2", text)
    snake = _MATCH_ALL_CAP.sub(r"\1_\2", snake)
    return snake.lower()


def _as_datetime(value: Any) -> datetime | None:
    """Normalise a timestamp column value to a datetime."""
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    raise TypeError(f"cannot scan {type(value).__name__} into a timestamp")


def _bind(sql: str, args: Sequence[Any]) -> tuple[Any, dict[str, Any]]:
    """Turn ``$n`` placeholders into named bind parameters."""
    statement = sql_text(_PLACEHOLDER.sub(lambda match: f":p{match.group(1)}", sql))
    params = {
        f"p{position}": value.value if isinstance(value, Enum) else value
        for position, value in enumerate(args, start=1)
    }
    return statement, params


def _sqlite_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _register_sqlite_functions(dbapi_connection: Any, _record: Any) -> None:
    dbapi_connection.create_function("now", 0, _sqlite_now)


class Database(HealthChecker):
    """A pool of database connections."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release every pooled connection."""
        self.engine.dispose()

    def ping(self) -> str:
        """Check the database is reachable; return an empty message on success."""
        try:
            with self.engine.connect() as connection:
                connection.execute(sql_text("select 1"))
        except SQLAlchemyError as exc:
            raise StoreError("Could not connect to the Database") from exc
        _log.info("Connection pool status: %s", self.engine.pool.status())
        return ""

    def query(self, sql: str, *args: Any) -> list[Row]:
        """Run a statement and return all its rows."""
        statement, params = _bind(sql, args)
        try:
            with self.engine.begin() as connection:
                return list(connection.execute(statement, params))
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    def query_row(self, sql: str, *args: Any) -> Row:
        """Run a statement and return its first row; raise if there is none."""
        rows = self.query(sql, *args)
        if not rows:
            raise StoreError("no rows in result set")
        return rows[0]

    def execute(self, sql: str, *args: Any) -> int:
        """Run a statement and return the number of rows it affected."""
        statement, params = _bind(sql, args)
        try:
            with self.engine.begin() as connection:
                return connection.execute(statement, params).rowcount
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc


def connect(conn_string: str) -> Database:
    """Open a connection pool for ``conn_string`` and verify it can connect."""
    if conn_string.startswith("postgres://"):
        conn_string = "postgresql://" + conn_string[len("postgres://"):]
    engine = None
    try:
        url = make_url(conn_string)
        backend = url.get_backend_name()
        options: dict[str, Any] = {}
        if backend == "sqlite" and url.database in (None, "", ":memory:"):
            options = {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
        engine = create_engine(url, **options)
        if backend == "sqlite":
            event.listen(engine, "connect", _register_sqlite_functions)
        with engine.connect():
            pass
    except (SQLAlchemyError, ImportError, ValueError) as exc:
        if engine is not None:
            engine.dispose()
        raise StoreError(str(exc)) from exc
    return Database(engine)