"""Storage of portfolios."""

from __future__ import annotations

from typing import Any, Iterable

from ..models import Portfolio
from .database import Database, StoreError, _as_datetime

_COLUMNS = '"id", "user_id", "name", "created_at", "updated_at", "deleted_at"'


def _scan(row: Any) -> Portfolio:
    record_id, user_id, name, created, updated, deleted = row
    return Portfolio(
        id=record_id,
        user_id=user_id,
        name=name,
        created_at=_as_datetime(created),
        updated_at=_as_datetime(updated),
        deleted_at=_as_datetime(deleted),
    )


class PortfolioStore:
    """Portfolios kept in the ``portfolios`` table."""

    def __init__(self, database: Database) -> None:
        self.database = database

    @staticmethod
    def _scan_all(rows: Iterable[Any]) -> list[Portfolio]:
        try:
            return [_scan(row) for row in rows]
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Error while scanning portfolios: {exc}") from exc

    def add(self, portfolio: Portfolio) -> Portfolio:
        """Insert ``portfolio`` and return the stored record with its id."""
        query = f"""insert into portfolios ("user_id", "name")
                    values ($1, $2)
                    returning {_COLUMNS}"""
        try:
            row = self.database.query_row(query, portfolio.user_id, portfolio.name)
            return _scan(row)
        except (StoreError, TypeError, ValueError) as exc:
            raise StoreError(
                f"Could not insert portfolio {portfolio.name} for user {portfolio.user_id}: {exc}"
            ) from exc

    def all(self) -> list[Portfolio]:
        """Return every portfolio."""
        try:
            rows = self.database.query(f"select {_COLUMNS} from portfolios")
        except StoreError as exc:
            raise StoreError(f"Could not get portfolios: {exc}") from exc
        return self._scan_all(rows)

    def delete(self, record_id: int) -> None:
        """Mark a portfolio as deleted."""
        query = "update portfolios set deleted_at = now() where id = $1"
        try:
            affected = self.database.execute(query, record_id)
        except StoreError as exc:
            raise StoreError(f"Could not delete portfolio {record_id}: {exc}") from exc
        if affected == 0:
            raise StoreError(f"Could not delete portfolio {record_id}: no rows affected")

    def get(self, record_id: int) -> Portfolio:
        """Return the portfolio with ``record_id``."""
        try:
            row = self.database.query_row(
                f"select {_COLUMNS} from portfolios where id = $1", record_id
            )
            return _scan(row)
        except (StoreError, TypeError, ValueError) as exc:
            raise StoreError(f"Could not get portfolio {record_id}: {exc}") from exc

    def get_by_user_id(self, user_id: int) -> list[Portfolio]:
        """Return the portfolios owned by ``user_id``."""
        try:
            rows = self.database.query(
                f"select {_COLUMNS} from portfolios where user_id = $1", user_id
            )
        except StoreError as exc:
            raise StoreError(f"Could not get portfolios for user {user_id}: {exc}") from exc
        return self._scan_all(rows)

    def update(self, portfolio: Portfolio) -> None:
        """Store the name of ``portfolio``."""
        query = "update portfolios set name = $1 where id = $2"
        try:
            affected = self.database.execute(query, portfolio.name, portfolio.id)
        except StoreError as exc:
            raise StoreError(f"Could not update portfolio {portfolio.id}: {exc}") from exc
        if affected == 0:
            raise StoreError(f"Could not update portfolio {portfolio.id}: no rows affected")