"""Storage of investments."""

from __future__ import annotations

from typing import Any, Iterable

from ..models import Investment
from .database import Database, StoreError, _as_datetime

_FIELDS = ("id", "portfolio_id", "token", "token_symbol", "created_at", "updated_at", "deleted_at")
_COLUMNS = ", ".join(f'"{name}"' for name in _FIELDS)
_QUALIFIED = ", ".join(f"i.{name}" for name in _FIELDS)


def _scan(row: Any) -> Investment:
    record_id, portfolio_id, token, token_symbol, created, updated, deleted = row
    return Investment(
        id=record_id,
        portfolio_id=portfolio_id,
        token=token,
        token_symbol=token_symbol,
        created_at=_as_datetime(created),
        updated_at=_as_datetime(updated),
        deleted_at=_as_datetime(deleted),
    )


class InvestmentStore:
    """Investments kept in the ``investments`` table."""

    def __init__(self, database: Database) -> None:
        self.database = database

    @staticmethod
    def _scan_all(rows: Iterable[Any]) -> list[Investment]:
        try:
            return [_scan(row) for row in rows]
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Error while scanning investments: {exc}") from exc

    def add(self, investment: Investment) -> Investment:
        """Insert ``investment`` and return the stored record with its id."""
        query = f"""insert into investments ("portfolio_id", "token", "token_symbol")
                    values ($1, $2, $3)
                    returning {_COLUMNS}"""
        try:
            row = self.database.query_row(
                query, investment.portfolio_id, investment.token, investment.token_symbol
            )
            return _scan(row)
        except (StoreError, TypeError, ValueError) as exc:
            raise StoreError(
                f"Could not insert investment of {investment.token} "
                f"in portfolio {investment.portfolio_id}: {exc}"
            ) from exc

    def all(self) -> list[Investment]:
        """Return every investment."""
        try:
            rows = self.database.query(f"select {_COLUMNS} from investments")
        except StoreError as exc:
            raise StoreError(f"Could not get investments: {exc}") from exc
        return self._scan_all(rows)

    def delete(self, record_id: int) -> None:
        """Mark an investment as deleted."""
        query = "update investments set deleted_at = now() where id = $1"
        try:
            affected = self.database.execute(query, record_id)
        except StoreError as exc:
            raise StoreError(f"Could not delete investment {record_id}: {exc}") from exc
        if affected == 0:
            raise StoreError(f"Could not delete investment {record_id}: no rows affected")

    def get(self, record_id: int) -> Investment:
        """Return the investment with ``record_id``."""
        try:
            row = self.database.query_row(
                f"select {_COLUMNS} from investments where id = $1", record_id
            )
            return _scan(row)
        except (StoreError, TypeError, ValueError) as exc:
            raise StoreError(f"Could not get investment {record_id}: {exc}") from exc

    def get_by_user_id(self, user_id: int) -> list[Investment]:
        """Return the investments in portfolios owned by ``user_id``."""
        query = f"""select {_QUALIFIED}
                    from investments as i
                    join portfolios as p on p.id = i.portfolio_id
                    where p.user_id = $1"""
        try:
            rows = self.database.query(query, user_id)
        except StoreError as exc:
            raise StoreError(
                f"Could not get investments where user_id is {user_id}: {exc}"
            ) from exc
        return self._scan_all(rows)

    def get_by_portfolio_id(self, portfolio_id: int) -> list[Investment]:
        """Return the investments of ``portfolio_id``."""
        try:
            rows = self.database.query(
                f"select {_COLUMNS} from investments where portfolio_id = $1", portfolio_id
            )
        except StoreError as exc:
            raise StoreError(
                f"Could not get investments where portfolio_id is {portfolio_id}: {exc}"
            ) from exc
        return self._scan_all(rows)

    def update(self, investment: Investment) -> None:
        """Store the portfolio of ``investment``."""
        query = "update investments set portfolio_id = $1 where id = $2"
        try:
            affected = self.database.execute(query, investment.portfolio_id, investment.id)
        except StoreError as exc:
            raise StoreError(f"Could not update investment {investment.id}: {exc}") from exc
        if affected == 0:
            raise StoreError(f"Could not update investment {investment.id}: no rows affected")