"""Storage of positions."""

from __future__ import annotations

from typing import Any, Iterable

from ..models import Position
from .database import Database, StoreError, _as_datetime

_COLUMNS = (
    '"id", "investment_id", "amount", "average_price", "profit", '
    '"created_at", "updated_at", "deleted_at"'
)


def _scan(row: Any) -> Position:
    record_id, investment_id, amount, average_price, profit, created, updated, deleted = row
    return Position(
        id=record_id,
        investment_id=investment_id,
        amount=float(amount),
        average_price=float(average_price),
        profit=float(profit),
        created_at=_as_datetime(created),
        updated_at=_as_datetime(updated),
        deleted_at=_as_datetime(deleted),
    )


class PositionStore:
    """Positions kept in the ``positions`` table."""

    def __init__(self, database: Database) -> None:
        self.database = database

    def add(self, position: Position) -> Position:
        """Insert ``position`` and return the stored record with its id."""
        query = f"""insert into positions ("investment_id", "amount", "average_price", "profit")
                    values ($1, $2, $3, $4)
                    returning {_COLUMNS}"""
        try:
            row = self.database.query_row(
                query,
                position.investment_id,
                position.amount,
                position.average_price,
                position.profit,
            )
            return _scan(row)
        except (StoreError, TypeError, ValueError) as exc:
            raise StoreError(
                f"Could not insert position for investment {position.investment_id}: {exc}"
            ) from exc

    def all(self) -> list[Position]:
        """Return every position."""
        try:
            rows = self.database.query(f"select {_COLUMNS} from positions")
        except StoreError as exc:
            raise StoreError(f"Could not get positions: {exc}") from exc
        return self._scan_all(rows)

    @staticmethod
    def _scan_all(rows: Iterable[Any]) -> list[Position]:
        try:
            return [_scan(row) for row in rows]
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Error while scanning positions: {exc}") from exc

    def delete(self, record_id: int) -> None:
        """Mark a position as deleted."""
        query = "update positions set deleted_at = now() where id = $1"
        try:
            affected = self.database.execute(query, record_id)
        except StoreError as exc:
            raise StoreError(f"Could not delete position {record_id}: {exc}") from exc
        if affected == 0:
            raise StoreError(f"Could not delete position {record_id}: no rows affected")

    def get(self, record_id: int) -> Position:
        """Return the position with ``record_id``."""
        try:
            row = self.database.query_row(
                f"select {_COLUMNS} from positions where id = $1", record_id
            )
            return _scan(row)
        except (StoreError, TypeError, ValueError) as exc:
            raise StoreError(f"Could not get position {record_id}: {exc}") from exc

    def get_by_user_id(self, user_id: int) -> Position:
        """Return the first position whose investment id equals ``user_id``."""
        try:
            row = self.database.query_row(
                f"select {_COLUMNS} from positions where investment_id = $1", user_id
            )
            return _scan(row)
        except (StoreError, TypeError, ValueError) as exc:
            raise StoreError(f"Could not get positions for user {user_id}: {exc}") from exc

    def update(self, position: Position) -> None:
        """Store the investment, amount, average price and profit of ``position``."""
        query = """update positions
                   set investment_id = $1,
                       amount = $2,
                       average_price = $3,
                       profit = $4
                   where id = $5"""
        try:
            affected = self.database.execute(
                query,
                position.investment_id,
                position.amount,
                position.average_price,
                position.profit,
                position.id,
            )
        except StoreError as exc:
            raise StoreError(f"Could not update position {position.id}: {exc}") from exc
        if affected == 0:
            raise StoreError(f"Could not update position {position.id}: no rows affected")