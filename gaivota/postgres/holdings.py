"""Storage of holdings."""

from __future__ import annotations

from typing import Any, Iterable

from ..models import Holding
from .database import Database, StoreError, _as_datetime

_FIELDS = (
    "id",
    "wallet_id",
    "position_id",
    "amount",
    "created_at",
    "updated_at",
    "deleted_at",
)
_COLUMNS = ", ".join(f'"{name}"' for name in _FIELDS)
_QUALIFIED = ", ".join(f"h.{name}" for name in _FIELDS)


def _scan(row: Any) -> Holding:
    record_id, wallet_id, position_id, amount, created, updated, deleted = row
    return Holding(
        id=record_id,
        wallet_id=wallet_id,
        position_id=position_id,
        amount=float(amount),
        created_at=_as_datetime(created),
        updated_at=_as_datetime(updated),
        deleted_at=_as_datetime(deleted),
    )


class HoldingStore:
    """Holdings kept in the ``holdings`` table."""

    def __init__(self, database: Database) -> None:
        self.database = database

    @staticmethod
    def _scan_all(rows: Iterable[Any]) -> list[Holding]:
        try:
            return [_scan(row) for row in rows]
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Error while scanning holdings: {exc}") from exc

    def _get_by(self, column: str, value: int) -> list[Holding]:
        try:
            rows = self.database.query(
                f"select {_COLUMNS} from holdings where {column} = $1", value
            )
        except StoreError as exc:
            raise StoreError(f"Could not get holdings where {column} is {value}: {exc}") from exc
        return self._scan_all(rows)

    def add(self, holding: Holding) -> Holding:
        """Insert ``holding`` and return the stored record with its id."""
        query = f"""insert into holdings ("wallet_id", "position_id", "amount")
                    values ($1, $2, $3)
                    returning {_COLUMNS}"""
        try:
            row = self.database.query_row(
                query, holding.wallet_id, holding.position_id, holding.amount
            )
            return _scan(row)
        except (StoreError, TypeError, ValueError) as exc:
            raise StoreError(
                f"Could not insert holding for wallet {holding.wallet_id} "
                f"and position {holding.position_id}: {exc}"
            ) from exc

    def all(self) -> list[Holding]:
        """Return every holding."""
        try:
            rows = self.database.query(f"select {_COLUMNS} from holdings")
        except StoreError as exc:
            raise StoreError(f"Could not get holdings: {exc}") from exc
        return self._scan_all(rows)

    def delete(self, record_id: int) -> None:
        """Mark a holding as deleted."""
        query = "update holdings set deleted_at = now() where id = $1"
        try:
            affected = self.database.execute(query, record_id)
        except StoreError as exc:
            raise StoreError(f"Could not delete holding {record_id}: {exc}") from exc
        if affected == 0:
            raise StoreError(f"Could not delete holding {record_id}: no rows affected")

    def get(self, record_id: int) -> Holding:
        """Return the holding with ``record_id``."""
        try:
            row = self.database.query_row(
                f"select {_COLUMNS} from holdings where id = $1", record_id
            )
            return _scan(row)
        except (StoreError, TypeError, ValueError) as exc:
            raise StoreError(f"Could not get holding {record_id}: {exc}") from exc

    def get_by_user_id(self, user_id: int) -> list[Holding]:
        """Return the holdings in wallets owned by ``user_id``."""
        query = f"""select {_QUALIFIED}
                    from holdings as h
                    join wallets as w on w.id = h.wallet_id
                    where w.user_id = $1"""
        try:
            rows = self.database.query(query, user_id)
        except StoreError as exc:
            raise StoreError(f"Could not get holdings for user {user_id}: {exc}") from exc
        return self._scan_all(rows)

    def get_by_wallet_id(self, wallet_id: int) -> list[Holding]:
        """Return the holdings of ``wallet_id``."""
        return self._get_by("wallet_id", wallet_id)

    def get_by_position_id(self, position_id: int) -> list[Holding]:
        """Return the holdings of ``position_id``."""
        return self._get_by("position_id", position_id)

    def update(self, holding: Holding) -> None:
        """Store the wallet, position and amount of ``holding``."""
        query = """update holdings
                   set wallet_id = $1,
                       position_id = $2,
                       amount = $3
                   where id = $4"""
        try:
            affected = self.database.execute(
                query, holding.wallet_id, holding.position_id, holding.amount, holding.id
            )
        except StoreError as exc:
            raise StoreError(f"Could not update holding {holding.id}: {exc}") from exc
        if affected == 0:
            raise StoreError(f"Could not update holding {holding.id}: no rows affected")