"""Storage of wallets."""

from __future__ import annotations

from typing import Any, Iterable

from ..models import Wallet
from .database import Database, StoreError, _as_datetime

_COLUMNS = (
    '"id", "user_id", "name", "total_value", "address", "location", '
    '"created_at", "updated_at", "deleted_at"'
)


def _scan(row: Any) -> Wallet:
    record_id, user_id, name, total_value, address, location, created, updated, deleted = row
    return Wallet(
        id=record_id,
        user_id=user_id,
        name=name,
        total_value=float(total_value),
        address=address,
        location=location,
        created_at=_as_datetime(created),
        updated_at=_as_datetime(updated),
        deleted_at=_as_datetime(deleted),
    )


class WalletStore:
    """Wallets kept in the ``wallets`` table."""

    def __init__(self, database: Database) -> None:
        self.database = database

    @staticmethod
    def _scan_all(rows: Iterable[Any]) -> list[Wallet]:
        try:
            return [_scan(row) for row in rows]
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Error while scanning wallets: {exc}") from exc

    def add(self, wallet: Wallet) -> Wallet:
        """Insert ``wallet`` and return the stored record with its id."""
        query = f"""insert into wallets ("user_id", "name", "total_value", "address", "location")
                    values ($1, $2, $3, $4, $5)
                    returning {_COLUMNS}"""
        try:
            row = self.database.query_row(
                query,
                wallet.user_id,
                wallet.name,
                wallet.total_value,
                wallet.address,
                wallet.location,
            )
            return _scan(row)
        except (StoreError, TypeError, ValueError) as exc:
            raise StoreError(
                f"Could not insert wallet {wallet.name} for user {wallet.user_id}: {exc}"
            ) from exc

    def all(self) -> list[Wallet]:
        """Return every wallet."""
        try:
            rows = self.database.query(f"select {_COLUMNS} from wallets")
        except StoreError as exc:
            raise StoreError(f"Could not get wallets: {exc}") from exc
        return self._scan_all(rows)

    def delete(self, record_id: int) -> None:
        """Mark a wallet as deleted."""
        query = "update wallets set deleted_at = now() where id = $1"
        try:
            affected = self.database.execute(query, record_id)
        except StoreError as exc:
            raise StoreError(f"Could not delete wallet {record_id}: {exc}") from exc
        if affected == 0:
            raise StoreError(f"Could not delete wallet {record_id}: no rows affected")

    def get(self, record_id: int) -> Wallet:
        """Return the wallet with ``record_id``."""
        try:
            row = self.database.query_row(
                f"select {_COLUMNS} from wallets where id = $1", record_id
            )
            return _scan(row)
        except (StoreError, TypeError, ValueError) as exc:
            raise StoreError(f"Could not get wallet {record_id}: {exc}") from exc

    def get_by_user_id(self, user_id: int) -> list[Wallet]:
        """Return the wallets owned by ``user_id``."""
        try:
            rows = self.database.query(
                f"select {_COLUMNS} from wallets where user_id = $1", user_id
            )
        except StoreError as exc:
            raise StoreError(f"Could not get wallets for user {user_id}: {exc}") from exc
        return self._scan_all(rows)

    def update(self, wallet: Wallet) -> None:
        """Store the name and total value of ``wallet``."""
        query = """update wallets
                   set name = $1,
                       total_value = $2
                   where id = $3"""
        try:
            affected = self.database.execute(query, wallet.name, wallet.total_value, wallet.id)
        except StoreError as exc:
            raise StoreError(f"Could not update wallet {wallet.id}: {exc}") from exc
        if affected == 0:
            raise StoreError(f"Could not update wallet {wallet.id}: no rows affected")