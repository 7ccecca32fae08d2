"""Storage of users."""

from __future__ import annotations

from typing import Any, Iterable

from ..models import User
from .database import Database, StoreError, _as_datetime

_COLUMNS = '"id", "email", "first_name", "last_name", "created_at", "updated_at", "deleted_at"'


def _scan(row: Any) -> User:
    record_id, email, first_name, last_name, created, updated, deleted = row
    return User(
        id=record_id,
        email=email,
        first_name=first_name,
        last_name=last_name,
        created_at=_as_datetime(created),
        updated_at=_as_datetime(updated),
        deleted_at=_as_datetime(deleted),
    )


class UserStore:
    """Users kept in the ``users`` table."""

    def __init__(self, database: Database) -> None:
        self.database = database

    @staticmethod
    def _scan_all(rows: Iterable[Any]) -> list[User]:
        try:
            return [_scan(row) for row in rows]
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Error while scanning users: {exc}") from exc

    def add(self, user: User) -> User:
        """Insert ``user`` and return the stored record with its id."""
        query = f"""insert into users ("email", "first_name", "last_name")
                    values ($1, $2, $3)
                    returning {_COLUMNS}"""
        try:
            row = self.database.query_row(query, user.email, user.first_name, user.last_name)
            return _scan(row)
        except (StoreError, TypeError, ValueError) as exc:
            raise StoreError(f"Could not insert user {user.email}: {exc}") from exc

    def all(self) -> list[User]:
        """Return every user."""
        try:
            rows = self.database.query(f"select {_COLUMNS} from users")
        except StoreError as exc:
            raise StoreError(f"Could not get users: {exc}") from exc
        return self._scan_all(rows)

    def delete(self, record_id: int) -> None:
        """Mark a user as deleted."""
        query = "update users set deleted_at = now() where id = $1"
        try:
            affected = self.database.execute(query, record_id)
        except StoreError as exc:
            raise StoreError(f"Could not delete user {record_id}: {exc}") from exc
        if affected == 0:
            raise StoreError(f"Could not delete user {record_id}: no rows affected")

    def get(self, record_id: int) -> User:
        """Return the user with ``record_id``."""
        try:
            row = self.database.query_row(f"select {_COLUMNS} from users where id = $1", record_id)
            return _scan(row)
        except (StoreError, TypeError, ValueError) as exc:
            raise StoreError(f"Could not get user {record_id}: {exc}") from exc

    def update(self, user: User) -> None:
        """Store the email and names of ``user``."""
        query = """update users
                   set email = $1,
                       first_name = $2,
                       last_name = $3
                   where id = $4"""
        try:
            affected = self.database.execute(
                query, user.email, user.first_name, user.last_name, user.id
            )
        except StoreError as exc:
            raise StoreError(f"Could not update user {user.id}: {exc}") from exc
        if affected == 0:
            raise StoreError(f"Could not update user {user.id}: no rows affected")