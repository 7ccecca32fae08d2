"""Storage of orders."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, TypeVar

from ..models import Order, OrderOperation, OrderType
from .database import Database, StoreError, _as_datetime

_COLUMNS = (
    '"id", "position_id", "amount", "unit_price", "total_price", "operation", "type", '
    '"exchange", "executed_at", "created_at", "updated_at", "deleted_at"'
)

_E = TypeVar("_E", bound=Enum)


def _member(kind: type[_E], value: Any) -> _E | Any:
    """Return the enum member for ``value``, or ``value`` itself if it names none."""
    try:
        return kind(value)
    except ValueError:
        return value


def _scan(row: Any) -> Order:
    (
        record_id,
        position_id,
        amount,
        unit_price,
        total_price,
        operation,
        order_type,
        exchange,
        executed_at,
        created,
        updated,
        deleted,
    ) = row
    return Order(
        id=record_id,
        position_id=position_id,
        amount=float(amount),
        unit_price=float(unit_price),
        total_price=float(total_price),
        operation=_member(OrderOperation, operation),
        type=_member(OrderType, order_type),
        exchange=exchange,
        executed_at=executed_at,
        created_at=_as_datetime(created),
        updated_at=_as_datetime(updated),
        deleted_at=_as_datetime(deleted),
    )


class OrderStore:
    """Orders kept in the ``orders`` table; deleted orders are hidden."""

    def __init__(self, database: Database) -> None:
        self.database = database

    @staticmethod
    def _scan_all(rows: Iterable[Any]) -> list[Order]:
        try:
            return [_scan(row) for row in rows]
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Error while scanning orders: {exc}") from exc

    def add(self, order: Order) -> Order:
        """Insert ``order`` and return the stored record with its id."""
        query = f"""insert into orders ("position_id", "amount", "unit_price", "total_price",
                                        "operation", "type", "exchange", "executed_at")
                    values ($1, $2, $3, $4, $5, $6, $7, $8)
                    returning {_COLUMNS}"""
        try:
            row = self.database.query_row(
                query,
                order.position_id,
                order.amount,
                order.unit_price,
                order.total_price,
                order.operation,
                order.type,
                order.exchange,
                order.executed_at,
            )
            return _scan(row)
        except (StoreError, TypeError, ValueError) as exc:
            raise StoreError(
                f"Could not insert order for position {order.position_id}: {exc}"
            ) from exc

    def all(self) -> list[Order]:
        """Return every order that has not been deleted."""
        try:
            rows = self.database.query(
                f"select {_COLUMNS} from orders where deleted_at is null"
            )
        except StoreError as exc:
            raise StoreError(f"Could not get orders: {exc}") from exc
        return self._scan_all(rows)

    def delete(self, record_id: int) -> None:
        """Mark an order as deleted."""
        query = "update orders set deleted_at = now() where id = $1"
        try:
            affected = self.database.execute(query, record_id)
        except StoreError as exc:
            raise StoreError(f"Could not delete order {record_id}: {exc}") from exc
        if affected == 0:
            raise StoreError(f"Could not delete order {record_id}: no rows affected")

    def get(self, record_id: int) -> Order:
        """Return the order with ``record_id`` unless it has been deleted."""
        try:
            row = self.database.query_row(
                f"select {_COLUMNS} from orders where id = $1 and deleted_at is null",
                record_id,
            )
            return _scan(row)
        except (StoreError, TypeError, ValueError) as exc:
            raise StoreError(f"Could not get order {record_id}: {exc}") from exc

    def update(self, order: Order) -> None:
        """Store every editable field of ``order``."""
        query = """update orders
                   set position_id = $1,
                       amount = $2,
                       unit_price = $3,
                       total_price = $4,
                       operation = $5,
                       "type" = $6,
                       exchange = $7,
                       executed_at = $8
                   where id = $9"""
        try:
            affected = self.database.execute(
                query,
                order.position_id,
                order.amount,
                order.unit_price,
                order.total_price,
                order.operation,
                order.type,
                order.exchange,
                order.executed_at,
                order.id,
            )
        except StoreError as exc:
            raise StoreError(f"Could not update order {order.id}: {exc}") from exc
        if affected == 0:
            raise StoreError(f"Could not update order {order.id}: no rows affected")