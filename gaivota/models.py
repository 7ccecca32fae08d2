"""Domain records, enumerations and service interfaces."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class LogLevel(str, Enum):
    """Severity of a log message."""

    INFO = "info"
    FATAL = "fatal"


class OrderOperation(str, Enum):
    """Direction of an order."""

    SELL = "sell"
    BUY = "buy"


class OrderType(str, Enum):
    """How an order is executed."""

    LIMIT = "limit"
    MARKET = "market"


def _plain(value: Any) -> Any:
    """Reduce enum members to their underlying value."""
    return value.value if isinstance(value, Enum) else value


def _json_kind(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


@dataclass
class User:
    id: int = 0
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    def to_json(self) -> dict[str, Any]:
        """Return the fields exposed in JSON documents."""
        return {
            "id": self.id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
        }


@dataclass
class Portfolio:
    id: int = 0
    user_id: int = 0
    name: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    _JSON_FIELDS = {"id": ("id", int), "user": ("user_id", int), "name": ("name", str)}

    def to_json(self) -> dict[str, Any]:
        """Return the fields exposed in JSON documents."""
        return {"id": self.id, "user": self.user_id, "name": self.name}

    @classmethod
    def from_json(cls, data: str | bytes | bytearray) -> "Portfolio":
        """Decode the first JSON value in ``data``; unknown fields are rejected."""
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8")
        try:
            value, _ = json.JSONDecoder().raw_decode(data.lstrip())
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid JSON: {exc}") from exc
        if value is None:
            return cls()
        if not isinstance(value, dict):
            raise ValueError(f"json: cannot unmarshal {_json_kind(value)} into Portfolio")

        kwargs: dict[str, Any] = {}
        for key, item in value.items():
            spec = cls._JSON_FIELDS.get(key.lower())
            if spec is None:
                raise ValueError(f'json: unknown field "{key}"')
            attr, kind = spec
            if item is None:
                continue
            if kind is int:
                valid = isinstance(item, int) and not isinstance(item, bool)
            else:
                valid = isinstance(item, str)
            if not valid:
                raise ValueError(
                    f"json: cannot unmarshal {_json_kind(item)} into field "
                    f"Portfolio.{key} of type {kind.__name__}"
                )
            kwargs[attr] = item
        return cls(**kwargs)


@dataclass
class Wallet:
    id: int = 0
    user_id: int = 0
    name: str = ""
    total_value: float = 0.0
    address: str = ""
    location: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    def to_json(self) -> dict[str, Any]:
        """Return the fields exposed in JSON documents."""
        return {
            "id": self.id,
            "user": self.user_id,
            "name": self.name,
            "totalValue": self.total_value,
            "address": self.address,
            "location": self.location,
        }


@dataclass
class Investment:
    id: int = 0
    portfolio_id: int = 0
    token: str = ""
    token_symbol: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    def to_json(self) -> dict[str, Any]:
        """Return the fields exposed in JSON documents."""
        return {
            "id": self.id,
            "portfolio": self.portfolio_id,
            "token": self.token,
            "symbol": self.token_symbol,
        }


@dataclass
class Position:
    id: int = 0
    investment_id: int = 0
    amount: float = 0.0
    average_price: float = 0.0
    profit: float = 0.0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    def to_json(self) -> dict[str, Any]:
        """Return the fields exposed in JSON documents; a zero profit is omitted."""
        document: dict[str, Any] = {
            "id": self.id,
            "investment": self.investment_id,
            "amount": self.amount,
            "averagePrice": self.average_price,
        }
        if self.profit:
            document["profit"] = self.profit
        return document


@dataclass
class Holding:
    id: int = 0
    wallet_id: int = 0
    wallet: Wallet | None = None
    position_id: int = 0
    position: Position | None = None
    amount: float = 0.0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    def to_json(self) -> dict[str, Any]:
        """Return the fields exposed in JSON documents."""
        return {
            "id": self.id,
            "wallet": self.wallet_id,
            "position": self.position_id,
            "amount": self.amount,
        }


@dataclass
class Order:
    id: int = 0
    position_id: int = 0
    amount: float = 0.0
    unit_price: float = 0.0
    total_price: float = 0.0
    operation: OrderOperation | str = ""
    type: OrderType | str = ""
    exchange: str = ""
    executed_at: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    def to_json(self) -> dict[str, Any]:
        """Return the fields exposed in JSON documents."""
        return {
            "id": self.id,
            "position": self.position_id,
            "amount": self.amount,
            "unitPrice": self.unit_price,
            "totalPrice": self.total_price,
            "operation": _plain(self.operation),
            "type": _plain(self.type),
            "exchange": self.exchange,
            "executedAt": self.executed_at,
        }


@dataclass
class Client:
    """The set of stores the application works with."""

    user_store: Any = None
    portfolio_store: Any = None
    wallet_store: Any = None
    investment_store: Any = None
    position_store: Any = None
    holding_store: Any = None
    order_store: Any = None


class HealthChecker(ABC):
    """A dependency whose availability can be checked."""

    @abstractmethod
    def ping(self) -> str:
        """Return a status message; raise an exception whose text describes a failure."""