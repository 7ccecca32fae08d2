import dataclasses
from datetime import datetime

import pytest

from gaivota.models import Holding
from gaivota.postgres.database import StoreError, connect
from gaivota.postgres.holdings import HoldingStore

_TIMESTAMPS = (
    "created_at timestamp default current_timestamp, "
    "updated_at timestamp default current_timestamp, "
    "deleted_at timestamp"
)


@pytest.fixture
def database():
    db = connect("sqlite://")
    db.execute(
        "create table wallets (id integer primary key autoincrement, "
        "user_id integer not null, name text not null, total_value real not null default 0, "
        f"address text not null default '', location text not null default '', {_TIMESTAMPS})"
    )
    db.execute(
        "create table holdings (id integer primary key autoincrement, "
        "wallet_id integer not null, position_id integer not null, amount real not null, "
        f"{_TIMESTAMPS})"
    )
    yield db
    db.close()


@pytest.fixture
def store(database):
    return HoldingStore(database)


def test_add_returns_stored_record(store):
    created = store.add(Holding(wallet_id=2, position_id=3, amount=0.5))
    assert created.id >= 1
    assert (created.wallet_id, created.position_id, created.amount) == (2, 3, 0.5)
    assert created.created_at is not None and created.deleted_at is None


def test_get_round_trip(store):
    created = store.add(Holding(wallet_id=1, position_id=1, amount=4.0))
    assert store.get(created.id) == created


def test_get_missing_raises(store):
    with pytest.raises(StoreError, match="Could not get holding 13"):
        store.get(13)


def test_all_lists_every_holding(store):
    first = store.add(Holding(wallet_id=1, position_id=1, amount=1.0))
    second = store.add(Holding(wallet_id=2, position_id=2, amount=2.0))
    assert store.all() == [first, second]


def test_get_by_wallet_id_filters(store):
    kept = store.add(Holding(wallet_id=4, position_id=1, amount=1.0))
    store.add(Holding(wallet_id=5, position_id=1, amount=2.0))
    assert store.get_by_wallet_id(4) == [kept]
    assert store.get_by_wallet_id(6) == []


def test_get_by_position_id_filters(store):
    store.add(Holding(wallet_id=1, position_id=7, amount=1.0))
    kept = store.add(Holding(wallet_id=1, position_id=8, amount=2.0))
    assert store.get_by_position_id(8) == [kept]


def test_get_by_user_id_joins_wallets(store, database):
    database.execute("insert into wallets (user_id, name) values ($1, $2)", 20, "cold")
    database.execute("insert into wallets (user_id, name) values ($1, $2)", 21, "hot")
    mine = store.add(Holding(wallet_id=1, position_id=1, amount=1.0))
    store.add(Holding(wallet_id=2, position_id=1, amount=2.0))
    assert store.get_by_user_id(20) == [mine]
    assert store.get_by_user_id(22) == []


def test_delete_marks_deleted(store):
    created = store.add(Holding(wallet_id=1, position_id=1, amount=1.0))
    store.delete(created.id)
    fetched = store.get(created.id)
    assert isinstance(fetched.deleted_at, datetime)
    assert fetched.deleted_at >= fetched.created_at
    assert dataclasses.replace(fetched, deleted_at=None) == created


def test_delete_missing_raises(store):
    with pytest.raises(StoreError, match="Could not delete holding 4"):
        store.delete(4)


def test_update_stores_fields(store):
    created = store.add(Holding(wallet_id=1, position_id=1, amount=1.0))
    created.wallet_id = 3
    created.position_id = 9
    created.amount = 6.5
    store.update(created)
    fetched = store.get(created.id)
    assert (fetched.wallet_id, fetched.position_id, fetched.amount) == (3, 9, 6.5)


def test_update_missing_raises(store):
    with pytest.raises(StoreError, match="Could not update holding 30"):
        store.update(Holding(id=30, wallet_id=1, position_id=1))


def test_get_by_wallet_id_failure_names_column(database):
    database.execute("drop table holdings")
    with pytest.raises(StoreError, match="Could not get holdings where wallet_id is 1"):
        HoldingStore(database).get_by_wallet_id(1)


def test_add_failure_wraps_error(database):
    database.execute("drop table holdings")
    with pytest.raises(StoreError, match="Could not insert holding for wallet 1 and position 2"):
        HoldingStore(database).add(Holding(wallet_id=1, position_id=2))