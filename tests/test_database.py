import pytest

from gaivota.postgres.database import Database, StoreError, connect, to_snake_case


@pytest.fixture
def db():
    database = connect("sqlite://")
    yield database
    database.close()


@pytest.mark.parametrize(
    "name, expected",
    [
        ("DatabaseConnString", "database_conn_string"),
        ("HTTPServer", "http_server"),
        ("id", "id"),
    ],
)
def test_to_snake_case(name, expected):
    assert to_snake_case(name) == expected


def test_to_snake_case_is_idempotent():
    once = to_snake_case("PortfolioID")
    assert to_snake_case(once) == once


def test_query_binds_numbered_placeholders(db):
    rows = db.query("select $1, $2", "a", "b")
    assert [tuple(row) for row in rows] == [("a", "b")]


def test_query_binds_placeholders_by_number_not_position(db):
    row = db.query_row("select $2, $1", "first", "second")
    assert tuple(row) == ("second", "first")


def test_query_row_without_rows_raises(db):
    db.execute("create table items (x integer)")
    with pytest.raises(StoreError, match="no rows"):
        db.query_row("select x from items")


def test_execute_returns_rows_affected(db):
    db.execute("create table items (x integer)")
    for value in (1, 2, 3):
        assert db.execute("insert into items (x) values ($1)", value) == 1
    assert db.execute("update items set x = $1", 0) == 3
    assert db.execute("update items set x = $1 where x = $2", 5, 9) == 0


def test_invalid_sql_raises_store_error(db):
    with pytest.raises(StoreError):
        db.query("select * from missing_table")


def test_ping_succeeds(db):
    assert db.ping() == ""


def test_connect_rejects_invalid_url():
    with pytest.raises(StoreError):
        connect("not a url")


def test_connect_fails_for_unreachable_database(tmp_path):
    target = tmp_path / "missing" / "data.db"
    with pytest.raises(StoreError):
        connect(f"sqlite:///{target}")


def test_database_as_context_manager(tmp_path):
    path = tmp_path / "data.db"
    with connect(f"sqlite:///{path}") as database:
        database.execute("create table items (x integer)")
        database.execute("insert into items (x) values ($1)", 7)
    assert isinstance(database, Database)
    with connect(f"sqlite:///{path}") as again:
        assert [tuple(r) for r in again.query("select x from items")] == [(7,)]