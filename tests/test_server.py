import io
import json

import pytest
from werkzeug.test import Client as TestClient

from gaivota.logger import FatalError, Logger
from gaivota.postgres.client import new_postgres_client
from gaivota.postgres.database import connect
from gaivota.server import build_app, main


@pytest.fixture
def db():
    database = connect("sqlite://")
    database.execute(
        "create table portfolios (id integer primary key autoincrement, user_id integer, "
        "name text, created_at timestamp default current_timestamp, "
        "updated_at timestamp default current_timestamp, deleted_at timestamp)"
    )
    yield database
    database.close()


def test_build_app_answers_ping(db):
    app = build_app(new_postgres_client(db), [db], Logger(stream=io.StringIO()))
    response = TestClient(app).get("/ping")
    assert response.status_code == 200
    assert response.get_data() == b"pong"


def test_build_app_portfolio_round_trip(db):
    app = build_app(new_postgres_client(db), [db], Logger(stream=io.StringIO()))
    client = TestClient(app)
    assert client.post("/positions/", data='{"user": 2, "name": "Core"}').status_code == 200
    response = client.get("/positions/1")
    assert response.status_code == 201
    assert json.loads(response.get_data()) == {"id": 1, "user": 2, "name": "Core"}


def test_main_without_config_is_fatal(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(FatalError) as info:
        main([])
    assert info.value.code == 1
    assert "Error while reading config file" in capsys.readouterr().out


def test_main_requires_port(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.json").write_text(
        json.dumps({"Port": 0, "DatabaseConnString": "sqlite://"}), encoding="utf-8"
    )
    with pytest.raises(RuntimeError, match="Missing mandatory environment variable PORT"):
        main([])


def test_main_bad_connection_is_fatal(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.json").write_text(
        json.dumps({"Port": 8080, "DatabaseConnString": "not a url"}), encoding="utf-8"
    )
    with pytest.raises(FatalError):
        main([])
    assert "Error while connecting to Postgres" in capsys.readouterr().out


def test_main_rejects_unknown_arguments():
    with pytest.raises(SystemExit) as info:
        main(["--bogus"])
    assert info.value.code == 2