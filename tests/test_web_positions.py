import io

from werkzeug.test import EnvironBuilder
from werkzeug.wrappers import Request

from gaivota.logger import Logger
from gaivota.web.positions import Positions


def _request(method):
    return Request(EnvironBuilder(path="/positions", method=method).get_environ())


def test_get_logs_and_returns_empty_response():
    stream = io.StringIO()
    response = Positions(Logger("p - ", stream=stream)).get(_request("GET"))
    assert response.status_code == 200
    assert response.get_data() == b""
    assert "Handle GET Positions" in stream.getvalue()


def test_add_logs_and_returns_empty_response():
    stream = io.StringIO()
    response = Positions(Logger("p - ", stream=stream)).add(_request("POST"))
    assert response.status_code == 200
    assert response.get_data() == b""
    assert "Handle POST Positions" in stream.getvalue()
    assert "Handle GET Positions" not in stream.getvalue()