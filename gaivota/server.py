"""Entry point of the HTTP API server."""

from __future__ import annotations

import argparse
import signal
import threading
from pathlib import Path
from typing import Any, Sequence

from werkzeug.serving import make_server

from .config import ConfigError, read_file
from .logger import Logger
from .models import Client, HealthChecker, LogLevel
from .postgres.client import new_postgres_client
from .postgres.database import StoreError, connect
from .web.router import Mux, Router

_SHUTDOWN_TIMEOUT = 30.0


def build_app(client: Client, dependencies: Sequence[HealthChecker], logger: Any) -> Router:
    """Return the WSGI application serving the API."""
    mux = Mux("/")
    mux.init_router(client, dependencies, logger)
    return mux.router


def _serve(app: Router, host: str, port: int, logger: Logger) -> None:
    address = f"{host}:{port}"
    try:
        server = make_server(host, port, app, threaded=True)
    except OSError as exc:
        logger.log(LogLevel.FATAL, "Error while starting server: %v", exc)
        return

    stop = threading.Event()
    received: list[str] = []

    def on_signal(signum: int, _frame: Any) -> None:
        received.append(signal.Signals(signum).name)
        stop.set()

    watched = (signal.SIGINT, signal.SIGTERM)
    previous = {sig: signal.signal(sig, on_signal) for sig in watched}
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    logger.log(LogLevel.INFO, "Starting server on %s", address)
    thread.start()
    try:
        stop.wait()
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)

    logger.log(
        LogLevel.INFO,
        "Received terminate %s signal, gracefully shutting down.",
        received[0] if received else "unknown",
    )
    server.shutdown()
    server.server_close()
    thread.join(_SHUTDOWN_TIMEOUT)


def main(argv: Sequence[str] | None = None) -> int:
    """Read ``config.json`` from the working directory and serve the API until signalled."""
    parser = argparse.ArgumentParser(prog="gaivota", description="Serve the portfolio API.")
    parser.parse_args(argv)

    logger = Logger("Gaivota-api - ")
    root_path = Path.cwd()

    try:
        settings = read_file(root_path / "config.json")
    except (OSError, ConfigError) as exc:
        logger.log(LogLevel.FATAL, "Error while reading config file: %v", exc)
        return 1

    if settings.port == 0:
        raise RuntimeError("Missing mandatory environment variable PORT")

    try:
        db = connect(settings.database_conn_string)
    except StoreError as exc:
        logger.log(LogLevel.FATAL, "Error while connecting to Postgres: %v", exc)
        return 1

    with db:
        app = build_app(new_postgres_client(db), [db], logger)
        _serve(app, "0.0.0.0", settings.port, logger)
    return 0