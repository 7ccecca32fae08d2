"""HTTP routing and the API's request handlers."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Sequence

from werkzeug.wrappers import Request, Response

from ..models import Client, HealthChecker, LogLevel, Portfolio
from ..postgres.database import StoreError

Handler = Callable[..., Response]

_PARAM = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")
_INTEGER = re.compile(r"[+-]?[0-9]+")


def _join(prefix: str, path: str) -> str:
    """Join two path pieces, collapsing repeated and trailing slashes."""
    return "/" + "/".join(part for part in f"{prefix}/{path}".split("/") if part)


def _compile(pattern: str) -> re.Pattern[str]:
    segments = []
    for segment in pattern.strip("/").split("/"):
        match = _PARAM.fullmatch(segment)
        segments.append(f"(?P<{match.group(1)}>[^/]+)" if match else re.escape(segment))
    return re.compile("^/" + "/".join(segment for segment in segments if segment) + "$")


def _error(message: str, status: int) -> Response:
    """Plain-text error response with a trailing newline."""
    response = Response(message + "\n", status=status, content_type="text/plain; charset=utf-8")
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


def _json_body(document: Any) -> str:
    encoded = json.dumps(document, separators=(",", ":"), ensure_ascii=False)
    for char, escape in (
        ("<", "\\u003c"),
        (">", "\\u003e"),
        ("&", "\\u0026"),
        ("\u2028", "\\u2028"),
        ("\u2029", "\\u2029"),
    ):
        encoded = encoded.replace(char, escape)
    return encoded + "\n"


@dataclass(frozen=True)
class _Route:
    method: str
    pattern: str
    regex: re.Pattern[str]
    handler: Handler


class Router:
    """Matches method and path to a handler; ``:name`` segments become keyword arguments."""

    def __init__(self, prefix: str = "/", routes: list[_Route] | None = None) -> None:
        self.prefix = _join(prefix, "")
        self._routes: list[_Route] = [] if routes is None else routes

    def _add(self, method: str, path: str, handler: Handler) -> None:
        pattern = _join(self.prefix, path)
        self._routes.append(_Route(method, pattern, _compile(pattern), handler))

    def get(self, path: str, handler: Handler) -> None:
        """Register ``handler`` for GET requests to ``path``."""
        self._add("GET", path, handler)

    def post(self, path: str, handler: Handler) -> None:
        """Register ``handler`` for POST requests to ``path``."""
        self._add("POST", path, handler)

    def new_subrouter(self, prefix: str) -> "Router":
        """Return a router that registers its routes here, under ``prefix``."""
        return Router(_join(self.prefix, prefix), self._routes)

    def dispatch(self, request: Request) -> Response:
        """Run the handler matching ``request`` and return its response."""
        path = _join(request.path, "")
        allowed: list[str] = []
        for route in self._routes:
            match = route.regex.match(path)
            if match is None:
                continue
            if route.method == request.method or (
                route.method == "GET" and request.method == "HEAD"
            ):
                return route.handler(request, **match.groupdict())
            allowed.append(route.method)
        if allowed:
            response = _error("Method Not Allowed", 405)
            response.headers["Allow"] = ", ".join(dict.fromkeys(allowed))
            return response
        return _error("404 page not found", 404)

    def __call__(self, environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        return self.dispatch(Request(environ))(environ, start_response)


class HealthCheck:
    """Answers ``pong`` when every dependency responds to a ping."""

    def __init__(self, logger: Any, dependencies: Sequence[HealthChecker]) -> None:
        self.logger = logger
        self.dependencies = list(dependencies)

    def __call__(self, request: Request, **kwargs: str) -> Response:
        self.logger.log(LogLevel.INFO, "Handle ping endpoint")
        for dependency in self.dependencies:
            try:
                dependency.ping()
            except Exception as exc:  # any failure of a dependency marks it unhealthy
                self.logger.log(
                    LogLevel.INFO,
                    "Error while pinging %s: %v",
                    type(dependency).__name__,
                    exc,
                )
                return _error(str(exc), 500)
        return Response("pong", status=200, content_type="text/plain; charset=utf-8")


class PortfolioHandler:
    """Reads and creates portfolios."""

    def __init__(self, logger: Any, portfolio_store: Any) -> None:
        self.logger = logger
        self.portfolio_store = portfolio_store

    def get(self, request: Request, **kwargs: str) -> Response:
        """Return the portfolio named by the ``portfolioId`` path parameter."""
        self.logger.log(LogLevel.INFO, "Handle GET Portfolio")
        raw_id = kwargs.get("portfolioId", "")
        if not _INTEGER.fullmatch(raw_id):
            return _error("Portfolio ID must be an integer", 400)
        try:
            portfolio = self.portfolio_store.get(int(raw_id))
        except StoreError:
            return _error("Error while getting Portfolio", 500)
        return Response(
            _json_body(portfolio.to_json()), status=201, content_type="application/json"
        )

    def add(self, request: Request, **kwargs: str) -> Response:
        """Create a portfolio from the JSON request body."""
        self.logger.log(LogLevel.INFO, "Handle POST Portfolio")
        try:
            portfolio = Portfolio.from_json(request.get_data())
        except (ValueError, UnicodeDecodeError) as exc:
            self.logger.log(
                LogLevel.INFO, "Error while decoding POST /portfolio request body: %v", exc
            )
            return _error("Error while decoding portfolio data", 400)
        try:
            self.portfolio_store.add(portfolio)
        except StoreError as exc:
            self.logger.log(LogLevel.INFO, "Error while adding portfolio: %v", exc)
        return Response(status=200)


def init_health_check_router(mux: "Mux", dependencies: Sequence[HealthChecker], logger: Any) -> None:
    """Register the ``/ping`` endpoint."""
    mux.router.get("/ping", HealthCheck(logger, dependencies))


def init_portfolio_router(mux: "Mux", store: Any, logger: Any) -> None:
    """Register the portfolio endpoints."""
    handler = PortfolioHandler(logger, store)
    router = mux.router.new_subrouter("/positions")
    router.post("/", handler.add)
    router.get("/:portfolioId", handler.get)


class Mux:
    """The application's root router."""

    def __init__(self, prefix: str = "/") -> None:
        self.router = Router(prefix)

    def init_router(
        self, client: Client, dependencies: Sequence[HealthChecker], logger: Any
    ) -> None:
        """Register every endpoint of the API."""
        init_health_check_router(self, dependencies, logger)
        init_portfolio_router(self, client.portfolio_store, logger)