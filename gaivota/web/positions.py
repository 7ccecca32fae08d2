"""Handlers for the positions resource."""

from __future__ import annotations

from typing import Any

from werkzeug.wrappers import Request, Response

from ..models import LogLevel


class Positions:
    """Acknowledges position requests after logging them."""

    def __init__(self, logger: Any) -> None:
        self.logger = logger

    def get(self, request: Request) -> Response:
        """Handle a listing request."""
        self.logger.log(LogLevel.INFO, "Handle GET Positions")
        return Response(status=200)

    def add(self, request: Request) -> Response:
        """Handle a creation request."""
        self.logger.log(LogLevel.INFO, "Handle POST Positions")
        return Response(status=200)