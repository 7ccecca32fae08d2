"""Timestamped line logger writing to standard output."""

from __future__ import annotations

import re
import sys
import threading
from datetime import datetime
from typing import Any, TextIO

from .models import LogLevel

_VERB = re.compile(r"%([-+# 0]*)(\d+)?(?:\.(\d+))?([a-zA-Z%])")


class FatalError(SystemExit):
    """Raised after a fatal message is logged; exits with status 1 if uncaught."""

    def __init__(self, message: str) -> None:
        super().__init__(1)
        self.message = message

    def __str__(self) -> str:
        return self.message


def _text(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _format_one(spec: str, verb: str, arg: Any) -> str:
    try:
        if verb == "d":
            return (spec + "d") % (arg,)
        if verb in "fFeEgG":
            return (spec + verb) % (arg,)
        if verb in "xXo":
            return (spec + verb) % (arg,)
        if verb == "q":
            return (spec + "s") % ('"' + _text(arg).replace("\\", "\\\\").replace('"', '\\"') + '"',)
        if verb == "T":
            return (spec + "s") % (type(arg).__name__,)
        return (spec + "s") % (_text(arg),)
    except (TypeError, ValueError):
        return f"%!{verb}({type(arg).__name__}={_text(arg)})"


def _sprintf(fmt: str, args: tuple[Any, ...]) -> str:
    """Apply printf-style verbs (%v, %s, %d, %f, ...) to ``args``."""
    remaining = iter(args)

    def replace(match: re.Match[str]) -> str:
        flags, width, precision, verb = match.groups()
        if verb == "%":
            return "%"
        try:
            arg = next(remaining)
        except StopIteration:
            return f"%!{verb}(MISSING)"
        spec = "%" + flags + (width or "") + (f".{precision}" if precision is not None else "")
        return _format_one(spec, verb, arg)

    return _VERB.sub(replace, fmt)


class Logger:
    """Writes ``<prefix>YYYY/MM/DD HH:MM:SS message`` lines."""

    def __init__(self, prefix: str = "", stream: TextIO | None = None) -> None:
        self.prefix = prefix
        self._stream = stream
        self._lock = threading.Lock()

    def log(self, level: LogLevel | str, fmt: str, *args: Any) -> None:
        """Log a message; a fatal level raises :class:`FatalError` afterwards."""
        level = LogLevel(level)
        message = _sprintf(fmt, args) if args else fmt
        self._write(message)
        if level is LogLevel.FATAL:
            raise FatalError(message)

    def _write(self, message: str) -> None:
        stamp = datetime.now().strftime("%Y/%m/%d %H:%M:%S")
        stream = self._stream if self._stream is not None else sys.stdout
        with self._lock:
            stream.write(f"{self.prefix}{stamp} {message}\n")
            stream.flush()