"""Crypto portfolio tracking in an SQL database, with an HTTP API and a command-line tool."""

__version__ = "0.1.0"