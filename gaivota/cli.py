"""Command-line tool for inspecting and editing the portfolio database."""

from __future__ import annotations

import re
import sys
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Sequence, TextIO

from .config import ConfigError, Settings, read_file
from .logger import FatalError, Logger
from .models import Client, HealthChecker, LogLevel, Portfolio, User
from .postgres.client import new_postgres_client
from .postgres.database import StoreError, connect

_INTEGER = re.compile(r"[+-]?[0-9]+")

_USAGE = (
    "Gaivota CLI - Portfolio Management Tool",
    "",
    "Usage: gaivota-cli <command> [args]",
    "",
    "Commands:",
    "  health                    Check database connection",
    "  users <subcommand>        Manage users",
    "    list                    List all users",
    "    get <id>                Get user by ID",
    "    create <email> <first> <last>  Create new user",
    "  portfolios <subcommand>   Manage portfolios",
    "    list                    List all portfolios",
    "    list-by-user <user_id>  List portfolios for user",
    "    get <id>                Get portfolio by ID",
    "    create <user_id> <name> Create new portfolio",
    "  wallets <subcommand>      Manage wallets",
    "    list                    List all wallets",
    "    list-by-user <user_id>  List wallets for user",
    "    get <id>                Get wallet by ID",
    "  investments <subcommand>  Manage investments",
    "    list                    List all investments",
    "    get <id>                Get investment by ID",
    "  positions <subcommand>    Manage positions",
    "    list                    List all positions",
    "    get <id>                Get position by ID",
    "  orders <subcommand>       Manage orders",
    "    list                    List all orders",
    "    get <id>                Get order by ID",
)


def _stream(out: TextIO | None) -> TextIO:
    return sys.stdout if out is None else out


def _atoi(text: str) -> int:
    """Parse a decimal integer with an optional sign, rejecting anything else."""
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"invalid integer: {text!r}")
    return int(text)


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _timestamp(value: datetime | None) -> str:
    """Render a timestamp as ``YYYY-MM-DD HH:MM:SS[.frac] +zzzz ZONE``."""
    if value is None:
        return "0001-01-01 00:00:00 +0000 UTC"
    rendered = value.strftime("%Y-%m-%d %H:%M:%S")
    if value.microsecond:
        rendered += "." + f"{value.microsecond:06d}".rstrip("0")
    if value.tzinfo is None:
        return rendered + " +0000 UTC"
    offset = value.strftime("%z")
    zone = value.strftime("%Z") or offset
    return f"{rendered} {offset} {zone}"


def _id_argument(args: Sequence[str], what: str, out: TextIO) -> int | None:
    """Return the integer in ``args[1]``, or report why there is none."""
    if len(args) < 2:
        print(f"Missing {what} ID", file=out)
        return None
    try:
        return _atoi(args[1])
    except ValueError:
        print(f"Invalid {what} ID: {args[1]}", file=out)
        return None


def print_usage(out: TextIO | None = None) -> None:
    """Print the list of commands."""
    stream = _stream(out)
    for line in _USAGE:
        print(line, file=stream)


def handle_health(db: HealthChecker, out: TextIO | None = None) -> int:
    """Ping the database; return 0 when healthy and 1 otherwise."""
    stream = _stream(out)
    try:
        message = db.ping()
    except Exception as exc:  # any failure of the dependency means unhealthy
        print(f"Health check failed: {exc}", file=stream)
        return 1
    print(f"Database connection healthy: {message}", file=stream)
    return 0


def handle_users(client: Client, args: Sequence[str], out: TextIO | None = None) -> None:
    """Run a ``users`` subcommand."""
    stream = _stream(out)
    store = client.user_store
    if not args:
        print("Missing subcommand for users", file=stream)
        return

    subcommand = args[0]
    if subcommand == "list":
        try:
            users = store.all()
        except StoreError as exc:
            print(f"Error listing users: {exc}", file=stream)
            return
        print("Users:", file=stream)
        print("%-5s %-25s %-15s %-15s" % ("ID", "Email", "First Name", "Last Name"), file=stream)
        print("-" * 61, file=stream)
        for user in users:
            print(
                "%-5d %-25s %-15s %-15s" % (user.id, user.email, user.first_name, user.last_name),
                file=stream,
            )
    elif subcommand == "get":
        record_id = _id_argument(args, "user", stream)
        if record_id is None:
            return
        try:
            user = store.get(record_id)
        except StoreError as exc:
            print(f"Error getting user: {exc}", file=stream)
            return
        print("User Details:", file=stream)
        print(f"  ID: {user.id}", file=stream)
        print(f"  Email: {user.email}", file=stream)
        print(f"  Name: {user.first_name} {user.last_name}", file=stream)
        print(f"  Created: {_timestamp(user.created_at)}", file=stream)
    elif subcommand == "create":
        if len(args) < 4:
            print("Usage: users create <email> <first_name> <last_name>", file=stream)
            return
        try:
            created = store.add(User(email=args[1], first_name=args[2], last_name=args[3]))
        except StoreError as exc:
            print(f"Error creating user: {exc}", file=stream)
            return
        print("User created successfully:", file=stream)
        print(f"  ID: {created.id}", file=stream)
        print(f"  Email: {created.email}", file=stream)
        print(f"  Name: {created.first_name} {created.last_name}", file=stream)
    else:
        print(f"Unknown users subcommand: {subcommand}", file=stream)


def handle_portfolios(client: Client, args: Sequence[str], out: TextIO | None = None) -> None:
    """Run a ``portfolios`` subcommand."""
    stream = _stream(out)
    store = client.portfolio_store
    if not args:
        print("Missing subcommand for portfolios", file=stream)
        return

    subcommand = args[0]
    if subcommand == "list":
        try:
            portfolios = store.all()
        except StoreError as exc:
            print(f"Error listing portfolios: {exc}", file=stream)
            return
        print("Portfolios:", file=stream)
        print("%-5s %-10s %-30s" % ("ID", "User ID", "Name"), file=stream)
        print("-" * 47, file=stream)
        for portfolio in portfolios:
            print(
                "%-5d %-10d %-30s" % (portfolio.id, portfolio.user_id, portfolio.name),
                file=stream,
            )
    elif subcommand == "list-by-user":
        user_id = _id_argument(args, "user", stream)
        if user_id is None:
            return
        try:
            portfolios = store.get_by_user_id(user_id)
        except StoreError as exc:
            print(f"Error listing portfolios for user: {exc}", file=stream)
            return
        print(f"Portfolios for User {user_id}:", file=stream)
        print("%-5s %-30s" % ("ID", "Name"), file=stream)
        print("-" * 36, file=stream)
        for portfolio in portfolios:
            print("%-5d %-30s" % (portfolio.id, portfolio.name), file=stream)
    elif subcommand == "get":
        record_id = _id_argument(args, "portfolio", stream)
        if record_id is None:
            return
        try:
            portfolio = store.get(record_id)
        except StoreError as exc:
            print(f"Error getting portfolio: {exc}", file=stream)
            return
        print("Portfolio Details:", file=stream)
        print(f"  ID: {portfolio.id}", file=stream)
        print(f"  User ID: {portfolio.user_id}", file=stream)
        print(f"  Name: {portfolio.name}", file=stream)
        print(f"  Created: {_timestamp(portfolio.created_at)}", file=stream)
    elif subcommand == "create":
        if len(args) < 3:
            print("Usage: portfolios create <user_id> <name>", file=stream)
            return
        try:
            user_id = _atoi(args[1])
        except ValueError:
            print(f"Invalid user ID: {args[1]}", file=stream)
            return
        try:
            created = store.add(Portfolio(user_id=user_id, name=args[2]))
        except StoreError as exc:
            print(f"Error creating portfolio: {exc}", file=stream)
            return
        print("Portfolio created successfully:", file=stream)
        print(f"  ID: {created.id}", file=stream)
        print(f"  User ID: {created.user_id}", file=stream)
        print(f"  Name: {created.name}", file=stream)
    else:
        print(f"Unknown portfolios subcommand: {subcommand}", file=stream)


def handle_wallets(client: Client, args: Sequence[str], out: TextIO | None = None) -> None:
    """Run a ``wallets`` subcommand."""
    stream = _stream(out)
    store = client.wallet_store
    if not args:
        print("Missing subcommand for wallets", file=stream)
        return

    subcommand = args[0]
    if subcommand == "list":
        try:
            wallets = store.all()
        except StoreError as exc:
            print(f"Error listing wallets: {exc}", file=stream)
            return
        print("Wallets:", file=stream)
        print(
            "%-5s %-10s %-20s %-15s %-40s" % ("ID", "User ID", "Name", "Total Value", "Address"),
            file=stream,
        )
        print("-" * 80, file=stream)
        for wallet in wallets:
            print(
                "%-5d %-10d %-20s $%-14.2f %-40s"
                % (wallet.id, wallet.user_id, wallet.name, wallet.total_value, wallet.address),
                file=stream,
            )
    elif subcommand == "list-by-user":
        user_id = _id_argument(args, "user", stream)
        if user_id is None:
            return
        try:
            wallets = store.get_by_user_id(user_id)
        except StoreError as exc:
            print(f"Error listing wallets for user: {exc}", file=stream)
            return
        print(f"Wallets for User {user_id}:", file=stream)
        print("%-5s %-20s %-15s %-40s" % ("ID", "Name", "Total Value", "Address"), file=stream)
        print("-" * 80, file=stream)
        for wallet in wallets:
            print(
                "%-5d %-20s $%-14.2f %-40s"
                % (wallet.id, wallet.name, wallet.total_value, wallet.address),
                file=stream,
            )
    elif subcommand == "get":
        record_id = _id_argument(args, "wallet", stream)
        if record_id is None:
            return
        try:
            wallet = store.get(record_id)
        except StoreError as exc:
            print(f"Error getting wallet: {exc}", file=stream)
            return
        print("Wallet Details:", file=stream)
        print(f"  ID: {wallet.id}", file=stream)
        print(f"  User ID: {wallet.user_id}", file=stream)
        print(f"  Name: {wallet.name}", file=stream)
        print(f"  Total Value: ${wallet.total_value:.2f}", file=stream)
        print(f"  Address: {wallet.address}", file=stream)
        print(f"  Location: {wallet.location}", file=stream)
        print(f"  Created: {_timestamp(wallet.created_at)}", file=stream)
    else:
        print(f"Unknown wallets subcommand: {subcommand}", file=stream)


def handle_investments(client: Client, args: Sequence[str], out: TextIO | None = None) -> None:
    """Run an ``investments`` subcommand."""
    stream = _stream(out)
    store = client.investment_store
    if not args:
        print("Missing subcommand for investments", file=stream)
        return

    subcommand = args[0]
    if subcommand == "list":
        try:
            investments = store.all()
        except StoreError as exc:
            print(f"Error listing investments: {exc}", file=stream)
            return
        print("Investments:", file=stream)
        print("%-5s %-15s %-20s %-10s" % ("ID", "Portfolio ID", "Token", "Symbol"), file=stream)
        print("-" * 52, file=stream)
        for investment in investments:
            print(
                "%-5d %-15d %-20s %-10s"
                % (
                    investment.id,
                    investment.portfolio_id,
                    investment.token,
                    investment.token_symbol,
                ),
                file=stream,
            )
    elif subcommand == "get":
        record_id = _id_argument(args, "investment", stream)
        if record_id is None:
            return
        try:
            investment = store.get(record_id)
        except StoreError as exc:
            print(f"Error getting investment: {exc}", file=stream)
            return
        print("Investment Details:", file=stream)
        print(f"  ID: {investment.id}", file=stream)
        print(f"  Portfolio ID: {investment.portfolio_id}", file=stream)
        print(f"  Token: {investment.token}", file=stream)
        print(f"  Symbol: {investment.token_symbol}", file=stream)
        print(f"  Created: {_timestamp(investment.created_at)}", file=stream)
    else:
        print(f"Unknown investments subcommand: {subcommand}", file=stream)


def handle_positions(client: Client, args: Sequence[str], out: TextIO | None = None) -> None:
    """Run a ``positions`` subcommand."""
    stream = _stream(out)
    store = client.position_store
    if not args:
        print("Missing subcommand for positions", file=stream)
        return

    subcommand = args[0]
    if subcommand == "list":
        try:
            positions = store.all()
        except StoreError as exc:
            print(f"Error listing positions: {exc}", file=stream)
            return
        print("Positions:", file=stream)
        print(
            "%-5s %-15s %-15s %-15s %-15s"
            % ("ID", "Investment ID", "Amount", "Avg Price", "Profit"),
            file=stream,
        )
        print("-" * 71, file=stream)
        for position in positions:
            print(
                "%-5d %-15d %-15.6f $%-14.2f $%-14.2f"
                % (
                    position.id,
                    position.investment_id,
                    position.amount,
                    position.average_price,
                    position.profit,
                ),
                file=stream,
            )
    elif subcommand == "get":
        record_id = _id_argument(args, "position", stream)
        if record_id is None:
            return
        try:
            position = store.get(record_id)
        except StoreError as exc:
            print(f"Error getting position: {exc}", file=stream)
            return
        print("Position Details:", file=stream)
        print(f"  ID: {position.id}", file=stream)
        print(f"  Investment ID: {position.investment_id}", file=stream)
        print(f"  Amount: {position.amount:.6f}", file=stream)
        print(f"  Average Price: ${position.average_price:.2f}", file=stream)
        print(f"  Profit: ${position.profit:.2f}", file=stream)
        print(f"  Created: {_timestamp(position.created_at)}", file=stream)
    else:
        print(f"Unknown positions subcommand: {subcommand}", file=stream)


def handle_orders(client: Client, args: Sequence[str], out: TextIO | None = None) -> None:
    """Run an ``orders`` subcommand."""
    stream = _stream(out)
    store = client.order_store
    if not args:
        print("Missing subcommand for orders", file=stream)
        return

    subcommand = args[0]
    if subcommand == "list":
        try:
            orders = store.all()
        except StoreError as exc:
            print(f"Error listing orders: {exc}", file=stream)
            return
        print("Orders:", file=stream)
        print(
            "%-5s %-12s %-10s %-12s %-12s %-8s %-8s %-15s"
            % ("ID", "Position ID", "Amount", "Unit Price", "Total", "Op", "Type", "Exchange"),
            file=stream,
        )
        print("-" * 83, file=stream)
        for order in orders:
            print(
                "%-5d %-12d %-10.4f $%-11.2f $%-11.2f %-8s %-8s %-15s"
                % (
                    order.id,
                    order.position_id,
                    order.amount,
                    order.unit_price,
                    order.total_price,
                    _plain(order.operation),
                    _plain(order.type),
                    order.exchange,
                ),
                file=stream,
            )
    elif subcommand == "get":
        record_id = _id_argument(args, "order", stream)
        if record_id is None:
            return
        try:
            order = store.get(record_id)
        except StoreError as exc:
            print(f"Error getting order: {exc}", file=stream)
            return
        print("Order Details:", file=stream)
        print(f"  ID: {order.id}", file=stream)
        print(f"  Position ID: {order.position_id}", file=stream)
        print(f"  Amount: {order.amount:.4f}", file=stream)
        print(f"  Unit Price: ${order.unit_price:.2f}", file=stream)
        print(f"  Total Price: ${order.total_price:.2f}", file=stream)
        print(f"  Operation: {_plain(order.operation)}", file=stream)
        print(f"  Type: {_plain(order.type)}", file=stream)
        print(f"  Exchange: {order.exchange}", file=stream)
        print(f"  Executed At: {order.executed_at}", file=stream)
        print(f"  Created: {_timestamp(order.created_at)}", file=stream)
    else:
        print(f"Unknown orders subcommand: {subcommand}", file=stream)


_HANDLERS: dict[str, Callable[[Client, Sequence[str], TextIO], None]] = {
    "users": handle_users,
    "portfolios": handle_portfolios,
    "wallets": handle_wallets,
    "investments": handle_investments,
    "positions": handle_positions,
    "orders": handle_orders,
}


def load_settings(root_path: str | Path, logger: Logger) -> Settings:
    """Read ``config.local.json`` under ``root_path``, falling back to ``config.json``.

    With the fallback file, a ``@db:5432`` host in the connection string is
    pointed at ``@localhost:5555``. Raises :class:`FatalError` when neither
    file can be read.
    """
    root = Path(root_path)
    try:
        return read_file(root / "config.local.json")
    except (OSError, ConfigError):
        pass

    try:
        settings = read_file(root / "config.json")
    except (OSError, ConfigError) as exc:
        logger.log(LogLevel.FATAL, "Error while reading config file: %v", exc)
        raise  # logging a fatal message always raises; kept for clarity

    if settings.database_conn_string:
        settings.database_conn_string = settings.database_conn_string.replace(
            "@db:5432", "@localhost:5555", 1
        )
        logger.log(LogLevel.INFO, "Adjusted database connection for local development")
    return settings


def main(argv: Sequence[str] | None = None) -> int:
    """Run one command against the configured database; return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    out = sys.stdout
    if not args:
        print_usage(out)
        return 1

    logger = Logger("Gaivota-CLI - ")
    try:
        try:
            root_path = Path.cwd()
        except OSError as exc:
            logger.log(LogLevel.FATAL, "Error getting root path: %v", exc)
            return 1
        settings = load_settings(root_path, logger)
        try:
            db = connect(settings.database_conn_string)
        except StoreError as exc:
            logger.log(LogLevel.FATAL, "Error while connecting to Postgres: %v", exc)
            return 1
    except FatalError:
        return 1

    with db:
        client = new_postgres_client(db)
        command, rest = args[0], args[1:]
        if command == "health":
            return handle_health(db, out)
        handler = _HANDLERS.get(command)
        if handler is None:
            print(f"Unknown command: {command}", file=out)
            print_usage(out)
            return 1
        handler(client, rest, out)
    return 0


if __name__ == "__main__":
    sys.exit(main())