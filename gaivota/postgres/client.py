"""Assembly of the SQL-backed stores into a client."""

from __future__ import annotations

from ..models import Client
from .database import Database
from .holdings import HoldingStore
from .investments import InvestmentStore
from .orders import OrderStore
from .portfolios import PortfolioStore
from .positions import PositionStore
from .users import UserStore
from .wallets import WalletStore


def new_postgres_client(db: Database) -> Client:
    """Return a client whose stores all use ``db``."""
    return Client(
        user_store=UserStore(db),
        portfolio_store=PortfolioStore(db),
        wallet_store=WalletStore(db),
        investment_store=InvestmentStore(db),
        position_store=PositionStore(db),
        holding_store=HoldingStore(db),
        order_store=OrderStore(db),
    )