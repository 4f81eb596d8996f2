# ledger_client/api/__init__.py
from .accounts import Accounts
from .actions import Actions
from .assets import Assets
from .balances import Balances
from .dev_utils import DevUtils
from .feeds import Feeds
from .flavors import Flavors
from .indexes import Indexes
from .keys import Keys
from .stats import Stats
from .tokens import Tokens
from .transactions import Transactions

__all__ = [
    "Accounts",
    "Actions",
    "Assets",
    "Balances",
    "DevUtils",
    "Feeds",
    "Flavors",
    "Indexes",
    "Keys",
    "Stats",
    "Tokens",
    "Transactions",
]
