# ledger_client/__init__.py
"""
ledger-client: Python SDK для hosted ledger API.
"""

from .builder import Action, TransactionBuilder
from .client import AsyncLedgerClient, LedgerClient
from .errors import (
    ActionError,
    ApiError,
    AuthError,
    BadRequestError,
    ConnectivityError,
    InvalidParametersError,
    JsonError,
    LedgerError,
    NoRequestIdError,
    NotFoundError,
    ProtocolError,
    ServerError,
)
from .page import Page, PageParams
from .query import AsyncQuery, Query
from .session import LedgerSession
from .settings import ClientSettings, get_settings
from .telemetry.logging import setup_logging

__version__ = "1.0.0"

__all__ = [
    "LedgerClient",
    "AsyncLedgerClient",
    "ClientSettings",
    "get_settings",
    "setup_logging",
    "TransactionBuilder",
    "Action",
    "Page",
    "PageParams",
    "Query",
    "AsyncQuery",
    "LedgerSession",
    "LedgerError",
    "ConnectivityError",
    "NoRequestIdError",
    "JsonError",
    "ProtocolError",
    "InvalidParametersError",
    "ApiError",
    "ActionError",
    "BadRequestError",
    "AuthError",
    "NotFoundError",
    "ServerError",
]
