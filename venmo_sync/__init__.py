"""
venmo_sync package.

This package contains the logic for syncing a Venmo account into Lunch Money:
downloading the Venmo statement export, parsing it into typed transactions,
mapping each transaction onto Lunch Money transactions (with shadow transfers
for bank-funded payments) and inserting them through the Lunch Money API.
"""
from .base import StatementDownloader
from .models import Amount, Currency, Statement, StatementRecord, Transaction, TransactionStatus, TransactionType
from .config import settings, Config
from .lunchmoney import Asset, LunchMoneyClient, LunchMoneyTransaction
from .normalizer import normalize_statement, normalize_transaction
from .statement import assemble_statement, parse_statement, tokenize_statement
from .venmo import VenmoDownloader

__all__ = [
    "StatementDownloader",
    "Amount",
    "Currency",
    "Statement",
    "StatementRecord",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "settings",
    "Config",
    "Asset",
    "LunchMoneyClient",
    "LunchMoneyTransaction",
    "normalize_statement",
    "normalize_transaction",
    "assemble_statement",
    "parse_statement",
    "tokenize_statement",
    "VenmoDownloader",
]
