"""Binding of repaired OFX markup to a typed statement model."""

from .binder import bind, bind_element, count_transactions
from .dates import parse_date
from .model import (
    Balance,
    BankResponseMessageSet,
    Document,
    SignOnResponse,
    StatementResponseSet,
    StatementTransactionResponseSet,
    Transaction,
    TransactionType,
)
from .preprocess import FIXUPS, preprocess

__all__ = [
    "FIXUPS",
    "Balance",
    "BankResponseMessageSet",
    "Document",
    "SignOnResponse",
    "StatementResponseSet",
    "StatementTransactionResponseSet",
    "Transaction",
    "TransactionType",
    "bind",
    "bind_element",
    "count_transactions",
    "parse_date",
    "preprocess",
]
