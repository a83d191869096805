"""Typed statement model for repaired OFX documents.

Each bound field declares the tag path it is read from (relative to the
element the dataclass is bound to) in its ``metadata["path"]``. Fields
without a path are not read from the markup.
"""

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from .dates import parse_date


def tag(path: str, default: Any = "", **kwargs: Any) -> Any:
    """Declare a field bound to the element at ``path``."""
    if "default_factory" in kwargs:
        return field(metadata={"path": path}, **kwargs)
    return field(default=default, metadata={"path": path}, **kwargs)


class TransactionType(Enum):
    """Transaction types of OFX 2.2, section 11.4.4.3."""

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"
    INTEREST = "INT"
    DIVIDEND = "DIV"
    FEE = "FEE"
    SERVICE_CHARGE = "SRVCHG"
    DEPOSIT = "DEP"
    ATM = "ATM"
    POS = "POS"
    TRANSFER = "XFER"
    CHECK = "CHECK"
    PAYMENT = "PAYMENT"
    CASH = "CASH"
    DIRECT_DEPOSIT = "DIRECTDEP"
    DIRECT_DEBIT = "DIRECTDEBIT"
    REPEAT_PAYMENT = "REPEATPMT"
    HOLD = "HOLD"
    OTHER = "OTHER"


@dataclass
class Transaction:
    """A single statement transaction (``STMTTRN``)."""

    type: Optional[TransactionType] = tag("TRNTYPE", None)
    type_code: str = tag("TRNTYPE")
    posted: str = tag("DTPOSTED")
    amount: Decimal = tag("TRNAMT", default_factory=Decimal)
    fit_id: str = tag("FITID")
    date: str = tag("DTUSER")
    name: str = tag("NAME")
    payee: str = tag("PAYEE")
    memo: str = tag("MEMO")

    def posted_at(self, default_tz: Optional[tzinfo] = None) -> datetime:
        """Posting date as a timezone-aware datetime."""
        return parse_date(self.posted, default_tz)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value if self.type else None,
            "type_code": self.type_code,
            "posted": self.posted,
            "amount": str(self.amount),
            "fit_id": self.fit_id,
            "date": self.date,
            "name": self.name,
            "payee": self.payee,
            "memo": self.memo,
        }


@dataclass
class SignOnResponse:
    """Sign-on response (``SIGNONMSGSRSV1/SONRS``)."""

    code: int = tag("STATUS/CODE", 0)
    severity: str = tag("STATUS/SEVERITY")
    date: str = tag("DTSERVER")
    language: str = tag("LANGUAGE")
    organization: str = tag("FI/ORG")
    organization_id: str = tag("FI/FID")
    intuit_id: str = tag("INTU.BID")


@dataclass
class Balance:
    amount: Decimal = tag("BALAMT", default_factory=Decimal)
    date: str = tag("DTASOF")


@dataclass
class StatementResponseSet:
    """Bank statement (``STMTRS``)."""

    currency: str = tag("CURDEF")
    bank_id: str = tag("BANKACCTFROM/BANKID")
    account_id: str = tag("BANKACCTFROM/ACCTID")
    account_type: str = tag("BANKACCTFROM/ACCTTYPE")
    start_date: str = tag("BANKTRANLIST/DTSTART")
    end_date: str = tag("BANKTRANLIST/DTEND")
    transactions: List[Transaction] = tag(
        "BANKTRANLIST/STMTTRN", default_factory=list
    )
    ledger_balance: Balance = tag("LEDGERBAL", default_factory=Balance)
    available_balance: Balance = tag("AVAILBAL", default_factory=Balance)


@dataclass
class StatementTransactionResponseSet:
    """Statement transaction response (``STMTTRNRS``)."""

    id: str = tag("TRNUID")
    code: int = tag("STATUS/CODE", 0)
    severity: str = tag("STATUS/SEVERITY")
    statement: StatementResponseSet = tag(
        "STMTRS", default_factory=StatementResponseSet
    )


@dataclass
class BankResponseMessageSet:
    response: StatementTransactionResponseSet = tag(
        "STMTTRNRS", default_factory=StatementTransactionResponseSet
    )


@dataclass
class Document:
    """A parsed OFX statement download."""

    sign_on: SignOnResponse = tag(
        "SIGNONMSGSRSV1/SONRS", default_factory=SignOnResponse
    )
    bank_responses: List[BankResponseMessageSet] = tag(
        "BANKMSGSRSV1", default_factory=list
    )
    transaction_count: int = 0

    ROOT_TAG = "OFX"

    def get_transactions(self) -> List[Transaction]:
        """All transactions across every statement, in document order."""
        transactions: List[Transaction] = []
        for message_set in self.bank_responses:
            transactions.extend(message_set.response.statement.transactions)
        return transactions

    def to_dict(self) -> Dict[str, Any]:
        """Summarize the document for JSON output."""
        statements = []
        for message_set in self.bank_responses:
            statement = message_set.response.statement
            statements.append({
                "transaction_id": message_set.response.id,
                "currency": statement.currency,
                "bank_id": statement.bank_id,
                "account_id": statement.account_id,
                "account_type": statement.account_type,
                "start_date": statement.start_date,
                "end_date": statement.end_date,
                "ledger_balance": str(statement.ledger_balance.amount),
                "available_balance": str(statement.available_balance.amount),
                "transactions": [txn.to_dict() for txn in statement.transactions],
            })
        return {
            "sign_on": {
                "code": self.sign_on.code,
                "severity": self.sign_on.severity,
                "date": self.sign_on.date,
                "language": self.sign_on.language,
                "organization": self.sign_on.organization,
                "organization_id": self.sign_on.organization_id,
            },
            "statements": statements,
            "transaction_count": self.transaction_count,
        }
