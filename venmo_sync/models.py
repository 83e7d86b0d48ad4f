"""
Data Models for Venmo Sync

This module defines the structures a Venmo statement is decoded into. Rows of
the CSV export are first read into loosely-typed `StatementRecord`s (every
field optional, because the same row shape carries balances and transactions),
then lifted into immutable `Transaction` and `Statement` objects.

Key Classes:
- TransactionType / TransactionStatus: Enums for the Venmo Type and Status columns.
- Amount: A currency marker plus a signed value, parsed from strings like "- $12.34".
- Currency: The account currency (ISO code and the marker Venmo prints).
- StatementRecord: One raw CSV row.
- Transaction: A validated transaction row.
- Statement: Beginning balance, ending balance and the transactions between them.
"""
import math
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import (
    AmountParseError,
    InvalidRecordError,
    UnknownTransactionStatusError,
    UnknownTransactionTypeError,
)

AMOUNT_RE = re.compile(r"^([-+]?) ?([^0-9])([0-9.]+)$")


class TransactionType(str, Enum):
    CHARGE = "Charge"
    PAYMENT = "Payment"
    STANDARD_TRANSFER = "Standard Transfer"
    MERCHANT_TRANSACTION = "Merchant Transaction"

    @classmethod
    def parse(cls, text: str) -> "TransactionType":
        try:
            return cls(text)
        except ValueError:
            raise UnknownTransactionTypeError(text) from None


class TransactionStatus(str, Enum):
    COMPLETE = "Complete"
    ISSUED = "Issued"

    @classmethod
    def parse(cls, text: str) -> "TransactionStatus":
        try:
            return cls(text)
        except ValueError:
            raise UnknownTransactionStatusError(text) from None


class Currency(BaseModel):
    """An account currency: the ISO code Lunch Money wants and the marker Venmo prints."""
    model_config = ConfigDict(frozen=True)

    iso_code: str = "USD"
    symbol: str = "$"


class Amount(BaseModel):
    """
    A signed amount as printed in a Venmo statement.

    `currency` is the marker glyph exactly as it appears (e.g. "$"). It is not
    checked against any currency list here; the normalizer compares it with the
    configured account currency.
    """
    model_config = ConfigDict(frozen=True)

    currency: str
    value: float

    @classmethod
    def parse(cls, text: str) -> "Amount":
        """Parse strings such as "+ $5.00", "-$12.34" or "$0.00"."""
        match = AMOUNT_RE.fullmatch(text)
        if not match:
            raise AmountParseError(text)
        sign, marker, digits = match.groups()
        try:
            value = float(f"{sign}{digits}")
        except ValueError:
            raise AmountParseError(text) from None
        return cls(currency=marker, value=value)

    @property
    def is_negative(self) -> bool:
        # -0.0 counts as negative
        return math.copysign(1.0, self.value) < 0

    def __str__(self) -> str:
        sign = "-" if self.is_negative else ""
        return f"{sign}{self.currency}{abs(self.value):.4f}"


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class StatementRecord(BaseModel):
    """
    One row of a Venmo statement CSV.

    Field aliases are the CSV column headers. Columns we do not know are
    ignored; blank cells become None. Cells are parsed when the record is
    built, so a malformed amount or an unknown type fails immediately.
    """
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: Optional[int] = Field(default=None, alias="ID", ge=0)
    timestamp: Optional[datetime] = Field(default=None, alias="Datetime")
    type_: Optional[TransactionType] = Field(default=None, alias="Type")
    status: Optional[TransactionStatus] = Field(default=None, alias="Status")
    note: Optional[str] = Field(default=None, alias="Note")
    from_: Optional[str] = Field(default=None, alias="From")
    to: Optional[str] = Field(default=None, alias="To")
    amount_total: Optional[Amount] = Field(default=None, alias="Amount (total)")
    amount_tip: Optional[Amount] = Field(default=None, alias="Amount (tip)")
    amount_fee: Optional[Amount] = Field(default=None, alias="Amount (fee)")
    funding_source: Optional[str] = Field(default=None, alias="Funding Source")
    destination: Optional[str] = Field(default=None, alias="Destination")
    beginning_balance: Optional[Amount] = Field(default=None, alias="Beginning Balance")
    ending_balance: Optional[Amount] = Field(default=None, alias="Ending Balance")
    statement_period_fees: Optional[Amount] = Field(default=None, alias="Statement Period Venmo Fees")
    terminal_location: Optional[str] = Field(default=None, alias="Terminal Location")
    year_to_date_fees: Optional[Amount] = Field(default=None, alias="Year to Date Venmo Fees")
    disclaimer: Optional[str] = Field(default=None, alias="Disclaimer")

    @field_validator("id", "timestamp", "note", "from_", "to", "funding_source",
                     "destination", "terminal_location", "disclaimer", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        return None if _blank(v) else v

    @field_validator("amount_total", "amount_tip", "amount_fee", "beginning_balance",
                     "ending_balance", "statement_period_fees", "year_to_date_fees",
                     mode="before")
    @classmethod
    def _parse_amount(cls, v: Any) -> Any:
        if _blank(v):
            return None
        if isinstance(v, str):
            return Amount.parse(v)
        return v

    @field_validator("type_", mode="before")
    @classmethod
    def _parse_type(cls, v: Any) -> Any:
        if _blank(v):
            return None
        if isinstance(v, str):
            return TransactionType.parse(v)
        return v

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, v: Any) -> Any:
        if _blank(v):
            return None
        if isinstance(v, str):
            return TransactionStatus.parse(v)
        return v


class Transaction(BaseModel):
    """
    A validated Venmo transaction.

    Only built through `from_record`, which insists on the fields every
    transaction row carries (ID, Datetime, Type, Status, Amount (total)).
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=0)
    timestamp: datetime
    type_: TransactionType
    status: TransactionStatus
    note: Optional[str] = None
    from_: Optional[str] = None
    to: Optional[str] = None
    amount_total: Amount
    funding_source: Optional[str] = None
    destination: Optional[str] = None

    @classmethod
    def from_record(cls, record: StatementRecord) -> "Transaction":
        required = [
            ("id", record.id),
            ("datetime", record.timestamp),
            ("type", record.type_),
            ("status", record.status),
            ("amount_total", record.amount_total),
        ]
        for field, value in required:
            if value is None:
                raise InvalidRecordError(field, record)

        # Venmo timestamps carry no zone; they are UTC.
        timestamp = record.timestamp
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        else:
            timestamp = timestamp.astimezone(timezone.utc)

        return cls(
            id=record.id,
            timestamp=timestamp,
            type_=record.type_,
            status=record.status,
            note=record.note,
            from_=record.from_,
            to=record.to,
            amount_total=record.amount_total,
            funding_source=record.funding_source,
            destination=record.destination,
        )


class Statement(BaseModel):
    model_config = ConfigDict(frozen=True)

    beginning_balance: Amount
    ending_balance: Amount
    transactions: Tuple[Transaction, ...] = ()
