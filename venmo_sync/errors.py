"""
Error Types

Every failure the sync pipeline can raise. Each exception keeps the context an
operator needs (field name, rule, offending record or transaction) as
attributes so callers can inspect it without parsing the message.

Categories:
- Transport: the HTTP request itself failed.
- Format: the statement bytes could not be decoded.
- Validation: a boundary or transaction record is missing a required field.
- Business rule: a transaction cannot be mapped to Lunch Money entries.
- Submission: Lunch Money rejected a batch.
"""
from typing import Any, Optional


class VenmoSyncError(Exception):
    """Base class for all sync errors."""


class ConfigurationError(VenmoSyncError):
    """A setting the run needs is missing."""


class TransportError(VenmoSyncError):
    """The request failed: no response at all (status None) or a non-200 one."""

    def __init__(self, url: str, status: Optional[int], body: Any = None):
        self.url = url
        self.status = status
        self.body = body
        if status is None:
            super().__init__(f"Request to {url} failed: {body}")
        else:
            super().__init__(f"Request to {url} failed with code {status}: {body!r}")


class StatementFormatError(VenmoSyncError):
    """The statement export could not be decoded."""


class StatementUnavailableError(StatementFormatError):
    """Venmo answered with its error banner instead of a statement."""

    def __init__(self, banner: str):
        self.banner = banner
        super().__init__(f"Venmo transaction history request failed: {banner!r}")


class AmountParseError(VenmoSyncError, ValueError):
    def __init__(self, text: str):
        self.text = text
        super().__init__(f"failed to parse Venmo amount: {text}")


class UnknownTransactionTypeError(VenmoSyncError, ValueError):
    def __init__(self, text: str):
        self.text = text
        super().__init__(f"unexpected Venmo transaction type: {text}")


class UnknownTransactionStatusError(VenmoSyncError, ValueError):
    def __init__(self, text: str):
        self.text = text
        super().__init__(f"unexpected Venmo transaction status: {text}")


class MissingBoundaryError(VenmoSyncError):
    """The first or last record of a statement does not carry its balance."""

    def __init__(self, boundary: str, record: Any = None):
        self.boundary = boundary
        self.record = record
        message = f"expected a {boundary} record"
        if record is not None:
            message += f", got {record!r}"
        super().__init__(message)


class InvalidRecordError(VenmoSyncError):
    """A statement row cannot be lifted into a Transaction."""

    def __init__(self, field: str, record: Any):
        self.field = field
        self.record = record
        super().__init__(f"expected field {field} to be defined on record {record!r}")


class CurrencyMismatchError(VenmoSyncError):
    def __init__(self, expected_symbol: str, expected_iso_code: str, actual: str):
        self.expected_symbol = expected_symbol
        self.expected_iso_code = expected_iso_code
        self.actual = actual
        super().__init__(
            f"expected currency marker {expected_symbol} for {expected_iso_code}, "
            f"got {actual} from Venmo"
        )


class InvalidTransactionError(VenmoSyncError):
    """A field required by a payee rule is missing on the transaction."""

    def __init__(self, field: str, rule: str, transaction: Any):
        self.field = field
        self.rule = rule
        self.transaction = transaction
        super().__init__(
            f"expected field {field} to be defined due to {rule} on record {transaction!r}"
        )


class LunchMoneyAPIError(VenmoSyncError):
    """Lunch Money rejected a request."""

    def __init__(self, status: int, body: Any, batch_index: Optional[int] = None):
        self.status = status
        self.body = body
        self.batch_index = batch_index
        where = f" (batch {batch_index})" if batch_index is not None else ""
        super().__init__(f"Lunch Money request failed{where}, code {status}: {body!r}")
