"""
Statement Parsing

Turns the raw bytes of a Venmo statement export into a `Statement`.

A Venmo export is not a plain CSV file. It starts with two lines of account
header text, then a CSV table whose first row holds the beginning balance,
whose last row holds the ending balance, and whose rows in between are the
transactions. There is no marker on the last row, so the assembler reads one
record ahead to spot it.
"""
import csv
import io
from typing import Iterable, Iterator, List, Optional

from pydantic import ValidationError

from .errors import MissingBoundaryError, StatementFormatError, StatementUnavailableError
from .models import Statement, StatementRecord, Transaction

UNAVAILABLE_BANNER = b"Unable to fetch transaction history"
PREAMBLE_LINES = 2


def _strip_preamble(data: bytes) -> bytes:
    parts = data.split(b"\n", PREAMBLE_LINES)
    if len(parts) <= PREAMBLE_LINES:
        return b""
    return parts[PREAMBLE_LINES]


def tokenize_statement(data: bytes) -> Iterator[StatementRecord]:
    """
    Decode a statement export into records, in source order.

    The banner check, preamble removal and text decoding happen immediately;
    rows are decoded as the returned iterator is consumed. A row whose field
    count differs from the header, or a cell that does not parse, raises
    `StatementFormatError`.
    """
    if data.startswith(UNAVAILABLE_BANNER):
        raise StatementUnavailableError(data.decode("utf-8", errors="replace").strip())

    try:
        text = _strip_preamble(data).decode("utf-8")
    except UnicodeDecodeError as e:
        raise StatementFormatError(f"Venmo statement is not valid UTF-8: {e}") from e

    return _iter_records(csv.reader(io.StringIO(text, newline="")))


def _iter_records(reader) -> Iterator[StatementRecord]:
    header: Optional[List[str]] = None
    row_number = 0
    try:
        for row in reader:
            if not row:
                continue
            if header is None:
                header = [name.strip() for name in row]
                continue

            row_number += 1
            if len(row) != len(header):
                raise StatementFormatError(
                    f"Row {row_number} of Venmo statement has {len(row)} fields, "
                    f"expected {len(header)}: {row!r}"
                )
            try:
                yield StatementRecord.model_validate(dict(zip(header, row)))
            except ValidationError as e:
                raise StatementFormatError(
                    f"Failed to decode row {row_number} of Venmo statement: {e}"
                ) from e
    except csv.Error as e:
        raise StatementFormatError(
            f"Malformed CSV after row {row_number} of Venmo statement: {e}"
        ) from e


def assemble_statement(records: Iterable[StatementRecord]) -> Statement:
    """
    Build a Statement from decoded records.

    The first record must carry the beginning balance and the last one the
    ending balance. Every record in between must be a complete transaction.
    """
    records = iter(records)

    beginning: Optional[StatementRecord] = next(records, None)
    if beginning is None or beginning.beginning_balance is None:
        raise MissingBoundaryError("beginning balance", beginning)

    transactions = []
    record = next(records, None)
    if record is None:
        raise MissingBoundaryError("ending balance")

    while True:
        following = next(records, None)
        if following is None:
            # Last record, so it should be the ending balance record.
            if record.ending_balance is None:
                raise MissingBoundaryError("ending balance", record)
            return Statement(
                beginning_balance=beginning.beginning_balance,
                ending_balance=record.ending_balance,
                transactions=tuple(transactions),
            )

        transactions.append(Transaction.from_record(record))
        record = following


def parse_statement(data: bytes) -> Statement:
    """Tokenize and assemble a raw Venmo statement export."""
    return assemble_statement(tokenize_statement(data))
