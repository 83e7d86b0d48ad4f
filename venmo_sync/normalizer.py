"""
Transaction Normalization

Maps a Venmo `Transaction` onto the Lunch Money transactions that describe it.

Every Venmo transaction becomes one primary Lunch Money transaction. When money
came from a bank or card (the funding source) or went out to one (the
destination), a "shadow" transfer is added so the Venmo asset in Lunch Money
nets out: the money moved into the Venmo balance and back out again.

External ids are derived from the Venmo id (`<id>`, `<id>T`, `<id>TDEPOSIT`)
so repeated syncs over overlapping ranges insert the same ids again.
"""
from typing import Dict, Iterable, List, NamedTuple, Tuple

from .errors import CurrencyMismatchError, InvalidTransactionError
from .lunchmoney import LunchMoneyTransaction, TransactionStatus
from .models import Currency, Statement, Transaction, TransactionType

VENMO_BALANCE = "Venmo balance"


class PayeeRule(NamedTuple):
    field: str
    rule: str
    template: str = "{}"


_STANDARD_TRANSFER = PayeeRule(
    "destination",
    "'Transaction Type' is set to 'Standard Transfer'",
    "TRANSFER TO {}",
)

# (type, amount is positive) -> where the payee comes from.
PAYEE_RULES: Dict[Tuple[TransactionType, bool], PayeeRule] = {
    (TransactionType.STANDARD_TRANSFER, True): _STANDARD_TRANSFER,
    (TransactionType.STANDARD_TRANSFER, False): _STANDARD_TRANSFER,
    (TransactionType.CHARGE, True): PayeeRule(
        "to", "'Transaction Type' is set to 'Charge' and 'Amount' is positive"),
    (TransactionType.CHARGE, False): PayeeRule(
        "from", "'Transaction Type' is set to 'Charge' and 'Amount' is negative"),
    (TransactionType.PAYMENT, True): PayeeRule(
        "from", "'Transaction Type' is set to 'Payment' or 'Merchant Transaction' and 'Amount' is positive"),
    (TransactionType.PAYMENT, False): PayeeRule(
        "to", "'Transaction Type' is set to 'Payment' or 'Merchant Transaction' and 'Amount' is negative"),
    (TransactionType.MERCHANT_TRANSACTION, True): PayeeRule(
        "from", "'Transaction Type' is set to 'Payment' or 'Merchant Transaction' and 'Amount' is positive"),
    (TransactionType.MERCHANT_TRANSACTION, False): PayeeRule(
        "to", "'Transaction Type' is set to 'Payment' or 'Merchant Transaction' and 'Amount' is negative"),
}

_FIELD_ATTRS = {
    "from": "from_",
    "to": "to",
    "destination": "destination",
}


def _is_external(account: str) -> bool:
    """True for a named bank or card, False for an empty value or the Venmo balance."""
    return bool(account) and account != VENMO_BALANCE


def resolve_payee(transaction: Transaction) -> str:
    positive = not transaction.amount_total.is_negative
    rule = PAYEE_RULES[(transaction.type_, positive)]
    value = getattr(transaction, _FIELD_ATTRS[rule.field])
    if value is None:
        raise InvalidTransactionError(rule.field, rule.rule, transaction)
    return rule.template.format(value)


def normalize_transaction(transaction: Transaction, currency: Currency,
                          asset_id: int) -> List[LunchMoneyTransaction]:
    """
    Build the Lunch Money transactions for one Venmo transaction.

    Returns the primary transaction, followed by the funding-source shadow
    transfer and the destination shadow transfer when those apply.

    Raises:
        CurrencyMismatchError: The amount's marker is not the account currency's symbol.
        InvalidTransactionError: The field the payee is taken from is missing.
    """
    amount = transaction.amount_total
    if amount.currency != currency.symbol:
        raise CurrencyMismatchError(currency.symbol, currency.iso_code, amount.currency)

    payee = resolve_payee(transaction)
    currency_code = currency.iso_code.lower()
    note = transaction.note

    entries = [
        LunchMoneyTransaction(
            date=transaction.timestamp,
            payee=payee,
            amount=amount.value,
            currency=currency_code,
            notes=note,
            asset_id=asset_id,
            external_id=str(transaction.id),
            status=TransactionStatus.UNCLEARED,
        )
    ]

    funding_source = transaction.funding_source
    if funding_source is not None and _is_external(funding_source):
        entries.append(LunchMoneyTransaction(
            date=transaction.timestamp,
            payee=f"TRANSFER FROM {funding_source}",
            amount=-amount.value,
            currency=currency_code,
            notes=f"To fund Venmo transaction with note: '{note}'" if note is not None else None,
            asset_id=asset_id,
            external_id=f"{transaction.id}T",
            status=TransactionStatus.UNCLEARED,
        ))

    destination = transaction.destination
    if (destination is not None and _is_external(destination)
            and transaction.type_ != TransactionType.STANDARD_TRANSFER):
        # Standard transfers already use the destination as their payee.
        entries.append(LunchMoneyTransaction(
            date=transaction.timestamp,
            payee=f"TRANSFER TO {destination}",
            amount=-amount.value,
            currency=currency_code,
            notes=f"From Venmo transaction with note: '{note}'" if note is not None else None,
            asset_id=asset_id,
            external_id=f"{transaction.id}TDEPOSIT",
            status=TransactionStatus.UNCLEARED,
        ))

    return entries


def normalize_transactions(transactions: Iterable[Transaction], currency: Currency,
                           asset_id: int) -> List[LunchMoneyTransaction]:
    """Normalize transactions in order, stopping at the first one that fails."""
    entries: List[LunchMoneyTransaction] = []
    for transaction in transactions:
        entries.extend(normalize_transaction(transaction, currency, asset_id))
    return entries


def normalize_statement(statement: Statement, currency: Currency,
                        asset_id: int) -> List[LunchMoneyTransaction]:
    return normalize_transactions(statement.transactions, currency, asset_id)
