"""
Lunch Money API

Models for the Lunch Money transaction and asset objects
(https://lunchmoney.dev/#transaction-object, https://lunchmoney.dev/#assets-object)
and a small client for the two endpoints the sync needs: listing assets and
inserting transactions in batches.

Requests go through a Playwright `APIRequestContext`, the same HTTP client the
Venmo downloader uses.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from playwright.sync_api import APIRequestContext, Error as PlaywrightError
from pydantic import BaseModel, ConfigDict, field_serializer

from .errors import LunchMoneyAPIError, TransportError
from .utils import chunked

API_BASE_URL = "https://dev.lunchmoney.app/v1"
DEFAULT_BATCH_SIZE = 50


class TransactionStatus(str, Enum):
    CLEARED = "cleared"
    UNCLEARED = "uncleared"
    RECURRING = "recurring"
    RECURRING_SUGGESTED = "recurring_suggested"


class LunchMoneyTransaction(BaseModel):
    """A transaction ready to be inserted into Lunch Money."""
    model_config = ConfigDict(frozen=True)

    date: datetime
    payee: Optional[str] = None
    amount: float
    currency: Optional[str] = None
    notes: Optional[str] = None
    asset_id: Optional[int] = None
    external_id: Optional[str] = None
    status: TransactionStatus = TransactionStatus.UNCLEARED

    @field_serializer("date")
    def _serialize_date(self, value: datetime) -> str:
        return value.strftime("%Y-%m-%d")

    @field_serializer("amount")
    def _serialize_amount(self, value: float) -> str:
        # Lunch Money accepts up to four decimal places.
        return f"{value:.4f}"

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class InsertTransactionsRequest(BaseModel):
    transactions: List[LunchMoneyTransaction]
    apply_rules: Optional[bool] = None
    skip_duplicates: Optional[bool] = None
    check_for_recurring: Optional[bool] = None
    debit_as_negative: Optional[bool] = None
    skip_balance_update: Optional[bool] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class Asset(BaseModel):
    """A manually-managed Lunch Money account."""
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    display_name: Optional[str] = None
    type_name: Optional[str] = None
    subtype_name: Optional[str] = None
    balance: Optional[str] = None
    currency: Optional[str] = None
    institution_name: Optional[str] = None


class LunchMoneyClient:
    """
    Thin client over the Lunch Money REST API.

    Every call is a single blocking request; a non-200 response raises
    `LunchMoneyAPIError` with the status and body attached. A request that
    gets no response at all raises `TransportError`.
    """

    def __init__(self, request: APIRequestContext, api_token: str,
                 apply_rules: bool = True, check_for_recurring: bool = True,
                 base_url: str = API_BASE_URL):
        self.request = request
        self.api_token = api_token
        self.apply_rules = apply_rules
        self.check_for_recurring = check_for_recurring
        self.base_url = base_url

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json; charset=utf-8",
        }

    def _read_json(self, response, batch_index: Optional[int] = None) -> Dict[str, Any]:
        if response.status != 200:
            raise LunchMoneyAPIError(response.status, response.text(), batch_index)
        try:
            data = response.json()
        except ValueError:
            raise LunchMoneyAPIError(response.status, response.text(), batch_index) from None
        # Lunch Money reports some failures with a 200 and an "error" key.
        if isinstance(data, dict) and data.get("error"):
            raise LunchMoneyAPIError(response.status, data, batch_index)
        return data

    def get_all_assets(self) -> List[Asset]:
        url = f"{self.base_url}/assets"
        try:
            response = self.request.get(url, headers=self._headers())
        except PlaywrightError as e:
            raise TransportError(url, None, str(e)) from e
        data = self._read_json(response)
        return [Asset.model_validate(a) for a in data.get("assets", [])]

    def insert_transactions(self, transactions: Sequence[LunchMoneyTransaction],
                            batch_index: Optional[int] = None) -> List[int]:
        """Insert one batch of transactions and return the ids Lunch Money assigned."""
        body = InsertTransactionsRequest(
            transactions=list(transactions),
            apply_rules=self.apply_rules,
            check_for_recurring=self.check_for_recurring,
            debit_as_negative=True,
        )
        url = f"{self.base_url}/transactions"
        try:
            response = self.request.post(url, headers=self._headers(), data=body.to_payload())
        except PlaywrightError as e:
            raise TransportError(url, None, str(e)) from e
        data = self._read_json(response, batch_index)
        return list(data.get("ids", []))

    def submit_transactions(self, transactions: Sequence[LunchMoneyTransaction],
                            batch_size: int = DEFAULT_BATCH_SIZE) -> List[int]:
        """
        Insert transactions in order, `batch_size` at a time.

        Batches are sent one after another. The first failing batch raises and
        the remaining ones are not sent; batches already accepted stay in
        Lunch Money.
        """
        ids: List[int] = []
        for index, batch in enumerate(chunked(transactions, batch_size)):
            print(f"[LUNCHMONEY] Inserting batch {index + 1} ({len(batch)} transactions)...")
            ids.extend(self.insert_transactions(batch, batch_index=index))
        print(f"[LUNCHMONEY] Inserted {len(ids)} transactions.")
        return ids
