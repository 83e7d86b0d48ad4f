"""Shared fixtures: statement builders and a fake Playwright request context.

Tests never touch the network. Downloaders and clients receive a
``FakeRequestContext`` that records every call and replays canned responses.
"""

from __future__ import annotations

import csv
import io
import json
from typing import Any

import pytest

from venmo_sync.config import Config

COLUMNS = [
    "",
    "ID",
    "Datetime",
    "Type",
    "Status",
    "Note",
    "From",
    "To",
    "Amount (total)",
    "Amount (tip)",
    "Amount (fee)",
    "Funding Source",
    "Destination",
    "Beginning Balance",
    "Ending Balance",
    "Statement Period Venmo Fees",
    "Terminal Location",
    "Year to Date Venmo Fees",
    "Disclaimer",
]

PREAMBLE = "Account Statement - (@Jane-Doe) ,,,,,,,,,,,,,,,,,,\nAccount Activity,,,,,,,,,,,,,,,,,,\n"


def statement_csv(
    transactions: list[dict[str, str]],
    beginning: str | None = "$10.00",
    ending: str | None = "$20.00",
) -> bytes:
    """Render a Venmo statement export: preamble, header, boundary rows."""
    out = io.StringIO()
    out.write(PREAMBLE)
    writer = csv.DictWriter(out, fieldnames=COLUMNS, restval="", lineterminator="\n")
    writer.writeheader()
    writer.writerow({"Beginning Balance": beginning or ""})
    for row in transactions:
        writer.writerow(row)
    writer.writerow(
        {
            "Ending Balance": ending or "",
            "Statement Period Venmo Fees": "$0.00",
            "Year to Date Venmo Fees": "$0.00",
            "Disclaimer": "In case of errors or questions about your electronic transfers...",
        }
    )
    return out.getvalue().encode("utf-8")


def payment_row(**overrides: str) -> dict[str, str]:
    row = {
        "ID": "3456789012345678901",
        "Datetime": "2024-03-02T18:25:43",
        "Type": "Payment",
        "Status": "Complete",
        "Note": "Pizza",
        "From": "Jane Doe",
        "To": "John Smith",
        "Amount (total)": "- $12.50",
        "Amount (fee)": "",
        "Funding Source": "Venmo balance",
        "Destination": "",
    }
    row.update(overrides)
    return row


class FakeResponse:
    def __init__(self, status: int = 200, body: bytes | str = b"", json_data: Any = None):
        if json_data is not None:
            body = json.dumps(json_data)
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.status = status
        self.ok = 200 <= status < 300
        self._body = body

    def body(self) -> bytes:
        return self._body

    def text(self) -> str:
        return self._body.decode("utf-8")

    def json(self) -> Any:
        return json.loads(self._body)


class FakeRequestContext:
    """Stand-in for ``playwright.sync_api.APIRequestContext``."""

    def __init__(self, responses: list[FakeResponse | Exception] | None = None):
        self.responses = list(responses or [])
        self.calls: list[dict[str, Any]] = []
        self.disposed = False

    def _respond(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"unexpected {method} {url}")
        response = self.responses.pop(0)
        # Queued exceptions stand in for network failures.
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._respond("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._respond("POST", url, **kwargs)

    def dispose(self) -> None:
        self.disposed = True


class FakeAPIRequest:
    def __init__(self, context: FakeRequestContext):
        self.context = context
        self.options: dict[str, Any] = {}

    def new_context(self, **kwargs: Any) -> FakeRequestContext:
        self.options = kwargs
        return self.context


class FakePlaywright:
    """Exposes ``.request.new_context()`` like the object ``sync_playwright()`` yields."""

    def __init__(self, context: FakeRequestContext):
        self.request = FakeAPIRequest(context)


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(
        transactions_path=tmp_path / "transactions",
        venmo={"profile_id": 1234567, "api_token": "venmo-token"},
        lunchmoney={"api_token": "lm-token", "asset_id": 42},
    )
