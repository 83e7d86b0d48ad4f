from datetime import date

import pandas as pd
import pytest
from playwright.sync_api import Error as PlaywrightError

from conftest import (
    FakePlaywright,
    FakeRequestContext,
    FakeResponse,
    payment_row,
    statement_csv,
)
from venmo_sync.errors import (
    ConfigurationError,
    CurrencyMismatchError,
    StatementUnavailableError,
    TransportError,
    VenmoSyncError,
)
from venmo_sync.venmo import VenmoDownloader

START = date(2024, 3, 1)
END = date(2024, 3, 31)


def run(config, responses, dry_run=False):
    request = FakeRequestContext(responses)
    downloader = VenmoDownloader(config)
    ids = downloader.run(START, END, dry_run=dry_run, playwright_instance=FakePlaywright(request))
    return ids, request


def test_fetch_statement_request(config):
    request = FakeRequestContext([FakeResponse(body=statement_csv([]))])
    downloader = VenmoDownloader(config)
    downloader.request = request

    assert downloader.fetch_statement(START, END) == statement_csv([])
    (call,) = request.calls
    assert call["url"] == (
        "https://venmo.com/transaction-history/statement"
        "?startDate=03-01-2024&endDate=03-31-2024&profileId=1234567&accountType=personal"
    )
    assert call["headers"] == {"Cookie": "api_access_token=venmo-token"}


def test_fetch_statement_non_200(config):
    downloader = VenmoDownloader(config)
    downloader.request = FakeRequestContext([FakeResponse(status=401, body="denied")])
    with pytest.raises(TransportError) as excinfo:
        downloader.fetch_statement(START, END)
    assert excinfo.value.status == 401
    assert excinfo.value.body == "denied"


def test_fetch_statement_banner(config):
    downloader = VenmoDownloader(config)
    downloader.request = FakeRequestContext(
        [FakeResponse(body=b"Unable to fetch transaction history. Try again later.")]
    )
    with pytest.raises(StatementUnavailableError):
        downloader.fetch_statement(START, END)


def test_fetch_requires_credentials(config):
    config.venmo.api_token = ""
    downloader = VenmoDownloader(config)
    downloader.request = FakeRequestContext()
    with pytest.raises(ConfigurationError):
        downloader.fetch_statement(START, END)


def test_run_submits_entries(config):
    data = statement_csv(
        [
            payment_row(ID="1"),
            payment_row(ID="2", **{"Funding Source": "Chase ****1234"}),
        ]
    )
    ids, request = run(
        config,
        [FakeResponse(body=data), FakeResponse(json_data={"ids": [11, 12, 13]})],
    )

    assert ids == [11, 12, 13]
    post = request.calls[1]
    assert post["headers"]["Authorization"] == "Bearer lm-token"
    sent = post["data"]["transactions"]
    assert [t["external_id"] for t in sent] == ["1", "2", "2T"]
    assert sent[0]["payee"] == "John Smith"
    assert sent[0]["amount"] == "-12.5000"
    assert sent[2]["payee"] == "TRANSFER FROM Chase ****1234"
    assert sent[2]["amount"] == "12.5000"
    assert request.disposed


def test_run_uses_configured_timeout(config):
    config.timeout = 1234
    request = FakeRequestContext([FakeResponse(body=statement_csv([]))])
    playwright = FakePlaywright(request)
    VenmoDownloader(config).run(START, END, dry_run=True, playwright_instance=playwright)
    assert playwright.request.options == {"timeout": 1234}


def test_run_stops_on_business_rule_error(config):
    data = statement_csv([payment_row(**{"Amount (total)": "- £12.50"})])
    with pytest.raises(CurrencyMismatchError):
        run(config, [FakeResponse(body=data)])


def test_run_disposes_context_on_error(config):
    request = FakeRequestContext([FakeResponse(status=500, body="oops")])
    with pytest.raises(TransportError):
        VenmoDownloader(config).run(START, END, playwright_instance=FakePlaywright(request))
    assert request.disposed


def test_run_requires_asset_id(config):
    config.lunchmoney.asset_id = None
    request = FakeRequestContext()
    with pytest.raises(ConfigurationError):
        VenmoDownloader(config).run(START, END, playwright_instance=FakePlaywright(request))
    assert request.calls == []


def test_dry_run_writes_monthly_csv(config):
    data = statement_csv(
        [
            payment_row(ID="1", Datetime="2024-02-28T09:00:00"),
            payment_row(ID="2", Datetime="2024-03-01T09:00:00",
                        **{"Funding Source": "Chase ****1234"}),
        ]
    )
    ids, request = run(config, [FakeResponse(body=data)], dry_run=True)

    assert ids == []
    assert len(request.calls) == 1  # no Lunch Money request

    out_dir = config.transactions_path / "venmo"
    assert sorted(p.name for p in out_dir.glob("*.csv")) == ["2024-02.csv", "2024-03.csv"]

    march = pd.read_csv(out_dir / "2024-03.csv", dtype=str)
    assert list(march.columns[:8]) == [
        "external_id", "date", "payee", "amount", "currency", "notes", "asset_id", "status",
    ]
    assert list(march["external_id"]) == ["2", "2T"]
    assert list(march["amount"]) == ["-12.5000", "12.5000"]


def test_network_failure_is_a_transport_error(config):
    request = FakeRequestContext([PlaywrightError("net::ERR_CONNECTION_RESET")])
    with pytest.raises(TransportError) as excinfo:
        VenmoDownloader(config).run(START, END, playwright_instance=FakePlaywright(request))

    assert excinfo.value.status is None
    assert "ERR_CONNECTION_RESET" in str(excinfo.value)
    assert isinstance(excinfo.value, VenmoSyncError)
    assert request.disposed
