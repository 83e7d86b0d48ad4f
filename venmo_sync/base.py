from abc import ABC, abstractmethod
from datetime import date
from typing import List, Dict, Any, Optional
from playwright.sync_api import APIRequestContext, Playwright, sync_playwright
from .config import Config, settings
from .errors import ConfigurationError
from .lunchmoney import LunchMoneyClient, LunchMoneyTransaction
from .models import Currency, Statement
from .normalizer import normalize_statement
from .statement import parse_statement

class StatementDownloader(ABC):
    """
    Abstract base class for statement downloaders.

    Subclasses only know how to fetch the raw statement export for a date
    range. This class owns the HTTP context (a Playwright `APIRequestContext`)
    and the high-level flow: fetch -> parse -> normalize -> submit (or save to
    CSV on a dry run).
    """

    def __init__(self, config: Config = settings):
        self.config = config
        self.playwright: Optional[Playwright] = None
        self.request: Optional[APIRequestContext] = None

    def run(self, start: date, end: date, dry_run: bool = False,
            playwright_instance: Optional[Playwright] = None) -> List[int]:
        """
        Main execution method.

        1.  Opens the HTTP request context.
        2.  Downloads and parses the statement.
        3.  Normalizes the transactions into Lunch Money transactions.
        4.  Inserts them into Lunch Money, or saves them to CSV on a dry run.
        5.  Cleans up resources.

        Returns the ids Lunch Money assigned (empty on a dry run).
        """
        asset_id = self.config.lunchmoney.asset_id
        if asset_id is None:
            raise ConfigurationError(
                "lunchmoney.asset_id is not set. Run with --list-assets to find it."
            )

        if playwright_instance is None:
            with sync_playwright() as p:
                return self.run(start, end, dry_run=dry_run, playwright_instance=p)

        self.playwright = playwright_instance
        self.setup_request_context()
        try:
            statement = self.download_statement(start, end)
            entries = normalize_statement(statement, self.get_currency(), asset_id)
            print(f"[{self.get_source_name().upper()}] Normalized into {len(entries)} Lunch Money transactions.")

            if dry_run:
                self.save_entries(entries)
                return []
            return self.submit_entries(entries)
        finally:
            self.teardown()

    def setup_request_context(self):
        """Create the HTTP request context used for every call in this run."""
        self.request = self.playwright.request.new_context(timeout=self.config.timeout)

    def download_statement(self, start: date, end: date) -> Statement:
        """Fetch and parse the statement for the given range."""
        name = self.get_source_name().upper()
        print(f"[{name}] Fetching statement from {start} to {end}...")
        data = self.fetch_statement(start, end)
        statement = parse_statement(data)
        print(f"[{name}] Beginning balance: {statement.beginning_balance}, "
              f"ending balance: {statement.ending_balance}")
        print(f"[{name}] Found {len(statement.transactions)} transactions.")
        return statement

    @abstractmethod
    def fetch_statement(self, start: date, end: date) -> bytes:
        """
        Download the raw statement export.

        Returns:
            The bytes of the export, exactly as served.
        """
        pass

    @abstractmethod
    def get_currency(self) -> Currency:
        """Return the currency the account is held in."""
        pass

    def submit_entries(self, entries: List[LunchMoneyTransaction]) -> List[int]:
        """Insert entries into Lunch Money in batches."""
        lm = self.config.lunchmoney
        client = LunchMoneyClient(
            self.request,
            lm.api_token,
            apply_rules=lm.apply_rules,
            check_for_recurring=lm.check_for_recurring,
        )
        return client.submit_transactions(entries, batch_size=lm.batch_size)

    def save_entries(self, entries: List[LunchMoneyTransaction]):
        """Save entries to CSV, one file per month."""
        import pandas as pd
        from .utils import CSVWriter
        if not entries:
            print(f"[{self.get_source_name().upper()}] Nothing to save.")
            return

        writer = CSVWriter(self.config.transactions_path / self.get_source_name())

        df = pd.DataFrame([entry.to_payload() for entry in entries])
        for month, group in df.groupby(df['date'].str[:7], sort=True):  # YYYY-MM
            rows: List[Dict[str, Any]] = group.to_dict(orient='records')
            writer.write(rows, f"{month}.csv")

    def teardown(self):
        """Dispose of the request context."""
        if self.request:
            self.request.dispose()
            self.request = None

    @abstractmethod
    def get_source_name(self) -> str:
        """Return unique source identifier for directory naming."""
        pass
