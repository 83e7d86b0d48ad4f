from datetime import date
from playwright.sync_api import Error as PlaywrightError
from .base import StatementDownloader
from .errors import ConfigurationError, StatementUnavailableError, TransportError
from .models import Currency
from .statement import UNAVAILABLE_BANNER

STATEMENT_URL = "https://venmo.com/transaction-history/statement"

class VenmoDownloader(StatementDownloader):
    """
    Venmo Statement Downloader.

    Downloads the CSV statement that the Venmo website offers under
    "Statements", using the unofficial endpoint the site itself calls.

    Authentication is the `api_access_token` cookie of a logged-in web
    session, read from the configuration (`venmo.api_token`) together with the
    numeric profile id of the account.
    """

    def get_source_name(self) -> str:
        return "venmo"

    def get_currency(self) -> Currency:
        return self.config.venmo.currency

    def statement_url(self, start: date, end: date) -> str:
        venmo = self.config.venmo
        return (
            f"{STATEMENT_URL}?startDate={start.strftime('%m-%d-%Y')}"
            f"&endDate={end.strftime('%m-%d-%Y')}"
            f"&profileId={venmo.profile_id}&accountType=personal"
        )

    def fetch_statement(self, start: date, end: date) -> bytes:
        """Download the statement CSV for [start, end]."""
        venmo = self.config.venmo
        if not venmo.api_token or not venmo.profile_id:
            raise ConfigurationError("venmo.api_token and venmo.profile_id must be set.")

        url = self.statement_url(start, end)
        try:
            response = self.request.get(
                url,
                headers={"Cookie": f"api_access_token={venmo.api_token}"},
            )
        except PlaywrightError as e:
            raise TransportError(url, None, str(e)) from e
        if response.status != 200:
            raise TransportError(url, response.status, response.text())

        data = response.body()
        if data.startswith(UNAVAILABLE_BANNER):
            raise StatementUnavailableError(data.decode("utf-8", errors="replace").strip())

        print(f"[VENMO] Downloaded statement ({len(data)} bytes).")
        return data
