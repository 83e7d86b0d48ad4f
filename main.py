import argparse
import sys
from pathlib import Path

"""
Venmo Sync - Main Entry Point

This script serves as the command-line interface (CLI) for the Venmo Sync application.
It downloads a Venmo statement for a date range and inserts the transactions into a
Lunch Money asset.

Purpose:
- Parse command-line arguments for the date range and run mode.
- Run the VenmoDownloader (fetch -> parse -> normalize -> insert).
- List Lunch Money assets so the target asset id can be configured.

Usage:
    python main.py                                     # Sync the last `days_to_fetch` days
    python main.py --start 2024-01-01 --end 2024-01-31 # Sync a specific range
    python main.py --dry-run                           # Save to CSV instead of inserting
    python main.py --list-assets                       # Show Lunch Money assets and their ids

Dependencies:
- playwright: HTTP requests to Venmo and Lunch Money.
- pydantic / pydantic-settings / PyYAML: Configuration.
- pandas: CSV export of a dry run.
- venmo_sync.*: Internal modules.
"""
from venmo_sync.config import Config, settings
from venmo_sync.errors import VenmoSyncError
from venmo_sync.lunchmoney import LunchMoneyClient
from venmo_sync.utils import date_range, parse_date
from venmo_sync.venmo import VenmoDownloader


def list_assets(config: Config):
    """Print the Lunch Money assets visible to the configured token."""
    from playwright.sync_api import sync_playwright

    with sync_playwright() as p:
        request = p.request.new_context(timeout=config.timeout)
        try:
            client = LunchMoneyClient(request, config.lunchmoney.api_token)
            assets = client.get_all_assets()
        finally:
            request.dispose()

    if not assets:
        print("No assets found.")
        return
    print(f"{'ID':>10}  {'Name':<30} {'Type':<15} {'Currency':<8} Balance")
    for asset in assets:
        name = asset.display_name or asset.name
        print(f"{asset.id:>10}  {name:<30} {asset.type_name or '':<15} "
              f"{(asset.currency or '').upper():<8} {asset.balance or ''}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Venmo Sync - Import Venmo transactions into Lunch Money")
    parser.add_argument(
        "--start",
        type=parse_date,
        help="First day of the statement (default: --days before --end)"
    )
    parser.add_argument(
        "--end",
        type=parse_date,
        help="Last day of the statement (default: today)"
    )
    parser.add_argument(
        "--days",
        type=int,
        help="Number of days to fetch when --start is not given (overrides config)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Save the Lunch Money transactions to CSV instead of inserting them"
    )
    parser.add_argument(
        "--list-assets",
        action="store_true",
        help="List Lunch Money assets and exit"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a YAML configuration file"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (print tracebacks on error)"
    )

    args = parser.parse_args(argv)

    config = Config.load(args.config) if args.config else settings
    if args.debug:
        config.debug = True

    try:
        if args.list_assets:
            list_assets(config)
            return 0

        days = args.days if args.days is not None else config.venmo.days_to_fetch
        try:
            start, end = date_range(args.start, args.end, days)
        except ValueError as e:
            parser.error(str(e))

        if not config.venmo.enabled:
            print("Venmo sync is disabled in the configuration.")
            return 0

        print("Starting Venmo Sync...")
        if args.dry_run:
            print(f"Dry run: output directory {config.transactions_path.resolve()}")

        ids = VenmoDownloader(config).run(start, end, dry_run=args.dry_run)
        if not args.dry_run:
            print(f"Inserted {len(ids)} transactions into Lunch Money.")
    except VenmoSyncError as e:
        print(f"Error: {e}")
        if config.debug:
            import traceback
            traceback.print_exc()
        return 1

    print("\nAll tasks completed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
