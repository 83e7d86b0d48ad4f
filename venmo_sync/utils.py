from datetime import date, datetime, timedelta
from itertools import islice
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

import pandas as pd

DATE_FORMATS = ['%Y-%m-%d', '%m/%d/%Y', '%m-%d-%Y', '%Y/%m/%d', '%b %d, %Y', '%d %b %Y']


def chunked(items: Iterable[Any], size: int) -> Iterator[List[Any]]:
    """Yield consecutive lists of at most `size` items, preserving order."""
    if size <= 0:
        raise ValueError(f"batch size must be positive, got {size}")
    iterator = iter(items)
    while True:
        batch = list(islice(iterator, size))
        if not batch:
            return
        yield batch


def parse_date(date_str: str) -> date:
    """
    Parse a date given on the command line or in a config file.

    Accepts ISO 8601 (YYYY-MM-DD) and a few common US formats.
    """
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(date_str.strip(), fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unrecognized date: {date_str!r}")


def date_range(start: Optional[date], end: Optional[date], days: int) -> Tuple[date, date]:
    """Fill in a missing start or end date, defaulting to the last `days` days."""
    end = end or date.today()
    start = start or end - timedelta(days=days)
    if start > end:
        raise ValueError(f"Start date {start} is after end date {end}")
    return start, end


class CSVWriter:
    """
    Writes normalized Lunch Money transactions to CSV files.

    Used by dry runs so the transactions a sync would insert can be reviewed
    before anything is sent. Columns always start with:
    1. external_id
    2. date
    3. payee
    4. amount
    5. currency
    6. notes
    7. asset_id
    8. status

    Any additional keys in the rows are appended as extra columns.
    """

    REQUIRED_FIELDS = [
        'external_id',
        'date',
        'payee',
        'amount',
        'currency',
        'notes',
        'asset_id',
        'status',
    ]

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def write(self, rows: List[Dict[str, Any]], filename: str) -> Optional[Path]:
        """Write rows to a CSV file."""
        if not rows:
            return None

        filepath = self.output_dir / filename

        df = pd.DataFrame(rows)
        extra_keys = [k for k in df.columns if k not in self.REQUIRED_FIELDS]
        df = df.reindex(columns=self.REQUIRED_FIELDS + extra_keys)
        df.to_csv(filepath, index=False, encoding='utf-8')

        print(f"Saved {len(rows)} transactions to {filepath}")
        return filepath
