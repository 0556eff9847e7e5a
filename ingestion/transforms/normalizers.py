"""
Normalizers for transforming provider data to a PriceSeries.
Pure functions - no IO, network, or side effects.
Minimal normalization - only when necessary.
"""

from datetime import date, datetime
from typing import Dict, Any, List

from ingestion.models import PriceSeries
from ingestion.transforms.validators import ValidationError


def normalize_prices(
    raw_rows: List[Dict[str, Any]],
    *,
    ticker: str,
    source: str
) -> PriceSeries:
    """
    Transform provider-native price rows to a PriceSeries.

    Minimal normalization:
    - Date strings to date objects
    - Adjusted close preferred, plain close as fallback
    - Deduplication by date (keep last to handle corrections)
    - Chronological ordering

    Args:
        raw_rows: Provider rows with 'Date' and 'Adj Close' and/or 'Close'
        ticker: Stock ticker symbol
        source: Data provider name

    Returns:
        Validated PriceSeries

    Raises:
        ValidationError: If no rows, a row has no price, or prices are invalid
    """
    if not raw_rows:
        raise ValidationError(f"No price rows to normalize for {ticker}")

    seen_dates: Dict[date, float] = {}

    for raw in raw_rows:
        row_date = _parse_date(raw.get('Date'))

        if raw.get('Adj Close') is not None:
            price = float(raw['Adj Close'])
        elif raw.get('Close') is not None:
            price = float(raw['Close'])
        else:
            raise ValidationError(f"No close price for {ticker} on {row_date}")

        # Later rows overwrite earlier ones for the same date
        seen_dates[row_date] = price

    ordered = sorted(seen_dates.items())

    return PriceSeries(
        ticker=ticker,
        dates=tuple(d for d, _ in ordered),
        prices=tuple(p for _, p in ordered),
        source=source
    )


def _parse_date(value: Any) -> date:
    """Parse an ISO date string, or narrow a datetime to its date."""
    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError as e:
            raise ValidationError(f"Invalid date: {value}") from e

    raise ValidationError(f"Missing or unsupported date value: {value!r}")
