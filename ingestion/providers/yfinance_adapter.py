"""
Yahoo Finance price source.
Downloads daily bars for one symbol; rows keep yfinance field names.
"""

import logging
import yfinance as yf
import pandas as pd
from datetime import date, timedelta
from typing import Dict, Any, List

from ingestion.errors import DataAcquisitionError

logger = logging.getLogger(__name__)

MAX_RANGE_DAYS = 365 * 30
MAX_TICKER_LENGTH = 10

# Letters and digits plus index (^), class/exchange (. -) and FX (=) markers
TICKER_CHARS = frozenset('ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789.-^=')

PRICE_FIELDS = ('Open', 'High', 'Low', 'Close', 'Adj Close')


def fetch_prices_window(ticker: str, start: date, end: date) -> List[Dict[str, Any]]:
    """
    Download daily bars for ticker between start and end, both inclusive.

    Args:
        ticker: Yahoo symbol (e.g. 'SPY', '^GSPC', 'EURUSD=X')
        start: First date wanted
        end: Last date wanted

    Returns:
        One dict per trading day with 'Date' (ISO string) and whichever of
        Open/High/Low/Close/Adj Close/Volume were reported. Empty list when
        Yahoo has no data for the window.

    Raises:
        DataAcquisitionError: On invalid arguments or any download failure
    """
    _validate_ticker(ticker)
    _validate_date_range(start, end)

    logger.info(f"Downloading {ticker} from yfinance ({start} to {end})")

    try:
        frame = yf.download(
            ticker,
            start=start.isoformat(),
            end=(end + timedelta(days=1)).isoformat(),  # exclusive upper bound
            progress=False,
            auto_adjust=False  # keep 'Adj Close'
        )
    except Exception as e:
        raise DataAcquisitionError(f"Failed to fetch prices for {ticker}: {str(e)}") from e

    if frame is None or frame.empty:
        logger.warning(f"yfinance returned no rows for {ticker}")
        return []

    rows = _frame_to_rows(frame)
    logger.info(f"Received {len(rows)} bars for {ticker}")
    return rows


def _frame_to_rows(frame: pd.DataFrame) -> List[Dict[str, Any]]:
    """Convert a yfinance frame to row dicts, dropping missing values."""
    # Newer yfinance returns (field, ticker) column pairs even for one symbol
    if isinstance(frame.columns, pd.MultiIndex):
        frame = frame.copy()
        frame.columns = frame.columns.get_level_values(0)

    present = [f for f in PRICE_FIELDS if f in frame.columns]
    has_volume = 'Volume' in frame.columns

    rows = []
    for timestamp, bar in frame.iterrows():
        row: Dict[str, Any] = {'Date': timestamp.strftime('%Y-%m-%d')}
        row.update({f: float(bar[f]) for f in present if pd.notna(bar[f])})
        if has_volume and pd.notna(bar['Volume']):
            row['Volume'] = int(bar['Volume'])
        rows.append(row)

    return rows


def _validate_date_range(start: date, end: date) -> None:
    """
    Reject reversed, future or overly long windows.

    Raises:
        DataAcquisitionError: If the window is unusable
    """
    if start > end:
        raise DataAcquisitionError(f"start date ({start}) must be <= end date ({end})")

    if max(start, end) > date.today():
        raise DataAcquisitionError("Future dates not allowed for historical data")

    if (end - start).days > MAX_RANGE_DAYS:
        raise DataAcquisitionError(f"Date range too long (max {MAX_RANGE_DAYS} days)")


def _validate_ticker(ticker: str) -> None:
    if not isinstance(ticker, str) or not ticker:
        raise DataAcquisitionError("Ticker must be non-empty string")

    if len(ticker) > MAX_TICKER_LENGTH:
        raise DataAcquisitionError(f"Ticker too long (max {MAX_TICKER_LENGTH} characters)")

    bad = set(ticker.upper()) - TICKER_CHARS
    if bad:
        raise DataAcquisitionError(f"Ticker contains invalid characters: {ticker}")
