"""
Delimited text file adapter - read price data from local CSV exports.
File IO allowed here, but minimal business logic.
"""

import logging
import pandas as pd
from pathlib import Path
from typing import Dict, Any, List, Optional, Union

from ingestion.errors import DataAcquisitionError

logger = logging.getLogger(__name__)

Column = Union[str, int]


def read_price_csv(
    path: Union[str, Path],
    *,
    date_column: Column = 'Date',
    price_column: Column = 'Adj Close',
    date_format: Optional[str] = None,
    decimal: str = '.',
    delimiter: str = ',',
    has_header: bool = True
) -> List[Dict[str, Any]]:
    """
    Read (date, price) rows from a delimited text file.
    Returns rows in provider format ('Date', 'Adj Close') - no normalization.

    Args:
        path: File path
        date_column: Date column name, or 0-based position when has_header is False
        price_column: Price column name, or 0-based position when has_header is False
        date_format: strptime format (e.g. '%d.%m.%Y'); inferred when None
        decimal: Decimal separator ('.' or ',')
        delimiter: Field separator
        has_header: Whether the first line holds column names

    Returns:
        List of raw price dictionaries in file order, rows without a price skipped

    Raises:
        DataAcquisitionError: If the file cannot be read or parsed
    """
    csv_path = Path(path)
    if not csv_path.exists():
        raise DataAcquisitionError(f"Price file not found: {csv_path}")

    if decimal == delimiter:
        raise DataAcquisitionError("decimal separator must differ from delimiter")

    logger.info(f"Reading prices from {csv_path}")

    try:
        df = pd.read_csv(
            csv_path,
            sep=delimiter,
            decimal=decimal,
            header=0 if has_header else None
        )
    except Exception as e:
        raise DataAcquisitionError(f"Failed to read price file {csv_path}: {str(e)}") from e

    for column in (date_column, price_column):
        if column not in df.columns:
            raise DataAcquisitionError(
                f"Column {column!r} not found in {csv_path} (columns: {list(df.columns)})"
            )

    if df.empty:
        logger.warning(f"Price file {csv_path} has no data rows")
        return []

    try:
        dates = pd.to_datetime(df[date_column], format=date_format)
    except (ValueError, TypeError) as e:
        raise DataAcquisitionError(f"Failed to parse dates in {csv_path}: {str(e)}") from e

    try:
        prices = pd.to_numeric(df[price_column])
    except (ValueError, TypeError) as e:
        raise DataAcquisitionError(f"Failed to parse prices in {csv_path}: {str(e)}") from e

    if dates.isna().any():
        raise DataAcquisitionError(f"Missing dates in {csv_path}")

    rows = []
    skipped = 0
    for row_date, price in zip(dates, prices):
        if pd.isna(price):
            skipped += 1
            continue

        rows.append({
            'Date': row_date.strftime('%Y-%m-%d'),
            'Adj Close': float(price),
        })

    if skipped:
        logger.warning(f"Skipped {skipped} rows without a price in {csv_path}")

    logger.info(f"Read {len(rows)} rows from {csv_path}")
    return rows
