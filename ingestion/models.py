"""
Price series data model.
Immutable once loaded; derived columns are computed on demand.
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass
from datetime import date
from typing import Tuple

from ingestion.transforms.validators import (
    validate_price_row,
    check_price_date_monotonicity,
    ValidationError
)


@dataclass(frozen=True)
class PriceSeries:
    """
    Ordered (date, adjusted price) observations for one instrument.

    Dates are strictly increasing and every price is positive and finite.
    """
    ticker: str
    dates: Tuple[date, ...]
    prices: Tuple[float, ...]
    source: str = 'unknown'

    def __post_init__(self):
        """Coerce to tuples and validate."""
        object.__setattr__(self, 'dates', tuple(self.dates))
        object.__setattr__(self, 'prices', tuple(float(p) for p in self.prices))

        if not self.ticker or not isinstance(self.ticker, str):
            raise ValidationError("ticker must be non-empty string")

        if len(self.dates) != len(self.prices):
            raise ValidationError(
                f"dates and prices must have same length "
                f"({len(self.dates)} != {len(self.prices)})"
            )

        if not self.prices:
            raise ValidationError("Price series must contain at least one observation")

        for d, p in zip(self.dates, self.prices):
            validate_price_row({'date': d, 'price': p})

        check_price_date_monotonicity(list(self.dates))

    def __len__(self) -> int:
        return len(self.prices)

    @property
    def start_date(self) -> date:
        return self.dates[0]

    @property
    def end_date(self) -> date:
        return self.dates[-1]

    def log_prices(self) -> np.ndarray:
        """Natural-log prices, same length as the series."""
        return np.log(np.array(self.prices, dtype=np.float64))

    def log_returns(self) -> np.ndarray:
        """Log returns; the first observation has no return."""
        return np.diff(self.log_prices())

    def to_frame(self) -> pd.DataFrame:
        """
        Fresh DataFrame with derived columns appended.

        Columns: date, adj_close, log_price, log_return (NaN on the first row)
        """
        log_p = self.log_prices()
        return pd.DataFrame({
            'date': list(self.dates),
            'adj_close': list(self.prices),
            'log_price': log_p,
            'log_return': np.concatenate(([np.nan], np.diff(log_p))),
        })
