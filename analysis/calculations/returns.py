"""
Log returns calculation utilities.
Pure functions for log prices, log returns and their descriptive statistics.
"""

import math
import numpy as np
import pandas as pd
from typing import Dict, List, Sequence, Union

from analysis.calculations.errors import InvalidParameterError
from analysis.calculations.volatility import realized_vol


def log_prices(prices: Sequence[float]) -> np.ndarray:
    """
    Convert a price series to natural-log prices.

    Args:
        prices: Prices in chronological order

    Returns:
        Numpy array of ln(P_t), same length as prices

    Raises:
        InvalidParameterError: If empty or any price is not positive and finite
    """
    if len(prices) < 1:
        raise InvalidParameterError("Insufficient data: need at least 1 price")

    price_array = np.asarray(prices, dtype=np.float64)

    if not np.all(np.isfinite(price_array)):
        raise InvalidParameterError("NaN or infinite prices not allowed")

    if np.any(price_array <= 0):
        raise InvalidParameterError("Zero or negative prices not allowed")

    return np.log(price_array)


def log_returns(prices: Sequence[float]) -> np.ndarray:
    """
    Calculate log returns from price series.

    Formula: r_t = ln(P_t) - ln(P_{t-1}) = ln(P_t / P_{t-1})

    Args:
        prices: Prices in chronological order

    Returns:
        Numpy array of log returns (length = len(prices) - 1)

    Raises:
        InvalidParameterError: If insufficient data or invalid prices
    """
    if len(prices) < 2:
        raise InvalidParameterError("Insufficient data: need at least 2 prices")

    return np.diff(log_prices(prices))


def prices_from_log_returns(initial_price: float, log_ret: Sequence[float]) -> np.ndarray:
    """
    Rebuild a price path from an initial price and log returns.

    P_t = P_0 * exp(r_1 + ... + r_t)

    Example:
        initial_price=100, log_ret=[ln(1.1), ln(1.1)] -> [100, 110, 121]
    """
    if not math.isfinite(initial_price) or initial_price <= 0:
        raise InvalidParameterError(f"Initial price must be positive, got {initial_price}")

    ret_array = np.asarray(log_ret, dtype=np.float64)
    cumulative = np.concatenate(([0.0], np.cumsum(ret_array)))

    return initial_price * np.exp(cumulative)


def describe_returns(
    log_ret: Union[np.ndarray, List[float]],
    periods_per_year: int = 252
) -> Dict[str, float]:
    """
    Descriptive statistics of a log return series.

    Args:
        log_ret: Log returns in chronological order
        periods_per_year: Annualization factor (252 daily, 12 monthly)

    Returns:
        Dictionary with count, mean, std, min, max, skewness,
        excess kurtosis, annualized mean, annualized volatility over the
        full sample and over the trailing periods_per_year returns

    Raises:
        InvalidParameterError: If fewer than 2 returns or non-finite values
    """
    if len(log_ret) < 2:
        raise InvalidParameterError("Insufficient data: need at least 2 returns")

    if periods_per_year <= 0:
        raise InvalidParameterError("periods_per_year must be positive")

    series = pd.Series(np.asarray(log_ret, dtype=np.float64))

    if not np.all(np.isfinite(series.values)):
        raise InvalidParameterError("NaN or infinite values not allowed in log returns")

    mean = float(series.mean())
    std = float(series.std(ddof=1))
    values = series.to_numpy()

    # pandas returns NaN skew/kurtosis for constant or very short series
    skew = series.skew()
    kurt = series.kurt()

    return {
        'count': int(series.count()),
        'mean': mean,
        'std': std,
        'min': float(series.min()),
        'max': float(series.max()),
        'skewness': float(skew) if pd.notna(skew) else None,
        'excess_kurtosis': float(kurt) if pd.notna(kurt) else None,
        'annualized_mean': mean * periods_per_year,
        'annualized_volatility': realized_vol(values, window=len(values), annualize=periods_per_year),
        # Trailing year (at least 2 returns), or the whole sample when shorter
        'recent_annualized_volatility': realized_vol(
            values, window=max(2, min(len(values), periods_per_year)), annualize=periods_per_year
        ),
    }
