"""
Volatility calculation utilities.
Pure functions for realized volatility and volatility scaling across horizons.
"""

import numpy as np
import math

from analysis.calculations.errors import InvalidParameterError


def realized_vol(
    log_ret: np.ndarray,
    window: int,
    annualize: int = 252
) -> float:
    """
    Calculate realized volatility from log returns.

    Formula: σ = std(log_returns) × √annualize

    Args:
        log_ret: Array of log returns
        window: Number of returns to use (from end of series)
        annualize: Annualization factor (252 for daily to annual)

    Returns:
        Annualized volatility as decimal (0.25 = 25%)

    Raises:
        InvalidParameterError: If insufficient data or invalid values
    """
    if len(log_ret) < window:
        raise InvalidParameterError(f"Insufficient data: need {window} returns, have {len(log_ret)}")

    if window <= 1:
        raise InvalidParameterError("Window must be > 1 for standard deviation")

    log_ret = np.asarray(log_ret, dtype=np.float64)

    if np.any(np.isnan(log_ret)):
        raise InvalidParameterError("NaN values not allowed in log returns")

    if np.any(np.isinf(log_ret)):
        raise InvalidParameterError("Infinite values not allowed in log returns")

    recent_returns = log_ret[-window:]

    # Sample standard deviation (ddof=1)
    std_dev = np.std(recent_returns, ddof=1)

    return float(std_dev * math.sqrt(annualize))


def scaled_volatility(
    log_prices: np.ndarray,
    q: int,
    periods_per_year: int = 252
) -> float:
    """
    Annualized volatility of returns sampled every q periods.

    Formula: σ(q) = √(periods_per_year / q) × std(X[q] - X[0], X[2q] - X[q], ...)

    Under a random walk σ(q) does not depend on q. A slope across q
    indicates serial correlation: rising for positive autocorrelation,
    falling for mean reversion.

    Args:
        log_prices: Log-price series X of length T+1
        q: Sampling interval in base periods
        periods_per_year: Annualization factor for the base period

    Returns:
        Annualized volatility as decimal

    Raises:
        InvalidParameterError: If q < 1 or fewer than 2 q-period returns exist
    """
    if q < 1:
        raise InvalidParameterError(f"Aggregation length must be >= 1, got {q}")

    if periods_per_year <= 0:
        raise InvalidParameterError("periods_per_year must be positive")

    x = np.asarray(log_prices, dtype=np.float64)

    # Non-overlapping q-period returns
    q_returns = np.diff(x[::q])

    if len(q_returns) < 2:
        raise InvalidParameterError(
            f"Insufficient data: need 2 returns at q={q}, have {len(q_returns)}"
        )

    std_dev = np.std(q_returns, ddof=1)

    return float(math.sqrt(periods_per_year / q) * std_dev)
