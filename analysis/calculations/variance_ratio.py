"""
Lo-MacKinlay variance ratio test of the random walk hypothesis.
Pure functions over a log-price series X_0..X_T.

Reference: Lo, A. W. and MacKinlay, A. C. (1988), "Stock Market Prices Do Not
Follow Random Walks: Evidence from a Simple Specification Test",
Review of Financial Studies 1(1), 41-66.
"""

import math
import numpy as np
import pandas as pd
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, asdict
from typing import Dict, Any, List, Optional, Sequence

from scipy import stats

from analysis.calculations.errors import (
    VarianceRatioError,
    InvalidParameterError,
    NumericDegeneracyError
)
from analysis.calculations.volatility import scaled_volatility

# Relative tolerance below which Vc(1) counts as zero. Rounding in the log
# prices leaves a residual of a few ulps of max|X| even for exact drift.
ZERO_VARIANCE_TOLERANCE = 64 * np.finfo(np.float64).eps


@dataclass(frozen=True)
class VarianceRatioResult:
    """One aggregation length of a variance ratio sweep."""
    q: int
    variance: Optional[float]
    variance_ratio: Optional[float]
    z_stat: Optional[float]
    p_value: Optional[float]
    scaled_volatility: Optional[float]
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _as_log_prices(log_prices: Sequence[float]) -> np.ndarray:
    """Validate a log-price series and return it as a float array."""
    x = np.asarray(log_prices, dtype=np.float64)

    if x.ndim != 1:
        raise InvalidParameterError(f"Log prices must be one-dimensional, got shape {x.shape}")

    if len(x) < 2:
        raise InvalidParameterError("Insufficient data: need at least 2 observations")

    if not np.all(np.isfinite(x)):
        raise InvalidParameterError("NaN or infinite values not allowed in log prices")

    return x


def _check_aggregation_length(q: int, T: int) -> None:
    """
    Validate q against T single-period increments.

    q == T is rejected as well: the normalizing constant m is zero there.
    """
    if q < 1:
        raise InvalidParameterError(f"Aggregation length must be >= 1, got {q}")

    if q >= T:
        raise InvalidParameterError(f"Aggregation length {q} must be < {T} increments")


def _is_zero_variance(vc_1: float, x: np.ndarray) -> bool:
    """True when sqrt(Vc(1)) is rounding noise relative to the log-price scale."""
    scale = max(1.0, float(np.max(np.abs(x))))
    return math.sqrt(vc_1) <= ZERO_VARIANCE_TOLERANCE * scale


def variance_c(log_prices: Sequence[float], q: int) -> float:
    """
    Overlapping q-period variance estimator (Lo & MacKinlay 1988, Eq. 12).

    Formula:
        mu = (X_T - X_0) / T
        m = q (T - q + 1)(1 - q / T)
        Vc(q) = (1/m) Σ_{t=q}^{T} (X_t - X_{t-q} - q·mu)^2

    Windows slide by one period, so every q-period difference is used.
    For q=1 the denominator is T - 1 and Vc(1) is the ddof=1 sample
    variance of the single-period increments.

    Args:
        log_prices: Log-price series X of length T+1
        q: Aggregation length, 1 <= q < T

    Returns:
        Per-period variance estimate at aggregation length q

    Raises:
        InvalidParameterError: If q is out of range or the series is too short
    """
    x = _as_log_prices(log_prices)
    T = len(x) - 1
    _check_aggregation_length(q, T)

    mu = (x[T] - x[0]) / T
    m = (T - q) * (T - q + 1) * q / T

    deviations = x[q:] - x[:-q] - q * mu
    sum_of_squares = float(np.dot(deviations, deviations))

    return sum_of_squares / m


def variance_ratio(log_prices: Sequence[float], q: int) -> float:
    """
    Variance ratio VR(q) = Vc(q) / Vc(1).

    Raises:
        InvalidParameterError: If q is out of range
        NumericDegeneracyError: If the single-period variance is zero, including
            constant increments where only rounding noise remains
    """
    x = _as_log_prices(log_prices)
    vc_1 = variance_c(x, 1)
    vc_q = variance_c(x, q)

    if _is_zero_variance(vc_1, x):
        raise NumericDegeneracyError("Zero single-period variance: variance ratio undefined")

    return vc_q / vc_1


def z_statistic(log_prices: Sequence[float], q: int) -> float:
    """
    Homoskedastic variance ratio test statistic (Lo & MacKinlay 1988, p.47).

    Formula:
        z(q) = sqrt(3qT / (2(2q - 1)(q - 1))) × (Vc(q) / Vc(1) - 1)

    Asymptotically N(0, 1) under the i.i.d. random walk null.

    Raises:
        InvalidParameterError: If q < 2 (undefined at q=1) or out of range
        NumericDegeneracyError: If the single-period variance is zero
    """
    if q < 2:
        raise InvalidParameterError(f"z-statistic requires q >= 2, got {q}")

    x = _as_log_prices(log_prices)
    T = len(x) - 1

    c = math.sqrt(T * 3 * q / (2 * (2 * q - 1) * (q - 1)))
    M = variance_ratio(x, q) - 1

    return c * M


def p_value(z: float) -> float:
    """
    Two-sided standard-normal p-value 2·Φ(-|z|).

    No finite-sample correction is applied.
    """
    if not math.isfinite(z):
        raise InvalidParameterError(f"z-statistic must be finite, got {z}")

    return float(2 * stats.norm.cdf(-abs(z)))


def _compute_row(x: np.ndarray, q: int, periods_per_year: int) -> VarianceRatioResult:
    """Compute one sweep row; failures become None entries with an error message."""
    try:
        sigma = scaled_volatility(x, q, periods_per_year)
    except InvalidParameterError:
        sigma = None

    try:
        variance = variance_c(x, q)
    except VarianceRatioError as e:
        return VarianceRatioResult(q, None, None, None, None, sigma, str(e))

    if q == 1:
        ratio = None if _is_zero_variance(variance, x) else 1.0
        return VarianceRatioResult(q, variance, ratio, None, None, sigma)

    try:
        ratio = variance_ratio(x, q)
        z = z_statistic(x, q)
    except VarianceRatioError as e:
        return VarianceRatioResult(q, variance, None, None, None, sigma, str(e))

    return VarianceRatioResult(q, variance, ratio, z, p_value(z), sigma)


def sweep(
    log_prices: Sequence[float],
    q_max: int = 100,
    periods_per_year: int = 252,
    max_workers: int = 1
) -> List[VarianceRatioResult]:
    """
    Run the variance ratio test for q = 1..q_max.

    Each row holds Vc(q), VR(q), z(q) and its p-value (None at q=1), and the
    annualized volatility of returns sampled every q periods. A q that cannot
    be computed yields a row with None entries and an error message instead
    of aborting the sweep.

    Args:
        log_prices: Log-price series X of length T+1
        q_max: Largest aggregation length
        periods_per_year: Annualization factor (252 daily, 12 monthly)
        max_workers: Thread pool size; 1 runs sequentially

    Returns:
        List of VarianceRatioResult ordered by q

    Raises:
        InvalidParameterError: If the series or sweep arguments are invalid
    """
    x = _as_log_prices(log_prices)

    if q_max < 1:
        raise InvalidParameterError(f"q_max must be >= 1, got {q_max}")

    if periods_per_year <= 0:
        raise InvalidParameterError("periods_per_year must be positive")

    if max_workers < 1:
        raise InvalidParameterError(f"max_workers must be >= 1, got {max_workers}")

    lags = range(1, q_max + 1)

    if max_workers == 1:
        return [_compute_row(x, q, periods_per_year) for q in lags]

    rows: Dict[int, VarianceRatioResult] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {q: executor.submit(_compute_row, x, q, periods_per_year) for q in lags}
        for q, future in futures.items():
            rows[q] = future.result()

    return [rows[q] for q in sorted(rows)]


def sweep_to_frame(results: List[VarianceRatioResult]) -> pd.DataFrame:
    """Sweep rows as a DataFrame indexed by q."""
    columns = [
        'q', 'variance', 'variance_ratio', 'z_stat',
        'p_value', 'scaled_volatility', 'error'
    ]
    df = pd.DataFrame([r.to_dict() for r in results], columns=columns)
    return df.set_index('q')
