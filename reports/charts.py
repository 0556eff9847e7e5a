"""
Static charts for variance ratio analysis.
Renders PNG files with matplotlib's non-interactive backend.
"""

import logging
from pathlib import Path
from typing import Dict, List

import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from analysis.calculations.variance_ratio import VarianceRatioResult
from ingestion.models import PriceSeries

logger = logging.getLogger(__name__)

# Two-sided 5% critical value of N(0, 1)
Z_CRITICAL = 1.96

PALETTE = {
    "blue": "#4F9CF9", "orange": "#F5A623",
    "red": "#E05C5C", "grey": "#888888",
}


def _save_fig(fig, output_dir: Path, name: str) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{name}.png"
    fig.savefig(path, dpi=120, bbox_inches="tight")
    plt.close(fig)
    logger.info(f"Saved chart: {path}")
    return path


def plot_prices(series: PriceSeries, output_dir: Path) -> Path:
    """Adjusted close price path."""
    fig, ax = plt.subplots(figsize=(10, 4))
    ax.plot(list(series.dates), list(series.prices), color=PALETTE["blue"], lw=1.2)
    ax.set_title(f"{series.ticker} adjusted close")
    ax.set_xlabel("Date")
    ax.set_ylabel("Price")
    ax.grid(True, alpha=0.3)
    return _save_fig(fig, output_dir, f"{series.ticker}_prices")


def plot_log_returns(series: PriceSeries, output_dir: Path) -> Path:
    """Log returns over time and their distribution."""
    log_ret = series.log_returns()

    fig, (ax_ts, ax_hist) = plt.subplots(1, 2, figsize=(12, 4))
    ax_ts.plot(list(series.dates[1:]), log_ret, color=PALETTE["blue"], lw=0.6)
    ax_ts.axhline(0, color=PALETTE["grey"], lw=0.8, ls="--")
    ax_ts.set_title(f"{series.ticker} log returns")
    ax_ts.set_xlabel("Date")

    ax_hist.hist(log_ret, bins=50, color=PALETTE["blue"], alpha=0.8)
    ax_hist.set_title("Distribution")
    ax_hist.set_xlabel("Log return")

    for ax in (ax_ts, ax_hist):
        ax.grid(True, alpha=0.3)

    return _save_fig(fig, output_dir, f"{series.ticker}_log_returns")


def plot_z_statistics(ticker: str, results: List[VarianceRatioResult], output_dir: Path) -> Path:
    """z(q) against q with the 5% two-sided rejection band."""
    rows = [r for r in results if r.z_stat is not None]
    lags = [r.q for r in rows]
    z_values = [r.z_stat for r in rows]

    fig, ax = plt.subplots(figsize=(10, 4))
    ax.plot(lags, z_values, marker="o", ms=3, color=PALETTE["blue"], lw=1.2, label="z(q)")
    ax.axhline(Z_CRITICAL, color=PALETTE["red"], lw=1.0, ls="--", label="±1.96")
    ax.axhline(-Z_CRITICAL, color=PALETTE["red"], lw=1.0, ls="--")
    ax.axhline(0, color=PALETTE["grey"], lw=0.8)
    ax.set_title(f"{ticker} variance ratio z-statistic")
    ax.set_xlabel("Aggregation length q")
    ax.set_ylabel("z(q)")
    ax.legend()
    ax.grid(True, alpha=0.3)
    return _save_fig(fig, output_dir, f"{ticker}_z_statistics")


def plot_scaled_volatility(ticker: str, results: List[VarianceRatioResult], output_dir: Path) -> Path:
    """Annualized σ(q) against q; flat under a random walk."""
    rows = [r for r in results if r.scaled_volatility is not None]
    lags = [r.q for r in rows]
    sigmas = np.array([r.scaled_volatility for r in rows])

    fig, ax = plt.subplots(figsize=(10, 4))
    ax.plot(lags, sigmas * 100, marker="o", ms=3, color=PALETTE["orange"], lw=1.2)
    if len(sigmas):
        ax.axhline(sigmas[0] * 100, color=PALETTE["grey"], lw=0.8, ls="--", label="σ(1)")
        ax.legend()
    ax.set_title(f"{ticker} annualized volatility by sampling interval")
    ax.set_xlabel("Aggregation length q")
    ax.set_ylabel("Annualized volatility (%)")
    ax.grid(True, alpha=0.3)
    return _save_fig(fig, output_dir, f"{ticker}_scaled_volatility")


def render_charts(
    series: PriceSeries,
    results: List[VarianceRatioResult],
    output_dir: Path
) -> Dict[str, Path]:
    """
    Render all charts for one analysis.

    Returns:
        Dictionary mapping chart name to PNG path
    """
    output_dir = Path(output_dir)
    return {
        'prices': plot_prices(series, output_dir),
        'log_returns': plot_log_returns(series, output_dir),
        'z_statistics': plot_z_statistics(series.ticker, results, output_dir),
        'scaled_volatility': plot_scaled_volatility(series.ticker, results, output_dir),
    }
