"""
Orchestrated variance ratio job - PriceSeries to results JSON.
Loads prices, calls pure functions, persists results, charts and tables.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional, Union

from analysis.config import AnalysisConfig
from analysis.calculations.returns import describe_returns
from analysis.calculations.variance_ratio import sweep, VarianceRatioResult
from ingestion.models import PriceSeries
from ingestion.providers.yfinance_adapter import fetch_prices_window
from ingestion.providers.csv_adapter import read_price_csv
from ingestion.transforms.normalizers import normalize_prices
from reports.atomic_writer import write_json_atomic, write_text_atomic
from reports.charts import render_charts
from reports.formatters import build_summary_markdown

logger = logging.getLogger(__name__)

CALCULATION_VERSION = '1.0.0'


def load_series(
    config: AnalysisConfig,
    *,
    ticker: Optional[str] = None,
    csv_path: Optional[Union[str, Path]] = None,
    csv_options: Optional[Dict[str, Any]] = None
) -> PriceSeries:
    """
    Load a PriceSeries from yfinance or a delimited file.

    Args:
        config: Analysis configuration (date range used for yfinance)
        ticker: Ticker symbol; also labels CSV data
        csv_path: Delimited file to read instead of fetching
        csv_options: Keyword arguments for read_price_csv

    Returns:
        Validated PriceSeries

    Raises:
        DataAcquisitionError: If fetching or reading fails
        ValidationError: If the rows do not form a valid series
        ValueError: If neither ticker nor csv_path is given
    """
    if csv_path is not None:
        label = ticker or Path(csv_path).stem
        raw_rows = read_price_csv(csv_path, **(csv_options or {}))
        return normalize_prices(raw_rows, ticker=label, source='csv')

    if not ticker:
        raise ValueError("Either ticker or csv_path is required")

    raw_rows = fetch_prices_window(
        ticker=ticker,
        start=config.start_date,
        end=config.end_date
    )
    return normalize_prices(raw_rows, ticker=ticker, source='yfinance')


def compose_variance_ratio_report(series: PriceSeries, config: AnalysisConfig) -> Dict[str, Any]:
    """
    Compose descriptive statistics and the variance ratio sweep into JSON form.

    Args:
        series: Price series to analyze
        config: Analysis configuration

    Returns:
        JSON-ready dictionary

    Raises:
        InvalidParameterError: If the series is too short
    """
    log_prices = series.log_prices()

    return_statistics = describe_returns(
        series.log_returns(),
        periods_per_year=config.periods_per_year
    )

    results = sweep(
        log_prices,
        q_max=config.max_q,
        periods_per_year=config.periods_per_year,
        max_workers=config.max_workers
    )

    failed = [r.q for r in results if r.error is not None]
    if failed:
        logger.warning(f"{series.ticker}: {len(failed)} aggregation lengths undefined (first q={failed[0]})")

    significant = [
        r.q for r in results
        if r.p_value is not None and r.p_value < config.significance_level
    ]

    return {
        'ticker': series.ticker,
        'data_period': {
            'start_date': series.start_date.isoformat(),
            'end_date': series.end_date.isoformat(),
            'observations': len(series),
        },
        'return_statistics': return_statistics,
        'variance_ratio': [r.to_dict() for r in results],
        'significant_lags': significant,
        'metadata': {
            'calculated_at': datetime.now().isoformat(),
            'calculation_version': CALCULATION_VERSION,
            'source': series.source,
            'config': config.to_dict(),
        }
    }


def analyze_series(
    series: PriceSeries,
    config: AnalysisConfig,
    output_path: Path,
    chart_dir: Optional[Path] = None,
    table_path: Optional[Path] = None
) -> Dict[str, Any]:
    """
    Run the analysis for one series and write its outputs.

    Args:
        series: Price series to analyze
        config: Analysis configuration
        output_path: Path for the results JSON
        chart_dir: Directory for PNG charts (skipped when None)
        table_path: Path for the Markdown summary (skipped when None)

    Returns:
        Dictionary with job status and summary
    """
    start_time = datetime.now()
    logger.info(f"Analyzing {series.ticker}: {len(series)} observations, q up to {config.max_q}")

    try:
        report = compose_variance_ratio_report(series, config)
        write_json_atomic(report, Path(output_path))

        charts = {}
        if chart_dir is not None:
            results = [VarianceRatioResult(**row) for row in report['variance_ratio']]
            charts = {name: str(path) for name, path in render_charts(series, results, Path(chart_dir)).items()}

        if table_path is not None:
            write_text_atomic(build_summary_markdown(report), Path(table_path))

        rows_defined = sum(1 for row in report['variance_ratio'] if row['error'] is None)

        logger.info(f"Completed {series.ticker}: {len(report['significant_lags'])} significant lags")

        return {
            'ticker': series.ticker,
            'status': 'completed',
            'output_path': str(output_path),
            'table_path': str(table_path) if table_path is not None else None,
            'charts': charts,
            'observations': len(series),
            'rows_calculated': rows_defined,
            'significant_lags': report['significant_lags'],
            'duration_seconds': (datetime.now() - start_time).total_seconds()
        }

    except Exception as e:
        logger.error(f"Analysis failed for {series.ticker}: {e}")
        return {
            'ticker': series.ticker,
            'status': 'failed',
            'error_message': str(e),
            'output_path': None,
            'rows_calculated': 0,
            'duration_seconds': (datetime.now() - start_time).total_seconds()
        }
