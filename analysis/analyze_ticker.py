#!/usr/bin/env python3
"""
CLI tool for running the variance ratio test on one price series.
Usage: python analysis/analyze_ticker.py TICKER [options]
       python analysis/analyze_ticker.py --csv prices.csv [options]
"""

import sys
import json
import argparse
import logging
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from analysis.config import load_analysis_config, ConfigError
from analysis.calculations.errors import VarianceRatioError
from analysis.variance_ratio_job import load_series, analyze_series
from ingestion.errors import DataAcquisitionError
from ingestion.transforms.validators import ValidationError

SUMMARY_LAGS = (2, 4, 8, 16)


def _column(value: str):
    """Column name, or 0-based position when numeric."""
    return int(value) if value.isdigit() else value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Test the random walk hypothesis with Lo-MacKinlay variance ratios',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python analysis/analyze_ticker.py AAPL
  python analysis/analyze_ticker.py SPY --start 2010-01-01 --end 2020-12-31 --max-q 50
  python analysis/analyze_ticker.py --csv data/prices.csv --date-format %d.%m.%Y --decimal , --delimiter ';'
  python analysis/analyze_ticker.py MSFT --periods-per-year 12 --csv data/msft_monthly.csv
        """
    )

    parser.add_argument('ticker', nargs='?', help='Stock ticker symbol (e.g., AAPL)')
    parser.add_argument('--csv', dest='csv_path',
                        help='Read prices from a delimited file instead of yfinance')
    parser.add_argument('--date-column', type=_column, default='Date',
                        help='Date column name or position (default: Date)')
    parser.add_argument('--price-column', type=_column, default='Adj Close',
                        help='Price column name or position (default: Adj Close)')
    parser.add_argument('--date-format',
                        help='strptime date format (default: inferred)')
    parser.add_argument('--decimal', default='.',
                        help='Decimal separator (default: .)')
    parser.add_argument('--delimiter', default=',',
                        help='Field delimiter (default: ,)')
    parser.add_argument('--no-header', action='store_true',
                        help='File has no header row; columns are positions')
    parser.add_argument('--config',
                        help='YAML config file (default: $VR_CONFIG_PATH)')
    parser.add_argument('--start', type=date.fromisoformat,
                        help='Start date for yfinance (YYYY-MM-DD)')
    parser.add_argument('--end', type=date.fromisoformat,
                        help='End date for yfinance (YYYY-MM-DD)')
    parser.add_argument('--max-q', type=int,
                        help='Largest aggregation length (default: 100)')
    parser.add_argument('--periods-per-year', type=int,
                        help='Annualization factor (default: 252, 12 for monthly)')
    parser.add_argument('--workers', type=int,
                        help='Threads for the q sweep (default: 1)')
    parser.add_argument('--output',
                        help='Output JSON path (default: ./data/processed/variance_ratio/{TICKER}.json)')
    parser.add_argument('--charts', metavar='DIR',
                        help='Write PNG charts to DIR')
    parser.add_argument('--table', metavar='PATH',
                        help='Write a Markdown summary to PATH')
    parser.add_argument('--quiet', '-q', action='store_true',
                        help='Minimal output (just success/failure)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Debug logging')
    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.ticker and not args.csv_path:
        parser.error('a ticker or --csv is required')

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    try:
        config = load_analysis_config(
            args.config,
            periods_per_year=args.periods_per_year,
            max_q=args.max_q,
            max_workers=args.workers,
            start_date=args.start,
            end_date=args.end
        )
    except (ConfigError, VarianceRatioError) as e:
        print(f"ERROR: Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    csv_options = {
        'date_column': args.date_column,
        'price_column': args.price_column,
        'date_format': args.date_format,
        'decimal': args.decimal,
        'delimiter': args.delimiter,
        'has_header': not args.no_header,
    }

    try:
        series = load_series(
            config,
            ticker=args.ticker,
            csv_path=args.csv_path,
            csv_options=csv_options
        )
    except (DataAcquisitionError, ValidationError) as e:
        print(f"ERROR: Could not load prices: {e}", file=sys.stderr)
        sys.exit(1)

    if args.output is None:
        output_path = Path('./data/processed/variance_ratio') / f'{series.ticker}.json'
    else:
        output_path = Path(args.output)

    if not args.quiet:
        print(f"Variance ratio test for {series.ticker} ({series.source})")
        print(f"Period: {series.start_date} to {series.end_date} ({len(series)} observations)")
        print(f"q = 1..{config.max_q}, {config.periods_per_year} periods/year")
        print()

    result = analyze_series(
        series,
        config,
        output_path=output_path,
        chart_dir=Path(args.charts) if args.charts else None,
        table_path=Path(args.table) if args.table else None
    )

    if result['status'] != 'completed':
        print(f"ERROR: Analysis failed for {series.ticker}: {result['error_message']}", file=sys.stderr)
        sys.exit(1)

    if args.quiet:
        print(f"{series.ticker} analysis complete: {result['output_path']}")
    else:
        _show_quick_summary(result)

    sys.exit(0)


def _show_quick_summary(result):
    """Show headline numbers from a completed job."""
    with open(result['output_path'], 'r') as f:
        report = json.load(f)

    stats = report['return_statistics']
    print(f"Annualized return: {stats['annualized_mean'] * 100:+.2f}%")
    print(f"Annualized volatility: {stats['annualized_volatility'] * 100:.2f}%")
    print()

    rows = {row['q']: row for row in report['variance_ratio']}
    for q in SUMMARY_LAGS:
        row = rows.get(q)
        if row is None or row['z_stat'] is None:
            continue
        print(f"   q={q:<4} VR={row['variance_ratio']:.4f}  z={row['z_stat']:+.3f}  p={row['p_value']:.4f}")

    significant = result['significant_lags']
    print()
    if significant:
        print(f"Random walk rejected at {len(significant)} aggregation lengths")
    else:
        print("Random walk not rejected at any aggregation length")

    print(f"Results saved to: {result['output_path']}")
    if result.get('table_path'):
        print(f"Summary table: {result['table_path']}")
    for name, path in result.get('charts', {}).items():
        print(f"Chart ({name}): {path}")


if __name__ == '__main__':
    main()
