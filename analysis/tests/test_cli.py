"""
Tests for the analyze_ticker CLI - subprocess calls in temp workspace.
Tests actual command execution against a seeded CSV file.
"""

import os
import pytest
import subprocess
import json
import sys
import numpy as np
import pandas as pd
from pathlib import Path

from analysis.analyze_ticker import main

PROJECT_ROOT = Path(__file__).parent.parent.parent
SCRIPT = PROJECT_ROOT / 'analysis' / 'analyze_ticker.py'


@pytest.fixture
def price_csv(tmp_path):
    """Random walk prices in a yfinance-style CSV export."""
    rng = np.random.default_rng(123)
    dates = pd.bdate_range('2022-01-03', periods=400)
    prices = 150.0 * np.exp(np.cumsum(rng.normal(0.0002, 0.012, 400)))

    path = tmp_path / 'ACME.csv'
    pd.DataFrame({
        'Date': dates.strftime('%Y-%m-%d'),
        'Adj Close': prices
    }).to_csv(path, index=False)
    return path


@pytest.fixture
def clean_env(monkeypatch):
    for name in ['VR_CONFIG_PATH', 'VR_PERIODS_PER_YEAR', 'VR_MAX_Q', 'VR_MAX_WORKERS']:
        monkeypatch.delenv(name, raising=False)


def _run(args, cwd):
    env = {k: v for k, v in os.environ.items() if not k.startswith('VR_')}
    return subprocess.run(
        [sys.executable, str(SCRIPT)] + args,
        cwd=cwd,
        env=env,
        capture_output=True,
        text=True,
        timeout=120
    )


class TestAnalyzeTickerSubprocess:
    """End-to-end CLI runs."""

    def test_csv_run_writes_outputs(self, price_csv, tmp_path):
        output = tmp_path / 'out' / 'ACME.json'
        table = tmp_path / 'ACME.md'

        result = _run([
            '--csv', str(price_csv),
            '--max-q', '20',
            '--output', str(output),
            '--table', str(table)
        ], cwd=tmp_path)

        assert result.returncode == 0, result.stderr
        assert 'Variance ratio test for ACME (csv)' in result.stdout
        assert 'Results saved to' in result.stdout

        report = json.loads(output.read_text())
        assert report['ticker'] == 'ACME'
        assert len(report['variance_ratio']) == 20
        assert report['data_period']['observations'] == 400
        assert '| q |' in table.read_text()

    def test_default_output_path(self, price_csv, tmp_path):
        result = _run(['--csv', str(price_csv), '--max-q', '5', '--quiet'], cwd=tmp_path)

        assert result.returncode == 0, result.stderr
        assert (tmp_path / 'data' / 'processed' / 'variance_ratio' / 'ACME.json').exists()
        assert 'ACME analysis complete' in result.stdout

    def test_missing_file_fails(self, tmp_path):
        result = _run(['--csv', str(tmp_path / 'missing.csv')], cwd=tmp_path)

        assert result.returncode == 1
        assert 'Could not load prices' in result.stderr


class TestAnalyzeTickerMain:
    """In-process argument handling."""

    def test_requires_ticker_or_csv(self, clean_env):
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 2

    def test_invalid_max_q(self, clean_env, price_csv, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(['--csv', str(price_csv), '--max-q', '0'])

        assert exc_info.value.code == 2
        assert 'Invalid configuration' in capsys.readouterr().err

    def test_monthly_annualization(self, clean_env, price_csv, tmp_path):
        output = tmp_path / 'monthly.json'

        with pytest.raises(SystemExit) as exc_info:
            main(['--csv', str(price_csv), '--max-q', '3', '--periods-per-year', '12',
                  '--output', str(output), '--quiet'])

        assert exc_info.value.code == 0
        report = json.loads(output.read_text())
        assert report['metadata']['config']['periods_per_year'] == 12

    def test_too_short_series_fails(self, clean_env, tmp_path):
        path = tmp_path / 'short.csv'
        path.write_text("Date,Adj Close\n2024-01-02,100.0\n2024-01-03,101.0\n")

        with pytest.raises(SystemExit) as exc_info:
            main(['--csv', str(path), '--output', str(tmp_path / 'short.json')])

        assert exc_info.value.code == 1
