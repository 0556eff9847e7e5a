"""
Tests for analysis configuration loading.
"""

import pytest
import yaml
from datetime import date, timedelta

from analysis.config import (
    AnalysisConfig,
    load_analysis_config,
    ConfigError,
    DEFAULT_HISTORY_DAYS
)
from analysis.calculations.errors import InvalidParameterError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer environment variables out of these tests."""
    for name in ['VR_CONFIG_PATH', 'VR_PERIODS_PER_YEAR', 'VR_MAX_Q', 'VR_MAX_WORKERS']:
        monkeypatch.delenv(name, raising=False)


def _write_yaml(path, data):
    with open(path, 'w') as f:
        yaml.dump(data, f)
    return str(path)


class TestAnalysisConfig:
    """Tests for the config dataclass."""

    def test_defaults(self):
        config = AnalysisConfig()

        assert config.periods_per_year == 252
        assert config.max_q == 100
        assert config.max_workers == 1
        assert config.significance_level == 0.05
        assert config.end_date == date.today()
        assert config.start_date == date.today() - timedelta(days=DEFAULT_HISTORY_DAYS)

    def test_iso_date_strings(self):
        config = AnalysisConfig(start_date='2020-01-01', end_date='2020-12-31')

        assert config.start_date == date(2020, 1, 1)
        assert config.end_date == date(2020, 12, 31)

    @pytest.mark.parametrize("kwargs, message", [
        ({'periods_per_year': 0}, "periods_per_year"),
        ({'max_q': 0}, "max_q"),
        ({'max_workers': 0}, "max_workers"),
        ({'significance_level': 1.5}, "significance_level"),
        ({'start_date': date(2021, 1, 1), 'end_date': date(2020, 1, 1)}, "start_date"),
        ({'end_date': '31.12.2020'}, "ISO date"),
    ])
    def test_invalid_values(self, kwargs, message):
        with pytest.raises(InvalidParameterError, match=message):
            AnalysisConfig(**kwargs)

    def test_to_dict(self):
        config = AnalysisConfig(max_q=10, start_date=date(2020, 1, 1), end_date=date(2021, 1, 1))
        data = config.to_dict()

        assert data['max_q'] == 10
        assert data['start_date'] == date(2020, 1, 1)


class TestLoadAnalysisConfig:
    """Tests for layered config loading."""

    def test_no_file_gives_defaults(self):
        config = load_analysis_config()
        assert config.max_q == 100

    def test_yaml_analysis_section(self, tmp_path):
        path = _write_yaml(tmp_path / 'vr.yml', {
            'analysis': {'periods_per_year': 12, 'max_q': 24, 'start_date': '2000-01-31'}
        })

        config = load_analysis_config(path)

        assert config.periods_per_year == 12
        assert config.max_q == 24
        assert config.start_date == date(2000, 1, 31)

    def test_yaml_flat_mapping(self, tmp_path):
        path = _write_yaml(tmp_path / 'vr.yml', {'max_workers': 4})
        assert load_analysis_config(path).max_workers == 4

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        path = _write_yaml(tmp_path / 'vr.yml', {'max_q': 7})
        monkeypatch.setenv('VR_CONFIG_PATH', path)

        assert load_analysis_config().max_q == 7

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = _write_yaml(tmp_path / 'vr.yml', {'max_q': 7, 'periods_per_year': 12})
        monkeypatch.setenv('VR_MAX_Q', '30')

        config = load_analysis_config(path)

        assert config.max_q == 30
        assert config.periods_per_year == 12

    def test_explicit_overrides_win(self, tmp_path, monkeypatch):
        path = _write_yaml(tmp_path / 'vr.yml', {'max_q': 7})
        monkeypatch.setenv('VR_MAX_Q', '30')

        config = load_analysis_config(path, max_q=50, periods_per_year=None)

        assert config.max_q == 50
        assert config.periods_per_year == 252

    def test_env_not_integer(self, monkeypatch):
        monkeypatch.setenv('VR_MAX_WORKERS', 'many')

        with pytest.raises(ConfigError, match="VR_MAX_WORKERS"):
            load_analysis_config()

    def test_missing_file(self):
        with pytest.raises(ConfigError, match="not found"):
            load_analysis_config('/nonexistent/path.yml')

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / 'bad.yml'
        path.write_text("invalid: yaml: content: [unclosed")

        with pytest.raises(ConfigError, match="Failed to load config"):
            load_analysis_config(str(path))

    def test_unknown_file_key(self, tmp_path):
        path = _write_yaml(tmp_path / 'vr.yml', {'analysis': {'max_lag': 10}})

        with pytest.raises(ConfigError, match="Unknown config options"):
            load_analysis_config(path)

    def test_unknown_override(self):
        with pytest.raises(ConfigError, match="Unknown config option"):
            load_analysis_config(None, lag=3)

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'empty.yml'
        path.write_text("")

        assert load_analysis_config(str(path)).max_q == 100

    def test_invalid_value_from_file(self, tmp_path):
        path = _write_yaml(tmp_path / 'vr.yml', {'max_q': 0})

        with pytest.raises(InvalidParameterError):
            load_analysis_config(path)
