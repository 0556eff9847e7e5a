"""
Analysis configuration.
Defaults, overridden by a YAML file, then environment, then explicit values.
"""

import os
import logging
import yaml
from dataclasses import dataclass, fields, asdict
from datetime import date, timedelta
from pathlib import Path
from typing import Dict, Any, Optional
from dotenv import load_dotenv

from analysis.calculations.errors import InvalidParameterError

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_DAYS = 365 * 10

ENV_OVERRIDES = {
    'VR_PERIODS_PER_YEAR': 'periods_per_year',
    'VR_MAX_Q': 'max_q',
    'VR_MAX_WORKERS': 'max_workers',
}


class ConfigError(ValueError):
    """Raised when a configuration file cannot be loaded."""
    pass


@dataclass
class AnalysisConfig:
    """Configuration for a variance ratio analysis run."""
    periods_per_year: int = 252
    max_q: int = 100
    max_workers: int = 1
    significance_level: float = 0.05
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def __post_init__(self):
        """Validate and set defaults."""
        if self.periods_per_year <= 0:
            raise InvalidParameterError("periods_per_year must be positive")

        if self.max_q < 1:
            raise InvalidParameterError("max_q must be >= 1")

        if self.max_workers < 1:
            raise InvalidParameterError("max_workers must be >= 1")

        if not 0 < self.significance_level < 1:
            raise InvalidParameterError("significance_level must be in (0, 1)")

        self.start_date = _parse_config_date(self.start_date, 'start_date')
        self.end_date = _parse_config_date(self.end_date, 'end_date')

        if self.end_date is None:
            self.end_date = date.today()

        if self.start_date is None:
            self.start_date = self.end_date - timedelta(days=DEFAULT_HISTORY_DAYS)

        if self.start_date > self.end_date:
            raise InvalidParameterError("start_date must be <= end_date")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _parse_config_date(value: Any, name: str) -> Optional[date]:
    """Accept a date, an ISO date string or None."""
    if value is None or isinstance(value, date):
        return value

    try:
        return date.fromisoformat(str(value))
    except ValueError as e:
        raise InvalidParameterError(f"{name} must be an ISO date (YYYY-MM-DD), got {value!r}") from e


def load_analysis_config(
    config_path: Optional[str] = None,
    **overrides: Any
) -> AnalysisConfig:
    """
    Build an AnalysisConfig from file, environment and explicit overrides.

    Args:
        config_path: YAML file path (default: $VR_CONFIG_PATH, or none)
        **overrides: Field values taking precedence; None values are ignored

    Returns:
        Validated AnalysisConfig

    Raises:
        ConfigError: If the config file is missing, malformed or has unknown keys
        InvalidParameterError: If a resulting value is out of range
    """
    known = {f.name for f in fields(AnalysisConfig)}
    values: Dict[str, Any] = {}

    if config_path is None:
        config_path = os.getenv('VR_CONFIG_PATH')

    if config_path:
        values.update(_read_config_file(config_path))

    for env_name, field_name in ENV_OVERRIDES.items():
        env_value = os.getenv(env_name)
        if env_value:
            try:
                values[field_name] = int(env_value)
            except ValueError as e:
                raise ConfigError(f"{env_name} must be an integer, got {env_value!r}") from e

    for key, value in overrides.items():
        if key not in known:
            raise ConfigError(f"Unknown config option: {key}")
        if value is not None:
            values[key] = value

    return AnalysisConfig(**values)


def _read_config_file(config_path: str) -> Dict[str, Any]:
    """Read the 'analysis' section (or the whole mapping) of a YAML file."""
    config_file = Path(config_path)
    if not config_file.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config: {e}") from e

    if config is None:
        return {}

    if not isinstance(config, dict):
        raise ConfigError("Config file must contain a mapping")

    section = config.get('analysis', config)
    if not isinstance(section, dict):
        raise ConfigError("Config 'analysis' section must be a mapping")

    known = {f.name for f in fields(AnalysisConfig)}
    unknown = set(section) - known
    if unknown:
        raise ConfigError(f"Unknown config options: {sorted(unknown)}")

    logger.info(f"Loaded analysis config from {config_path}")
    return dict(section)
