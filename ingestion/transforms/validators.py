"""
Validation rules for price observations.
Pure functions that raise on the first violation found.
"""

import math
from datetime import date
from typing import Any, Mapping, Sequence

REQUIRED_PRICE_KEYS = frozenset({'date', 'price'})


class ValidationError(ValueError):
    """Raised when price data breaks a validation rule."""
    pass


def validate_price_row(row: Mapping[str, Any]) -> None:
    """
    Check one (date, price) observation.

    The price must be a real number (bools excluded), finite and strictly
    positive so that its logarithm exists.

    Args:
        row: Mapping with 'date' and 'price' keys

    Raises:
        ValidationError: On a missing key, wrong type or unusable price
    """
    missing = REQUIRED_PRICE_KEYS.difference(row)
    if missing:
        raise ValidationError(f"Missing required keys: {sorted(missing)}")

    observed = row['date']
    if not isinstance(observed, date):
        raise ValidationError(f"date must be date, got {type(observed).__name__}")

    price = row['price']
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise ValidationError(f"price must be numeric, got {type(price).__name__}")

    if not math.isfinite(price):
        raise ValidationError(f"price must be finite, got {price}")

    if price <= 0:
        raise ValidationError(f"price must be positive, got {price}")


def check_price_date_monotonicity(dates: Sequence[date]) -> None:
    """
    Require strictly increasing observation dates.

    Raises:
        ValidationError: On a repeated date or a date earlier than its predecessor
    """
    for previous, current in zip(dates, dates[1:]):
        if current == previous:
            raise ValidationError(f"Duplicate date found in price series: {current}")
        if current < previous:
            raise ValidationError(
                f"Price series dates not monotonic: {previous} comes before {current}"
            )
