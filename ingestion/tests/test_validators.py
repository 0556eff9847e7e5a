"""
Tests for core validators.
"""

import pytest
from datetime import date

from ingestion.transforms.validators import (
    validate_price_row,
    check_price_date_monotonicity,
    ValidationError
)


class TestValidatePriceRow:
    """Tests for validate_price_row."""

    def test_valid_row(self):
        validate_price_row({'date': date(2024, 1, 15), 'price': 185.75})
        validate_price_row({'date': date(2024, 1, 15), 'price': 10})

    def test_missing_keys(self):
        with pytest.raises(ValidationError, match="Missing required keys"):
            validate_price_row({'date': date(2024, 1, 15)})

    def test_date_type(self):
        with pytest.raises(ValidationError, match="date must be date"):
            validate_price_row({'date': '2024-01-15', 'price': 1.0})

    @pytest.mark.parametrize("price, message", [
        ('1.0', "must be numeric"),
        (True, "must be numeric"),
        (None, "must be numeric"),
        (float('nan'), "must be finite"),
        (float('inf'), "must be finite"),
        (0.0, "must be positive"),
        (-5.0, "must be positive"),
    ])
    def test_invalid_prices(self, price, message):
        with pytest.raises(ValidationError, match=message):
            validate_price_row({'date': date(2024, 1, 15), 'price': price})

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            validate_price_row({'date': date(2024, 1, 15), 'price': -1.0})


class TestDateMonotonicity:
    """Tests for check_price_date_monotonicity."""

    def test_increasing(self):
        check_price_date_monotonicity([date(2024, 1, 15), date(2024, 1, 16), date(2024, 1, 18)])

    def test_empty_and_single(self):
        check_price_date_monotonicity([])
        check_price_date_monotonicity([date(2024, 1, 15)])

    def test_duplicate(self):
        with pytest.raises(ValidationError, match="Duplicate date"):
            check_price_date_monotonicity([date(2024, 1, 15), date(2024, 1, 15)])

    def test_decreasing(self):
        with pytest.raises(ValidationError, match="not monotonic"):
            check_price_date_monotonicity([date(2024, 1, 16), date(2024, 1, 15)])
