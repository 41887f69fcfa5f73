"""
Unit tests for the input validators.
"""

import pytest

from perfspotter.validation import (
    ValidationError,
    validate_boolean,
    validate_enum_choice,
    validate_non_empty_string,
    validate_path_exists,
    validate_positive_float,
    validate_positive_integer,
)


@pytest.mark.unit
class TestNumberValidators:
    """Test cases for numeric validators."""

    def test_positive_integer(self):
        """Test integer conversion and bounds."""
        assert validate_positive_integer("8") == 8
        assert validate_positive_integer(0, min_value=0) == 0
        with pytest.raises(ValidationError):
            validate_positive_integer(0)
        with pytest.raises(ValidationError):
            validate_positive_integer(300, max_value=256)
        with pytest.raises(ValidationError):
            validate_positive_integer("eight")

    def test_boolean_is_not_an_integer(self):
        """Test that booleans are rejected as integers."""
        with pytest.raises(ValidationError):
            validate_positive_integer(True)

    def test_positive_float(self):
        """Test float conversion and bounds."""
        assert validate_positive_float("0.5") == 0.5
        assert validate_positive_float(3) == 3.0
        with pytest.raises(ValidationError):
            validate_positive_float(-0.1)
        with pytest.raises(ValidationError):
            validate_positive_float(5.0, max_value=1.0)


@pytest.mark.unit
class TestOtherValidators:
    """Test cases for the remaining validators."""

    def test_boolean(self):
        """Test booleans and their string spellings."""
        assert validate_boolean(True) is True
        assert validate_boolean(" FALSE ") is False
        with pytest.raises(ValidationError):
            validate_boolean(1)

    def test_non_empty_string(self):
        """Test that strings are stripped and blanks rejected."""
        assert validate_non_empty_string("  ramp ") == "ramp"
        with pytest.raises(ValidationError):
            validate_non_empty_string("   ")
        with pytest.raises(ValidationError):
            validate_non_empty_string(None)

    def test_enum_choice(self):
        """Test exact and case-insensitive choices."""
        assert validate_enum_choice("csv", ["parquet", "csv"]) == "csv"
        assert validate_enum_choice("CSV", ["parquet", "csv"], case_sensitive=False) == "csv"
        with pytest.raises(ValidationError):
            validate_enum_choice("CSV", ["parquet", "csv"])

    def test_path_exists(self, temp_dir):
        """Test that existing paths pass and missing paths fail."""
        assert validate_path_exists(temp_dir) == str(temp_dir)
        with pytest.raises(ValidationError):
            validate_path_exists(temp_dir / "missing")
