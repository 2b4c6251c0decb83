"""Tests for edi_backend/x12/segments.py."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

import pytest

from edi_backend.x12.errors import FormatError, ValidationError
from edi_backend.x12.segments import (
    Delimiters,
    build_segment,
    composite,
    fixed_width,
    format_amount,
    format_date,
    format_npi,
    format_quantity,
    format_short_date,
    format_tax_id,
    format_time,
    is_decimal,
    normalize_gender,
    strip_diagnosis_code,
    zero_pad,
)


class TestBuildSegment:
    """Tests for build_segment."""

    def test_joins_elements_and_terminates(self):
        """Test elements are joined with * and the segment ends with ~."""
        assert build_segment("NM1", "41", "2", "CLINIC") == "NM1*41*2*CLINIC~"

    def test_keeps_positional_empty_elements(self):
        """Test empty elements keep their positions."""
        assert build_segment("HL", "1", "", "20", "1") == "HL*1**20*1~"

    def test_none_becomes_empty(self):
        """Test None elements serialize as empty."""
        assert build_segment("REF", "EI", None) == "REF*EI*~"

    def test_numbers_are_stringified(self):
        """Test non-string elements are converted."""
        assert build_segment("SE", 31, "0001") == "SE*31*0001~"

    def test_rejects_embedded_element_separator(self):
        """Test an element containing * raises FormatError."""
        with pytest.raises(FormatError, match="NM103"):
            build_segment("NM1", "41", "2", "SMITH*JONES")

    def test_rejects_embedded_terminator(self):
        """Test an element containing ~ raises FormatError."""
        with pytest.raises(FormatError):
            build_segment("N3", "123 MAIN~ST")

    def test_custom_delimiters(self):
        """Test a different delimiter set is honored."""
        delimiters = Delimiters(element="|", component=">", segment="\n")
        assert build_segment("LX", "1", delimiters=delimiters) == "LX|1\n"

    @pytest.mark.parametrize("value", ["SUITE:4", "A^B"])
    def test_rejects_separators_in_plain_elements(self, value):
        """Test component and repetition separators are rejected outside composites."""
        with pytest.raises(FormatError, match="N301"):
            build_segment("N3", value)

    def test_composite_may_hold_component_separator(self):
        assert build_segment("SV1", composite("HC", "97110", "GP")) == "SV1*HC:97110:GP~"

    def test_composite_rejects_repetition_separator(self):
        with pytest.raises(FormatError):
            build_segment("SV1", composite("HC", "97110^GP"))

    def test_isa_carries_separators(self):
        """Test ISA11 and ISA16 may hold the repetition and component separators."""
        assert build_segment("ISA", "^", "00501", ":") == "ISA*^*00501*:~"


class TestComposite:
    """Tests for composite."""

    def test_joins_components(self):
        """Test components are joined with the component separator."""
        assert composite("HC", "97140", "GP", "59") == "HC:97140:GP:59"

    def test_drops_trailing_empty_components(self):
        """Test trailing empty components are not emitted."""
        assert composite("HC", "97161", "", None) == "HC:97161"

    def test_keeps_inner_empty_components(self):
        """Test an empty component between values is kept."""
        assert composite("11", "", "1") == "11::1"


class TestDateAndTime:
    """Tests for date and time formatting."""

    def test_format_date_from_date(self):
        assert format_date(date(2024, 1, 15)) == "20240115"

    def test_format_date_from_datetime(self):
        assert format_date(datetime(2024, 1, 15, 9, 5)) == "20240115"

    @pytest.mark.parametrize("value", ["2024-01-15", "01/15/2024", "20240115"])
    def test_format_date_from_strings(self, value):
        """Test the accepted string formats."""
        assert format_date(value) == "20240115"

    @pytest.mark.parametrize("value", [None, "", "2024-02-30", "not a date"])
    def test_format_date_rejects_invalid(self, value):
        """Test missing or impossible dates raise FormatError."""
        with pytest.raises(FormatError):
            format_date(value)

    def test_short_date(self):
        """Test ISA09 YYMMDD format."""
        assert format_short_date(date(2024, 3, 15)) == "240315"

    def test_format_time(self):
        assert format_time(datetime(2024, 3, 15, 9, 5)) == "0905"
        assert format_time(time(14, 30)) == "1430"

    def test_format_time_rejects_missing(self):
        with pytest.raises(FormatError):
            format_time(None)


class TestPadding:
    """Tests for fixed-width and zero padding."""

    def test_fixed_width_pads(self):
        assert fixed_width("TMHP", 15) == "TMHP           "

    def test_fixed_width_truncates(self):
        assert fixed_width("A" * 20, 15) == "A" * 15

    def test_fixed_width_none(self):
        assert fixed_width(None, 10) == " " * 10

    def test_zero_pad(self):
        assert zero_pad(42, 9) == "000000042"
        assert zero_pad("7", 4) == "0007"


class TestAmounts:
    """Tests for amount and quantity formatting."""

    def test_two_decimals(self):
        assert format_amount(125.5) == "125.50"
        assert format_amount("45") == "45.00"
        assert format_amount(Decimal("0")) == "0.00"

    def test_rounds_half_up(self):
        """Test half-cent amounts round away from zero."""
        assert format_amount("10.005") == "10.01"
        assert format_amount(Decimal("2.675")) == "2.68"

    @pytest.mark.parametrize("value", [-1, "-0.01", "abc", float("inf"), float("nan")])
    def test_rejects_invalid_amounts(self, value):
        """Test negative, non-numeric and non-finite amounts raise."""
        with pytest.raises(FormatError):
            format_amount(value)

    @pytest.mark.parametrize("value", ["1e30", Decimal("1E+40")])
    def test_rejects_amounts_too_large_for_cents(self, value):
        with pytest.raises(FormatError, match="too large"):
            format_amount(value)

    def test_quantity_whole_numbers(self):
        """Test whole unit counts have no decimal part."""
        assert format_quantity(2) == "2"
        assert format_quantity(Decimal("3.0")) == "3"

    def test_quantity_fractional(self):
        assert format_quantity("1.5") == "1.5"

    @pytest.mark.parametrize("value", [0, -1, "x"])
    def test_quantity_rejects_non_positive(self, value):
        with pytest.raises(FormatError):
            format_quantity(value)


class TestIdentifiers:
    """Tests for NPI, tax ID, gender and diagnosis normalization."""

    def test_npi_strips_formatting(self):
        assert format_npi("123-456-7890") == "1234567890"

    @pytest.mark.parametrize("value", [None, "", "123456789", "12345678901"])
    def test_npi_must_be_ten_digits(self, value):
        """Test short or long NPIs raise instead of being padded."""
        with pytest.raises(ValidationError):
            format_npi(value)

    def test_tax_id_digits_only(self):
        assert format_tax_id("74-1234567") == "741234567"

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("male", "M"),
            ("M", "M"),
            ("Female", "F"),
            ("f", "F"),
            ("unknown", "U"),
            ("", "U"),
            (None, "U"),
            ("x", "U"),
        ],
    )
    def test_normalize_gender(self, value, expected):
        assert normalize_gender(value) == expected

    def test_strip_diagnosis_code(self):
        """Test ICD-10 decimal points are removed."""
        assert strip_diagnosis_code("M54.5") == "M545"
        assert strip_diagnosis_code("m62.81") == "M6281"
        assert strip_diagnosis_code("Z00.00") == "Z0000"


class TestIsDecimal:
    """Tests for is_decimal."""

    @pytest.mark.parametrize("value", ["0", "450.00", "-75.00", ".5", "12.", " 3.25 "])
    def test_accepts_plain_decimals(self, value):
        assert is_decimal(value)

    @pytest.mark.parametrize(
        "value", [None, "", "NaN", "inf", "-Infinity", "1e5", "1E-2", "1,000.00", "--1", "."]
    )
    def test_rejects_everything_else(self, value):
        assert not is_decimal(value)
