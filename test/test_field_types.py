"""Tests for the field type taxonomy and its casters."""

from datetime import date, datetime

import pytest

from custom_fields.exceptions import CastError, ValidationError
from custom_fields.models.field_type import FieldType
from custom_fields.services.validation import cast_value


class TestFieldTypeMetadata:
    """Test per-type labels, default rules and flags."""

    def test_all_types_present(self):
        assert {ft.value for ft in FieldType} == {"text", "textarea", "number", "boolean", "date", "select"}

    def test_default_rules(self):
        assert FieldType.TEXT.default_rules == ["string", "max:255"]
        assert FieldType.TEXTAREA.default_rules == ["string"]
        assert FieldType.NUMBER.default_rules == ["numeric"]
        assert FieldType.BOOLEAN.default_rules == ["boolean"]
        assert FieldType.DATE.default_rules == ["date"]
        assert FieldType.SELECT.default_rules == ["string"]

    def test_default_rules_are_copies(self):
        rules = FieldType.TEXT.default_rules
        rules.append("required")
        assert FieldType.TEXT.default_rules == ["string", "max:255"]

    def test_translation_support(self):
        translatable = {ft for ft in FieldType if ft.supports_translation}
        assert translatable == {FieldType.TEXT, FieldType.TEXTAREA}

    def test_only_select_requires_options(self):
        assert [ft for ft in FieldType if ft.requires_options] == [FieldType.SELECT]

    def test_choices(self):
        choices = FieldType.choices()
        assert choices["text"] == "Text"
        assert choices["select"] == "Select"
        assert len(choices) == 6

    def test_lookup_by_value(self):
        assert FieldType("number") is FieldType.NUMBER
        with pytest.raises(ValueError):
            FieldType("color")


class TestCasting:
    """Test coercion of raw values to Python types."""

    def test_text(self):
        assert FieldType.TEXT.cast("Technology") == "Technology"
        assert FieldType.TEXT.cast(42) == "42"

    def test_text_rejects_collections(self):
        with pytest.raises(CastError):
            FieldType.TEXT.cast(["a"])
        with pytest.raises(CastError):
            FieldType.TEXTAREA.cast({"a": 1})

    def test_text_rejects_booleans(self):
        with pytest.raises(CastError):
            FieldType.TEXT.cast(True)

    def test_number(self):
        assert FieldType.NUMBER.cast(1000000) == 1000000.0
        assert isinstance(FieldType.NUMBER.cast(3), float)
        assert FieldType.NUMBER.cast(" 12.5 ") == 12.5

    @pytest.mark.parametrize("raw", ["abc", True, None, float("nan"), "inf"])
    def test_number_rejects(self, raw):
        with pytest.raises(CastError):
            FieldType.NUMBER.cast(raw)

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (True, True),
            (False, False),
            (1, True),
            (0, False),
            ("1", True),
            ("0", False),
            ("true", True),
            ("False", False),
            ("yes", True),
            ("off", False),
        ],
    )
    def test_boolean(self, raw, expected):
        assert FieldType.BOOLEAN.cast(raw) is expected

    @pytest.mark.parametrize("raw", ["maybe", 2, 0.5, [], None])
    def test_boolean_rejects(self, raw):
        with pytest.raises(CastError):
            FieldType.BOOLEAN.cast(raw)

    def test_date(self):
        assert FieldType.DATE.cast("2020-01-15") == date(2020, 1, 15)
        assert FieldType.DATE.cast(date(2020, 1, 15)) == date(2020, 1, 15)
        assert FieldType.DATE.cast(datetime(2020, 1, 15, 9, 30)) == date(2020, 1, 15)
        assert FieldType.DATE.cast("2020-01-15T09:30:00") == date(2020, 1, 15)

    @pytest.mark.parametrize("raw", ["15/01/2020", "not a date", 20200115])
    def test_date_rejects(self, raw):
        with pytest.raises(CastError):
            FieldType.DATE.cast(raw)

    def test_select_casts_to_string(self):
        assert FieldType.SELECT.cast("high") == "high"

    def test_serialize_date(self):
        assert FieldType.DATE.serialize(date(2020, 1, 15)) == "2020-01-15"
        assert FieldType.NUMBER.serialize(5.0) == 5.0


class TestCastError:
    """Test the error raised for uncastable values."""

    def test_cast_error_details(self):
        with pytest.raises(CastError) as exc_info:
            FieldType.NUMBER.cast("abc", field="annual_revenue")

        error = exc_info.value
        assert error.field == "annual_revenue"
        assert error.field_type == "number"
        assert error.value == "abc"
        assert "cannot be cast to number" in error.message

    def test_cast_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            cast_value("boolean", "maybe")

    def test_cast_value_accepts_enum_or_string(self):
        assert cast_value(FieldType.NUMBER, "5") == 5.0
        assert cast_value("number", "5") == 5.0
