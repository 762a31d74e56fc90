"""Tests for property value variants and rule models."""

import datetime

import pytest

from propscript.models import MISSING, Rule, format_value, normalize_value, value_kind, values_equal


class TestValuesEqual:
    """Tests for variant-aware value comparison."""

    def test_missing_differs_from_empty_string_and_none(self):
        assert not values_equal(MISSING, "")
        assert not values_equal(MISSING, None)
        assert values_equal(MISSING, MISSING)

    def test_boolean_is_not_number(self):
        assert not values_equal(True, 1)
        assert not values_equal(False, 0)

    def test_numbers_compare_numerically(self):
        assert values_equal(1, 1.0)
        assert not values_equal(1, "1")

    def test_lists_compare_deeply(self):
        assert values_equal(["a", "b"], ["a", "b"])
        assert not values_equal(["a", "b"], ["b", "a"])
        assert not values_equal([1], [True])

    def test_nan_equals_nan(self):
        assert values_equal(float("nan"), float("nan"))
        assert values_equal([float("nan")], [float("nan")])
        assert not values_equal(float("nan"), 1.0)

    def test_mappings_compare_deeply(self):
        assert values_equal({"a": [1, 2]}, {"a": [1, 2]})
        assert not values_equal({"a": 1}, {"a": 1, "b": 2})

    def test_unsupported_type_raises(self):
        with pytest.raises(TypeError):
            value_kind(object())


class TestFormatValue:
    """Tests for string coercion handed to scripts."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (MISSING, ""),
            (None, "null"),
            ("done", "done"),
            (True, "true"),
            (False, "false"),
            (3, "3"),
            (2.0, "2"),
            (2.5, "2.5"),
            (["a", "b", 3], "a,b,3"),
            (["a", None], "a,"),
        ],
    )
    def test_scalar_and_list_formatting(self, value, expected):
        assert format_value(value) == expected

    def test_mapping_is_json(self):
        assert format_value({"k": "v"}) == '{"k": "v"}'


class TestNormalizeValue:
    """Tests for conversion into property value variants."""

    def test_dates_become_iso_strings(self):
        assert normalize_value(datetime.date(2024, 5, 1)) == "2024-05-01"

    def test_containers_are_rebuilt(self):
        nested = {"tags": ("a", "b"), 1: {"x"}}
        result = normalize_value(nested)

        assert result == {"tags": ["a", "b"], "1": ["x"]}
        assert result["tags"] is not nested["tags"]

    def test_unknown_objects_become_strings(self):
        class Token:
            def __str__(self):
                return "token"

        assert normalize_value(Token()) == "token"
        assert normalize_value(MISSING) is MISSING
        assert normalize_value(None) is None


def test_rule_without_property_is_inactive():
    assert not Rule(property_name="", command="x").is_active
    assert not Rule(property_name="status", enabled=False).is_active
    assert Rule(property_name="status").is_active
