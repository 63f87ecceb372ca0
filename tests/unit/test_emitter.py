"""
Unit tests for stripe emission
"""

import pytest

from stripes.emitter import check_radius, emit
from stripes.errors import InvalidConfiguration
from stripes.stripe import PartialStripeRecord


class TestEmitWindow:
    """Tests for the sliding window"""

    def test_radius_one(self):
        """Each token sees its direct neighbors"""
        records = emit(["a", "b", "c"], radius=1)

        assert records == [
            ("a", {"b": 1}),
            ("b", {"a": 1, "c": 1}),
            ("c", {"b": 1}),
        ]
        assert all(isinstance(r, PartialStripeRecord) for r in records)

    def test_default_radius_is_one(self):
        assert emit(["a", "b", "c"]) == emit(["a", "b", "c"], radius=1)

    def test_window_truncated_at_line_end(self):
        """The last token only sees what precedes it"""
        records = emit(["a", "b", "c"], radius=1)
        assert records[2] == ("c", {"b": 1})
        assert records[0] == ("a", {"b": 1})

    def test_radius_two(self):
        records = emit(["a", "b", "c", "d"], radius=2)

        assert records == [
            ("a", {"b": 1, "c": 1}),
            ("b", {"a": 1, "c": 1, "d": 1}),
            ("c", {"a": 1, "b": 1, "d": 1}),
            ("d", {"b": 1, "c": 1}),
        ]

    def test_radius_larger_than_line(self):
        assert emit(["x", "y"], radius=10) == [("x", {"y": 1}), ("y", {"x": 1})]

    def test_repeated_neighbors_are_counted(self):
        records = emit(["a", "a", "a"], radius=1)
        assert records == [("a", {"a": 1}), ("a", {"a": 2}), ("a", {"a": 1})]

    def test_radius_zero_gives_empty_stripes(self):
        assert emit(["a", "b"], radius=0) == [("a", {}), ("b", {})]

    def test_single_token_line_emits_empty_stripe(self):
        assert emit(["alone"], radius=3) == [("alone", {})]

    def test_empty_line_emits_nothing(self):
        assert emit([], radius=1) == []

    def test_empty_tokens_are_skipped(self):
        """Empty strings are neither central words nor neighbors"""
        assert emit(["a", "", "b"], radius=1) == [("a", {}), ("b", {})]

    def test_record_order_follows_token_order(self):
        tokens = ["the", "cat", "sat", "on", "the", "mat"]
        assert [r.word for r in emit(tokens, radius=2)] == tokens

    def test_each_record_gets_its_own_stripe(self):
        records = emit(["a", "b", "a"], radius=1)
        records[0].stripe["zzz"] = 99
        assert "zzz" not in records[2].stripe

    def test_counts_are_positive(self):
        for radius in range(0, 4):
            for _, stripe in emit(["a", "b", "a", "c", "b", "a"], radius):
                assert all(count > 0 for count in stripe.values())


class TestRadiusValidation:
    """Tests for radius checking"""

    def test_negative_radius_raises(self):
        with pytest.raises(InvalidConfiguration):
            emit(["a", "b"], radius=-1)

    def test_invalid_configuration_is_a_value_error(self):
        with pytest.raises(ValueError):
            emit(["a"], radius=-5)

    @pytest.mark.parametrize("radius", ["1", 1.0, None, True])
    def test_non_integer_radius_raises(self, radius):
        with pytest.raises(InvalidConfiguration):
            check_radius(radius)

    def test_negative_radius_raises_even_for_empty_line(self):
        with pytest.raises(InvalidConfiguration):
            emit([], radius=-1)

    def test_zero_is_valid(self):
        assert check_radius(0) == 0
