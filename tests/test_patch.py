"""Tests for nutshell_client.patch."""

import pytest

from nutshell_client.patch import (
    AppendItem,
    DoneMarker,
    SetField,
    changed_field,
    classify,
)


class TestClassifySet:
    def test_string_value(self):
        assert classify({"op": "set", "field": "title", "value": "Hello"}) == SetField("title", "Hello")

    def test_numeric_value(self):
        assert classify({"op": "set", "field": "read_time_min", "value": 3}) == SetField("read_time_min", 3)

    def test_explicit_null_is_kept(self):
        """A null value means the field was cleared, which is still a set."""
        op = classify({"op": "set", "field": "category", "value": None})
        assert op == SetField("category", None)

    def test_missing_value(self):
        assert classify({"op": "set", "field": "title"}) is None

    def test_missing_field(self):
        assert classify({"op": "set", "value": "x"}) is None

    @pytest.mark.parametrize("value", [{"nested": 1}, [1, 2]])
    def test_non_scalar_value(self, value):
        assert classify({"op": "set", "field": "title", "value": value}) is None


class TestClassifyAppend:
    def test_append(self):
        op = classify({"op": "append", "field": "key_points", "value": "point"})
        assert op == AppendItem("key_points", "point")

    def test_value_coerced_to_string(self):
        op = classify({"op": "append", "field": "key_points", "value": 7})
        assert op == AppendItem("key_points", "7")

    def test_null_value(self):
        assert classify({"op": "append", "field": "key_points", "value": None}) is None

    def test_missing_field(self):
        assert classify({"op": "append", "value": "point"}) is None


class TestClassifyOther:
    def test_done(self):
        assert classify({"op": "done"}) == DoneMarker()

    @pytest.mark.parametrize("raw", [
        {"op": "replace", "field": "title", "value": "x"},
        {"op": None},
        {},
        None,
        "set",
        ["set", "title"],
    ])
    def test_unclassifiable(self, raw):
        assert classify(raw) is None


class TestKnownField:
    def test_known(self):
        assert SetField("main_summary", "x").is_known_field
        assert AppendItem("key_points", "x").is_known_field

    def test_unknown_field_is_still_classified(self):
        op = classify({"op": "set", "field": "mood", "value": "calm"})
        assert op == SetField("mood", "calm")
        assert not op.is_known_field


class TestChangedField:
    def test_set_and_append(self):
        assert changed_field(SetField("title", "x")) == "title"
        assert changed_field(AppendItem("key_points", "x")) == "key_points"

    def test_done_and_none(self):
        assert changed_field(DoneMarker()) is None
        assert changed_field(None) is None
