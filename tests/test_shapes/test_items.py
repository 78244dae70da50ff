"""Tests for adminlens.shapes.items -- record collection extraction."""

from __future__ import annotations

import copy

import pytest

from adminlens.shapes.items import extract_items, is_record_list


class TestExtractItems:
    def test_none(self) -> None:
        assert extract_items(None) is None

    def test_empty_list(self) -> None:
        assert extract_items([]) == []

    def test_list_is_copied(self) -> None:
        data = [{"id": 1}, {"id": 2}]
        result = extract_items(data)
        assert result == data
        assert result is not data

    def test_list_of_scalars_returned_as_is(self) -> None:
        assert extract_items([1, 2, 3]) == [1, 2, 3]

    @pytest.mark.parametrize("key", ["points", "data", "items", "results", "records", "entries", "rows"])
    def test_envelope_keys(self, key: str) -> None:
        assert extract_items({key: [{"id": 1}], "total": 1}) == [{"id": 1}]

    def test_envelope_priority(self) -> None:
        data = {"results": [{"id": "r"}], "data": [{"id": "d"}]}
        assert extract_items(data) == [{"id": "d"}]

    def test_skips_empty_and_scalar_lists(self) -> None:
        data = {"points": [], "data": ["a", "b"], "items": [{"id": 1}]}
        assert extract_items(data) == [{"id": 1}]

    def test_no_collection(self) -> None:
        assert extract_items({"total": 10, "page": 1}) is None

    def test_unknown_wrapper_key(self) -> None:
        assert extract_items({"users": [{"id": 1}]}) is None

    def test_custom_envelope_keys(self) -> None:
        assert extract_items({"users": [{"id": 1}]}, envelope_keys=["users"]) == [{"id": 1}]

    @pytest.mark.parametrize("value", [42, "text", True, 3.5])
    def test_scalars(self, value: object) -> None:
        assert extract_items(value) is None

    def test_never_mutates(self) -> None:
        data = {"data": [{"id": 1, "tags": ["a"]}], "total": 1}
        before = copy.deepcopy(data)
        result = extract_items(data)
        result.append({"id": 2})
        assert data == before


class TestIsRecordList:
    def test_records(self) -> None:
        assert is_record_list([{"a": 1}])

    @pytest.mark.parametrize("value", [[], [1], "abc", None, {"a": 1}])
    def test_non_records(self, value: object) -> None:
        assert not is_record_list(value)
