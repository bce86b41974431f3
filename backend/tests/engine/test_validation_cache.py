"""Tests for component_engine.pipeline.validation_cache."""

import json
from unittest.mock import patch

from component_engine.pipeline import validation_cache as vc
from component_engine.pipeline.validation_cache import (
    ValidationCache,
    ValidationRecord,
    validate_component,
)
from component_engine.tree.payload import parse_document


class TestValidateComponent:

    def test_valid_with_tree(self, heading_response):
        record = validate_component(heading_response)
        assert record.is_valid
        assert record.has_tree_data
        assert record.has_well_formed_json
        assert record.errors == ()

    def test_accepts_parsed_document(self, heading_response):
        assert validate_component(parse_document(heading_response)).is_valid

    def test_missing_id_is_error(self):
        record = validate_component({"title": {"rendered": "No id"}})
        assert not record.is_valid
        assert "Component missing ID" in record.errors

    def test_missing_title_is_warning_but_invalid(self, heading_response):
        heading_response["title"] = {"rendered": ""}
        record = validate_component(heading_response)
        assert record.errors == ()
        assert "Component missing title" in record.warnings
        assert not record.is_valid

    def test_no_tree_still_valid(self, empty_response):
        record = validate_component(empty_response)
        assert record.is_valid
        assert not record.has_tree_data
        assert any("fallback" in w for w in record.warnings)

    def test_malformed_json(self):
        record = validate_component({"id": 5, "title": "Broken", "meta": {"_elementor_data": "[{oops"}})
        assert not record.has_well_formed_json
        assert not record.has_tree_data
        assert any("_elementor_data" in w for w in record.warnings)

    def test_deeply_nested_json_is_malformed(self):
        deep = "[" * 100000 + "]" * 100000
        record = validate_component({"id": 5, "title": "Deep", "meta": {"_elementor_data": deep}})
        assert record.is_valid
        assert not record.has_well_formed_json
        assert not record.has_tree_data

    def test_non_object(self):
        record = validate_component("nope")
        assert not record.is_valid
        assert record.errors


class TestValidationCache:

    def test_get_insert_clear(self):
        cache = ValidationCache()
        record = ValidationRecord(is_valid=True, has_tree_data=True, has_well_formed_json=True)
        assert cache.get(1) is None
        cache.insert(1, record)
        assert cache.get(1) is record
        cache.clear()
        assert cache.get(1) is None

    def test_last_writer_wins(self):
        cache = ValidationCache()
        first = ValidationRecord(True, True, True)
        second = ValidationRecord(False, False, True)
        cache.insert(1, first)
        cache.insert(1, second)
        assert cache.get(1) is second

    def test_get_or_validate_memoizes(self, heading_response):
        cache = ValidationCache()
        with patch.object(vc, "validate_component", wraps=vc.validate_component) as spy:
            first = cache.get_or_validate(heading_response)
            second = cache.get_or_validate(heading_response)
        assert first is second
        assert spy.call_count == 1

    def test_stale_until_cleared(self, heading_response):
        cache = ValidationCache()
        assert cache.get_or_validate(heading_response).has_tree_data
        heading_response["meta"] = {}
        assert cache.get_or_validate(heading_response).has_tree_data
        cache.clear()
        assert not cache.get_or_validate(heading_response).has_tree_data


class TestValidationStats:

    def test_counts(self, heading_response, empty_response):
        broken = {"id": 5, "title": "Broken", "meta": {"_elementor_data": "[{oops"}}
        untitled = {"id": 6, "meta": {"_elementor_data": heading_response["meta"]["_elementor_data"]}}
        stats = ValidationCache().stats([heading_response, empty_response, broken, untitled])

        assert stats.total == 4
        assert stats.valid == 3
        assert stats.invalid == 1
        assert stats.missing_tree_data == 2
        assert stats.malformed_json == 1
        assert stats.empty_components == 1

    def test_memoized_by_sorted_ids(self, heading_response, empty_response):
        cache = ValidationCache()
        first = cache.stats([heading_response, empty_response])
        second = cache.stats([empty_response, heading_response])
        assert first is second
        assert cache.size() == {"validation_cache_size": 2, "stats_cache_size": 1}

    def test_clear_resets_both(self, heading_response):
        cache = ValidationCache()
        cache.stats([heading_response])
        cache.clear()
        assert cache.size() == {"validation_cache_size": 0, "stats_cache_size": 0}

    def test_json_string_meta_field(self):
        tree = json.dumps({"elType": "container", "elements": [{"widgetType": "button"}]})
        stats = ValidationCache().stats([{"id": 8, "title": "Single", "meta": {"elementor_data": tree}}])
        assert stats.valid == 1
        assert stats.missing_tree_data == 0
