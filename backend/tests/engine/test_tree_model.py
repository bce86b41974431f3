"""Tests for component_engine.tree.model and tree.payload."""

import re

import pytest

from component_engine.errors import ErrorKind, ExtractionError
from component_engine.tree.model import NodeKind, TreeNode, count_nodes, generate_element_id
from component_engine.tree.payload import parse_document


class TestNodeKind:

    @pytest.mark.parametrize("raw,expected", [
        ("container", NodeKind.CONTAINER),
        ("Section", NodeKind.SECTION),
        (" COLUMN ", NodeKind.COLUMN),
        ("Widget", NodeKind.WIDGET),
    ])
    def test_parse_case_insensitive(self, raw, expected):
        assert NodeKind.parse(raw) is expected

    @pytest.mark.parametrize("raw", ["grid", "", None, 3])
    def test_parse_unknown_returns_none(self, raw):
        assert NodeKind.parse(raw) is None


class TestGenerateElementId:

    def test_format(self):
        for _ in range(50):
            assert re.fullmatch(r"[a-z0-9]{7}", generate_element_id())


class TestTreeNode:

    def test_widget_to_dict(self):
        node = TreeNode(
            id="abc1234",
            kind=NodeKind.WIDGET,
            widget_kind="heading",
            settings={"title": "Hi"},
        )
        assert node.to_dict() == {
            "id": "abc1234",
            "elType": "widget",
            "isInner": False,
            "isLocked": False,
            "settings": {"title": "Hi"},
            "elements": [],
            "widgetType": "heading",
        }

    def test_container_has_no_widget_type(self):
        node = TreeNode(id="c1", kind=NodeKind.CONTAINER)
        assert "widgetType" not in node.to_dict()

    def test_extras_passed_through(self):
        node = TreeNode(
            id="w1",
            kind=NodeKind.WIDGET,
            widget_kind="html",
            extras={"htmlCache": "<b>x</b>", "editSettings": {"panel": 1}},
        )
        data = node.to_dict()
        assert data["htmlCache"] == "<b>x</b>"
        assert data["editSettings"] == {"panel": 1}

    def test_walk_and_count(self):
        leaf_a = TreeNode(id="a", kind=NodeKind.WIDGET, widget_kind="text-editor")
        leaf_b = TreeNode(id="b", kind=NodeKind.WIDGET, widget_kind="image")
        root = TreeNode(id="r", kind=NodeKind.CONTAINER, children=(leaf_a, leaf_b))
        assert [n.id for n in root.walk()] == ["r", "a", "b"]
        assert count_nodes([root, leaf_a]) == 4


class TestParseDocument:

    def test_rendered_title_and_php_empty_meta(self, empty_response):
        doc = parse_document(empty_response)
        assert doc.id == 9
        assert doc.title == "Empty"
        assert doc.meta == {}

    def test_plain_string_title(self):
        assert parse_document({"id": "5", "title": "Plain"}).title == "Plain"

    def test_featured_media_from_embedded(self, plain_post_response):
        doc = parse_document(plain_post_response)
        assert doc.featured_media.media_id == 301
        assert doc.featured_media.url == "https://cdn.example.org/team.jpg"

    def test_featured_media_zero_is_absent(self):
        assert parse_document({"id": 1, "featured_media": 0}).featured_media is None

    def test_non_object_body_is_malformed(self):
        with pytest.raises(ExtractionError) as exc_info:
            parse_document([{"id": 1}])
        assert exc_info.value.kind is ErrorKind.MALFORMED_RESPONSE
