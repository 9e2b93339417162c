"""Tests for spectui.navigation.tree."""

from __future__ import annotations

from spectui.models import BrokenMarker, ComponentGroup, CyclicMarker, Reference
from spectui.navigation.tree import format_scalar, tree_item, tree_items


class TestTreeItems:
    """Mappings and sequences become drill-down levels."""

    def test_mapping_keys_in_order(self) -> None:
        items = tree_items({"type": "object", "required": ["id"], "properties": {"id": {}}})
        assert [item.label for item in items] == [
            "type: object",
            "required [1]",
            "properties {1}",
        ]

    def test_containers_have_children(self) -> None:
        (item,) = tree_items({"properties": {"id": {"type": "integer"}}})
        assert item.is_container
        assert item.children is not None
        assert item.children[0].label == "id {1}"
        assert item.children[0].children[0].label == "type: integer"

    def test_sequence_indices(self) -> None:
        items = tree_items(["a", {"b": 1}])
        assert [item.label for item in items] == ["[0]: a", "[1] {1}"]

    def test_empty_containers_are_leaves(self) -> None:
        items = tree_items({"a": {}, "b": []})
        assert [item.label for item in items] == ["a: {}", "b: []"]
        assert not any(item.is_container for item in items)

    def test_scalar_root(self) -> None:
        (item,) = tree_items("plain text")
        assert item.label == "plain text"
        assert not item.is_container

    def test_markers_are_leaves(self) -> None:
        cyclic = CyclicMarker(reference=Reference(group=ComponentGroup.SCHEMAS, name="Node"))
        broken = BrokenMarker(ref="#/definitions/X", reason="unsupported")
        items = tree_items({"items": cyclic, "schema": broken})
        assert items[0].label == "items: <cyclic $ref #/components/schemas/Node>"
        assert items[1].label == "schema: <broken $ref #/definitions/X: unsupported>"
        assert not items[0].is_container
        assert items[0].value is cyclic


class TestFormatScalar:
    def test_strings_collapse_whitespace(self) -> None:
        assert format_scalar("line one\n  line two") == "line one line two"

    def test_json_literals(self) -> None:
        assert format_scalar(True) == "true"
        assert format_scalar(None) == "null"
        assert format_scalar(1.5) == "1.5"

    def test_tree_item_label(self) -> None:
        assert tree_item("deprecated", True).label == "deprecated: true"
