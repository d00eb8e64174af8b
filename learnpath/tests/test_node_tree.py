"""
Unit tests for the in-memory tree builder

No database: nodes are plain objects with id, parent_id and order.
"""
from types import SimpleNamespace

from learnpath.services.node_tree import (
    build_node_tree,
    collect_subtree_ids,
    group_children,
    would_create_cycle,
)


def n(id, parent_id=None, order=0):
    return SimpleNamespace(id=id, parent_id=parent_id, order=order)


def serialize(node):
    return {"id": node.id}


def ids(forest):
    """Nested (id, [children]) tuples for compact assertions."""
    return [(item["id"], ids(item["children"])) for item in forest]


def flatten(forest):
    out = []
    for item in forest:
        out.append(item["id"])
        out.extend(flatten(item["children"]))
    return out


class TestBuildNodeTree:

    def test_empty_path_gives_empty_forest(self):
        result = build_node_tree([], serialize)
        assert result.roots == []
        assert result.excluded_ids == []

    def test_children_nested_and_sorted_by_order(self):
        nodes = [
            n(1, order=2),
            n(2, order=1),
            n(3, parent_id=1, order=5),
            n(4, parent_id=1, order=0),
            n(5, parent_id=4, order=0),
        ]
        result = build_node_tree(nodes, serialize)

        assert ids(result.roots) == [
            (2, []),
            (1, [(4, [(5, [])]), (3, [])]),
        ]

    def test_equal_order_ties_broken_by_id(self):
        nodes = [n(7, order=1), n(3, order=1), n(5, order=0)]
        result = build_node_tree(nodes, serialize)
        assert [item["id"] for item in result.roots] == [5, 3, 7]

    def test_every_reachable_node_appears_exactly_once(self):
        nodes = [n(i, parent_id=(i - 1 if i > 1 else None), order=i) for i in range(1, 30)]
        nodes += [n(100 + i, parent_id=1, order=i) for i in range(5)]
        result = build_node_tree(nodes, serialize)

        flat = flatten(result.roots)
        assert sorted(flat) == sorted(node.id for node in nodes)
        assert len(flat) == len(set(flat))

    def test_dangling_parent_is_excluded(self):
        nodes = [n(1), n(2, parent_id=1), n(3, parent_id=999), n(4, parent_id=3)]
        result = build_node_tree(nodes, serialize)

        assert sorted(flatten(result.roots)) == [1, 2]
        assert result.excluded_ids == [3, 4]

    def test_cycle_is_excluded_without_looping(self):
        # 10 -> 11 -> 12 -> 10 never reaches a root
        nodes = [n(1), n(10, parent_id=12), n(11, parent_id=10), n(12, parent_id=11), n(13, parent_id=11)]
        result = build_node_tree(nodes, serialize)

        assert flatten(result.roots) == [1]
        assert result.excluded_ids == [10, 11, 12, 13]

    def test_self_parent_is_excluded(self):
        result = build_node_tree([n(1), n(2, parent_id=2)], serialize)
        assert flatten(result.roots) == [1]
        assert result.excluded_ids == [2]

    def test_serializer_output_is_kept(self):
        result = build_node_tree([n(1, order=3)], lambda node: {"id": node.id, "order": node.order})
        assert result.roots == [{"id": 1, "order": 3, "children": []}]


class TestSubtree:

    def test_group_children_puts_roots_under_none(self):
        groups = group_children([n(1), n(2, parent_id=1), n(3)])
        assert [x.id for x in groups[None]] == [1, 3]
        assert [x.id for x in groups[1]] == [2]

    def test_collect_subtree_ids_includes_all_descendants(self):
        nodes = [n(1), n(2, parent_id=1), n(3, parent_id=2), n(4, parent_id=1), n(5)]
        assert collect_subtree_ids(nodes, 1) == [1, 2, 4, 3]
        assert collect_subtree_ids(nodes, 5) == [5]

    def test_collect_subtree_ids_terminates_on_cycle(self):
        nodes = [n(1, parent_id=2), n(2, parent_id=1)]
        assert sorted(collect_subtree_ids(nodes, 1)) == [1, 2]

    def test_would_create_cycle(self):
        nodes = [n(1), n(2, parent_id=1), n(3, parent_id=2), n(4)]
        assert would_create_cycle(nodes, 1, 1) is True
        assert would_create_cycle(nodes, 1, 3) is True
        assert would_create_cycle(nodes, 2, 4) is False
        assert would_create_cycle(nodes, 3, None) is False
