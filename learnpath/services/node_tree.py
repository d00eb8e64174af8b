"""
learnpath/services/node_tree.py
In-memory tree assembly for a path's flat node table

Pure functions, no database access:
- build_node_tree: flat rows → sorted forest, unreachable rows reported
- collect_subtree_ids: a node plus every descendant
- would_create_cycle: write-time guard for parent changes
"""
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Set


@dataclass
class TreeBuildResult:
    roots: List[Dict[str, Any]] = field(default_factory=list)
    excluded_ids: List[int] = field(default_factory=list)


def _sort_key(node) -> tuple:
    return (node.order if node.order is not None else 0, node.id)


def group_children(nodes: Iterable) -> Dict[Optional[int], List]:
    """parent_id → children sorted by (order, id). Roots are under None."""
    children = defaultdict(list)
    for node in nodes:
        children[node.parent_id].append(node)
    for siblings in children.values():
        siblings.sort(key=_sort_key)
    return children


def build_node_tree(nodes: Iterable, serialize: Callable[[Any], Dict[str, Any]]) -> TreeBuildResult:
    """
    Rebuild the forest of one path.

    Walks from null-parent roots with a visited set, so every reachable
    node appears exactly once. Nodes whose ancestor chain dangles or cycles
    are not reachable and are returned in `excluded_ids`.
    `serialize(node)` must return a dict; a "children" list is added to it.
    """
    nodes = list(nodes)
    children = group_children(nodes)
    visited: Set[int] = set()

    def attach(node) -> Dict[str, Any]:
        visited.add(node.id)
        item = serialize(node)
        item["children"] = [
            attach(child) for child in children.get(node.id, []) if child.id not in visited
        ]
        return item

    roots = [attach(root) for root in children.get(None, []) if root.id not in visited]

    excluded = sorted(node.id for node in nodes if node.id not in visited)
    return TreeBuildResult(roots=roots, excluded_ids=excluded)


def collect_subtree_ids(nodes: Iterable, root_id: int) -> List[int]:
    """root_id followed by all of its descendants (breadth first)."""
    children = group_children(nodes)
    result = [root_id]
    seen = {root_id}
    queue = [root_id]
    while queue:
        current = queue.pop(0)
        for child in children.get(current, []):
            if child.id not in seen:
                seen.add(child.id)
                result.append(child.id)
                queue.append(child.id)
    return result


def would_create_cycle(nodes: Iterable, node_id: int, new_parent_id: Optional[int]) -> bool:
    """True if making new_parent_id the parent of node_id closes a loop."""
    if new_parent_id is None:
        return False
    return new_parent_id in set(collect_subtree_ids(nodes, node_id))
