"""Tests for compute_descendant_counts."""

import pytest

from conftest import make_node
from endless_tale.descendants import compute_descendant_counts
from endless_tale.errors import CyclicGraphError
from endless_tale.graph import AdventureGraph, sort_by_descendants


def _reachable_via_parents(nodes, target: str) -> int:
    """Brute force: nodes whose parent chain passes through target."""
    by_id = {n.id: n for n in nodes}
    total = 0
    for n in nodes:
        parent = n.parent_id
        while parent is not None:
            if parent == target:
                total += 1
                break
            parent = by_id[parent].parent_id if parent in by_id else None
    return total


def test_root_with_one_child():
    counts = compute_descendant_counts([make_node("root"), make_node("a", "root")])
    assert counts == {"root": 1, "a": 0}


def test_empty_input():
    assert compute_descendant_counts([]) == {}


def test_nested_tree():
    nodes = [
        make_node("root"),
        make_node("a", "root"),
        make_node("b", "root"),
        make_node("a1", "a"),
        make_node("a2", "a"),
        make_node("a2x", "a2"),
    ]
    counts = compute_descendant_counts(nodes)
    assert counts == {"root": 5, "a": 3, "b": 0, "a1": 0, "a2": 1, "a2x": 0}


def test_matches_parent_chain_walk_for_a_forest():
    nodes = [
        make_node("r1"),
        make_node("r2"),
        make_node("x", "r1"),
        make_node("y", "x"),
        make_node("z", "y"),
        make_node("w", "r2"),
        make_node("v", "r1"),
    ]
    counts = compute_descendant_counts(nodes)
    for n in nodes:
        assert counts[n.id] == _reachable_via_parents(nodes, n.id)


def test_children_listed_before_parent():
    nodes = [make_node("leaf", "mid"), make_node("mid", "root"), make_node("root")]
    assert compute_descendant_counts(nodes) == {"leaf": 0, "mid": 1, "root": 2}


def test_dangling_parent_not_counted():
    counts = compute_descendant_counts([make_node("orphan", "missing")])
    assert counts == {"orphan": 0}
    assert "missing" not in counts


def test_deep_chain_does_not_hit_recursion_limit():
    depth = 5000
    nodes = [make_node("n0")] + [make_node(f"n{i}", f"n{i - 1}") for i in range(1, depth)]
    counts = compute_descendant_counts(nodes)
    assert counts["n0"] == depth - 1
    assert counts[f"n{depth - 1}"] == 0


def test_self_parent_is_a_cycle():
    with pytest.raises(CyclicGraphError) as exc:
        compute_descendant_counts([make_node("loop", "loop")])
    assert exc.value.node_id == "loop"


def test_two_node_cycle_detected():
    with pytest.raises(CyclicGraphError):
        compute_descendant_counts([make_node("a", "b"), make_node("b", "a")])


def test_cycle_below_valid_root_detected():
    nodes = [make_node("root"), make_node("a", "root"), make_node("b", "c"), make_node("c", "b")]
    with pytest.raises(CyclicGraphError):
        compute_descendant_counts(nodes)


def test_children_ordered_by_descendant_count():
    nodes = [make_node("root"), make_node("small", "root"), make_node("big", "root"), make_node("leaf", "root")]
    nodes += [make_node(f"big{i}", "big") for i in range(5)]
    nodes += [make_node(f"small{i}", "small") for i in range(2)]
    graph = AdventureGraph.from_nodes(nodes)
    counts = compute_descendant_counts(nodes)
    assert [counts[n] for n in ("big", "small", "leaf")] == [5, 2, 0]
    ordered = sort_by_descendants(graph.children("root"), counts)
    assert [n.id for n in ordered] == ["big", "small", "leaf"]
