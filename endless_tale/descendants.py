"""Descendant counting over the parent/child relation.

For every node, the number of strict descendants: each child counts once
plus its own descendants. Leaves count 0.

The traversal is depth-first with an explicit stack, memoized per id, so the
whole computation is O(n) and deep chains never hit the recursion limit.
Each id is tagged unvisited (absent), in progress, or done; reaching an id
that is still in progress means the input contains a cycle.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from endless_tale.errors import CyclicGraphError
from endless_tale.models import AdventureNode

_IN_PROGRESS = 1
_DONE = 2


def compute_descendant_counts(nodes: Iterable[AdventureNode]) -> dict[str, int]:
    """Return {node id: strict descendant count}. Raises CyclicGraphError."""
    nodes = list(nodes)
    children: dict[str, list[str]] = {}
    for node in nodes:
        if node.parent_id is not None:
            children.setdefault(node.parent_id, []).append(node.id)

    counts: dict[str, int] = {}
    marks: dict[str, int] = {}
    for node in nodes:
        if marks.get(node.id) != _DONE:
            _count_subtree(node.id, children, counts, marks)
    return counts


def _count_subtree(
    start: str,
    children: dict[str, list[str]],
    counts: dict[str, int],
    marks: dict[str, int],
) -> None:
    marks[start] = _IN_PROGRESS
    stack: list[tuple[str, Iterator[str]]] = [(start, iter(children.get(start, ())))]

    while stack:
        node_id, pending = stack[-1]
        for child_id in pending:
            mark = marks.get(child_id)
            if mark == _DONE:
                continue
            if mark == _IN_PROGRESS:
                raise CyclicGraphError(child_id)
            marks[child_id] = _IN_PROGRESS
            stack.append((child_id, iter(children.get(child_id, ()))))
            break
        else:
            stack.pop()
            counts[node_id] = sum(1 + counts[child_id] for child_id in children.get(node_id, ()))
            marks[node_id] = _DONE
