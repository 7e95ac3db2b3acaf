"""Reader navigation through the graph.

A path is the ordered list of node ids the reader has walked. An empty path
means nothing is chosen yet and the reader picks among the roots. Every
transition closes the "contribute" form.
"""

from __future__ import annotations

from collections.abc import Iterator

from endless_tale.errors import InvalidChoiceError
from endless_tale.graph import AdventureGraph


class PathState:
    """Client-held walk from a root to the current node.

    Args:
        single_root: when true, reset() starts at the graph's single root
                     instead of an empty path.
    """

    def __init__(self, ids: list[str] | None = None, single_root: bool = False) -> None:
        self._ids: list[str] = list(ids or [])
        self.single_root = single_root
        self.show_contribute = False

    @property
    def ids(self) -> list[str]:
        return list(self._ids)

    @property
    def last(self) -> str | None:
        return self._ids[-1] if self._ids else None

    @property
    def is_empty(self) -> bool:
        return not self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._ids))

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def choose(self, graph: AdventureGraph, node_id: str) -> None:
        """Step to node_id, which must be a child of the tip (or a root)."""
        if self._ids:
            valid = node_id in graph.children_ids(self._ids[-1]) and node_id in graph
        else:
            valid = any(root.id == node_id for root in graph.roots())
        if not valid:
            where = f"under {self._ids[-1]!r}" if self._ids else "among the roots"
            raise InvalidChoiceError(f"Node {node_id!r} is not a choice {where}")
        self._ids.append(node_id)
        self.show_contribute = False

    def revert_to(self, index: int) -> None:
        """Truncate to path[:index + 1]; the next choice branches from there."""
        if index < 0 or index >= len(self._ids):
            raise IndexError(f"Path index {index} out of range")
        del self._ids[index + 1:]
        self.show_contribute = False

    def reset(self, graph: AdventureGraph) -> None:
        self._ids = graph.root_path() if self.single_root else []
        self.show_contribute = False

    def after_submit(self, new_id: str) -> None:
        """Submitting a contribution moves the reader onto it."""
        self._ids.append(new_id)
        self.show_contribute = False

    def discard(self, node_id: str) -> None:
        """Drop node_id and everything after it (used after a deletion)."""
        if node_id in self._ids:
            del self._ids[self._ids.index(node_id):]

    def toggle_contribute(self) -> None:
        self.show_contribute = not self.show_contribute

    def close_contribute(self) -> None:
        self.show_contribute = False
