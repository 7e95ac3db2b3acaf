"""Indexed, read-only view over a full node listing.

The graph is always built wholesale from a snapshot (from_nodes) and never
patched; any mutation of the store is followed by a fresh build.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from endless_tale.models import AdventureNode


class AdventureGraph:
    def __init__(self) -> None:
        self._nodes: dict[str, AdventureNode] = {}
        self._children_by_parent: dict[str, list[str]] = {}
        self._root_ids: list[str] = []

    @classmethod
    def from_nodes(cls, nodes: Iterable[AdventureNode]) -> AdventureGraph:
        """Build all indices in one pass.

        A duplicate id replaces the earlier node in the id map, but child and
        root lists are appended positionally, so the id is listed twice.
        """
        graph = cls()
        for node in nodes:
            if node.parent_id is None:
                graph._root_ids.append(node.id)
            else:
                graph._children_by_parent.setdefault(node.parent_id, []).append(node.id)
            graph._nodes[node.id] = node
        return graph

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def node(self, node_id: str) -> AdventureNode | None:
        return self._nodes.get(node_id)

    def children_ids(self, parent_id: str) -> list[str]:
        return list(self._children_by_parent.get(parent_id, ()))

    def children(self, parent_id: str) -> list[AdventureNode]:
        """Child nodes in snapshot order; ids that fail to resolve are dropped."""
        return [
            self._nodes[child_id]
            for child_id in self._children_by_parent.get(parent_id, ())
            if child_id in self._nodes
        ]

    def has_children(self, node_id: str) -> bool:
        return bool(self.children(node_id))

    def roots(self) -> list[AdventureNode]:
        return [self._nodes[root_id] for root_id in self._root_ids if root_id in self._nodes]

    def root_path(self) -> list[str]:
        """Singleton path for a single-root graph, empty otherwise."""
        roots = self.roots()
        if len(roots) == 1:
            return [roots[0].id]
        return []

    def nodes(self) -> list[AdventureNode]:
        return list(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    # ------------------------------------------------------------------
    # Path views
    # ------------------------------------------------------------------

    def segments(self, path: Iterable[str]) -> list[tuple[int, AdventureNode]]:
        """Nodes along a path with their path index, skipping missing ids."""
        return [
            (i, self._nodes[node_id])
            for i, node_id in enumerate(path)
            if node_id in self._nodes
        ]

    def options(self, path: Sequence[str]) -> list[AdventureNode]:
        """What the reader can choose next: children of the path tip, or the roots."""
        if not path:
            return self.roots()
        return self.children(path[-1])


def sort_by_descendants(
    nodes: Iterable[AdventureNode], counts: Mapping[str, int]
) -> list[AdventureNode]:
    """Order nodes by descendant count, largest first; ties keep their order."""
    return sorted(nodes, key=lambda node: counts.get(node.id, 0), reverse=True)
