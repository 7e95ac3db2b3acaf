"""Server-side graph cache guarded by a single lock.

Writers hold the lock for one store operation plus the rebuild that follows
it, never across a network call. Readers take the current graph without
locking: rebuild() builds a new graph and swaps the reference, so a reader
sees either the old snapshot or the new one.
"""

from __future__ import annotations

import asyncio
import logging

from endless_tale.graph import AdventureGraph
from endless_tale.store import NodeStore

logger = logging.getLogger(__name__)


class GraphSnapshot:
    def __init__(self, store: NodeStore) -> None:
        self._store = store
        self._lock = asyncio.Lock()
        self._graph = AdventureGraph.from_nodes(store.list_all())
        self._generation = 1

    @property
    def store(self) -> NodeStore:
        return self._store

    @property
    def lock(self) -> asyncio.Lock:
        return self._lock

    @property
    def graph(self) -> AdventureGraph:
        return self._graph

    @property
    def generation(self) -> int:
        return self._generation

    def rebuild(self) -> AdventureGraph:
        """Re-read the store and swap in a freshly built graph."""
        graph = AdventureGraph.from_nodes(self._store.list_all())
        self._graph = graph
        self._generation += 1
        logger.debug("graph rebuilt generation=%d nodes=%d", self._generation, len(graph))
        return graph
