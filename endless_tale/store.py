"""Node stores.

A store is the source of truth for the adventure. It only knows how to list
every node, insert a node unless its id is taken, and delete by id; the
graph and descendant counts are always re-derived from list_all().

Two implementations are provided:

    MemoryNodeStore — a plain list. Used by tests and throwaway servers.
    JsonlNodeStore  — one JSON object per line in a flat file:

        {base}/
          adventurenodes.jsonl   ← append-only on insert, rewritten on delete
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from endless_tale.models import AdventureNode

logger = logging.getLogger(__name__)

NODES_FILE = "adventurenodes.jsonl"


# ---------------------------------------------------------------------------
# Protocol — every store must match this interface
# ---------------------------------------------------------------------------

class NodeStore(Protocol):
    def list_all(self) -> list[AdventureNode]: ...

    def insert_if_absent(self, node: AdventureNode) -> bool: ...

    def delete_by_id(self, node_id: str) -> bool: ...


# ---------------------------------------------------------------------------
# MemoryNodeStore
# ---------------------------------------------------------------------------

class MemoryNodeStore:
    def __init__(self, nodes: Iterable[AdventureNode] = ()) -> None:
        self._nodes: list[AdventureNode] = []
        for node in nodes:
            self.insert_if_absent(node)

    def list_all(self) -> list[AdventureNode]:
        return list(self._nodes)

    def insert_if_absent(self, node: AdventureNode) -> bool:
        if any(n.id == node.id for n in self._nodes):
            return False
        self._nodes.append(node)
        return True

    def delete_by_id(self, node_id: str) -> bool:
        for i, node in enumerate(self._nodes):
            if node.id == node_id:
                del self._nodes[i]
                return True
        return False


# ---------------------------------------------------------------------------
# JsonlNodeStore
# ---------------------------------------------------------------------------

class JsonlNodeStore:
    def __init__(self, base_path: Path) -> None:
        self._base = base_path
        self._base.mkdir(parents=True, exist_ok=True)
        self._path = base_path / NODES_FILE

    @property
    def path(self) -> Path:
        return self._path

    def list_all(self) -> list[AdventureNode]:
        return self._read(warn=True)

    def _read(self, warn: bool) -> list[AdventureNode]:
        """Parse the file line by line; undecodable or invalid lines are skipped."""
        if not self._path.is_file():
            return []
        nodes = []
        for lineno, raw in enumerate(self._path.read_bytes().splitlines(), start=1):
            if not raw.strip():
                continue
            try:
                nodes.append(AdventureNode.model_validate_json(raw.decode("utf-8")))
            except (UnicodeDecodeError, ValidationError) as e:
                if warn:
                    logger.warning("Skipping invalid line %d in %s: %s", lineno, self._path, e)
        return nodes

    def insert_if_absent(self, node: AdventureNode) -> bool:
        if any(n.id == node.id for n in self._read(warn=False)):
            return False
        with self._path.open("a", encoding="utf-8") as f:
            f.write(node.model_dump_json() + "\n")
        return True

    def delete_by_id(self, node_id: str) -> bool:
        nodes = self.list_all()
        remaining = [n for n in nodes if n.id != node_id]
        if len(remaining) == len(nodes):
            return False
        tmp = self._path.with_suffix(".jsonl.tmp")
        tmp.write_text("".join(n.model_dump_json() + "\n" for n in remaining), encoding="utf-8")
        os.replace(tmp, self._path)
        return True


def seed_store(store: NodeStore, nodes: Iterable[AdventureNode]) -> int:
    """Insert seed nodes that are not already present. Returns how many were added."""
    return sum(1 for node in nodes if store.insert_if_absent(node))
