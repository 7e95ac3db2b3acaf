"""Removing leaf nodes.

Checks run in a fixed order and the first failure wins:

  1. No resolvable session             → UnauthorizedError
  2. Node id not in the store          → NotFoundError
  3. Node still has children           → HasChildrenError (for everyone)
  4. Privileged identity               → allowed
  5. Not the tip of the caller's path,
     or not the node's author          → ForbiddenError

The session is verified before the store lock is taken. The store delete and
the graph rebuild happen under the lock; if the store fails the graph is left
as it was.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from endless_tale.errors import (
    ForbiddenError,
    HasChildrenError,
    NotFoundError,
    UnauthorizedError,
)
from endless_tale.graph import AdventureGraph
from endless_tale.session import SessionVerifier, resolve_author
from endless_tale.snapshot import GraphSnapshot

logger = logging.getLogger(__name__)


class DeletionController:
    """Enforces who may delete which node.

    Args:
        snapshot:        Shared graph cache and store.
        verifier:        Resolves session tokens to usernames.
        privileged_user: Username allowed to delete any leaf. Empty disables.
        session_timeout: Upper bound on session verification, in seconds.
    """

    def __init__(
        self,
        snapshot: GraphSnapshot,
        verifier: SessionVerifier,
        privileged_user: str = "",
        session_timeout: float = 10.0,
    ) -> None:
        self._snapshot = snapshot
        self._verifier = verifier
        self._privileged_user = privileged_user
        self._session_timeout = session_timeout

    async def delete(
        self,
        node_id: str,
        session_token: str | None = None,
        path: Sequence[str] | None = None,
    ) -> AdventureGraph:
        """Delete node_id and return the rebuilt graph.

        path is the caller's current walk when known; the node must then be
        its last element. The wire endpoint carries no path, so only the
        ownership rule applies there.
        """
        username = await resolve_author(self._verifier, session_token, self._session_timeout)
        if username is None:
            raise UnauthorizedError("A verified session is required to delete nodes")

        async with self._snapshot.lock:
            graph = self._snapshot.rebuild()
            node = graph.node(node_id)
            if node is None:
                raise NotFoundError(f"Node {node_id!r} not found")
            if graph.has_children(node_id):
                raise HasChildrenError(f"Node {node_id!r} has children and cannot be deleted")

            privileged = bool(self._privileged_user) and username == self._privileged_user
            if not privileged:
                if path is not None and (not path or path[-1] != node_id):
                    raise ForbiddenError("Only the last node of the current path can be deleted")
                if node.created_by != username:
                    raise ForbiddenError(f"Node {node_id!r} belongs to someone else")

            if not self._snapshot.store.delete_by_id(node_id):
                raise NotFoundError(f"Node {node_id!r} not found")
            graph = self._snapshot.rebuild()

        logger.info("Deleted adventure node %s (by %s%s)", node_id, username, ", privileged" if privileged else "")
        return graph
