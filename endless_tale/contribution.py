"""Adding reader contributions to the story.

Submit flow:
  1. Build the node (fresh id, given parent and texts, no author).
  2. Resolve the author from the session token — outside the store lock,
     degrading to anonymous on any gateway failure.
  3. Under the lock: insert unless the id is taken, then rebuild the graph
     from a full listing.
  4. Return the node id so the caller can advance its path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from endless_tale.models import AdventureNode
from endless_tale.session import SessionVerifier, resolve_author
from endless_tale.snapshot import GraphSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmitResult:
    node_id: str
    inserted: bool  # False when the id already existed; nothing was stored
    created_by: str | None = None


class ContributionController:
    def __init__(
        self,
        snapshot: GraphSnapshot,
        verifier: SessionVerifier,
        session_timeout: float = 10.0,
    ) -> None:
        self._snapshot = snapshot
        self._verifier = verifier
        self._session_timeout = session_timeout

    async def submit(
        self,
        parent_id: str | None,
        choice_text: str,
        story_text: str,
        session_token: str | None = None,
    ) -> SubmitResult:
        node = AdventureNode.user(parent_id, choice_text, story_text)
        return await self.submit_node(node, session_token)

    async def submit_node(
        self, node: AdventureNode, session_token: str | None = None
    ) -> SubmitResult:
        """Store a client-built node. Any created_by it carries is replaced."""
        author = await resolve_author(self._verifier, session_token, self._session_timeout)
        node = node.model_copy(update={"created_by": author})

        async with self._snapshot.lock:
            inserted = self._snapshot.store.insert_if_absent(node)
            self._snapshot.rebuild()

        if inserted:
            logger.info("Stored adventure node %s (parent=%s, author=%s)", node.id, node.parent_id, author)
        else:
            logger.warning("Adventure node %s already exists; submission ignored", node.id)
        return SubmitResult(node_id=node.id, inserted=inserted, created_by=author)
