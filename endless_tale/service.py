"""AdventureService — one object per server holding the store, graph and controllers.

Request handlers receive the service and call one typed method per
operation; the wire codec only exists at the HTTP boundary.
"""

from __future__ import annotations

from collections.abc import Sequence

from endless_tale.contribution import ContributionController, SubmitResult
from endless_tale.deletion import DeletionController
from endless_tale.descendants import compute_descendant_counts
from endless_tale.graph import AdventureGraph
from endless_tale.models import AdventureNode
from endless_tale.session import AnonymousVerifier, SessionVerifier
from endless_tale.snapshot import GraphSnapshot
from endless_tale.store import NodeStore


class AdventureService:
    def __init__(
        self,
        store: NodeStore,
        verifier: SessionVerifier | None = None,
        privileged_user: str = "",
        session_timeout: float = 10.0,
    ) -> None:
        verifier = verifier or AnonymousVerifier()
        self.snapshot = GraphSnapshot(store)
        self.contributions = ContributionController(self.snapshot, verifier, session_timeout)
        self.deletions = DeletionController(
            self.snapshot, verifier, privileged_user, session_timeout
        )

    @property
    def graph(self) -> AdventureGraph:
        return self.snapshot.graph

    def list_nodes(self) -> list[AdventureNode]:
        return self.snapshot.store.list_all()

    def descendant_counts(self) -> dict[str, int]:
        return compute_descendant_counts(self.list_nodes())

    async def submit_node(
        self, node: AdventureNode, session_token: str | None = None
    ) -> SubmitResult:
        return await self.contributions.submit_node(node, session_token)

    async def delete_node(
        self,
        node_id: str,
        session_token: str | None = None,
        path: Sequence[str] | None = None,
    ) -> AdventureGraph:
        return await self.deletions.delete(node_id, session_token, path)
