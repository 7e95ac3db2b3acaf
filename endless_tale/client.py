"""Reader-side API client and navigation state.

AdventureApi has one method per operation and hides the wire union: each
method sends its request message, checks that the reply is the expected
variant, and turns Error replies back into typed exceptions.

AdventureState is what a UI binds to. It holds the latest graph snapshot,
descendant counts, the reader's PathState and a load state. Every reload
replaces the snapshot wholesale, and a reload that has been superseded by a
newer one throws its result away.
"""

from __future__ import annotations

import enum
import logging

import httpx
from pydantic import BaseModel

from endless_tale.descendants import compute_descendant_counts
from endless_tale.errors import (
    AdventureError,
    ForbiddenError,
    SerializationError,
    TransportError,
    error_from_code,
)
from endless_tale.graph import AdventureGraph, sort_by_descendants
from endless_tale.models import AdventureNode
from endless_tale.path import PathState
from endless_tale import wire

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# AdventureApi
# ---------------------------------------------------------------------------

class AdventureApi:
    """Async client for the ``POST /api`` wire endpoint.

    Args:
        base_url:  Server base URL, e.g. "http://localhost:8080".
        timeout:   HTTP timeout in seconds. Defaults to 30.
        transport: Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = f"{base_url.rstrip('/')}/api"
        self._timeout = timeout
        self._transport = transport

    async def _send(self, message: BaseModel) -> wire.ServerMessage:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(
                    self._url,
                    content=wire.encode(message),
                    headers={"Content-Type": "application/json"},
                )
        except httpx.TimeoutException as e:
            raise TransportError(f"Adventure server timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Cannot reach adventure server: {e}") from e

        if resp.status_code == 400:
            raise SerializationError(resp.text)
        if resp.is_error:
            raise TransportError(f"Adventure server returned HTTP {resp.status_code}")

        reply = wire.decode(resp.content)
        if isinstance(reply, wire.Error):
            raise error_from_code(reply.code, reply.message)
        return reply

    @staticmethod
    def _expect(reply: wire.ServerMessage, kind: type[BaseModel]) -> None:
        if not isinstance(reply, kind):
            raise SerializationError(f"Expected {kind.__name__}, got {reply.kind}")

    async def fetch_nodes(self) -> list[AdventureNode]:
        reply = await self._send(wire.RequestAdventureNodes())
        self._expect(reply, wire.ReturnAdventureNodes)
        return reply.nodes

    async def fetch_descendant_counts(self) -> dict[str, int]:
        reply = await self._send(wire.RequestDescendantCounts())
        self._expect(reply, wire.ReturnDescendantCounts)
        return reply.counts

    async def submit_node(self, node: AdventureNode, session_token: str | None = None) -> bool:
        """Returns False when the server already had a node with this id."""
        reply = await self._send(wire.SubmitAdventureNode(node=node, session_token=session_token))
        self._expect(reply, wire.Ok)
        return reply.inserted is not False

    async def delete_node(self, node_id: str, session_token: str | None = None) -> None:
        reply = await self._send(wire.DeleteAdventureNode(node_id=node_id, session_token=session_token))
        self._expect(reply, wire.Ok)


# ---------------------------------------------------------------------------
# AdventureState
# ---------------------------------------------------------------------------

class LoadState(enum.Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class AdventureState:
    def __init__(self, api: AdventureApi, single_root: bool = False) -> None:
        self._api = api
        self.graph = AdventureGraph()
        self.counts: dict[str, int] = {}
        self.path = PathState(single_root=single_root)
        self.load_state = LoadState.LOADING
        self.error: str | None = None
        self._generation = 0

    async def reload(self, reset_path: bool = True) -> bool:
        """Fetch a full snapshot and swap it in.

        Returns False when the fetch failed or a newer reload started while
        this one was in flight; in the latter case nothing is changed.
        """
        self._generation += 1
        generation = self._generation
        self.load_state = LoadState.LOADING

        try:
            nodes = await self._api.fetch_nodes()
            graph = AdventureGraph.from_nodes(nodes)
            counts = compute_descendant_counts(nodes)
        except AdventureError as e:
            if generation == self._generation:
                self.load_state = LoadState.ERROR
                self.error = str(e)
            logger.warning("Adventure reload failed: %s", e)
            return False

        if generation != self._generation:
            logger.debug("Discarding stale reload generation=%d current=%d", generation, self._generation)
            return False

        self.graph = graph
        self.counts = counts
        if reset_path:
            self.path.reset(graph)
        self.path.close_contribute()
        self.load_state = LoadState.READY
        self.error = None
        return True

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def segments(self) -> list[tuple[int, AdventureNode]]:
        return self.graph.segments(self.path.ids)

    def options(self) -> list[AdventureNode]:
        """Next choices, most-developed branch first."""
        return sort_by_descendants(self.graph.options(self.path.ids), self.counts)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def choose(self, node_id: str) -> None:
        self.path.choose(self.graph, node_id)

    def revert_to(self, index: int) -> None:
        self.path.revert_to(index)

    def reset(self) -> None:
        self.path.reset(self.graph)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def contribute(
        self, choice_text: str, story_text: str, session_token: str | None = None
    ) -> str:
        """Add a node under the current tip and move onto it. Returns its id.

        Raises on failure without touching the path, so the caller can keep
        the text the reader typed. Once the server has accepted the node the
        path advances even if the reload that follows fails or is superseded.
        """
        node = AdventureNode.user(self.path.last, choice_text, story_text)
        inserted = await self._api.submit_node(node, session_token)
        if not inserted:
            logger.warning("Server already had node %s; nothing was stored", node.id)
        await self.reload(reset_path=False)
        self.path.after_submit(node.id)
        return node.id

    async def delete_current(self, session_token: str | None = None) -> str:
        """Delete the node at the tip of the path and step back. Returns its id."""
        node_id = self.path.last
        if node_id is None:
            raise ForbiddenError("Only the last node of the current path can be deleted")
        await self._api.delete_node(node_id, session_token)
        self.path.discard(node_id)
        await self.reload(reset_path=False)
        return node_id

    @property
    def is_ready(self) -> bool:
        return self.load_state is LoadState.READY
