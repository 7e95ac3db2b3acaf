import asyncio

import pytest

from endless_tale.errors import TransportError
from endless_tale.models import AdventureNode
from endless_tale.service import AdventureService
from endless_tale.store import MemoryNodeStore


class StubVerifier:
    """Session verifier with canned answers.

    users maps token → username; tokens in failing raise TransportError;
    delay (seconds) is awaited before answering.
    """

    def __init__(
        self,
        users: dict[str, str] | None = None,
        failing: set[str] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.users = users or {}
        self.failing = failing or set()
        self.delay = delay
        self.calls: list[str] = []

    async def verify(self, token: str) -> str | None:
        self.calls.append(token)
        if self.delay:
            await asyncio.sleep(self.delay)
        if token in self.failing:
            raise TransportError("gateway unreachable")
        return self.users.get(token)


def make_node(node_id: str, parent_id: str | None = None, created_by: str | None = None) -> AdventureNode:
    return AdventureNode(
        id=node_id,
        parent_id=parent_id,
        choice_text=f"Go to {node_id}",
        story_text=f"You arrive at {node_id}.",
        created_by=created_by,
    )


@pytest.fixture
def verifier() -> StubVerifier:
    return StubVerifier(users={"tok-alice": "alice", "tok-bob": "bob", "tok-mod": "moderator"})


@pytest.fixture
def store() -> MemoryNodeStore:
    """root ─ a (alice) ─ a1 (alice)
            └ b (bob)"""
    return MemoryNodeStore([
        make_node("root"),
        make_node("a", "root", created_by="alice"),
        make_node("b", "root", created_by="bob"),
        make_node("a1", "a", created_by="alice"),
    ])


@pytest.fixture
def service(store: MemoryNodeStore, verifier: StubVerifier) -> AdventureService:
    return AdventureService(store, verifier=verifier, privileged_user="moderator", session_timeout=1.0)
