"""Core domain models.

The graph, stores, controllers and wire codec all operate on AdventureNode.
Pydantic is used for validation and serialisation at every data boundary.
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict


def new_node_id() -> str:
    """Return a fresh node id for a reader contribution."""
    return f"user_{uuid.uuid4().hex}"


class AdventureNode(BaseModel):
    """A single segment of the story: the choice that leads here and what happens.

    Nodes are immutable once created. A node with no parent_id is a root.
    created_by is only ever set server-side from a verified session.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    parent_id: str | None = None
    choice_text: str
    story_text: str
    created_by: str | None = None

    @classmethod
    def user(
        cls, parent_id: str | None, choice_text: str, story_text: str
    ) -> AdventureNode:
        """Build an anonymous contribution with a freshly generated id."""
        return cls(
            id=new_node_id(),
            parent_id=parent_id,
            choice_text=choice_text,
            story_text=story_text,
        )

    @property
    def is_root(self) -> bool:
        return self.parent_id is None
