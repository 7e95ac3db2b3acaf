"""Exception hierarchy shared by the graph, controllers, wire codec and client.

Every error carries a stable ``code`` so it can cross the wire as an
``Error`` message and be re-raised as the same type on the other side.
"""

from __future__ import annotations


class AdventureError(Exception):
    """Base class for all adventure errors."""

    code = "error"

    @classmethod
    def from_message(cls, message: str) -> AdventureError:
        return cls(message)


class NotFoundError(AdventureError):
    """A referenced node id does not exist."""

    code = "not_found"


class ForbiddenError(AdventureError):
    """The caller is not allowed to perform the operation."""

    code = "forbidden"


class UnauthorizedError(ForbiddenError):
    """No session was supplied, or the session could not be resolved."""

    code = "unauthorized"


class HasChildrenError(AdventureError):
    """Attempted to delete a node that still has children."""

    code = "has_children"


class TransportError(AdventureError):
    """A third-party network call failed (session gateway, API server)."""

    code = "transport"


class SerializationError(AdventureError):
    """A wire payload could not be decoded."""

    code = "serialization"


class CyclicGraphError(AdventureError):
    """The parent/child relation contains a cycle."""

    code = "cyclic_graph"

    def __init__(self, node_id: str | None = None, message: str | None = None) -> None:
        super().__init__(message or f"Cycle detected at node {node_id!r}")
        self.node_id = node_id

    @classmethod
    def from_message(cls, message: str) -> CyclicGraphError:
        return cls(message=message)


class InvalidChoiceError(AdventureError):
    """A path step does not follow the parent/child relation."""

    code = "invalid_choice"


ERRORS_BY_CODE: dict[str, type[AdventureError]] = {
    cls.code: cls
    for cls in (
        NotFoundError,
        ForbiddenError,
        UnauthorizedError,
        HasChildrenError,
        TransportError,
        SerializationError,
        CyclicGraphError,
        InvalidChoiceError,
    )
}


def error_from_code(code: str | None, message: str) -> AdventureError:
    """Rebuild a typed error from a wire ``Error`` message."""
    cls = ERRORS_BY_CODE.get(code or "", AdventureError)
    return cls.from_message(message)
