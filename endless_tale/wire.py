"""Wire protocol for the single ``POST /api`` endpoint.

Requests and responses share one tagged union, discriminated by ``kind`` and
encoded as JSON:

    RequestAdventureNodes                    → ReturnAdventureNodes{nodes}
    RequestDescendantCounts                  → ReturnDescendantCounts{counts}
    SubmitAdventureNode{node, session_token} → Ok{inserted} | Error{message, code}
    DeleteAdventureNode{node_id, session_token} → Ok | Error{message, code}

A response variant sent as a request gets Error("Unhandled message type").
Payloads that do not parse raise SerializationError.
"""

from __future__ import annotations

import logging
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from endless_tale.errors import AdventureError, SerializationError
from endless_tale.models import AdventureNode
from endless_tale.service import AdventureService

logger = logging.getLogger(__name__)


class RequestAdventureNodes(BaseModel):
    kind: Literal["RequestAdventureNodes"] = "RequestAdventureNodes"


class ReturnAdventureNodes(BaseModel):
    kind: Literal["ReturnAdventureNodes"] = "ReturnAdventureNodes"
    nodes: list[AdventureNode]


class RequestDescendantCounts(BaseModel):
    kind: Literal["RequestDescendantCounts"] = "RequestDescendantCounts"


class ReturnDescendantCounts(BaseModel):
    kind: Literal["ReturnDescendantCounts"] = "ReturnDescendantCounts"
    counts: dict[str, int]


class SubmitAdventureNode(BaseModel):
    kind: Literal["SubmitAdventureNode"] = "SubmitAdventureNode"
    node: AdventureNode
    session_token: str | None = None


class DeleteAdventureNode(BaseModel):
    kind: Literal["DeleteAdventureNode"] = "DeleteAdventureNode"
    node_id: str
    session_token: str | None = None


class Ok(BaseModel):
    kind: Literal["Ok"] = "Ok"
    inserted: bool | None = None  # set for submissions; False means the id already existed


class Error(BaseModel):
    kind: Literal["Error"] = "Error"
    message: str
    code: str | None = None


ServerMessage = Annotated[
    Union[
        RequestAdventureNodes,
        ReturnAdventureNodes,
        RequestDescendantCounts,
        ReturnDescendantCounts,
        SubmitAdventureNode,
        DeleteAdventureNode,
        Ok,
        Error,
    ],
    Field(discriminator="kind"),
]

_adapter: TypeAdapter[ServerMessage] = TypeAdapter(ServerMessage)


def decode(payload: bytes | str) -> ServerMessage:
    try:
        return _adapter.validate_json(payload)
    except ValidationError as e:
        raise SerializationError(f"Failed to deserialize: {e}") from e


def encode(message: BaseModel) -> bytes:
    return message.model_dump_json().encode()


async def handle_message(message: ServerMessage, service: AdventureService) -> ServerMessage:
    """Dispatch one request to the service and build the response."""
    try:
        if isinstance(message, RequestAdventureNodes):
            return ReturnAdventureNodes(nodes=service.list_nodes())

        if isinstance(message, RequestDescendantCounts):
            return ReturnDescendantCounts(counts=service.descendant_counts())

        if isinstance(message, SubmitAdventureNode):
            result = await service.submit_node(message.node, message.session_token)
            return Ok(inserted=result.inserted)

        if isinstance(message, DeleteAdventureNode):
            await service.delete_node(message.node_id, message.session_token)
            return Ok()
    except AdventureError as e:
        logger.info("%s rejected: %s", message.kind, e)
        return Error(message=str(e), code=e.code)

    logger.warning("Unhandled message type: %s", message.kind)
    return Error(message="Unhandled message type")
