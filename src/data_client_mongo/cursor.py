"""Pagination cursor codec.

A cursor is the hex string of the last returned document's ``_id``. Decoding
is pure; resolving looks the reference document up so its sort-key values
can seed the keyset predicate.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .exceptions import InvalidCursorError, InvalidIdentifierError
from .identifiers import from_object_id, to_object_id

if TYPE_CHECKING:
    from bson import ObjectId

logger = logging.getLogger("data_client.mongo.cursor")


def decode_cursor(cursor: str) -> ObjectId:
    """Decode a cursor to the ObjectId it references.

    Raises:
        InvalidCursorError: if the cursor is not a valid ObjectId hex string.
    """
    try:
        return to_object_id(cursor)
    except InvalidIdentifierError as e:
        raise InvalidCursorError(f'Invalid cursor format: "{cursor}"') from e


async def resolve_cursor(collection: Any, object_id: ObjectId) -> dict[str, Any]:
    """Fetch the reference document a cursor points at.

    Raises:
        InvalidCursorError: if the document no longer exists.
    """
    doc = await collection.find_one({"_id": object_id})
    if doc is None:
        logger.warning("Cursor document %s not found; cursor is stale", object_id)
        raise InvalidCursorError(
            f'Cursor "{from_object_id(object_id)}" is no longer valid'
        )
    return doc


def encode_cursor(document: dict[str, Any]) -> str:
    """Encode the cursor for the page ending at ``document``."""
    return from_object_id(document["_id"])
