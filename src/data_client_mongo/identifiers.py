"""String id <-> ObjectId codec. The single validation gate for caller ids."""

from __future__ import annotations

import re
from typing import Any

from bson import ObjectId

from .exceptions import InvalidIdentifierError

_HEX_ID = re.compile(r"[0-9a-fA-F]{24}")


def is_valid_identifier(value: Any) -> bool:
    """Return True if ``value`` is a 24-character hexadecimal string."""
    return isinstance(value, str) and _HEX_ID.fullmatch(value) is not None


def to_object_id(value: Any) -> ObjectId:
    """Convert an application id to an ObjectId.

    Raises:
        InvalidIdentifierError: if ``value`` is not a 24-character hex string.
    """
    if not is_valid_identifier(value):
        raise InvalidIdentifierError(value)
    return ObjectId(value)


def from_object_id(value: ObjectId) -> str:
    """Convert an ObjectId to its hex string form."""
    return str(value)
