"""Exceptions raised by the MongoDB data client."""

from __future__ import annotations


class DataClientError(Exception):
    """Root exception for the data client."""


# ── Client errors ────────────────────────────────────────────────────


class InvalidArgumentError(DataClientError):
    """Raised when the caller supplied a request the store cannot serve.

    Covers malformed identifiers and cursors, stale cursors, invalid
    search configuration and commands rejected by the server.
    """


class InvalidIdentifierError(InvalidArgumentError):
    """Raised when a string is not a valid ObjectId hex representation."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f'Invalid ID format: "{value}"')


class InvalidCursorError(InvalidArgumentError):
    """Raised when a pagination cursor is malformed or no longer valid."""


class NotFoundError(DataClientError):
    """Raised when a read/update/delete target does not exist."""

    def __init__(self, model_name: str, entity_id: object) -> None:
        self.model_name = model_name
        self.entity_id = entity_id
        super().__init__(f'Item with ID "{entity_id}" not found in {model_name}.')


# ── Server errors ────────────────────────────────────────────────────


class StorageUnavailableError(DataClientError):
    """Raised for store failures that are not the caller's fault."""


class MongoConnectionError(StorageUnavailableError):
    """Raised when the MongoDB connection is not initialised or was closed."""
