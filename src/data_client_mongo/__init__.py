"""MongoDB data client.

Generic CRUD + query access to MongoDB collections: selector and free-text
search compilation, deterministic sorting and keyset (cursor) pagination.
"""

from __future__ import annotations

from .client import MongoDataClient
from .config import DEFAULT_PAGE_SIZE, DataClientConfig
from .connection import MongoConnectionManager
from .cursor import decode_cursor, encode_cursor, resolve_cursor
from .exceptions import (
    DataClientError,
    InvalidArgumentError,
    InvalidCursorError,
    InvalidIdentifierError,
    MongoConnectionError,
    NotFoundError,
    StorageUnavailableError,
)
from .identifiers import from_object_id, is_valid_identifier, to_object_id
from .indexes import ensure_sort_index
from .model_mapper import MongoDocumentMapper
from .pagination import PaginatedResponse, PaginationOptions, SortOption, SortOrder
from .ports import CollectionProvider, IDataClient
from .query_builder import MongoQueryBuilder

__all__ = [
    # Core
    "MongoDataClient",
    "MongoConnectionManager",
    "DataClientConfig",
    "DEFAULT_PAGE_SIZE",
    # Ports
    "IDataClient",
    "CollectionProvider",
    # Query translation
    "MongoQueryBuilder",
    "MongoDocumentMapper",
    "ensure_sort_index",
    "to_object_id",
    "from_object_id",
    "is_valid_identifier",
    "decode_cursor",
    "encode_cursor",
    "resolve_cursor",
    # Pagination
    "PaginationOptions",
    "PaginatedResponse",
    "SortOption",
    "SortOrder",
    # Exceptions
    "DataClientError",
    "InvalidArgumentError",
    "InvalidIdentifierError",
    "InvalidCursorError",
    "NotFoundError",
    "StorageUnavailableError",
    "MongoConnectionError",
]
