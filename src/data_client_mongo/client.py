"""MongoDataClient[T]: generic CRUD + keyset-paginated queries over MongoDB."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import (
    CursorNotFound,
    ExecutionTimeout,
    OperationFailure,
    WriteConcernError,
)

from .config import DataClientConfig
from .cursor import decode_cursor, encode_cursor, resolve_cursor
from .exceptions import (
    DataClientError,
    InvalidArgumentError,
    NotFoundError,
    StorageUnavailableError,
)
from .identifiers import is_valid_identifier, to_object_id
from .model_mapper import FromJson, MongoDocumentMapper, ToJson
from .pagination import PaginatedResponse, PaginationOptions
from .query_builder import MongoQueryBuilder

if TYPE_CHECKING:
    from .ports import CollectionProvider
    from .query_builder import SortInput

T = TypeVar("T")

# OperationFailure subclasses and codes that are the server's problem, not
# a rejected command: timeouts, write concern, lost cursors, auth.
_SERVER_SIDE_FAILURES = (ExecutionTimeout, WriteConcernError, CursorNotFound)
_SERVER_SIDE_CODES = frozenset({13, 18})


def _is_rejected_command(exc: BaseException) -> bool:
    if not isinstance(exc, OperationFailure):
        return False
    if isinstance(exc, _SERVER_SIDE_FAILURES):
        return False
    return exc.code not in _SERVER_SIDE_CODES


class MongoDataClient(Generic[T]):
    """
    Data client for one collection of ``T`` documents.

    Translates the storage-agnostic contract of
    :class:`~data_client_mongo.ports.IDataClient` to MongoDB: ids are
    ObjectId hex strings, filters use the native dialect plus a free-text key,
    and ``read_all`` pages with opaque keyset cursors.

    Usage::

        client = MongoDataClient(
            connection,
            "products",
            from_json=Product.model_validate,
            to_json=lambda p: p.model_dump(mode="python"),
            config=DataClientConfig(searchable_fields=("name",)),
        )
        page = await client.read_all(
            filter={"q": "gadget", "price": {"$gte": 10}},
            sort=[SortOption("price", SortOrder.DESC)],
            pagination=PaginationOptions(limit=10),
        )
        next_page = await client.read_all(
            sort=[SortOption("price", SortOrder.DESC)],
            pagination=PaginationOptions(limit=10, cursor=page.cursor),
        )
    """

    def __init__(
        self,
        connection: CollectionProvider,
        model_name: str,
        *,
        from_json: FromJson[T],
        to_json: ToJson[T],
        config: DataClientConfig | None = None,
        query_builder: MongoQueryBuilder | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._connection = connection
        self._model_name = model_name
        self._config = config or DataClientConfig()
        self._mapper: MongoDocumentMapper[T] = MongoDocumentMapper(
            from_json, to_json, id_field=self._config.id_field
        )
        self._query_builder = query_builder or MongoQueryBuilder(
            self._config.searchable_fields,
            owner_field=self._config.owner_field,
            id_field=self._config.id_field,
            search_key=self._config.search_key,
        )
        self._logger = logger or logging.getLogger("data_client.mongo.client")

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def config(self) -> DataClientConfig:
        return self._config

    def _collection(self) -> Any:
        return self._connection.get_collection(self._model_name)

    @contextlib.contextmanager
    def _store_errors(self, operation: str) -> Iterator[None]:
        """Re-classify anything raised by the store into the client taxonomy."""
        try:
            yield
        except DataClientError:
            raise
        except OperationFailure as e:
            if _is_rejected_command(e):
                self._logger.warning(
                    "MongoDB rejected %s on %s: %s", operation, self._model_name, e
                )
                raise InvalidArgumentError(
                    f"Invalid request during {operation}: {e}"
                ) from e
            self._logger.error(
                "MongoDB failure during %s", operation, exc_info=True
            )
            raise StorageUnavailableError(
                f"Database error during {operation}: {e}"
            ) from e
        except Exception as e:
            self._logger.error(
                "MongoDB failure during %s", operation, exc_info=True
            )
            raise StorageUnavailableError(
                f"Database error during {operation}: {e}"
            ) from e

    def _id_selector(self, object_id: ObjectId, owner: str | None) -> dict[str, Any]:
        selector: dict[str, Any] = {"_id": object_id}
        if owner is not None:
            selector[self._config.owner_field] = owner
        return selector

    def _to_model(self, doc: dict[str, Any]) -> T:
        try:
            return self._mapper.to_model(doc)
        except Exception as e:
            raise StorageUnavailableError(
                f"Failed to decode document from {self._model_name}: {e}"
            ) from e

    def _to_document(
        self, item: T, owner: str | None
    ) -> tuple[ObjectId | None, dict[str, Any]]:
        try:
            raw_id, doc = self._mapper.to_document_with_id(item)
        except Exception as e:
            raise InvalidArgumentError(
                f"Failed to encode item for {self._model_name}: {e}"
            ) from e
        if owner is not None:
            doc[self._config.owner_field] = owner
        return self._model_object_id(raw_id), doc

    def _model_object_id(self, raw_id: Any) -> ObjectId | None:
        """Return the ObjectId carried by a model, if it carries one.

        Ids that are not ObjectId hex strings (UUIDs, empty strings) are not
        store keys; the store assigns the key instead.
        """
        if isinstance(raw_id, ObjectId):
            return raw_id
        if isinstance(raw_id, str) and is_valid_identifier(raw_id):
            return to_object_id(raw_id)
        return None

    def _page_size(self, pagination: PaginationOptions | None) -> int:
        limit = pagination.limit if pagination is not None else None
        if limit is None:
            limit = self._config.default_page_size
        if self._config.max_page_size is not None:
            limit = min(limit, self._config.max_page_size)
        return limit

    # -- reads --------------------------------------------------------------

    async def read(self, id: str, *, owner: str | None = None) -> T:  # noqa: A002
        """Load one item by id (optionally scoped by owner)."""
        self._logger.debug(
            "Reading item with id: %s from %s, owner: %s", id, self._model_name, owner
        )
        selector = self._id_selector(to_object_id(id), owner)
        with self._store_errors("read"):
            doc = await self._collection().find_one(selector)
        if doc is None:
            self._logger.warning(
                'Read FAILED: Item with id "%s" not found in %s for owner: %s',
                id,
                self._model_name,
                owner,
            )
            raise NotFoundError(self._model_name, id)
        return self._to_model(doc)

    async def read_all(
        self,
        *,
        owner: str | None = None,
        filter: Mapping[str, Any] | None = None,  # noqa: A002
        sort: Sequence[SortInput] | None = None,
        pagination: PaginationOptions | None = None,
    ) -> PaginatedResponse[T]:
        """Read one page of items.

        Fetches ``limit + 1`` documents so the presence of a further page is
        known without a count query. The returned cursor is the id of the
        last item on the page and is only set when more items exist.

        Raises:
            InvalidArgumentError: malformed filter/sort, or a cursor that is
                malformed or references a document that no longer exists.
        """
        self._logger.debug(
            "Reading all from %s with filter: %s, pagination: %s, sort: %s, "
            "owner: %s",
            self._model_name,
            filter,
            pagination,
            sort,
            owner,
        )
        limit = self._page_size(pagination)
        selector = self._query_builder.build_selector(filter, owner=owner)
        sort_order = self._query_builder.build_sort(sort)
        cursor_id = None
        if pagination is not None and pagination.cursor is not None:
            cursor_id = decode_cursor(pagination.cursor)

        with self._store_errors("readAll"):
            coll = self._collection()
            if cursor_id is not None:
                reference = await resolve_cursor(coll, cursor_id)
                clauses = self._query_builder.build_keyset(sort_order, reference)
                selector = self._query_builder.apply_keyset(selector, clauses)
            docs = [
                doc async for doc in coll.find(selector, sort=sort_order, limit=limit + 1)
            ]

        has_more = len(docs) > limit
        docs = docs[:limit]
        next_cursor = encode_cursor(docs[-1]) if has_more else None
        return PaginatedResponse(
            items=[self._to_model(doc) for doc in docs],
            cursor=next_cursor,
            has_more=has_more,
        )

    async def count(
        self,
        filter: Mapping[str, Any] | None = None,  # noqa: A002
        *,
        owner: str | None = None,
    ) -> int:
        """Count items matching the filter (free-text key supported)."""
        selector = self._query_builder.build_selector(filter, owner=owner)
        with self._store_errors("count"):
            return int(await self._collection().count_documents(selector))

    async def aggregate(
        self,
        pipeline: Sequence[Mapping[str, Any]],
        *,
        owner: str | None = None,
    ) -> list[dict[str, Any]]:
        """Run an aggregation pipeline verbatim and return the raw documents.

        With ``owner`` a ``$match`` on the owner field is prepended.

        Raises:
            InvalidArgumentError: if the server rejects the pipeline.
        """
        stages = [dict(stage) for stage in pipeline]
        owner_match = self._query_builder.build_owner_match(owner)
        if owner_match is not None:
            stages.insert(0, owner_match)
        self._logger.debug("Aggregating %s with pipeline: %s", self._model_name, stages)
        with self._store_errors("aggregate"):
            return [doc async for doc in self._collection().aggregate(stages)]

    # -- writes -------------------------------------------------------------

    async def create(self, item: T, *, owner: str | None = None) -> T:
        """Insert a new item and return it as stored.

        The item's own id is kept when it is an ObjectId hex string; any
        other id is dropped and a new ObjectId is generated here.
        """
        self._logger.debug("Creating item in %s, owner: %s", self._model_name, owner)
        object_id, doc = self._to_document(item, owner)
        if object_id is None:
            object_id = ObjectId()
        doc["_id"] = object_id

        with self._store_errors("create"):
            coll = self._collection()
            await coll.insert_one(doc)
            stored = await coll.find_one({"_id": object_id})
        if stored is None:
            self._logger.error(
                "Create FAILED: item %s missing from %s after insert",
                object_id,
                self._model_name,
            )
            raise StorageUnavailableError(
                f"Failed to create item in {self._model_name}: "
                "document not found after insert"
            )
        return self._to_model(stored)

    async def update(self, id: str, item: T, *, owner: str | None = None) -> T:  # noqa: A002
        """Replace an existing item and return it as stored."""
        self._logger.debug(
            "Updating item with id: %s in %s, owner: %s", id, self._model_name, owner
        )
        object_id = to_object_id(id)
        item_id, doc = self._to_document(item, owner)
        if item_id is not None and item_id != object_id:
            raise InvalidArgumentError(
                f'Item id "{item_id}" does not match target id "{id}"'
            )

        with self._store_errors("update"):
            updated = await self._collection().find_one_and_replace(
                self._id_selector(object_id, owner),
                doc,
                return_document=ReturnDocument.AFTER,
            )
        if updated is None:
            self._logger.warning(
                'Update FAILED: Item with id "%s" not found in %s for owner: %s',
                id,
                self._model_name,
                owner,
            )
            raise NotFoundError(self._model_name, id)
        return self._to_model(updated)

    async def delete(self, id: str, *, owner: str | None = None) -> None:  # noqa: A002
        """Delete an item by id (optionally scoped by owner)."""
        self._logger.debug(
            "Deleting item with id: %s from %s, owner: %s", id, self._model_name, owner
        )
        selector = self._id_selector(to_object_id(id), owner)
        with self._store_errors("delete"):
            result = await self._collection().delete_one(selector)
        if result.deleted_count == 0:
            self._logger.warning(
                'Delete FAILED: Item with id "%s" not found in %s for owner: %s',
                id,
                self._model_name,
                owner,
            )
            raise NotFoundError(self._model_name, id)
