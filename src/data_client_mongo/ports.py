"""Protocols: the storage-agnostic data client contract and the connection seam."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from .pagination import PaginatedResponse, PaginationOptions
    from .query_builder import SortInput

T = TypeVar("T")


@runtime_checkable
class CollectionProvider(Protocol):
    """Hands out named collections over an open, usable connection.

    Implementations raise ``MongoConnectionError`` when the connection is not
    ready rather than returning an unusable handle.
    """

    def get_collection(self, name: str) -> Any: ...


@runtime_checkable
class IDataClient(Protocol[T]):
    """
    Generic CRUD + query contract over a collection of ``T``.

    ``owner`` scopes every operation to documents belonging to that owner.
    ``filter`` uses the native query dialect plus the free-text key ``q``.
    """

    async def read(self, id: str, *, owner: str | None = None) -> T: ...  # noqa: A002

    async def read_all(
        self,
        *,
        owner: str | None = None,
        filter: Mapping[str, Any] | None = None,  # noqa: A002
        sort: Sequence[SortInput] | None = None,
        pagination: PaginationOptions | None = None,
    ) -> PaginatedResponse[T]: ...

    async def create(self, item: T, *, owner: str | None = None) -> T: ...

    async def update(self, id: str, item: T, *, owner: str | None = None) -> T: ...  # noqa: A002

    async def delete(self, id: str, *, owner: str | None = None) -> None: ...  # noqa: A002

    async def count(
        self,
        filter: Mapping[str, Any] | None = None,  # noqa: A002
        *,
        owner: str | None = None,
    ) -> int: ...

    async def aggregate(
        self,
        pipeline: Sequence[Mapping[str, Any]],
        *,
        owner: str | None = None,
    ) -> list[dict[str, Any]]: ...
