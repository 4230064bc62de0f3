"""Index helpers: compound sort indexes for keyset pages."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .query_builder import MongoQueryBuilder

if TYPE_CHECKING:
    from .ports import CollectionProvider
    from .query_builder import SortInput


async def ensure_sort_index(
    connection: CollectionProvider,
    collection: str,
    sort: list[SortInput] | None,
    *,
    owner_field: str | None = None,
    name: str | None = None,
) -> str:
    """Create the compound index serving ``read_all`` with this sort.

    Keys are the compiled sort order (``_id`` tie-breaker included), prefixed
    by ``owner_field`` when pages are owner-scoped. Returns the index name.
    """
    keys = MongoQueryBuilder().build_sort(sort)
    if owner_field is not None:
        keys.insert(0, (owner_field, 1))
    options = {"name": name} if name else {}
    coll = connection.get_collection(collection)
    return await coll.create_index(keys, **options)
