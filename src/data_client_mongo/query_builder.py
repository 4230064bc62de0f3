"""Mongo query builder: selectors, free-text search, sort and keyset predicates."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from .exceptions import InvalidArgumentError
from .pagination import SortOption, SortOrder

logger = logging.getLogger("data_client.mongo.query_builder")

ID_FIELD = "_id"

SortInput = SortOption | tuple[str, Any] | str


def _regex_escape(s: str) -> str:
    """Escape special regex characters in a literal string."""
    return re.escape(s)


def _direction(value: Any) -> int:
    """Normalise a sort direction (SortOrder, "asc"/"desc", 1/-1) to 1/-1."""
    if isinstance(value, SortOrder):
        return value.direction
    if isinstance(value, str):
        try:
            return SortOrder(value.lower()).direction
        except ValueError:
            pass
    elif isinstance(value, int) and not isinstance(value, bool) and value in (1, -1):
        return value
    raise InvalidArgumentError(f"Invalid sort direction: {value!r}")


def _lookup(doc: Mapping[str, Any], path: str) -> Any:
    """Read a dot-notation path (e.g. ``address.city``); missing -> None."""
    if path in doc:
        return doc[path]
    current: Any = doc
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return current


class MongoQueryBuilder:
    """Compiles caller filters, sort options and cursors to MongoDB queries.

    The raw filter is trusted to already use MongoDB's operator dialect and
    is merged verbatim; only the reserved free-text key is rewritten.
    """

    def __init__(
        self,
        searchable_fields: Iterable[str] = (),
        *,
        owner_field: str = "userId",
        id_field: str = "id",
        search_key: str = "q",
    ) -> None:
        self.searchable_fields = tuple(searchable_fields)
        self.owner_field = owner_field
        self.id_field = id_field
        self.search_key = search_key

    # -- selector -----------------------------------------------------------

    def build_selector(
        self,
        filter: Mapping[str, Any] | None = None,  # noqa: A002
        *,
        owner: str | None = None,
    ) -> dict[str, Any]:
        """Merge ownership scope, free-text term and raw filter into a selector.

        A free-text term becomes a case-insensitive ``$regex`` disjunction over
        the searchable fields, ANDed with the rest of the selector.

        Raises:
            InvalidArgumentError: if a search term is given but no searchable
                fields are configured, or the term is not a string.
        """
        selector: dict[str, Any] = {}
        if owner is not None:
            selector[self.owner_field] = owner
        raw = dict(filter or {})
        term = raw.pop(self.search_key, None)
        selector.update(raw)

        search = self.build_search(term)
        if search:
            selector = {"$and": [selector, search]}

        logger.debug("Built MongoDB selector: %s", selector)
        return selector

    def build_search(self, term: Any) -> dict[str, Any] | None:
        """Compile a free-text term to ``{"$or": [{field: {"$regex": ...}}]}``.

        Returns None when there is nothing to search for.
        """
        if term is None:
            return None
        if not isinstance(term, str):
            raise InvalidArgumentError(
                f"Search term '{self.search_key}' must be a string, got {term!r}"
            )
        if not term.strip():
            return None
        if not self.searchable_fields:
            raise InvalidArgumentError(
                f"Free-text search '{self.search_key}' is not supported: "
                "no searchable fields are configured"
            )
        pattern = _regex_escape(term)
        return {
            "$or": [
                {field: {"$regex": pattern, "$options": "i"}}
                for field in self.searchable_fields
            ]
        }

    def build_owner_match(self, owner: str | None) -> dict[str, Any] | None:
        """Return the ``$match`` stage scoping a pipeline to ``owner``."""
        if owner is None:
            return None
        return {"$match": {self.owner_field: owner}}

    # -- sort ---------------------------------------------------------------

    def _native_field(self, field: str) -> str:
        return ID_FIELD if field == self.id_field else field

    def build_sort(self, sort: Sequence[SortInput] | None) -> list[tuple[str, int]]:
        """Build MongoDB sort tuples ending in an ``_id`` tie-breaker.

        Accepts :class:`SortOption`, ``(field, "asc"|"desc"|1|-1)`` tuples and
        ``"field"`` / ``"-field"`` strings. The application id field maps to
        ``_id``; an explicit ``_id`` keeps its direction and is not repeated.
        """
        result: list[tuple[str, int]] = []
        seen: set[str] = set()
        for item in sort or ():
            if isinstance(item, SortOption):
                field, direction = item.field, item.order.direction
            elif isinstance(item, tuple):
                if len(item) != 2:
                    raise InvalidArgumentError(f"Invalid sort option: {item!r}")
                field, direction = item[0], _direction(item[1])
            elif isinstance(item, str):
                field, direction = (item[1:], -1) if item.startswith("-") else (item, 1)
            else:
                raise InvalidArgumentError(f"Invalid sort option: {item!r}")
            if not isinstance(field, str) or not field:
                raise InvalidArgumentError(f"Invalid sort field: {field!r}")
            field = self._native_field(field)
            if field in seen:
                raise InvalidArgumentError(f"Duplicate sort field: {field!r}")
            seen.add(field)
            result.append((field, direction))
        if ID_FIELD not in seen:
            result.append((ID_FIELD, 1))
        logger.debug("Built MongoDB sort: %s", result)
        return result

    # -- keyset pagination --------------------------------------------------

    def build_keyset(
        self,
        sort_order: Sequence[tuple[str, int]],
        reference: Mapping[str, Any],
    ) -> list[dict[str, Any]]:
        """Build the clauses selecting documents strictly after ``reference``.

        For ``[(f1, d1), ..., (fn, dn)]`` clause ``i`` is equality on
        ``f1..f(i-1)`` plus a strictly-after condition on ``fi``. Their
        disjunction is the lexicographic "after" set.

        Null and missing values sort before every other value, so they are
        matched explicitly: ``$gt``/``$lt`` never cross that boundary.
        """
        clauses: list[dict[str, Any]] = []
        for i, (field, direction) in enumerate(sort_order):
            after = self._after(field, direction, _lookup(reference, field))
            if after is None:
                continue
            clause: dict[str, Any] = {
                prev: _lookup(reference, prev) for prev, _ in sort_order[:i]
            }
            clause.update(after)
            clauses.append(clause)
        return clauses

    @staticmethod
    def _after(field: str, direction: int, value: Any) -> dict[str, Any] | None:
        """Condition on ``field`` alone selecting values sorted after ``value``.

        Returns None when nothing can sort after ``value``.
        """
        if direction == 1:
            if value is None:
                return {field: {"$ne": None}}
            return {field: {"$gt": value}}
        if value is None:
            return None
        if field == ID_FIELD:
            return {field: {"$lt": value}}
        return {"$or": [{field: {"$lt": value}}, {field: None}]}

    def apply_keyset(
        self,
        selector: Mapping[str, Any],
        clauses: list[dict[str, Any]],
    ) -> dict[str, Any]:
        """Combine a selector with keyset clauses.

        A caller-supplied top-level ``$or`` is never overwritten: in that case
        the keyset disjunction is ANDed with the whole selector.
        """
        if not clauses:
            return dict(selector)
        if "$or" in selector:
            return {"$and": [dict(selector), {"$or": clauses}]}
        combined = dict(selector)
        combined["$or"] = clauses
        return combined
