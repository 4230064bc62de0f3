"""Sort and pagination request/response types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from .exceptions import InvalidArgumentError

T = TypeVar("T")


class SortOrder(str, Enum):
    """Sort direction. Native MongoDB values: ASC -> 1, DESC -> -1."""

    ASC = "asc"
    DESC = "desc"

    @property
    def direction(self) -> int:
        return 1 if self is SortOrder.ASC else -1


@dataclass(frozen=True)
class SortOption:
    """One sort key, e.g. ``SortOption("price", SortOrder.DESC)``."""

    field: str
    order: SortOrder = SortOrder.ASC


@dataclass(frozen=True)
class PaginationOptions:
    """Page request. ``limit=None`` uses the client's default page size."""

    limit: int | None = None
    cursor: str | None = None

    def __post_init__(self) -> None:
        if self.limit is not None and (
            isinstance(self.limit, bool)
            or not isinstance(self.limit, int)
            or self.limit < 1
        ):
            raise InvalidArgumentError(
                f"Pagination limit must be a positive integer, got {self.limit!r}"
            )


@dataclass
class PaginatedResponse(Generic[T]):
    """One page of results.

    ``cursor`` is set iff ``has_more``; pass it back in
    :class:`PaginationOptions` to fetch the next page.
    """

    items: list[T] = field(default_factory=list)
    cursor: str | None = None
    has_more: bool = False
