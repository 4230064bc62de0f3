"""Configuration for MongoDataClient."""

from __future__ import annotations

from dataclasses import dataclass, field

from .exceptions import InvalidArgumentError

DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True)
class DataClientConfig:
    """Per-collection settings for a data client.

    Attributes:
        searchable_fields: Fields matched by the free-text search key. Empty
            means free-text search is not configured and a search term is
            rejected with ``InvalidArgumentError``.
        owner_field: Document field holding the ownership scope value.
        id_field: Name of the identifier field on the application model.
        search_key: Reserved filter key carrying the free-text term.
        default_page_size: Page size when pagination options omit a limit.
        max_page_size: Upper bound for requested page sizes (None = no bound).
    """

    searchable_fields: tuple[str, ...] = field(default_factory=tuple)
    owner_field: str = "userId"
    id_field: str = "id"
    search_key: str = "q"
    default_page_size: int = DEFAULT_PAGE_SIZE
    max_page_size: int | None = None

    def __post_init__(self) -> None:
        # A bare string is one field name, not an iterable of characters.
        fields = self.searchable_fields
        if isinstance(fields, str):
            fields = (fields,)
        object.__setattr__(self, "searchable_fields", tuple(fields))
        if self.default_page_size < 1:
            raise InvalidArgumentError("default_page_size must be >= 1")
        if self.max_page_size is not None and self.max_page_size < 1:
            raise InvalidArgumentError("max_page_size must be >= 1")
        if self.id_field == "_id":
            raise InvalidArgumentError(
                "id_field is the application field name and cannot be '_id'"
            )
