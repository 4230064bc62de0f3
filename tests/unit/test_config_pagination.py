"""Unit tests for DataClientConfig and pagination request types."""

from __future__ import annotations

import pytest

from data_client_mongo.config import DEFAULT_PAGE_SIZE, DataClientConfig
from data_client_mongo.exceptions import InvalidArgumentError
from data_client_mongo.pagination import (
    PaginatedResponse,
    PaginationOptions,
    SortOption,
    SortOrder,
)


def test_config_defaults() -> None:
    config = DataClientConfig()
    assert config.searchable_fields == ()
    assert config.owner_field == "userId"
    assert config.id_field == "id"
    assert config.search_key == "q"
    assert config.default_page_size == DEFAULT_PAGE_SIZE == 20
    assert config.max_page_size is None


def test_config_normalises_searchable_fields() -> None:
    config = DataClientConfig(searchable_fields=["name", "sku"])  # type: ignore[arg-type]
    assert config.searchable_fields == ("name", "sku")


def test_config_single_searchable_field_string() -> None:
    config = DataClientConfig(searchable_fields="name")  # type: ignore[arg-type]
    assert config.searchable_fields == ("name",)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"default_page_size": 0},
        {"max_page_size": 0},
        {"id_field": "_id"},
    ],
)
def test_config_rejects_invalid_values(kwargs) -> None:
    with pytest.raises(InvalidArgumentError):
        DataClientConfig(**kwargs)


def test_sort_order_directions() -> None:
    assert SortOrder.ASC.direction == 1
    assert SortOrder.DESC.direction == -1
    assert SortOption("price").order is SortOrder.ASC


def test_pagination_options_defaults() -> None:
    options = PaginationOptions()
    assert options.limit is None
    assert options.cursor is None


@pytest.mark.parametrize("limit", [0, -1, True, 2.5, "10"])
def test_pagination_options_rejects_bad_limit(limit) -> None:
    with pytest.raises(InvalidArgumentError, match="positive integer"):
        PaginationOptions(limit=limit)


def test_paginated_response_defaults() -> None:
    page: PaginatedResponse[int] = PaginatedResponse()
    assert page.items == []
    assert page.cursor is None
    assert page.has_more is False
