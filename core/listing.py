"""
core/listing.py -- Paged list and detail loading, shared by every dataset.

A Dataset bundles the two query documents of one upstream source with the
functions that build variables and parse responses. load_page() and
load_detail() are the only entry points views use; both return a result
object carrying either data or a human-readable error, never both, and never
raise for upstream failures. List and detail results are independent: a
failed detail fetch does not touch an already-rendered list.

No side effects beyond the client call. No retries.
"""

import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Generic, Optional, TypeVar

from core.client import DataFetchError, GraphQLClient
from core.models import Character, Launch, ListPage
from core.queries import (
    GET_CHARACTER_BY_ID,
    GET_CHARACTERS,
    GET_LAUNCH_BY_ID,
    GET_LAUNCHES,
    character_page_variables,
    launch_page_variables,
    parse_character,
    parse_character_page,
    parse_launch,
    parse_launch_page,
)

logger = logging.getLogger("webteam.listing")

T = TypeVar("T")

_UNEXPECTED_SHAPE = "The data service returned an unexpected response."


@dataclass(frozen=True)
class Dataset(Generic[T]):
    name: str  # URL segment and template prefix, e.g. "characters"
    label: str  # singular display name, e.g. "Character"
    list_query: str
    detail_query: str
    page_variables: Callable[[int], dict[str, Any]]
    parse_page: Callable[[dict, int], ListPage[T]]
    parse_detail: Callable[[dict], Optional[T]]


@dataclass
class ListingResult(Generic[T]):
    page: int
    listing: Optional[ListPage[T]] = None
    error: Optional[str] = None

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        # Without a fetched page there is no known bound; keep "next" usable.
        return self.listing.has_next if self.listing is not None else True


@dataclass
class DetailResult(Generic[T]):
    record_id: str
    record: Optional[T] = None
    error: Optional[str] = None
    not_found: bool = False


def parse_page_param(raw: Optional[str]) -> int:
    """Parse a ?page= value. Absent, non-numeric, or < 1 all mean page 1."""
    try:
        page = int(str(raw).strip())
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


def characters_dataset() -> Dataset[Character]:
    return Dataset(
        name="characters",
        label="Character",
        list_query=GET_CHARACTERS,
        detail_query=GET_CHARACTER_BY_ID,
        page_variables=character_page_variables,
        parse_page=parse_character_page,
        parse_detail=parse_character,
    )


def launches_dataset(page_size: int = 10) -> Dataset[Launch]:
    return Dataset(
        name="launches",
        label="Launch",
        list_query=GET_LAUNCHES,
        detail_query=GET_LAUNCH_BY_ID,
        page_variables=partial(launch_page_variables, page_size=page_size),
        parse_page=parse_launch_page,
        parse_detail=parse_launch,
    )


def load_page(dataset: Dataset[T], client: GraphQLClient, page: int) -> ListingResult[T]:
    """Fetch one page of a dataset. The page is replaced, never accumulated."""
    try:
        data = client.execute(dataset.list_query, dataset.page_variables(page))
        listing = dataset.parse_page(data, page)
    except DataFetchError as e:
        return ListingResult(page=page, error=str(e))
    except (ValueError, TypeError):
        logger.warning("Unexpected %s page %d response shape", dataset.name, page, exc_info=True)
        return ListingResult(page=page, error=_UNEXPECTED_SHAPE)
    return ListingResult(page=page, listing=listing)


def load_detail(dataset: Dataset[T], client: GraphQLClient, record_id: str) -> DetailResult[T]:
    """Fetch one record by id for the detail overlay."""
    try:
        data = client.execute(dataset.detail_query, {"id": record_id})
        record = dataset.parse_detail(data)
    except DataFetchError as e:
        return DetailResult(record_id=record_id, error=str(e))
    except (ValueError, TypeError):
        logger.warning("Unexpected %s %s response shape", dataset.name, record_id, exc_info=True)
        return DetailResult(record_id=record_id, error=_UNEXPECTED_SHAPE)
    if record is None:
        return DetailResult(
            record_id=record_id,
            error=f"{dataset.label} {record_id} was not found.",
            not_found=True,
        )
    return DetailResult(record_id=record_id, record=record)


@dataclass(frozen=True)
class DataSource(Generic[T]):
    """A dataset bound to the client for its upstream endpoint."""

    dataset: Dataset[T]
    client: GraphQLClient

    def page(self, page: int) -> ListingResult[T]:
        return load_page(self.dataset, self.client, page)

    def detail(self, record_id: str) -> DetailResult[T]:
        return load_detail(self.dataset, self.client, record_id)
