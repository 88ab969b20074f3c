"""
Pagination adapters - pluggable strategies for walking a listing query.

An adapter owns the query variables between pages. The pagination engine only
ever calls `start`, `next`, `concat` and `get_items`, so another strategy can
be swapped in without touching any other component.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ..core.defs import ENTITIES_FIELD

DEFAULT_LIMIT = 100


@dataclass
class PaginationState:
    """Variables for the next request and whether there is a next page."""
    variables: dict[str, Any] = field(default_factory=dict)
    has_next_page: bool = True


class PaginationAdapter(ABC):
    """Strategy interface for paging through one query shape."""

    name: str = "PaginationAdapter"
    expected_variable_names: tuple[str, ...] = ()

    @abstractmethod
    def start(self) -> PaginationState:
        """State for the first request."""

    @abstractmethod
    def next(self, state: PaginationState, page: Any) -> PaginationState:
        """State after `page` was fetched with `state`."""

    @abstractmethod
    def concat(self, result: Any, page: Any) -> Any:
        """Merge a page into the accumulated result."""

    @abstractmethod
    def get_items(self, page_or_result: Any) -> list[Any]:
        """Items of a page or of an accumulated result."""


def _coerce_limit(value: Any, default: int) -> int:
    """Numeric limit, falling back to the default for absent, zero or non-numeric values."""
    if isinstance(value, bool):
        return default
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return default
    return limit or default


def _coerce_offset(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class LimitOffsetAdapter(PaginationAdapter):
    """
    Limit/offset paging over `EntityQueryResult.entities`.

    A page shorter than `limit` is the last one. When the final page is
    exactly `limit` long, one more (empty) page is requested to find out.

    Example:
        pages of 100, 100, 47 items with limit=100
        -> offsets 0, 100, 200; has_next_page True, True, False
    """

    name = "LimitOffsetDrupal"
    expected_variable_names = ("limit", "offset")

    def __init__(self, page_size: int = DEFAULT_LIMIT):
        self.page_size = page_size

    def start(self) -> PaginationState:
        return PaginationState(
            variables={"limit": self.page_size, "offset": 0},
            has_next_page=True,
        )

    def next(self, state: PaginationState, page: Any) -> PaginationState:
        limit = _coerce_limit(state.variables.get("limit"), DEFAULT_LIMIT)
        offset = _coerce_offset(state.variables.get("offset")) + limit
        return PaginationState(
            variables={"limit": limit, "offset": offset},
            has_next_page=len(self.get_items(page)) >= limit,
        )

    def concat(self, result: Any, page: Any) -> Any:
        return {ENTITIES_FIELD: self.get_items(result) + self.get_items(page)}

    def get_items(self, page_or_result: Any) -> list[Any]:
        if not page_or_result:
            return []
        return list(page_or_result.get(ENTITIES_FIELD) or [])
