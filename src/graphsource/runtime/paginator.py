"""
Pagination engine - drives one compiled document through all of its pages.

State machine per (type, language):
    start -> fetch -> advance -> fetch -> ... -> terminal

Page N+1 depends on page N, so pages of one type are strictly sequential.
Items are yielded as soon as their page arrives; a failure after some pages
keeps what was already yielded.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Optional

from ..core.defs import CompiledDocument, EntityRecord
from ..core.errors import ExecutorError, FetchError, SourcingCancelled
from ..core.query_types import GraphQLRequest, QueryExecutor
from .pagination import PaginationAdapter

logger = logging.getLogger(__name__)


async def _fetch_page(
    executor: QueryExecutor,
    document: CompiledDocument,
    language: str,
    variables: dict[str, Any],
) -> dict[str, Any]:
    request = GraphQLRequest(
        query=document.text,
        operation_name=document.operation_name(language),
        variables=dict(variables),
    )
    try:
        data = await executor.execute(request)
    except ExecutorError as e:
        raise FetchError(document.remote_type_name, language, dict(variables), str(e)) from e

    field_name = document.query_field_name
    if not isinstance(data, dict) or field_name not in data:
        problem = f"response has no `{field_name}` field"
    elif data[field_name] is None:
        problem = f"`{field_name}` is null"
    elif not isinstance(data[field_name], dict):
        problem = f"`{field_name}` is not an object"
    else:
        return data[field_name]

    raise FetchError(document.remote_type_name, language, dict(variables), problem)


def _check_cancelled(cancel_event: Optional[asyncio.Event], document: CompiledDocument, language: str):
    if cancel_event is not None and cancel_event.is_set():
        raise SourcingCancelled(f"Cancelled while sourcing {document.remote_type_name} ({language})")


async def paginate(
    executor: QueryExecutor,
    document: CompiledDocument,
    language: str,
    adapter: PaginationAdapter,
    cancel_event: Optional[asyncio.Event] = None,
) -> AsyncIterator[EntityRecord]:
    """
    Stream every entity of one type in one language.

    Items of sibling types (empty objects returned when the listing field is
    an interface) are dropped; they still count towards the page length.

    Args:
        executor: Remote query executor
        document: Compiled document of the type
        language: Language whose operation is executed
        adapter: Pagination strategy
        cancel_event: Checked before every page

    Yields:
        EntityRecord per entity of the type

    Raises:
        FetchError: If a page cannot be fetched
        SourcingCancelled: If cancel_event is set between pages
    """
    type_name = document.remote_type_name
    state = adapter.start()
    page_number = 0

    while state.has_next_page:
        _check_cancelled(cancel_event, document, language)

        page = await _fetch_page(executor, document, language, state.variables)
        items = adapter.get_items(page)
        page_number += 1
        logger.debug(
            f"{type_name} ({language}) page {page_number}: "
            f"{len(items)} items with {state.variables}"
        )

        for item in items:
            if not isinstance(item, dict) or item.get("__typename") != type_name:
                continue
            yield EntityRecord(remote_type_name=type_name, language=language, data=item)

        state = adapter.next(state, page)


async def fetch_all(
    executor: QueryExecutor,
    document: CompiledDocument,
    language: str,
    adapter: PaginationAdapter,
    cancel_event: Optional[asyncio.Event] = None,
) -> Any:
    """
    Fetch every page and merge them with the adapter's `concat`.

    Non-streaming counterpart of `paginate`; nothing is returned if a page
    fails.

    Returns:
        Accumulated result (for LimitOffsetAdapter: `{"entities": [...]}`)
    """
    state = adapter.start()
    result: Any = None

    while state.has_next_page:
        _check_cancelled(cancel_event, document, language)
        page = await _fetch_page(executor, document, language, state.variables)
        result = page if result is None else adapter.concat(result, page)
        state = adapter.next(state, page)

    return result
