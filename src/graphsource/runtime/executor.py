"""
HTTP executor for the remote GraphQL endpoint.

Posts GraphQL requests as JSON and returns the `data` payload.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from ..core.errors import GraphQLResponseError, TransportError
from ..core.query_types import GraphQLRequest, GraphQLResponse

logger = logging.getLogger(__name__)


class HttpQueryExecutor:
    """
    Async GraphQL executor over HTTP.

    Usage:
        executor = HttpQueryExecutor("https://drupal.example.com/graphql")
        data = await executor.execute(GraphQLRequest(query="{ __typename }"))
        await executor.close()
    """

    def __init__(
        self,
        url: str,
        headers: Optional[dict[str, str]] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize executor.

        Args:
            url: GraphQL endpoint URL
            headers: Extra headers sent with every request (e.g. Authorization)
            timeout: HTTP request timeout in seconds
            transport: Custom httpx transport (used by tests)
        """
        self.url = url
        self.headers = headers or {}
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self.headers,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpQueryExecutor":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def execute(self, request: GraphQLRequest) -> dict[str, Any]:
        """
        Execute one request.

        Args:
            request: Query, operation name and variables

        Returns:
            The `data` object of the response

        Raises:
            TransportError: On connection failures, non-200 answers or bodies
                that are not GraphQL responses
            GraphQLResponseError: If the response carries `errors`
        """
        client = await self._get_client()
        logger.debug(f"POST {self.url} {request.operation_name} {request.variables}")

        try:
            response = await client.post(self.url, json=request.to_payload())
        except httpx.RequestError as e:
            raise TransportError(url=self.url, status_code=0, message=str(e)) from e

        if response.status_code != 200:
            raise TransportError(
                url=self.url,
                status_code=response.status_code,
                message=response.text,
            )

        try:
            body = GraphQLResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise TransportError(
                url=self.url,
                status_code=response.status_code,
                message=f"Invalid GraphQL response body: {e}",
            ) from e

        if body.errors:
            raise GraphQLResponseError(body.errors)

        return body.data or {}
