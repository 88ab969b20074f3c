"""
Pydantic models for the GraphQL wire format and the executor contract.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


class GraphQLRequest(BaseModel):
    """
    A single GraphQL POST body.

    Example:
    {
        "query": "query LIST_NodeArticle_EN($limit: Int, $offset: Int) {...}",
        "operationName": "LIST_NodeArticle_EN",
        "variables": {"limit": 100, "offset": 0}
    }
    """
    model_config = ConfigDict(populate_by_name=True)

    query: str
    operation_name: Optional[str] = Field(default=None, alias="operationName")
    variables: Dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """Serialize with wire names, dropping an absent operation name."""
        return self.model_dump(by_alias=True, exclude_none=True)


class GraphQLResponse(BaseModel):
    """Decoded GraphQL response body."""
    data: Optional[Dict[str, Any]] = None
    errors: Optional[List[Dict[str, Any]]] = None


@runtime_checkable
class QueryExecutor(Protocol):
    """
    Executes GraphQL requests against the remote endpoint.

    Implementations return the `data` payload and raise `TransportError` or
    `GraphQLResponseError` so that callers can tell the two apart.
    """

    async def execute(self, request: GraphQLRequest) -> dict[str, Any]:
        ...
