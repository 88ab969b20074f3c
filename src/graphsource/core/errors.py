"""
Custom exceptions for the graphsource engine.

Schema and compile phase errors are global and abort a run before anything
reaches the node sink. Fragment and fetch errors are scoped to one entity type
and are collected into the run report instead of propagating.
"""

from __future__ import annotations

from typing import Any, Optional


class GraphSourceError(Exception):
    """Base exception for all graphsource errors."""
    pass


class ConfigurationError(GraphSourceError):
    """Raised when sourcing configuration is missing or invalid."""
    pass


class ExecutorError(GraphSourceError):
    """Raised by a query executor when a request cannot be completed."""
    pass


class TransportError(ExecutorError):
    """Raised when the remote endpoint cannot be reached or answers non-200."""

    def __init__(self, url: str, status_code: int, message: str):
        self.url = url
        self.status_code = status_code
        super().__init__(f"Endpoint '{url}' returned {status_code}: {message}")


class GraphQLResponseError(ExecutorError):
    """Raised when the remote endpoint answers with a GraphQL `errors` array."""

    def __init__(self, errors: list[dict[str, Any]]):
        self.errors = errors
        messages = [e.get("message", str(e)) for e in errors]
        super().__init__(f"GraphQL errors: {'; '.join(messages)}")


class SchemaLoadError(GraphSourceError):
    """Raised when the remote schema cannot be introspected."""
    pass


class PaginationVariableMismatch(GraphSourceError):
    """Raised when a pagination adapter expects different query variables."""

    def __init__(self, adapter: str, expected: list[str], actual: list[str]):
        self.adapter = adapter
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Pagination adapter '{adapter}' expects variables {actual}, "
            f"listing queries declare {expected}"
        )


class UnresolvedFragmentError(GraphSourceError):
    """Raised when a type reaches the compiler without a data fragment."""

    def __init__(self, type_name: str, message: Optional[str] = None):
        self.type_name = type_name
        super().__init__(message or f"No data fragment resolved for type '{type_name}'")


class DocumentValidationError(GraphSourceError):
    """Raised when a compiled document does not validate against the remote schema."""

    def __init__(self, type_name: str, errors: list[str]):
        self.type_name = type_name
        self.errors = errors
        super().__init__(f"Compiled document for '{type_name}' is invalid: {errors}")


class FragmentGenerationError(GraphSourceError):
    """Raised when no usable data fragment can be produced for a type."""

    def __init__(self, type_name: str, message: str):
        self.type_name = type_name
        super().__init__(f"Fragment for '{type_name}': {message}")


class FetchError(GraphSourceError):
    """Raised when a page fetch fails during pagination of one type/language."""

    def __init__(
        self,
        type_name: str,
        language: str,
        variables: dict[str, Any],
        message: str,
    ):
        self.type_name = type_name
        self.language = language
        self.variables = variables
        super().__init__(
            f"Fetching {type_name} ({language}) with {variables} failed: {message}"
        )


class SourcingCancelled(GraphSourceError):
    """Raised between pages when the run's cancel event is set."""
    pass
