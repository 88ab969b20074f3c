"""
Runtime module - remote execution, pagination and orchestration.
"""

from __future__ import annotations

from .executor import HttpQueryExecutor
from .orchestrator import (
    SourcingOrchestrator,
    SourcingPlan,
    SourcingReport,
    TypeReport,
    build_node_definitions,
)
from .pagination import LimitOffsetAdapter, PaginationAdapter, PaginationState
from .paginator import fetch_all, paginate

__all__ = [
    "HttpQueryExecutor",
    "PaginationState",
    "PaginationAdapter",
    "LimitOffsetAdapter",
    "paginate",
    "fetch_all",
    "SourcingOrchestrator",
    "SourcingPlan",
    "SourcingReport",
    "TypeReport",
    "build_node_definitions",
]
