"""
Sourcing orchestrator - runs the whole pipeline for one remote endpoint.

    introspect -> resolve types -> synthesize listing queries
        -> resolve fragments -> compile -> paginate and emit

Everything up to and including compilation is all-or-nothing: a failure there
aborts before the sink sees anything. During pagination each type is
isolated; a failing type is reported and the others carry on.

Usage:
    config = SourcingConfig(url="https://drupal.example.com/graphql", languages=["EN", "ES"])
    orchestrator = SourcingOrchestrator(config, sink=InMemoryNodeSink())
    report = await orchestrator.run()
    print(report.summary())
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Mapping, Optional, Union

from graphql import FragmentDefinitionNode

from ..config import SourcingConfig
from ..core.compiler import QueryCompiler
from ..core.defs import CompiledDocument, EntityTypeDescriptor, ListingQuery, NodeDefinition
from ..core.errors import FetchError, SourcingCancelled
from ..core.fragments import (
    DefaultFragmentGenerator,
    FragmentCache,
    FragmentGenerator,
    ResolvedFragments,
    resolve_fragments,
)
from ..core.query_types import QueryExecutor
from ..core.resolver import find_entity_types
from ..core.schema import RemoteSchema, load_schema
from ..core.synthesizer import FilterFactory, QuerySynthesizer, check_pagination_variables
from ..sinks import InMemoryNodeSink, NodeSink
from ..storage import FragmentStore, write_compiled_queries
from .executor import HttpQueryExecutor
from .pagination import LimitOffsetAdapter, PaginationAdapter
from .paginator import paginate

logger = logging.getLogger(__name__)

TypeStatus = Literal["pending", "complete", "partial", "skipped", "cancelled"]


@dataclass
class SourcingPlan:
    """Everything prepared before the first page is fetched."""
    schema: RemoteSchema
    descriptors: list[EntityTypeDescriptor]
    listing_queries: dict[str, list[ListingQuery]]
    identity_fragments: dict[str, FragmentDefinitionNode]
    fragments: ResolvedFragments
    documents: dict[str, CompiledDocument]
    node_definitions: dict[str, NodeDefinition]

    @property
    def skipped(self) -> dict[str, str]:
        """Types without a fragment, with the reason."""
        return {name: str(error) for name, error in self.fragments.failures.items()}


@dataclass
class TypeReport:
    """Outcome of sourcing one remote type."""
    remote_type_name: str
    status: TypeStatus = "pending"
    emitted: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class SourcingReport:
    """Per-type outcome of a run."""
    types: dict[str, TypeReport] = field(default_factory=dict)
    cancelled: bool = False

    def _with_status(self, status: TypeStatus) -> list[str]:
        return [name for name, entry in self.types.items() if entry.status == status]

    @property
    def complete(self) -> list[str]:
        return self._with_status("complete")

    @property
    def partial(self) -> list[str]:
        return self._with_status("partial")

    @property
    def skipped(self) -> list[str]:
        return self._with_status("skipped")

    @property
    def cancelled_types(self) -> list[str]:
        return self._with_status("cancelled")

    @property
    def total_emitted(self) -> int:
        return sum(entry.emitted for entry in self.types.values())

    def summary(self) -> str:
        lines = [
            f"Sourced {self.total_emitted} records: "
            f"{len(self.complete)} complete, {len(self.partial)} partial, "
            f"{len(self.skipped)} skipped, {len(self.cancelled_types)} cancelled"
        ]
        for name, entry in self.types.items():
            lines.append(f"  {name}: {entry.status} ({entry.emitted})")
            for error in entry.errors:
                lines.append(f"    - {error}")
        return "\n".join(lines)


def build_node_definitions(
    descriptors: Iterable[EntityTypeDescriptor],
    documents: Mapping[str, CompiledDocument],
    type_prefix: str = "",
) -> dict[str, NodeDefinition]:
    """Node definition per compiled type, named `<type_prefix><RemoteTypeName>`."""
    return {
        d.remote_type_name: NodeDefinition(
            descriptor=d,
            node_type_name=f"{type_prefix}{d.remote_type_name}",
            document=documents[d.remote_type_name],
        )
        for d in descriptors
        if d.remote_type_name in documents
    }


class SourcingOrchestrator:
    """
    Sequences schema introspection, compilation and pagination for one run.

    No state survives a run apart from the fragment cache written through
    the store.
    """

    def __init__(
        self,
        config: SourcingConfig,
        executor: Optional[QueryExecutor] = None,
        sink: Optional[NodeSink] = None,
        adapter: Optional[PaginationAdapter] = None,
        store: Optional[FragmentCache] = None,
        custom_fragments: Optional[Mapping[str, str]] = None,
        fragment_generator: Optional[FragmentGenerator] = None,
        filters: Union[FilterFactory, Mapping[str, Any], None] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            config: Run configuration
            executor: Remote executor (default: HttpQueryExecutor for config.url)
            sink: Receiver of sourced records (default: InMemoryNodeSink)
            adapter: Pagination strategy (default: LimitOffsetAdapter(config.page_size))
            store: Fragment cache (default: FragmentStore(config.fragments_dir))
            custom_fragments: Fragment texts by type name, overriding the cache
            fragment_generator: Default fragment generator
            filters: `filter` arguments per type, overriding config.filters
        """
        self.config = config
        self.executor = executor
        self.sink = sink if sink is not None else InMemoryNodeSink()
        self.adapter = adapter or LimitOffsetAdapter(config.page_size)
        self.store = store if store is not None else FragmentStore(config.fragments_dir)
        self.custom_fragments = dict(custom_fragments or {})
        self.fragment_generator = fragment_generator
        self.filters = filters if filters is not None else (config.filters or None)
        self._owns_executor = False

    def _preflight(self) -> None:
        """Checks that must fail before any network call."""
        self.config.validate()
        check_pagination_variables(self.adapter)

    def _get_executor(self) -> QueryExecutor:
        if self.executor is None:
            self.executor = HttpQueryExecutor(
                self.config.url,
                headers=self.config.headers,
                timeout=self.config.timeout,
            )
            self._owns_executor = True
        return self.executor

    async def close(self) -> None:
        """Close the executor if this orchestrator created it."""
        if self._owns_executor and self.executor is not None:
            await self.executor.close()
            self.executor = None
            self._owns_executor = False

    async def prepare(self) -> SourcingPlan:
        """
        Run every step up to compilation.

        Raises:
            ConfigurationError: Missing url or invalid configuration
            PaginationVariableMismatch: Adapter incompatible with listing queries
            SchemaLoadError: Introspection failed
            UnresolvedFragmentError, DocumentValidationError: Compilation failed
        """
        self._preflight()
        executor = self._get_executor()

        schema = await load_schema(executor)
        descriptors = find_entity_types(schema, self.config.languages)

        synthesizer = QuerySynthesizer(schema, filters=self.filters)
        listing_queries = {
            d.remote_type_name: synthesizer.build_listing_queries(d) for d in descriptors
        }
        identity_fragments = {
            d.remote_type_name: synthesizer.identity_fragment(d) for d in descriptors
        }

        fragments = resolve_fragments(
            self.store,
            schema,
            descriptors,
            custom_fragments=self.custom_fragments,
            generator=self.fragment_generator or DefaultFragmentGenerator(self.config.fragment_depth),
        )

        compilable = [d for d in descriptors if d.remote_type_name in fragments]
        documents = QueryCompiler(schema).compile(
            compilable,
            listing_queries,
            identity_fragments,
            fragments.fragments,
        )

        if self.config.debug_dir:
            write_compiled_queries(self.config.debug_dir, documents)

        return SourcingPlan(
            schema=schema,
            descriptors=descriptors,
            listing_queries=listing_queries,
            identity_fragments=identity_fragments,
            fragments=fragments,
            documents=documents,
            node_definitions=build_node_definitions(compilable, documents, self.config.type_prefix),
        )

    async def source(
        self,
        plan: SourcingPlan,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> SourcingReport:
        """
        Paginate every compiled type into the sink.

        Types run with at most `config.concurrency` in flight; languages of one
        type run one after another.

        Args:
            plan: Result of prepare()
            cancel_event: When set, sourcing stops before the next page

        Returns:
            SourcingReport with a status per type
        """
        report = SourcingReport()
        for descriptor in plan.descriptors:
            report.types[descriptor.remote_type_name] = TypeReport(descriptor.remote_type_name)
        for type_name, reason in plan.skipped.items():
            entry = report.types[type_name]
            entry.status = "skipped"
            entry.errors.append(reason)

        for definition in plan.node_definitions.values():
            self.sink.declare(definition)

        semaphore = asyncio.Semaphore(self.config.concurrency)

        async def run_type(definition: NodeDefinition):
            async with semaphore:
                await self._source_type(
                    definition,
                    report.types[definition.remote_type_name],
                    cancel_event,
                )

        await asyncio.gather(*(run_type(d) for d in plan.node_definitions.values()))

        report.cancelled = cancel_event is not None and cancel_event.is_set()
        return report

    async def _source_type(
        self,
        definition: NodeDefinition,
        entry: TypeReport,
        cancel_event: Optional[asyncio.Event],
    ) -> None:
        descriptor = definition.descriptor
        executor = self._get_executor()

        for language in descriptor.supported_languages:
            try:
                async for record in paginate(
                    executor,
                    definition.document,
                    language,
                    self.adapter,
                    cancel_event,
                ):
                    self.sink.emit(definition, record)
                    entry.emitted += 1
            except FetchError as e:
                logger.warning(f"Partially sourced {descriptor.remote_type_name}: {e}")
                entry.errors.append(str(e))
            except SourcingCancelled as e:
                logger.info(str(e))
                entry.status = "cancelled"
                return

        entry.status = "partial" if entry.errors else "complete"
        logger.info(f"Sourced {entry.emitted} {descriptor.remote_type_name} records ({entry.status})")

    async def run(self, cancel_event: Optional[asyncio.Event] = None) -> SourcingReport:
        """
        Prepare and source in one go.

        Fatal errors of the prepare phase propagate; fetch errors end up in
        the report.
        """
        try:
            plan = await self.prepare()
            report = await self.source(plan, cancel_event)
        finally:
            await self.close()

        logger.info(report.summary())
        return report
