"""
Fragment provider - one data fragment per sourced entity type.

Resolution order per type:
1. A fragment supplied by the caller
2. A cached fragment in the fragment store
3. A generated default fragment, written back to the store

Cached fragments are never regenerated, so they can be edited by hand to
trim or extend what is fetched. A failure is scoped to its type: the type is
reported as skipped and every other type keeps its fragment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, Optional, Protocol

from graphql import (
    FieldNode,
    FragmentDefinitionNode,
    GraphQLError,
    GraphQLInterfaceType,
    GraphQLObjectType,
    NameNode,
    NamedTypeNode,
    OperationDefinitionNode,
    SelectionSetNode,
    get_named_type,
    is_interface_type,
    is_leaf_type,
    is_object_type,
    is_required_argument,
    is_union_type,
    parse,
    print_ast,
)

from .defs import DataFragment, EntityTypeDescriptor
from .errors import FragmentGenerationError
from .schema import RemoteSchema

logger = logging.getLogger(__name__)


class FragmentCache(Protocol):
    """Named text blobs addressed by type name (see `graphsource.storage.FragmentStore`)."""

    def read(self, type_name: str) -> Optional[str]:
        ...

    def write(self, type_name: str, text: str) -> None:
        ...


# (schema, descriptor, sourced type names) -> fragment text
FragmentGenerator = Callable[[RemoteSchema, EntityTypeDescriptor, frozenset], str]


def _leaf(name: str) -> FieldNode:
    return FieldNode(alias=None, name=NameNode(value=name), arguments=(), directives=(), selection_set=None)


def _composite(name: str, selections: list[FieldNode]) -> FieldNode:
    return FieldNode(
        alias=None,
        name=NameNode(value=name),
        arguments=(),
        directives=(),
        selection_set=SelectionSetNode(selections=tuple(selections)),
    )


class DefaultFragmentGenerator:
    """
    Generates a fragment selecting every leaf field of a type.

    - Scalar and enum fields are always selected
    - Object and interface fields are followed up to `max_depth` levels
    - Fields pointing at another sourced entity type only select its identity
      (`__typename`, `entityId`) so that entities reference each other
    - Union fields select `__typename`
    - Fields with required arguments are skipped
    """

    def __init__(self, max_depth: int = 2):
        self.max_depth = max_depth

    def __call__(
        self,
        schema: RemoteSchema,
        descriptor: EntityTypeDescriptor,
        sourced_types: frozenset = frozenset(),
    ) -> str:
        type_name = descriptor.remote_type_name
        remote_type = schema.type_by_name(type_name)
        if not is_object_type(remote_type):
            raise FragmentGenerationError(type_name, "not an object type in the remote schema")

        selections = self._selections(remote_type, 0, sourced_types)
        if not selections:
            raise FragmentGenerationError(type_name, "no selectable fields")

        fragment = FragmentDefinitionNode(
            name=NameNode(value=type_name),
            type_condition=NamedTypeNode(name=NameNode(value=type_name)),
            variable_definitions=(),
            directives=(),
            selection_set=SelectionSetNode(selections=tuple(selections)),
        )
        return print_ast(fragment) + "\n"

    def _selections(
        self,
        parent: GraphQLObjectType | GraphQLInterfaceType,
        depth: int,
        sourced_types: frozenset,
    ) -> list[FieldNode]:
        selections: list[FieldNode] = []

        for name, remote_field in parent.fields.items():
            if any(is_required_argument(arg) for arg in remote_field.args.values()):
                continue

            named = get_named_type(remote_field.type)
            if is_leaf_type(named):
                selections.append(_leaf(name))
                continue

            if depth >= self.max_depth:
                continue

            if named.name in sourced_types:
                reference = [_leaf("__typename")]
                if "entityId" in named.fields:
                    reference.append(_leaf("entityId"))
                selections.append(_composite(name, reference))
            elif is_union_type(named):
                selections.append(_composite(name, [_leaf("__typename")]))
            elif is_object_type(named) or is_interface_type(named):
                nested = self._selections(named, depth + 1, sourced_types)
                if nested:
                    selections.append(_composite(name, nested))

        return selections


def parse_fragment(
    type_name: str,
    text: str,
    source: str = "generated",
) -> DataFragment:
    """
    Parse fragment text for a type.

    The text may hold several fragments; the main one is the first fragment
    named after the type, or else the first one on the type.

    Raises:
        FragmentGenerationError: On syntax errors, operations in the text or
            no fragment on the type
    """
    try:
        document = parse(text)
    except GraphQLError as e:
        raise FragmentGenerationError(type_name, f"invalid fragment text: {e.message}") from e

    if any(isinstance(d, OperationDefinitionNode) for d in document.definitions):
        raise FragmentGenerationError(type_name, "fragment text must not contain operations")

    definitions = [d for d in document.definitions if isinstance(d, FragmentDefinitionNode)]
    on_type = [d for d in definitions if d.type_condition.name.value == type_name]
    if not on_type:
        raise FragmentGenerationError(type_name, f"no fragment on '{type_name}'")

    main = next((d for d in on_type if d.name.value == type_name), on_type[0])
    ordered = [main] + [d for d in definitions if d is not main]

    return DataFragment(
        remote_type_name=type_name,
        name=main.name.value,
        definitions=tuple(ordered),
        text=text,
        source=source,
    )


@dataclass
class ResolvedFragments:
    """Fragments by remote type name plus the types that failed."""
    fragments: dict[str, DataFragment] = field(default_factory=dict)
    failures: dict[str, FragmentGenerationError] = field(default_factory=dict)

    def __contains__(self, type_name: str) -> bool:
        return type_name in self.fragments


def resolve_fragments(
    store: FragmentCache,
    schema: RemoteSchema,
    descriptors: Iterable[EntityTypeDescriptor],
    custom_fragments: Optional[Mapping[str, str]] = None,
    generator: Optional[FragmentGenerator] = None,
) -> ResolvedFragments:
    """
    Resolve exactly one data fragment per descriptor.

    Args:
        store: Fragment cache
        schema: Remote schema
        descriptors: Entity types being sourced
        custom_fragments: Fragment texts by type name, taking precedence
        generator: Default fragment generator (DefaultFragmentGenerator())

    Returns:
        ResolvedFragments; each descriptor is in exactly one of
        `fragments` or `failures`
    """
    descriptors = list(descriptors)
    custom_fragments = custom_fragments or {}
    generator = generator or DefaultFragmentGenerator()
    sourced_types = frozenset(d.remote_type_name for d in descriptors)
    result = ResolvedFragments()

    for descriptor in descriptors:
        type_name = descriptor.remote_type_name
        try:
            if type_name in custom_fragments:
                fragment = parse_fragment(type_name, custom_fragments[type_name], "custom")
            else:
                cached = store.read(type_name)
                if cached is not None:
                    fragment = parse_fragment(type_name, cached, "cache")
                else:
                    fragment = _generate(generator, schema, descriptor, sourced_types)
                    store.write(type_name, fragment.text)
        except FragmentGenerationError as e:
            logger.warning(f"Skipping type {type_name}: {e}")
            result.failures[type_name] = e
            continue

        logger.debug(f"Fragment for {type_name} from {fragment.source}")
        result.fragments[type_name] = fragment

    logger.info(
        f"Resolved {len(result.fragments)} fragments, {len(result.failures)} failed"
    )
    return result


def _generate(
    generator: FragmentGenerator,
    schema: RemoteSchema,
    descriptor: EntityTypeDescriptor,
    sourced_types: frozenset,
) -> DataFragment:
    type_name = descriptor.remote_type_name
    try:
        text = generator(schema, descriptor, sourced_types)
    except FragmentGenerationError:
        raise
    except Exception as e:
        raise FragmentGenerationError(type_name, f"generator failed: {e}") from e
    return parse_fragment(type_name, text, "generated")
