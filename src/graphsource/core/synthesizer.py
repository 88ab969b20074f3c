"""
Query synthesizer - identity-only listing queries per entity type and language.

Every listing query selects nothing but the identity fragment of its type:

    query LIST_NodeArticle_EN($limit: Int, $offset: Int) {
      nodeQuery(limit: $limit, offset: $offset) {
        entities(language: EN) {
          ..._NodeArticleId_
        }
      }
    }

    fragment _NodeArticleId_ on NodeArticle {
      __typename
      entityId
      entityLanguage {
        id
      }
    }

Queries are built as graphql-core AST nodes and only printed when needed.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from graphql import (
    ArgumentNode,
    EnumValueNode,
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    NameNode,
    NamedTypeNode,
    OperationDefinitionNode,
    OperationType,
    SelectionSetNode,
    TypeNode,
    VariableDefinitionNode,
    VariableNode,
    ValueNode,
    ast_from_value,
    parse_type,
)

from .defs import ENTITIES_FIELD, EntityTypeDescriptor, ListingQuery
from .errors import ConfigurationError, PaginationVariableMismatch
from .schema import RemoteSchema

logger = logging.getLogger(__name__)

# Returns the `filter` argument value for a (type, language) pair, or None
FilterFactory = Callable[[EntityTypeDescriptor, str], Optional[Any]]


def _name(value: str) -> NameNode:
    return NameNode(value=value)


def _field(
    name: str,
    arguments: Sequence[ArgumentNode] = (),
    selections: Sequence[Any] = (),
) -> FieldNode:
    return FieldNode(
        alias=None,
        name=_name(name),
        arguments=tuple(arguments),
        directives=(),
        selection_set=SelectionSetNode(selections=tuple(selections)) if selections else None,
    )


def _spread(fragment_name: str) -> FragmentSpreadNode:
    return FragmentSpreadNode(name=_name(fragment_name), directives=())


def build_identity_fragment(type_name: str) -> FragmentDefinitionNode:
    """Fragment `_<TypeName>Id_` selecting `__typename`, `entityId` and `entityLanguage.id`."""
    return FragmentDefinitionNode(
        name=_name(f"_{type_name}Id_"),
        type_condition=NamedTypeNode(name=_name(type_name)),
        variable_definitions=(),
        directives=(),
        selection_set=SelectionSetNode(selections=(
            _field("__typename"),
            _field("entityId"),
            _field("entityLanguage", selections=[_field("id")]),
        )),
    )


class QuerySynthesizer:
    """
    Builds listing queries and identity fragments.

    Usage:
        synthesizer = QuerySynthesizer(schema, filters={"NodeArticle": {...}})
        queries = synthesizer.build_listing_queries(descriptor)
        fragment = synthesizer.identity_fragment(descriptor)
    """

    VARIABLE_NAMES = ("limit", "offset")

    def __init__(
        self,
        schema: RemoteSchema,
        filters: Union[FilterFactory, Mapping[str, Any], None] = None,
    ):
        """
        Initialize synthesizer.

        Args:
            schema: Remote schema, used for variable and filter argument types
            filters: Optional `filter` argument per type, either a mapping of
                remote type name to value or a callable of (descriptor, language)
        """
        self.schema = schema
        if filters is None or callable(filters):
            self._filter_factory = filters
        else:
            mapping = dict(filters)
            self._filter_factory = lambda descriptor, _language: mapping.get(
                descriptor.remote_type_name
            )

    @staticmethod
    def operation_name(descriptor: EntityTypeDescriptor, language: str) -> str:
        return f"LIST_{descriptor.remote_type_name}_{language}"

    def identity_fragment(self, descriptor: EntityTypeDescriptor) -> FragmentDefinitionNode:
        """Identity fragment shared by every language variant of the type."""
        return build_identity_fragment(descriptor.remote_type_name)

    def build_listing_queries(
        self,
        descriptor: EntityTypeDescriptor,
        languages: Optional[Sequence[str]] = None,
    ) -> list[ListingQuery]:
        """
        Build one listing query per language.

        Args:
            descriptor: Entity type to list
            languages: Overrides the descriptor's supported languages

        Returns:
            ListingQuery per language, in language order

        Raises:
            ConfigurationError: If a filter cannot be applied to the query field
        """
        langs = list(languages) if languages is not None else list(descriptor.supported_languages)
        return [
            ListingQuery(
                remote_type_name=descriptor.remote_type_name,
                language=language,
                operation=self._build_operation(descriptor, language),
                variable_names=self.VARIABLE_NAMES,
            )
            for language in langs
        ]

    def _build_operation(
        self,
        descriptor: EntityTypeDescriptor,
        language: str,
    ) -> OperationDefinitionNode:
        arguments = [
            ArgumentNode(name=_name(var), value=VariableNode(name=_name(var)))
            for var in self.VARIABLE_NAMES
        ]

        filter_value = self._filter_node(descriptor, language)
        if filter_value is not None:
            arguments.append(ArgumentNode(name=_name("filter"), value=filter_value))

        entities = _field(
            ENTITIES_FIELD,
            arguments=[ArgumentNode(name=_name("language"), value=EnumValueNode(value=language))],
            selections=[_spread(descriptor.identity_fragment_name)],
        )
        root = _field(descriptor.query_field_name, arguments=arguments, selections=[entities])

        return OperationDefinitionNode(
            operation=OperationType.QUERY,
            name=_name(self.operation_name(descriptor, language)),
            variable_definitions=tuple(
                VariableDefinitionNode(
                    variable=VariableNode(name=_name(var)),
                    type=self._variable_type(descriptor.query_field_name, var),
                    default_value=None,
                    directives=(),
                )
                for var in self.VARIABLE_NAMES
            ),
            directives=(),
            selection_set=SelectionSetNode(selections=(root,)),
        )

    def _variable_type(self, query_field_name: str, argument: str) -> TypeNode:
        """Declare variables with the query field's own argument types."""
        field = self.schema.query_field(query_field_name)
        arg = field.args.get(argument) if field else None
        return parse_type(str(arg.type)) if arg else parse_type("Int")

    def _filter_node(self, descriptor: EntityTypeDescriptor, language: str) -> Optional[ValueNode]:
        if self._filter_factory is None:
            return None
        value = self._filter_factory(descriptor, language)
        if value is None:
            return None

        field = self.schema.query_field(descriptor.query_field_name)
        arg = field.args.get("filter") if field else None
        if arg is None:
            raise ConfigurationError(
                f"Query field '{descriptor.query_field_name}' has no `filter` argument "
                f"(filter configured for '{descriptor.remote_type_name}')"
            )

        node = ast_from_value(value, arg.type)
        if node is None:
            raise ConfigurationError(
                f"Filter for '{descriptor.remote_type_name}' does not match type {arg.type}"
            )
        logger.debug(f"Applying filter to {self.operation_name(descriptor, language)}")
        return node


def check_pagination_variables(adapter: Any) -> None:
    """
    Wiring-time contract check between listing queries and a pagination adapter.

    Raises:
        PaginationVariableMismatch: If the adapter expects other variable names
    """
    expected = list(QuerySynthesizer.VARIABLE_NAMES)
    actual = list(getattr(adapter, "expected_variable_names", []) or [])
    if sorted(actual) != sorted(expected):
        raise PaginationVariableMismatch(
            adapter=getattr(adapter, "name", type(adapter).__name__),
            expected=expected,
            actual=actual,
        )
