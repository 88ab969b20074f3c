"""
Entity type resolver - maps paginated query fields to concrete remote types.

A query root field is an entity collection when it is named `<prefix>Query`
and returns `EntityQueryResult`. The entity type is the prefix with its first
letter upper-cased; abstract types expand into their implementors.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from graphql import get_nullable_type, is_composite_type, is_named_type

from .defs import ENTITY_QUERY_RESULT, EntityTypeDescriptor
from .schema import RemoteSchema
from .utils import query_field_prefix, upper_first

logger = logging.getLogger(__name__)


def query_field_entity_type(schema: RemoteSchema, field_name: str) -> Optional[str]:
    """
    Resolve the entity type name a query field lists, if it follows the convention.

    Returns None for non-matching names, other return types and prefixes
    without a composite type of the same name.
    """
    prefix = query_field_prefix(field_name)
    field = schema.query_field(field_name)
    if not prefix or field is None:
        return None

    # Non-null is unwrapped, list results are not paginated collections
    result_type = get_nullable_type(field.type)
    if not is_named_type(result_type) or result_type.name != ENTITY_QUERY_RESULT:
        return None

    type_name = upper_first(prefix)
    entity_type = schema.type_by_name(type_name)
    if entity_type is None:
        logger.debug(f"Query field '{field_name}' has no type '{type_name}', skipping")
        return None
    if not is_composite_type(entity_type):
        logger.debug(f"Type '{type_name}' of '{field_name}' is not composite, skipping")
        return None
    return type_name


def find_entity_types(
    schema: RemoteSchema,
    languages: Sequence[str] = ("EN",),
) -> list[EntityTypeDescriptor]:
    """
    Discover every concrete entity type reachable through a paginated query field.

    Args:
        schema: Remote schema
        languages: Language codes each type is listed in

    Returns:
        Descriptors in query field order. A concrete type reachable through
        several query fields keeps the first one.
    """
    descriptors: dict[str, EntityTypeDescriptor] = {}

    for field_name in schema.query_fields():
        type_name = query_field_entity_type(schema, field_name)
        if type_name is None:
            continue

        if schema.is_abstract(type_name):
            candidates = [
                EntityTypeDescriptor(
                    remote_type_name=implementor.name,
                    query_field_name=field_name,
                    supported_languages=tuple(languages),
                    is_interface=True,
                    interface_name=type_name,
                )
                for implementor in schema.implementors_of(type_name)
            ]
        else:
            candidates = [
                EntityTypeDescriptor(
                    remote_type_name=type_name,
                    query_field_name=field_name,
                    supported_languages=tuple(languages),
                )
            ]

        for descriptor in candidates:
            existing = descriptors.get(descriptor.remote_type_name)
            if existing is not None:
                logger.debug(
                    f"Type '{descriptor.remote_type_name}' already listed by "
                    f"'{existing.query_field_name}', ignoring '{field_name}'"
                )
                continue
            descriptors[descriptor.remote_type_name] = descriptor

    logger.info(f"Found {len(descriptors)} entity types")
    return list(descriptors.values())
