"""
Utility functions for graphsource.

Includes:
- Name conversion between query fields and remote type names
- Selection set flattening
- Dotted path lookup in decoded payloads
"""

from __future__ import annotations

import re
from typing import Any, Optional

from graphql import FieldNode, InlineFragmentNode, SelectionSetNode


# =============================================================================
# Naming utilities
# =============================================================================

_QUERY_FIELD_PATTERN = re.compile(r'^(.+)Query$')


def upper_first(name: str) -> str:
    """
    Upper-case the first character only.

    Examples:
        node -> Node
        taxonomyTerm -> TaxonomyTerm
    """
    return name[0].upper() + name[1:] if name else name


def query_field_prefix(field_name: str) -> Optional[str]:
    """
    Extract the entity prefix of a `<prefix>Query` field name.

    Examples:
        nodeQuery -> node
        taxonomyTermQuery -> taxonomyTerm
        Query -> None
        route -> None
    """
    match = _QUERY_FIELD_PATTERN.match(field_name)
    return match.group(1) if match else None


# =============================================================================
# Selection and payload utilities
# =============================================================================


def flatten_selection(selection_set: Optional[SelectionSetNode], prefix: str = "") -> list[str]:
    """
    Flatten a selection set into dotted leaf paths.

    Fragment spreads are not followed; inline fragments are merged into the
    surrounding level.

    Example:
        { __typename entityId entityLanguage { id } }
        -> ["__typename", "entityId", "entityLanguage.id"]
    """
    if selection_set is None:
        return []

    paths: list[str] = []
    for selection in selection_set.selections:
        if isinstance(selection, FieldNode):
            name = selection.alias.value if selection.alias else selection.name.value
            path = f"{prefix}{name}"
            if selection.selection_set:
                paths.extend(flatten_selection(selection.selection_set, f"{path}."))
            else:
                paths.append(path)
        elif isinstance(selection, InlineFragmentNode):
            paths.extend(flatten_selection(selection.selection_set, prefix))
    return paths


def get_path(data: Any, path: str) -> Any:
    """
    Read a dotted path from nested dicts, returning None on any gap.

    Example:
        get_path({"entityLanguage": {"id": "en"}}, "entityLanguage.id") -> "en"
    """
    current = data
    for part in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current
