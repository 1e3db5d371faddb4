#!/usr/bin/env python3
"""Generic traversal of arbitrary JSON documents.

Used for documents the domain-aware traversal does not recognize (for example an
order wrapped as ``{"order": {...}}``). Every object and array becomes a node;
scalar leaves stay in their parent's data. Object types come from the rule
table's ``type_rules`` (first match wins), so a new entity type only needs a new
rule, not new code.
"""
import logging
from typing import Any, Optional

from ....models.models import GraphNode
from .context import BuildContext
from .sequencing import link_sequence

logger = logging.getLogger(__name__)

# Stack entry that chains the elements of an array after they are visited
_LINK = object()


def _display_type(node_type: str) -> str:
    return node_type[:1].upper() + node_type[1:]


def object_label(ctx: BuildContext, obj: dict[str, Any], node_type: str, parent_key: Optional[str]) -> str:
    """Label an object by its type and first present label field.

    Falls back to the property name it was found under, or 'root'.
    """
    for field in ctx.rules.label_fields:
        value = obj.get(field)
        if isinstance(value, (str, int, float)) and not isinstance(value, bool) and value != "":
            return f"{_display_type(node_type)}: {value}"
    if node_type != "object":
        return f"{_display_type(node_type)}: {parent_key or 'root'}"
    return parent_key or "root"


def _chain_candidates(ctx: BuildContext, children: list[GraphNode]) -> list[str]:
    """Sequence fields for chaining array elements: type-specific when all share one type."""
    child_types = {child.type for child in children}
    if len(child_types) == 1:
        return ctx.rules.chain_fields(child_types.pop())
    return [ctx.rules.default_sequence_field] if ctx.rules.default_sequence_field else []


def traverse_generic(ctx: BuildContext, data: dict[str, Any]) -> GraphNode:
    """Walk a parsed document and create nodes for every object and array.

    The walk uses an explicit stack instead of recursion, so nesting depth is
    bounded only by what the JSON parser accepted. Ids are still allocated in
    pre-order: children are pushed in reverse so the first child pops first.
    An array pushes a link entry beneath its elements, so its sequence chain is
    built once every element has been visited.

    Args:
        ctx: Build context receiving nodes, edges and index entries
        data: Parsed root object

    Returns:
        The root node
    """
    root = None
    # (value, parent node, property name or _LINK, element list of the enclosing array)
    stack: list[tuple[Any, Optional[GraphNode], Any, Optional[list[GraphNode]]]] = [(data, None, None, None)]

    while stack:
        value, parent, key, siblings = stack.pop()

        if key is _LINK:
            link_sequence(ctx, value, _chain_candidates(ctx, value))
            continue

        node_type = ctx.rules.classify(value, key)
        if isinstance(value, dict):
            node = ctx.add_node(object_label(ctx, value, node_type, key), node_type, parent, value)
            if siblings is not None:
                siblings.append(node)
            children = [(child, node, child_key, None) for child_key, child in value.items()
                        if isinstance(child, (dict, list))]
        else:
            node = ctx.add_node(f"{key} [{len(value)}]", node_type, parent, value)
            elements: list[GraphNode] = []
            stack.append((elements, None, _LINK, None))
            children = [(item, node, key, elements) for item in value if isinstance(item, (dict, list))]

        if root is None:
            root = node
        stack.extend(reversed(children))

    logger.debug(f"Generic traversal created {len(ctx.nodes)} nodes")
    return root
