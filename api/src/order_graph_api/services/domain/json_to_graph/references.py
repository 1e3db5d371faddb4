#!/usr/bin/env python3
"""Reference resolution.

Runs once traversal has finished, because a line may point at an address that
appears later in the document. Turns the sequence numbers and business ids
embedded in each node's data into 'reference' and 'amendment' edges, using the
indices the traversal built. Lookups that do not resolve are skipped: partial
order documents are expected and must still render.
"""
import logging
from typing import Any

from ....models.models import GraphNode
from .accessors import get_dicts, get_list, get_number, parse_leading_int
from .context import BuildContext

logger = logging.getLogger(__name__)


def _data_items(node: GraphNode) -> list[dict[str, Any]]:
    """The dicts a node's data contributes: the object itself, or the dict elements of a list."""
    if isinstance(node.data, dict):
        return [node.data]
    if isinstance(node.data, list):
        return [item for item in node.data if isinstance(item, dict)]
    return []


def _nested_dicts(obj: dict[str, Any], path: list[str]) -> list[dict[str, Any]]:
    """Follow a path of list-valued keys, e.g. prices[].adjustments[]."""
    current = [obj]
    for key in path:
        current = [child for parent in current for child in get_dicts(parent, key)]
    return current


def _resolve_sequence(ctx: BuildContext, node: GraphNode, target_type: str, sequence: Any, field: str) -> int:
    target = ctx.sequence_index.lookup(target_type, sequence)
    if target is None:
        logger.debug(f"{node.id}: {field}={sequence!r} has no {target_type} node")
        return 0
    return int(ctx.add_reference(node.id, target))


def resolve_references(ctx: BuildContext) -> int:
    """Append reference and amendment edges for every node built so far.

    Args:
        ctx: Build context after traversal

    Returns:
        Number of edges appended
    """
    rules = ctx.rules
    added = 0

    for node in list(ctx.nodes):
        items = _data_items(node)

        for item in items:
            for ref in rules.sequence_references:
                sequence = get_number(item, ref.field)
                if sequence is not None:
                    added += _resolve_sequence(ctx, node, ref.target, sequence, ref.field)

            for ref in rules.nested_references:
                for nested in _nested_dicts(item, ref.path):
                    sequence = get_number(nested, ref.field)
                    if sequence is not None:
                        added += _resolve_sequence(ctx, node, ref.target, sequence, ref.field)

            if rules.amendment is not None:
                added += _resolve_amendments(ctx, item)

        if not isinstance(node.data, dict):
            continue

        for ref in rules.id_list_references:
            if node.type != ref.node_type:
                continue
            for business_id in get_list(node.data, ref.field):
                if not isinstance(business_id, str):
                    continue
                target = ctx.id_index.get(business_id)
                if target is None:
                    logger.debug(f"{node.id}: {ref.field} id {business_id!r} not found")
                    continue
                added += int(ctx.add_reference(node.id, target))

        for ref in rules.sequence_list_references:
            if node.type != ref.node_type:
                continue
            for raw in get_list(node.data, ref.field):
                sequence = parse_leading_int(raw)
                if sequence is not None:
                    added += _resolve_sequence(ctx, node, ref.target, sequence, ref.field)

    logger.debug(f"Reference resolution appended {added} edges")
    return added


def _resolve_amendments(ctx: BuildContext, item: dict[str, Any]) -> int:
    """Link each amended entity to the one it supersedes (newId -> oldId)."""
    rule = ctx.rules.amendment
    added = 0
    for detail in get_dicts(item, rule.field):
        new_id = detail.get(rule.new_id)
        old_id = detail.get(rule.old_id)
        if not isinstance(new_id, str) or not isinstance(old_id, str):
            continue
        source = ctx.id_index.get(new_id)
        target = ctx.id_index.get(old_id)
        if source is None or target is None:
            logger.debug(f"Amendment {new_id!r} -> {old_id!r} does not resolve")
            continue
        added += int(ctx.add_reference(source, target, "amendment"))
    return added
