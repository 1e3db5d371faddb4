#!/usr/bin/env python3
"""Sequence chains between siblings of one collection."""
from typing import Optional

from ....models.models import GraphEdge, GraphNode
from .accessors import get_number
from .context import BuildContext


def shared_sequence_field(children: list[GraphNode], candidates: list[str]) -> Optional[str]:
    """Return the first candidate field that every child carries as a number."""
    for field in candidates:
        if all(get_number(child.data, field) is not None for child in children):
            return field
    return None


def link_sequence(ctx: BuildContext, children: list[GraphNode], candidates: list[str]) -> int:
    """Chain siblings in ascending sequence order with 'sequence' edges.

    Edges run child[i] -> child[i+1] after a stable sort, so equal sequence
    numbers keep their input order. Nothing is linked when the siblings do not
    all share a numeric sequence field.

    Returns:
        Number of edges added
    """
    if len(children) < 2:
        return 0

    field = shared_sequence_field(children, candidates)
    if field is None:
        return 0

    ordered = sorted(children, key=lambda child: get_number(child.data, field))
    for current, following in zip(ordered, ordered[1:]):
        ctx.sequence_edges.append(GraphEdge(source=current.id, target=following.id, type="sequence"))
    return len(ordered) - 1
