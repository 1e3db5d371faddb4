#!/usr/bin/env python3
"""Per-build state for JSON to graph conversion.

A BuildContext owns the node id counter, the node and edge lists and the lookup
indices of one build. Nothing here is module-level, so two builds never share
ids or indices and the same input always yields the same ids.
"""
import logging
from typing import Any, Optional

from ....models.models import GraphData, GraphEdge, GraphNode
from .accessors import get_dict, get_number, get_string
from .rules import GraphRules

logger = logging.getLogger(__name__)


class SequenceIndex:
    """Entity type -> sequence number -> node id.

    Buckets for every indexed entity type exist from the start; registrations for
    other types are ignored.
    """

    def __init__(self, entity_types: list[str]):
        self._buckets: dict[str, dict[int | float, str]] = {t: {} for t in entity_types}

    def register(self, entity_type: str, sequence: int | float, node_id: str):
        bucket = self._buckets.get(entity_type)
        if bucket is not None:
            bucket[sequence] = node_id

    def lookup(self, entity_type: str, sequence: int | float) -> Optional[str]:
        bucket = self._buckets.get(entity_type)
        if bucket is None:
            return None
        return bucket.get(sequence)

    def __contains__(self, entity_type: str) -> bool:
        return entity_type in self._buckets


class BuildContext:
    """Mutable state of a single graph build."""

    def __init__(self, rules: GraphRules):
        self.rules = rules
        self.nodes: list[GraphNode] = []
        self.contains: list[GraphEdge] = []
        self.sequence_edges: list[GraphEdge] = []
        self.reference_edges: list[GraphEdge] = []
        self.sequence_index = SequenceIndex(rules.indexed_types)
        self.id_index: dict[str, str] = {}
        self._reference_keys: set[tuple[str, str, str]] = set()
        self._node_counter = 0

    def next_id(self) -> str:
        node_id = f"node-{self._node_counter}"
        self._node_counter += 1
        return node_id

    def add_node(
        self,
        label: str,
        node_type: str,
        parent: Optional[GraphNode],
        data: Any,
        status: Optional[dict[str, Any]] = None,
    ) -> GraphNode:
        """Create a node, its containment edge and its index entries.

        Args:
            label: Human-readable label
            node_type: Semantic type tag
            parent: Structural parent, None for the root
            data: JSON fragment retained on the node
            status: Explicit status object; found on data via status_fields when omitted

        Returns:
            The created node
        """
        node = GraphNode(
            id=self.next_id(),
            label=label,
            type=node_type,
            depth=parent.depth + 1 if parent is not None else 0,
            data=data,
            status=status if status is not None else self._find_status(data),
        )
        self.nodes.append(node)
        if parent is not None:
            self.contains.append(GraphEdge(source=parent.id, target=node.id, type="default"))
        self._register(node)
        return node

    def _find_status(self, data: Any) -> Optional[dict[str, Any]]:
        for key in self.rules.status_fields:
            status = get_dict(data, key)
            if status is not None:
                return status
        return None

    def _register(self, node: GraphNode):
        if node.type in self.sequence_index:
            for field in self.rules.sequence_fields.get(node.type, []):
                sequence = get_number(node.data, field)
                if sequence is not None:
                    self.sequence_index.register(node.type, sequence, node.id)
                    break

        for field in self.rules.business_id_fields.get(node.type, []):
            business_id = get_string(node.data, field)
            if business_id:
                self.id_index[business_id] = node.id
                break

    def add_reference(self, source: str, target: Optional[str], edge_type: str = "reference") -> bool:
        """Append a reference/amendment edge.

        Skipped when the target is missing, equals the source (no self-loops) or
        the same edge was already appended. Duplicates collapse even when they
        come from different fields: a line whose addressSequence and
        serviceAddressSequence name the same address gets one edge, not two.
        """
        if target is None or target == source:
            return False
        key = (source, target, edge_type)
        if key in self._reference_keys:
            return False
        self._reference_keys.add(key)
        self.reference_edges.append(GraphEdge(source=source, target=target, type=edge_type))
        return True

    def to_graph(self) -> GraphData:
        """Assemble the output: containment, then sequence, then reference edges."""
        return GraphData(
            nodes=list(self.nodes),
            edges=[*self.contains, *self.sequence_edges, *self.reference_edges],
        )
