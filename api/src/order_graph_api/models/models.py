#!/usr/bin/env python3

from typing import Any, Literal

from pydantic import BaseModel

# Pydantic Models

EdgeType = Literal["default", "sequence", "reference", "amendment"]


class GraphNode(BaseModel):
    """One visualizable unit of an order document."""

    id: str  # 'node-<n>', allocated in creation order
    label: str
    type: str  # 'order', 'product', 'line', ..., 'object', 'array'
    depth: int = 0  # containment distance from the root
    data: Any = None  # JSON fragment the node was derived from
    status: dict[str, Any] | None = None  # status/milestone sub-object found on data


class GraphEdge(BaseModel):
    source: str
    target: str
    type: EdgeType = "default"


class GraphData(BaseModel):
    nodes: list[GraphNode] = []
    edges: list[GraphEdge] = []

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form; 'status' is omitted from nodes that have none."""
        return {
            "nodes": [node.model_dump(exclude={"status"} if node.status is None else None) for node in self.nodes],
            "edges": [edge.model_dump() for edge in self.edges],
        }


class GraphSummary(BaseModel):
    node_count: int = 0
    edge_count: int = 0
    max_depth: int = 0
    nodes_by_type: dict[str, int] = {}
    edges_by_type: dict[str, int] = {}


class GraphBuildRequest(BaseModel):
    """Request to build a graph from raw JSON text."""
    json_text: str
    strategy: str | None = None  # 'auto', 'domain' or 'generic'; None uses GRAPH_STRATEGY


class GraphBuildResponse(BaseModel):
    status: str  # 'success'
    data: GraphData
    summary: GraphSummary
