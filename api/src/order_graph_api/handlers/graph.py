#!/usr/bin/env python3

import logging
from collections import Counter
from typing import Any

from fastapi import HTTPException, UploadFile

from ..core.config import GraphConfig
from ..models.models import GraphData, GraphSummary
from ..services.domain.json_to_graph import ParseError, UnknownError, build_graph, load_graph_rules

logger = logging.getLogger(__name__)


def summarize_graph(graph: GraphData) -> GraphSummary:
    """Count nodes and edges per type for the response summary."""
    return GraphSummary(
        node_count=len(graph.nodes),
        edge_count=len(graph.edges),
        max_depth=max((node.depth for node in graph.nodes), default=0),
        nodes_by_type=dict(Counter(node.type for node in graph.nodes)),
        edges_by_type=dict(Counter(edge.type for edge in graph.edges)),
    )


def handle_build_graph(json_text: str, strategy: str | None = None) -> dict[str, Any]:
    """
    Build a graph from raw JSON text and map conversion errors to HTTP errors.

    Args:
        json_text: Order document as JSON text
        strategy: Optional traversal strategy ('auto', 'domain', 'generic')

    Returns:
        Dictionary with status, graph data and summary

    Raises:
        HTTPException: 413 if the text exceeds MAX_INPUT_BYTES, 400 for invalid JSON
            or an unknown strategy, 500 for unexpected conversion failures
    """
    config = GraphConfig()

    size = len(json_text.encode("utf-8"))
    if size > config.MAX_INPUT_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"Input is {size} bytes, exceeds MAX_INPUT_BYTES={config.MAX_INPUT_BYTES}"
        )

    rules = load_graph_rules(config.RULES_PATH)
    try:
        graph = build_graph(json_text, strategy or config.STRATEGY, rules)
    except ParseError as e:
        logger.info(f"Rejected graph build request: {e}")
        raise HTTPException(status_code=400, detail=str(e)) from e
    except UnknownError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return {
        "status": "success",
        "data": graph.to_dict(),
        "summary": summarize_graph(graph).model_dump(),
    }


async def handle_graph_upload(file: UploadFile, strategy: str | None = None) -> dict[str, Any]:
    """Build a graph from an uploaded JSON file."""
    content = await file.read()
    try:
        json_text = content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=400, detail=f"File {file.filename} is not UTF-8 text") from e

    logger.info(f"Building graph for uploaded file {file.filename} ({len(content)} bytes)")
    return handle_build_graph(json_text, strategy)
