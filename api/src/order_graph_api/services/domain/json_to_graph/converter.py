#!/usr/bin/env python3
"""Order JSON to graph converter service.

This module turns the JSON text of a telecom/e-commerce order into a typed graph
of nodes and edges for force-directed visualization:

- parse: the text must be valid JSON (ParseError otherwise)
- traverse: one node per meaningful unit plus a 'default' containment edge to
  its parent, 'sequence' edges between ordered siblings, and sequence/id indices
- resolve: 'reference' and 'amendment' edges from the sequence numbers and
  business ids embedded in each node's data

A root that is not a JSON object yields an empty graph. Each call owns its own
BuildContext, so node ids restart at node-0 and builds can run concurrently.
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from ....core.config import STRATEGIES, GraphConfig
from ....core.logging import setup_logging
from ....models.models import GraphData
from .context import BuildContext
from .generic_traversal import traverse_generic
from .order_traversal import traverse_order
from .references import resolve_references
from .rules import GraphRules, load_graph_rules

logger = logging.getLogger(__name__)


class GraphBuildError(Exception):
    """Base class for failures of a graph build."""
    pass


class ParseError(GraphBuildError):
    """Raised when the input text is not syntactically valid JSON."""
    pass


class UnknownError(GraphBuildError):
    """Raised when traversal or reference resolution fails unexpectedly.

    This signals a defect in the converter, not bad input: malformed but
    parseable documents degrade to fewer nodes and edges instead.
    """
    pass


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def parse_json(json_text: str) -> Any:
    """Parse JSON text, rejecting the NaN/Infinity literals Python would accept.

    Raises:
        ParseError: If the text is not valid JSON, or nests deeper than the
            parser can follow
    """
    try:
        return json.loads(json_text, parse_constant=_reject_constant)
    except (ValueError, TypeError) as e:
        raise ParseError(f"Invalid JSON: {e}") from e
    except RecursionError as e:
        raise ParseError(f"Invalid JSON: document is nested too deeply ({e})") from e


def select_strategy(data: dict[str, Any], strategy: str, rules: GraphRules) -> str:
    """Resolve 'auto' to 'domain' or 'generic' by looking for order markers on the root."""
    if strategy != "auto":
        return strategy
    if any(marker in data for marker in rules.domain_markers):
        return "domain"
    return "generic"


def build_graph(json_text: str, strategy: Optional[str] = None, rules: Optional[GraphRules] = None) -> GraphData:
    """Build the graph of an order document.

    Args:
        json_text: Raw JSON text
        strategy: 'auto', 'domain' or 'generic'; defaults to GRAPH_STRATEGY
        rules: Rule table; defaults to the table at GRAPH_RULES_PATH

    Returns:
        GraphData with nodes in creation order and edges ordered containment,
        sequence, then reference/amendment

    Raises:
        ValueError: If strategy is not a known strategy name
        ParseError: If json_text is not valid JSON
        UnknownError: If conversion fails for any other reason
    """
    if strategy is None or rules is None:
        config = GraphConfig()
        strategy = strategy or config.STRATEGY
        rules = rules or load_graph_rules(config.RULES_PATH)
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown strategy {strategy!r}; expected one of {', '.join(STRATEGIES)}")

    data = parse_json(json_text)
    if not isinstance(data, dict):
        logger.info(f"Root is {type(data).__name__}, not an object; returning empty graph")
        return GraphData()

    try:
        ctx = BuildContext(rules)
        chosen = select_strategy(data, strategy, rules)
        if chosen == "domain":
            traverse_order(ctx, data)
        else:
            traverse_generic(ctx, data)
        resolve_references(ctx)
        graph = ctx.to_graph()
    except Exception as e:
        logger.exception(f"Graph build failed: {e}")
        raise UnknownError("An unknown error occurred while building the graph.") from e

    logger.info(
        f"Built order graph with {chosen} traversal",
        extra={"strategy": chosen, "node_count": len(graph.nodes), "edge_count": len(graph.edges)},
    )
    return graph


def main(argv: Optional[list[str]] = None) -> int:
    """Command-line interface: convert an order JSON file to graph JSON."""
    parser = argparse.ArgumentParser(description="Convert an order JSON document into a typed node/edge graph")
    parser.add_argument("input", help="Order JSON file, or '-' for stdin")
    parser.add_argument("--strategy", choices=STRATEGIES, help="Traversal strategy (default: GRAPH_STRATEGY or auto)")
    parser.add_argument("--rules", help="Path to a custom rule table YAML")
    parser.add_argument("--indent", type=int, default=2, help="Indentation of the output JSON")
    parser.add_argument("--out", help="Output file (default: stdout)")
    args = parser.parse_args(argv)

    config = GraphConfig()
    setup_logging(config.LOG_LEVEL, stream="ext://sys.stderr")

    json_text = sys.stdin.read() if args.input == "-" else Path(args.input).read_text(encoding="utf-8")
    rules = load_graph_rules(args.rules or config.RULES_PATH)

    try:
        graph = build_graph(json_text, args.strategy or config.STRATEGY, rules)
    except GraphBuildError as e:
        print(f"Error: {e}", file=sys.stderr)  # noqa: T201
        return 1

    output = json.dumps(graph.to_dict(), indent=args.indent)
    if args.out:
        Path(args.out).write_text(output, encoding="utf-8")
        print(f"OK: wrote {len(graph.nodes)} nodes and {len(graph.edges)} edges to {args.out}")  # noqa: T201
    else:
        print(output)  # noqa: T201
    return 0


if __name__ == "__main__":
    sys.exit(main())
