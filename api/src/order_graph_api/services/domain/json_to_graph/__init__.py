"""
Order JSON to Graph Conversion Domain

Handles conversion of order documents (products, lines, items, fulfillments,
shipments, promotions, addresses, accounts) into typed node/edge graphs for
force-directed visualization.
"""

from .converter import GraphBuildError, ParseError, UnknownError, build_graph
from .rules import GraphRules, RuleTableError, load_graph_rules

__all__ = [
    "build_graph",
    "GraphBuildError",
    "ParseError",
    "UnknownError",
    "GraphRules",
    "RuleTableError",
    "load_graph_rules",
]
