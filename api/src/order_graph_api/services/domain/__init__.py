"""
Domain Layer

This package contains business logic organized by domain area.
Domain services implement core algorithms and should not handle HTTP or
other external I/O themselves.

Domains:
- json_to_graph: order JSON to node/edge graph conversion
"""
