#!/usr/bin/env python3
"""
Configuration settings for the order graph builder.

Every value can be overridden via environment variables so the same image can
run with a different traversal strategy or rule table per deployment.
"""

import logging

from .env_utils import getenv_clean, getenv_int, getenv_list

logger = logging.getLogger(__name__)

STRATEGIES = ("auto", "domain", "generic")


class GraphConfig:
    """Graph builder configuration.

    Values are read from the environment when the instance is created, so tests
    (and the CLI) can build a fresh config after changing the environment.
    """

    def __init__(self):
        # Traversal strategy used when a request does not name one
        strategy = (getenv_clean("GRAPH_STRATEGY", "auto") or "auto").lower()
        if strategy not in STRATEGIES:
            logger.warning(f"Unknown GRAPH_STRATEGY {strategy!r}, using 'auto'")
            strategy = "auto"
        self.STRATEGY = strategy

        # Custom rule table; empty means the packaged graph_rules.yaml
        self.RULES_PATH = getenv_clean("GRAPH_RULES_PATH", "") or None

        # The core enforces no size limit; the HTTP layer rejects larger bodies
        self.MAX_INPUT_BYTES = getenv_int("MAX_INPUT_BYTES", 5 * 1024 * 1024)

        self.LOG_LEVEL = (getenv_clean("LOG_LEVEL", "INFO") or "INFO").upper()

        self.CORS_ORIGINS = getenv_list("CORS_ORIGINS", ["http://localhost:3000"])


# Singleton instance
graph_config = GraphConfig()
