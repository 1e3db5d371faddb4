#!/usr/bin/env python3

import logging
import logging.config

from pythonjsonlogger import jsonlogger


def setup_logging(level: str = "INFO", stream: str = "ext://sys.stdout"):
    """Setup JSON logging configuration (the CLI passes ext://sys.stderr to keep stdout clean)"""
    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": jsonlogger.JsonFormatter,
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s %(strategy)s %(node_count)s %(edge_count)s"
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": stream
            }
        },
        "loggers": {
            "": {
                "handlers": ["console"],
                "level": level,
                "propagate": False
            },
            "uvicorn": {
                "handlers": ["console"],
                "level": "INFO",
                "propagate": False
            }
        }
    }

    logging.config.dictConfig(logging_config)
