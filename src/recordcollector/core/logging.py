# recordcollector/core/logging.py
"""
Logging setup for processes embedding the collector.

JSON lines by default (one object per record, easy to ship); a plain
format is kept for local runs.
"""
from __future__ import annotations

import logging
import sys
from pythonjsonlogger import jsonlogger

PLAIN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s  %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO", *, json_format: bool = True) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    if json_format:
        handler.setFormatter(jsonlogger.JsonFormatter(JSON_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))

    # Avoid duplicate handlers in reload
    root.handlers = [handler]

    # one line per page request is enough
    logging.getLogger("httpx").setLevel(logging.WARNING)
