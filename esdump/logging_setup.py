# esdump/logging_setup.py
from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """
    Send log records to stderr. stdout is reserved for exported records
    when printing to the console.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"unknown log level: {level}")
    logging.basicConfig(level=numeric, format=LOG_FORMAT, stream=sys.stderr, force=True)
    # the transport logs every request at INFO
    logging.getLogger("elastic_transport").setLevel(max(numeric, logging.WARNING))
