"""Central logging setup for the project."""
from __future__ import annotations
import logging
import sys
from typing import TextIO

def setup_logging(level: int | str = logging.INFO, stream: TextIO | None = None) -> None:
    """
    Configure root logger with sane defaults.

    Records go to stderr unless a stream is given; stdout is reserved for
    the completion text itself.

    Args:
        level: Logging level, numeric or a name such as "DEBUG".
        stream: Destination stream.
    """
    unknown = None
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if isinstance(resolved, int):
            level = resolved
        else:
            unknown, level = level, logging.INFO
    handler = logging.StreamHandler(stream or sys.stderr)
    fmt = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
    handler.setFormatter(logging.Formatter(fmt))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
    if unknown is not None:
        logging.getLogger("completion_runner").warning("Unknown log level %r; using INFO", unknown)
