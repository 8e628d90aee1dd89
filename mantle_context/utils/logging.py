import logging
import sys
from typing import TextIO

NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Install one console handler on the root logger.

    The MCP server speaks its protocol over stdout, so it passes
    ``sys.stderr`` here; the HTTP server keeps the stdout default.
    """
    handler = logging.StreamHandler(stream or sys.stdout)
    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level.upper())
    # Avoid duplicate handlers if reload
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        root.addHandler(handler)

    # httpx logs every request at INFO
    if root.level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
