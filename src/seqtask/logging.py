from __future__ import annotations

import logging
import sys
from typing import IO, Optional

_HANDLER_NAME = "seqtask-stdout"

# Library loggers that are too chatty at the service's level
_QUIET_LOGGERS = ("uvicorn.access", "asyncio")


def configure_logging(log_level: str = "info", *, stream: Optional[IO[str]] = None) -> None:
    """
    Configures root logging for the engine and its API.

    - logs to stdout (or the given stream)
    - consistent format
    - replaces only the handler it installed earlier, so repeated init
      (app reloads, test clients) neither doubles output nor drops
      handlers owned by someone else
    """
    level = _parse_level(log_level)

    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        if h.get_name() == _HANDLER_NAME:
            root.removeHandler(h)

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s - %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
    )
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))
    logging.getLogger("uvicorn.error").setLevel(level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name if name else "seqtask")


def _parse_level(log_level: str) -> int:
    mapping = {
        "critical": logging.CRITICAL,
        "error": logging.ERROR,
        "warning": logging.WARNING,
        "warn": logging.WARNING,
        "info": logging.INFO,
        "debug": logging.DEBUG,
        "trace": logging.DEBUG,  # no TRACE in stdlib logging
    }
    return mapping.get(log_level.lower().strip(), logging.INFO)
