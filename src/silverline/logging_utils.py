from __future__ import annotations

import logging
from copy import copy, deepcopy
from typing import Any
from urllib.parse import unquote

from rich.logging import RichHandler
from uvicorn.config import LOGGING_CONFIG
from uvicorn.logging import AccessFormatter as UvicornAccessFormatter

__all__ = ["BookAccessFormatter", "build_uvicorn_log_config", "configure_logging"]

LOGGER_NAME = "silverline"
_REQUEST_PATH_ARG = 2


def _level(debug: bool) -> int:
    return logging.DEBUG if debug else logging.WARNING


def _rich_handler() -> RichHandler:
    return RichHandler(show_path=False, markup=False)


def configure_logging(debug: bool = False) -> None:
    """Route the ``silverline`` loggers through rich; DEBUG when ``debug`` is set."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_level(debug))
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(_rich_handler())
    logger.propagate = False


class BookAccessFormatter(UvicornAccessFormatter):
    """Access log formatter that shows book ids (file names) unescaped."""

    def formatMessage(self, record):  # type: ignore[override]
        args = record.args
        if isinstance(args, tuple) and len(args) == 5 and isinstance(args[_REQUEST_PATH_ARG], str):
            book_path = unquote(args[_REQUEST_PATH_ARG], encoding="utf-8", errors="replace")
            record = copy(record)
            record.args = args[:_REQUEST_PATH_ARG] + (book_path,) + args[_REQUEST_PATH_ARG + 1 :]
        return super().formatMessage(record)


def build_uvicorn_log_config(debug: bool = False) -> dict[str, Any]:
    """
    Uvicorn's logging config with readable book paths in the access log.

    The ``silverline`` logger is declared in the same config so the parser
    warnings keep their rich handler once uvicorn applies it.
    """
    config = deepcopy(LOGGING_CONFIG)
    config["formatters"]["access"]["()"] = f"{__name__}.BookAccessFormatter"
    config["handlers"]["rich"] = {"()": f"{__name__}._rich_handler"}
    config["loggers"][LOGGER_NAME] = {
        "handlers": ["rich"],
        "level": logging.getLevelName(_level(debug)),
        "propagate": False,
    }
    return config
