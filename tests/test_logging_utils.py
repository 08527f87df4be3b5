from __future__ import annotations

import logging
import logging.config

from rich.logging import RichHandler

from silverline.logging_utils import BookAccessFormatter, build_uvicorn_log_config, configure_logging


def _access_record(args: object) -> logging.LogRecord:
    return logging.LogRecord(
        name="uvicorn.access",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg='%s - "%s %s HTTP/%s" %d',
        args=args,  # type: ignore[arg-type]
        exc_info=None,
    )


def test_uvicorn_config_uses_book_access_formatter() -> None:
    config = build_uvicorn_log_config()
    assert config["formatters"]["access"]["()"] == "silverline.logging_utils.BookAccessFormatter"
    assert config["loggers"]["silverline"]["level"] == "WARNING"
    assert build_uvicorn_log_config(debug=True)["loggers"]["silverline"]["level"] == "DEBUG"


def test_uvicorn_config_routes_silverline_through_rich() -> None:
    logging.config.dictConfig(build_uvicorn_log_config(debug=True))
    logger = logging.getLogger("silverline")
    assert logger.level == logging.DEBUG
    assert logger.propagate is False
    assert [type(handler) for handler in logger.handlers] == [RichHandler]
    configure_logging(debug=False)


def test_access_formatter_decodes_book_ids() -> None:
    formatter = BookAccessFormatter(fmt='%(client_addr)s - "%(request_line)s" %(status_code)s', use_colors=False)
    record = _access_record(("127.0.0.1:5000", "GET", "/api/books/%E6%9C%AC.txt/segments", "1.1", 200))
    assert "/api/books/本.txt/segments" in formatter.format(record)
    assert record.args[2] == "/api/books/%E6%9C%AC.txt/segments"


def test_configure_logging_is_idempotent() -> None:
    configure_logging(debug=True)
    configure_logging(debug=False)
    logger = logging.getLogger("silverline")
    assert logger.level == logging.WARNING
    assert sum(isinstance(handler, RichHandler) for handler in logger.handlers) == 1
