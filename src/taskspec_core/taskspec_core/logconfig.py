# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Logging configuration for the task spec tools.

Log records carry the file and document being validated. The file layer sets
them through :class:`ValidationContext`; :class:`ValidationContextFilter`
copies them onto every record so both formats can print them.
"""

import json
import logging
import logging.handlers
import sys
from contextvars import ContextVar
from typing import Optional

spec_file_var: ContextVar[str] = ContextVar("spec_file", default="")
document_var: ContextVar[str] = ContextVar("document", default="")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(spec_file)s%(document)s] %(message)s"
JSON_FORMAT = (
    '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"spec_file": "%(spec_file)s", "document": "%(document)s", "message": "%(message)s"}'
)

PACKAGE_LOGGERS = ("taskspec_common", "taskspec_core")


class JsonLineFormatter(logging.Formatter):
    """Fill JSON_FORMAT with JSON-escaped values so every line parses."""

    def __init__(self, datefmt: Optional[str] = None):
        super().__init__(JSON_FORMAT, datefmt)

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        values = dict(record.__dict__, message=message, asctime=self.formatTime(record, self.datefmt))
        for key, value in values.items():
            if isinstance(value, str):
                values[key] = json.dumps(value)[1:-1]
        return self._fmt % values


class ValidationContext:
    """Set or clear the file/document the current thread of work is validating."""

    @staticmethod
    def set(spec_file: str, document: Optional[int] = None):
        spec_file_var.set(spec_file)
        document_var.set("" if document is None else f"#{document}")

    @staticmethod
    def clear():
        spec_file_var.set("")
        document_var.set("")


class ValidationContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.spec_file = spec_file_var.get()
        record.document = document_var.get()
        return True


def configure_logging(
    level: str = "WARNING",
    fmt: str = "text",
    log_file: Optional[str] = None,
    max_bytes: Optional[int] = None,
    backup_count: Optional[int] = None,
) -> logging.Handler:
    """Attach one handler to the package loggers and return it.

    Logs go to stderr unless *log_file* is given, in which case a rotating
    file handler is used (rotation is off when *max_bytes* is unset or 0).
    """
    if log_file:
        handler: logging.Handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_bytes or 0, backupCount=backup_count or 0
        )
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonLineFormatter() if fmt == "json" else logging.Formatter(LOG_FORMAT))
    handler.addFilter(ValidationContextFilter())

    for name in PACKAGE_LOGGERS:
        logger = logging.getLogger(name)
        for old in [h for h in logger.handlers if getattr(h, "_taskspec_handler", False)]:
            logger.removeHandler(old)
            old.close()
        logger.setLevel(level.upper())
        logger.addHandler(handler)
    handler._taskspec_handler = True  # type: ignore[attr-defined]
    return handler
