# =============================================================================
# BACKOFFICE SERVICE - LOG FORMATTER
# =============================================================================
# File: backoffice/logger/formatter.py
# Description: Line formatter with trailing key=value fields
#              [INFO] 2024/01/31 12:00:00 app.py:42: message | k=v, k2=v2
# =============================================================================

import logging
from typing import Any, Dict


LEVEL_LABELS = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "FATAL",
}

DATE_FORMAT = "%Y/%m/%d %H:%M:%S"


def fields(**kwargs: Any) -> Dict[str, Dict[str, Any]]:
    """
    Build the ``extra`` mapping carrying structured fields.

    Example:
        >>> logger.info("User logged in", extra=fields(user_id=uid))
    """
    return {"fields": kwargs}


def render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


class FieldsFormatter(logging.Formatter):
    """
    Formats records as ``[LEVEL] date time file:line: message | k=v``.

    Fields are read from ``record.fields`` (set through ``extra``) and
    rendered in insertion order. Exception tracebacks follow on new lines.
    """

    def __init__(self) -> None:
        super().__init__(datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()

        record_fields = getattr(record, "fields", None)
        if record_fields:
            rendered = ", ".join(
                f"{key}={render_value(value)}" for key, value in record_fields.items()
            )
            message = f"{message} | {rendered}"

        label = LEVEL_LABELS.get(record.levelno, record.levelname)
        line = (
            f"[{label}] {self.formatTime(record, self.datefmt)} "
            f"{record.filename}:{record.lineno}: {message}"
        )

        if record.exc_info:
            if not record.exc_text:
                record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            line = f"{line}\n{record.exc_text}"
        if record.stack_info:
            line = f"{line}\n{self.formatStack(record.stack_info)}"
        return line
