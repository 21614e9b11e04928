"""Structured logging for the jira_adf logger hierarchy.

Log messages are snake_case event names (``adf_unknown_node_type``,
``jira_get_issue_failed``); details travel in ``extra`` and end up under
``context`` in the JSON output. JIRA_ADF_LOG_LEVEL and JIRA_ADF_LOG_FORMAT
select the level and the output format.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional

ROOT_LOGGER = "jira_adf"

# Context keys that may carry Jira credentials
SENSITIVE_KEYS = {"api_token", "token", "authorization", "password", "secret"}

# Attributes every LogRecord has; anything else came in through ``extra``
_RECORD_FIELDS = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: timestamp (UTC, 'Z'), level, logger, message, context.

    Context keys listed in SENSITIVE_KEYS are replaced with ``[REDACTED]``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = {
            key: "[REDACTED]" if key.lower() in SENSITIVE_KEYS else value
            for key, value in record.__dict__.items()
            if key not in _RECORD_FIELDS and not key.startswith("_")
        }
        if context:
            log_data["context"] = context
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Plain one-line format for local debugging (JIRA_ADF_LOG_FORMAT=text)."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def configure_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Attach a single stream handler to the jira_adf logger.

    Safe to call repeatedly: the handler is reused and only its formatter
    and the logger level change.

    Args:
        level: Level name; defaults to JIRA_ADF_LOG_LEVEL (INFO). Unknown
               names fall back to INFO.
        log_format: "json" or "text"; defaults to JIRA_ADF_LOG_FORMAT (json).
    """
    level = level or os.getenv("JIRA_ADF_LOG_LEVEL", "INFO")
    log_format = log_format or os.getenv("JIRA_ADF_LOG_FORMAT", "json")

    formatter = TextFormatter() if log_format.lower() == "text" else StructuredFormatter()

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not logger.handlers:
        logger.addHandler(logging.StreamHandler())
    for handler in logger.handlers:
        handler.setFormatter(formatter)
    logger.propagate = False
