"""Logging setup: readable lines in development, one JSON object per line elsewhere."""

import json
import logging
import re
import sys
from datetime import UTC, datetime

# Credentials and customer identifiers scrubbed before a record is emitted
_REDACTIONS = [
    (re.compile(r"(Bearer\s+)[\w\-.]+", re.IGNORECASE), r"\1[REDACTED]"),
    (re.compile(r"(jwt=)[\w\-.]+"), r"\1[REDACTED]"),
    (re.compile(r'(password\w*["\']?\s*[:=]\s*["\']?)[^\s,&"\']+', re.IGNORECASE), r"\1[REDACTED]"),
    (re.compile(r'(razorpay_signature["\']?\s*[:=]\s*["\']?)[0-9a-f]+', re.IGNORECASE), r"\1[REDACTED]"),
    (re.compile(r"\brzp_(live|test)_[A-Za-z0-9]+"), r"rzp_\1_[REDACTED]"),
    (re.compile(r'((?:secret|auth_token)["\']?\s*[:=]\s*["\']?)[^\s,&"\']+', re.IGNORECASE), r"\1[REDACTED]"),
    (re.compile(r"\+\d{6,}(\d{4})\b"), r"+******\1"),
]

_EXTRA_FIELDS = ("request_id", "method", "path", "status_code", "duration_ms", "user_id")


def redact(value: str) -> str:
    for pattern, replacement in _REDACTIONS:
        value = pattern.sub(replacement, value)
    return value


class SensitiveDataFilter(logging.Filter):
    """Masks tokens, secrets and phone numbers in message and args."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(redact(a) if isinstance(a, str) else a for a in record.args)
        elif isinstance(record.args, dict):
            record.args = {
                k: redact(v) if isinstance(v, str) else v for k, v in record.args.items()
            }
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        for key in _EXTRA_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        return json.dumps(entry, default=str)


def setup_logging(json_output: bool = False, level: str = "INFO") -> None:
    """
    Configure the root logger.

    Args:
        json_output: Emit JSON lines (production) instead of plain text.
        level: Root log level name.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    # On the handler so records from child loggers are scrubbed too
    handler.addFilter(SensitiveDataFilter())
    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("twilio.http_client").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
