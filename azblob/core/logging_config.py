"""
Logging setup for azblob-plugin.

Every handler carries a filter that masks storage secrets before a record is
rendered: the account key of a connection string and the query string of a
signed blob URI. Records are written as JSON lines by default, or as plain
text.
"""

import json
import logging
import logging.handlers
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

REDACTED = "***REDACTED***"

# Applied in order; a signed URI loses its whole query before the bare
# signature pattern runs.
_SECRET_PATTERNS = [
    (re.compile(r'(https?://[^\s?"\']+\?)[^\s"\']*\bsig=[^\s"\']*', re.IGNORECASE), r'\1' + REDACTED),
    (re.compile(r'(AccountKey=)[^;\s"\']+', re.IGNORECASE), r'\1' + REDACTED),
    (re.compile(r'(SharedAccessSignature=)[^;\s"\']+', re.IGNORECASE), r'\1' + REDACTED),
    (re.compile(r'(\bsig=)[^&;\s"\']+', re.IGNORECASE), r'\1' + REDACTED),
]

_SIZE_PATTERN = re.compile(r'^(\d+(?:\.\d+)?)\s*(B|KB|MB|GB)?$')
_SIZE_UNITS = {None: 1, "B": 1, "KB": 1024, "MB": 1024 ** 2, "GB": 1024 ** 3}

correlation_id: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)


def redact(text: str) -> str:
    """Mask account keys and SAS signatures in ``text``."""
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class SensitiveDataFilter(logging.Filter):
    """
    Redacts storage secrets from a record.

    The message is merged with its arguments first, so a SAS URI passed as a
    ``%s`` argument is masked as well. String values of the ``context``
    extra are masked too.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.args:
            record.msg = record.getMessage()
            record.args = None
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)

        context = getattr(record, "context", None)
        if isinstance(context, dict):
            record.context = {
                key: redact(value) if isinstance(value, str) else value
                for key, value in context.items()
            }
        return True


class TextFormatter(logging.Formatter):
    """Human-readable single-line formatter."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def formatException(self, ei) -> str:
        # Azure SDK errors embed the request URL
        return redact(super().formatException(ei))


class JSONFormatter(TextFormatter):
    """One JSON object per record, tagged with the request's correlation ID."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if corr_id := correlation_id.get():
            entry["correlation_id"] = corr_id
        if context := getattr(record, "context", None):
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _parse_size(size_str: str) -> int:
    """Parse a rotation size such as ``10MB`` into bytes."""
    match = _SIZE_PATTERN.match(size_str.strip().upper())
    if not match:
        raise ValueError(f"Invalid rotation size: {size_str!r}")
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[unit])


def _attach(root: logging.Logger, handler: logging.Handler, formatter: logging.Formatter) -> None:
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    handler.addFilter(SensitiveDataFilter())
    root.addHandler(handler)


def setup_logging(
    level: str = "INFO",
    format_type: str = "json",
    log_file: Optional[str] = None,
    rotation_size: str = "10MB",
    rotation_count: int = 5,
    module_levels: Optional[Dict[str, str]] = None
) -> None:
    """
    Configure the root logger for the plugin server.

    Args:
        level: Root log level name
        format_type: "json" or "text"
        log_file: Optional path of a size-rotated log file
        rotation_size: Rotation threshold, e.g. "10MB"
        rotation_count: Rotated files to keep
        module_levels: Per-logger levels, e.g. {"azblob.services.blob": "DEBUG"}
    """
    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers.clear()

    formatter = JSONFormatter() if format_type == "json" else TextFormatter()
    _attach(root, logging.StreamHandler(sys.stdout), formatter)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        _attach(
            root,
            logging.handlers.RotatingFileHandler(
                filename=log_file,
                maxBytes=_parse_size(rotation_size),
                backupCount=rotation_count,
                encoding='utf-8',
            ),
            formatter,
        )

    # The Azure SDK logs every HTTP exchange at INFO
    logging.getLogger("azure").setLevel(logging.WARNING)

    for name, module_level in (module_levels or {}).items():
        logging.getLogger(name).setLevel(module_level.upper())

    root.info(f"Logging configured: level={level}, format={format_type}, file={log_file or '-'}")


def set_correlation_id(corr_id: str) -> None:
    correlation_id.set(corr_id)


def get_correlation_id() -> Optional[str]:
    return correlation_id.get()


def clear_correlation_id() -> None:
    correlation_id.set(None)


def log_with_context(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """Log ``message`` with ``context`` attached as structured fields."""
    logger.log(level, message, extra={"context": context} if context else {})
