"""JSON log lines carrying the request, session and language in scope."""
import json
import logging

from assetstudio.core.request_context import (
    get_language,
    get_request_id,
    get_session_id,
)

# (attribute, value written when nothing is in scope)
CONTEXT_FIELDS: tuple[tuple[str, str], ...] = (
    ("request_id", "unknown"),
    ("session_id", ""),
    ("language", ""),
)

_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}
_CONTEXT_NAMES = frozenset(name for name, _ in CONTEXT_FIELDS)


class StudioContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        scoped = {
            "request_id": get_request_id(),
            "session_id": get_session_id(),
            "language": get_language(),
        }
        for name, empty in CONTEXT_FIELDS:
            setattr(record, name, scoped[name] or empty)
        return True


def record_extras(record: logging.LogRecord) -> dict[str, object]:
    """Fields passed through `extra=` on the logging call."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _STANDARD_ATTRS
        and key not in _CONTEXT_NAMES
        and not key.startswith("_")
        and value is not None
    }


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, object] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name, empty in CONTEXT_FIELDS:
            value = getattr(record, name, empty)
            # language only appears while a language is being processed
            if value or name != "language":
                line[name] = value
        line.update(record_extras(record))
        if record.exc_info:
            line["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            line["stack_info"] = self.formatStack(record.stack_info)
        return json.dumps(line, default=str)
