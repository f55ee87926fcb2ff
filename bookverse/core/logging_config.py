import contextvars
import json
import logging
import time

# Per-request context, set by the HTTP middleware and the auth dependency
request_id_var = contextvars.ContextVar("request_id", default=None)
user_id_var = contextvars.ContextVar("user_id", default=None)

_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}
_CONTEXT_FIELDS = ("request_id", "user_id")

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"

# Libraries that log every statement or connection at INFO
_NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "passlib")


class RequestContextFilter(logging.Filter):
    """Copy the request context onto every record so any formatter can use it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_var.get() or "-"
        if getattr(record, "user_id", None) is None:
            record.user_id = user_id_var.get()
        return True


class JsonContextFormatter(logging.Formatter):
    """One JSON object per record, including request context and ``extra=`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "ts": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }

        request_id = getattr(record, "request_id", None) or request_id_var.get()
        if request_id and request_id != "-":
            log_record["request_id"] = request_id

        user_id = getattr(record, "user_id", None) or user_id_var.get()
        if user_id:
            log_record["user_id"] = user_id

        for key, value in vars(record).items():
            if key in _RESERVED_ATTRS or key in _CONTEXT_FIELDS or key in log_record:
                continue
            log_record[key] = value if isinstance(value, (str, int, float, bool)) else str(value)

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_record, ensure_ascii=False)


def setup_logging(settings):
    """Install a single root handler, JSON or plain depending on ``LOG_JSON``."""
    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JsonContextFormatter() if settings.LOG_JSON else logging.Formatter(PLAIN_FORMAT))
    root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured (level={settings.LOG_LEVEL.upper()}, json={settings.LOG_JSON})"
    )
