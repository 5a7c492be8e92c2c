import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from gemini_key_proxy.core.config.schema import LOG_LEVELS

VALID_LOG_LEVELS = list(LOG_LEVELS)

# Client-library loggers that log every upstream call at INFO
NOISY_HTTP_LOGGERS = (
    "httpx",
    "httpcore",
    "httpcore.http11",
    "httpcore.connection",
)

UVICORN_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")

# Id of the proxied request being handled by the current task
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def normalize_log_level(raw_level: str) -> str:
    """Return an upper-case level name, falling back to INFO when unknown."""
    words = raw_level.split()
    level = words[0].upper() if words else ""
    return level if level in VALID_LOG_LEVELS else "INFO"


def set_noisy_http_logger_levels(current_log_level: str) -> None:
    """Let httpx/httpcore chatter through only when the proxy runs at DEBUG."""
    level = logging.DEBUG if current_log_level == "DEBUG" else logging.WARNING
    for name in NOISY_HTTP_LOGGERS:
        logging.getLogger(name).setLevel(level)


class ConversationLogger:
    """Access to the per-request logger and its correlation id."""

    NAME = "gemini_key_proxy.requests"

    @staticmethod
    def get_logger() -> logging.Logger:
        return logging.getLogger(ConversationLogger.NAME)

    @staticmethod
    @contextmanager
    def correlation_context(request_id: str) -> Iterator[None]:
        """Tag every record emitted inside the block with ``request_id``."""
        token = _correlation_id.set(request_id)
        try:
            yield
        finally:
            _correlation_id.reset(token)


class CorrelationIdFilter(logging.Filter):
    """Copy the active request id onto records that lack one."""

    def filter(self, record: logging.LogRecord) -> bool:
        request_id = _correlation_id.get()
        if request_id is not None and not hasattr(record, "correlation_id"):
            record.correlation_id = request_id
        return True


class CorrelationFormatter(logging.Formatter):
    """Prefix the message with the first 8 characters of the request id."""

    def format(self, record: logging.LogRecord) -> str:
        request_id = getattr(record, "correlation_id", None)
        if not request_id:
            return super().format(record)

        message = record.msg
        record.msg = f"[{request_id[:8]}] {message}"
        try:
            return super().format(record)
        finally:
            record.msg = message


class HttpRequestLogDowngradeFilter(logging.Filter):
    """Re-label INFO records from the given logger prefixes as DEBUG."""

    def __init__(self, *prefixes: str) -> None:
        super().__init__()
        self.prefixes = prefixes

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno == logging.INFO and record.name.startswith(self.prefixes):
            record.levelno = logging.DEBUG
            record.levelname = "DEBUG"
        return True


def configure_root_logging(log_level: str = "INFO") -> None:
    """Install the proxy's stderr handler as the only root handler.

    Calling it again replaces the handler instead of adding a second one.
    """
    level = normalize_log_level(log_level)

    stream_handler = logging.StreamHandler()
    stream_handler.addFilter(CorrelationIdFilter())
    stream_handler.addFilter(HttpRequestLogDowngradeFilter(*NOISY_HTTP_LOGGERS))
    stream_handler.setFormatter(
        CorrelationFormatter("%(asctime)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S")
    )

    root = logging.getLogger()
    root.handlers = [stream_handler]
    root.setLevel(level)

    for name in UVICORN_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    set_noisy_http_logger_levels(level)

    logger.debug("Root logging configured at %s", level)


logger = logging.getLogger(__name__)
conversation_logger = ConversationLogger.get_logger()
