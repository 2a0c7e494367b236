import logging
import json
import sys

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

CONTEXT_FIELDS = ("job_id", "step", "theme", "duration_ms")


class SafeStreamHandler(logging.StreamHandler):
    """
    Stream handler that gracefully handles closed streams during shutdown.
    """

    def emit(self, record):
        try:
            super().emit(record)
        except (ValueError, OSError) as e:
            # Closed stderr at interpreter exit
            if "closed file" in str(e).lower() or "bad file descriptor" in str(e).lower():
                pass
            else:
                raise


class StructuredLogFormatter(logging.Formatter):
    """
    Formats log records as structured JSON with export context fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_record[field] = value
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        elif record.exc_text:
            log_record["exception"] = record.exc_text
        return json.dumps(log_record, ensure_ascii=False)


def configure_logging(log_level: str = "INFO", structured: bool = False) -> None:
    """
    Centralized logging configuration for the exporter.
    Sets up the root logger on stderr, as JSON lines when ``structured``.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    handler = SafeStreamHandler(sys.stderr)
    if structured:
        handler.setFormatter(StructuredLogFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())
    logging.getLogger("asyncio").setLevel("WARNING")
    logging.getLogger("aiohttp").setLevel("WARNING")
