"""
Logging configuration for the E2E harness.

Provides leveled text or structured JSON logging to a size-rotated file sink,
plus the process-wide HarnessLogger used by fixtures, page objects and
session hooks.
"""

import logging
import logging.handlers
import json
import sys
import threading
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from .config import Config
from .exceptions import ConfigurationError

HARNESS_LOGGER_NAME = "e2e_harness"

MAX_LOG_BYTES = 10 * 1024 * 1024  # 10MB
LOG_BACKUP_COUNT = 5


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        if getattr(record, "metadata", None):
            log_entry["metadata"] = record.metadata

        for attr in ["test_name", "duration", "status"]:
            if hasattr(record, attr):
                log_entry[attr] = getattr(record, attr)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable formatter: ``timestamp [LEVEL] message {metadata}``."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as human-readable text."""
        timestamp = datetime.fromtimestamp(record.created).strftime(
            "%Y-%m-%d %H:%M:%S.%f"
        )[:-3]

        message = f"{timestamp} [{record.levelname}] {record.getMessage()}"

        meta: Dict[str, Any] = {}
        if getattr(record, "test_name", None):
            meta["test_name"] = record.test_name
        if getattr(record, "metadata", None):
            meta.update(record.metadata)
        if meta:
            message += f" {json.dumps(meta, ensure_ascii=False, default=str)}"

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


class BestEffortRotatingFileHandler(logging.handlers.RotatingFileHandler):
    """Rotating file handler that drops records it cannot write."""

    def handleError(self, record: logging.LogRecord) -> None:
        # Disk errors lose the record; the caller never sees them.
        return None


def _build_formatter(config: Config) -> logging.Formatter:
    if config.log_format == "json":
        return StructuredFormatter()
    return TextFormatter()


def setup_logging(config: Config, name: str = HARNESS_LOGGER_NAME) -> logging.Logger:
    """
    Set up the harness logger based on the configuration.

    Args:
        config: Configuration object with logging settings
        name: Logger name that owns the harness sinks

    Returns:
        Configured harness logger
    """
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    log_level = getattr(logging, config.log_level)
    logger.setLevel(log_level)

    formatter = _build_formatter(config)

    try:
        config.logs_dir.mkdir(parents=True, exist_ok=True)
        file_handler = BestEffortRotatingFileHandler(
            config.get_log_file_path(),
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
            delay=True,
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        logger.addHandler(file_handler)
    except OSError as e:
        # Without a writable logs directory the harness runs without a file sink
        sys.stderr.write(f"e2e_harness: file logging disabled ({e})\n")

    if config.log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler.setLevel(log_level)
        logger.addHandler(console_handler)

    logger.debug(
        "Logging configured",
        extra={
            "metadata": {
                "log_level": config.log_level,
                "log_format": config.log_format,
                "log_file": str(config.get_log_file_path()),
                "ci_mode": config.ci_mode,
            }
        },
    )

    return logger


def get_logger(name: str, **context) -> logging.Logger:
    """
    Get a logger with optional context.

    Args:
        name: Logger name (typically module name)
        **context: Additional context to include in log records

    Returns:
        Configured logger with context
    """
    logger = logging.getLogger(name)

    if context:

        class ContextAdapter(logging.LoggerAdapter):
            def process(self, msg, kwargs):
                if "extra" not in kwargs:
                    kwargs["extra"] = {}
                kwargs["extra"].update(self.extra)
                return msg, kwargs

        return ContextAdapter(logger, context)

    return logger


def log_performance(
    logger: logging.Logger, operation: str, duration: float, **metadata
):
    """
    Log performance metrics for operations.

    Args:
        logger: Logger instance
        operation: Name of the operation
        duration: Duration in seconds
        **metadata: Additional metadata to include
    """
    logger.info(
        f"Performance: {operation} completed in {duration:.2f}s",
        extra={"metadata": {"operation": operation, "duration": duration, **metadata}},
    )


class HarnessLogger:
    """
    Leveled logger shared by every harness layer.

    ``get_instance()`` returns the lazily created process-wide instance.
    Fixtures construct it once through ``configure()`` and pass it explicitly
    to reporters, page objects and the lifecycle coordinator.
    """

    _instance: Optional["HarnessLogger"] = None
    _instance_lock = threading.Lock()

    def __init__(self, config: Optional[Config] = None, name: str = HARNESS_LOGGER_NAME):
        self.config = config or _config_from_env()
        self._logger = setup_logging(self.config, name)
        self._test_name: Optional[str] = None

    @classmethod
    def get_instance(cls) -> "HarnessLogger":
        """Return the process-wide logger, creating it on first access."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def configure(cls, config: Config) -> "HarnessLogger":
        """Create the process-wide logger from an explicit configuration."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls(config)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Close and forget the process-wide logger."""
        with cls._instance_lock:
            if cls._instance is not None:
                cls._instance.close()
            cls._instance = None

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def current_test(self) -> Optional[str]:
        return self._test_name

    def bind_test(self, test_name: str) -> None:
        """Tag subsequent records with the running test's name."""
        self._test_name = test_name

    def unbind_test(self) -> None:
        self._test_name = None

    def _log(
        self,
        level: int,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Any = None,
    ) -> None:
        extra: Dict[str, Any] = {}
        if metadata:
            extra["metadata"] = metadata
        if self._test_name:
            extra["test_name"] = self._test_name
        self._logger.log(level, message, extra=extra, exc_info=exc_info)

    def debug(self, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.DEBUG, message, metadata)

    def info(self, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.INFO, message, metadata)

    def warn(self, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.WARNING, message, metadata)

    warning = warn

    def error(
        self,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Any = None,
    ) -> None:
        self._log(logging.ERROR, message, metadata, exc_info=exc_info)

    def log_pass(self, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Log an INFO record tagged ``[PASS]``."""
        self._log(logging.INFO, f"[PASS] {message}", metadata)

    def log_fail(self, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Log an ERROR record tagged ``[FAIL]``."""
        self._log(logging.ERROR, f"[FAIL] {message}", metadata)

    def close(self) -> None:
        """Flush and detach the file and console sinks."""
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()


def _config_from_env() -> Config:
    try:
        return Config.from_env()
    except ConfigurationError:
        return Config()
