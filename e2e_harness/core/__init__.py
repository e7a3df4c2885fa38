"""Core components for the E2E harness."""

from .config import Config, load_config, load_environment
from .exceptions import (
    HarnessError,
    ConfigurationError,
    ActionTimeoutError,
    ReportingError,
    FileOperationError,
    DatabaseError,
    TestDataError,
)
from .logging_config import HarnessLogger, setup_logging, get_logger

__all__ = [
    "Config",
    "load_config",
    "load_environment",
    "HarnessError",
    "ConfigurationError",
    "ActionTimeoutError",
    "ReportingError",
    "FileOperationError",
    "DatabaseError",
    "TestDataError",
    "HarnessLogger",
    "setup_logging",
    "get_logger",
]
