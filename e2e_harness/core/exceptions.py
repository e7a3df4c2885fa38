"""
Base exception classes for the E2E harness.

Provides a hierarchy of exceptions for the failure categories a browser test
run distinguishes: configuration, action timeouts, reporting, file system,
database and test data errors.
"""

from typing import Optional, Dict, Any, List

TIMEOUT_TAG = "[TIMEOUT]"


class HarnessError(Exception):
    """Base exception class for all harness errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
        }


class ConfigurationError(HarnessError):
    """Raised when required configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        violations: Optional[List[str]] = None,
        env_file: Optional[str] = None,
    ):
        super().__init__(message, "CONFIGURATION_INVALID")
        self.violations = violations or []
        self.env_file = env_file
        self.context.update(
            {
                "violations": self.violations,
                "env_file": env_file,
            }
        )


class ActionTimeoutError(HarnessError):
    """Raised when a browser wait or action exceeds its configured bound."""

    def __init__(
        self,
        message: str,
        action: Optional[str] = None,
        target: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        if not message.startswith(TIMEOUT_TAG):
            message = f"{TIMEOUT_TAG} {message}"
        super().__init__(message, "ACTION_TIMEOUT")
        self.action = action
        self.target = target
        self.timeout = timeout
        self.context.update(
            {
                "action": action,
                "target": target,
                "timeout": timeout,
            }
        )


class ReportingError(HarnessError):
    """Raised when the reporting adapter is driven out of order."""

    def __init__(self, message: str, test_id: Optional[str] = None):
        super().__init__(message, "REPORTING_FAILED")
        self.test_id = test_id
        self.context.update({"test_id": test_id})


class FileOperationError(HarnessError):
    """Raised when file system operations fail."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(message, "FILE_OPERATION_FAILED")
        self.file_path = file_path
        self.operation = operation
        self.context.update(
            {
                "file_path": file_path,
                "operation": operation,
            }
        )


class DatabaseError(HarnessError):
    """Raised when database utility operations fail."""

    def __init__(
        self,
        message: str,
        db_type: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(message, "DATABASE_ERROR")
        self.db_type = db_type
        self.operation = operation
        self.context.update(
            {
                "db_type": db_type,
                "operation": operation,
            }
        )


class TestDataError(HarnessError):
    """Raised when requested test data is not available."""

    __test__ = False

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message, "TEST_DATA_MISSING")
        self.key = key
        self.context.update({"key": key})
