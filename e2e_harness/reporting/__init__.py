"""
Test reporting for the E2E harness.

Per-test records, the reporting adapter and the allure backend.
"""

from .models import Attachment, MimeType, StepRecord, TestRecord, TestStatus
from .allure_reporter import AllureReporter
from .reporter import BaseReporter, TestReporter
from .generator import ReportGenerator

__all__ = [
    "Attachment",
    "MimeType",
    "StepRecord",
    "TestRecord",
    "TestStatus",
    "AllureReporter",
    "BaseReporter",
    "TestReporter",
    "ReportGenerator",
]
