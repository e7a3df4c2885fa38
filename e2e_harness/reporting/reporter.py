"""
Test reporting adapter.

Tracks the single open test record for a worker and mirrors every step,
attachment and label into the allure backend and the harness log.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..core.exceptions import ReportingError
from ..core.logging_config import HarnessLogger
from .allure_reporter import AllureReporter, error_details, error_label
from .models import Attachment, MimeType, StepRecord, TestRecord, TestStatus


class BaseReporter:
    """Owns the current test record pointer."""

    def __init__(self, logger: Optional[HarnessLogger] = None):
        self.logger = logger or HarnessLogger.get_instance()
        self._current: Optional[TestRecord] = None

    @property
    def current_test(self) -> Optional[TestRecord]:
        return self._current

    def start_test(self, test_id: str, test_name: str, suite_name: str) -> TestRecord:
        """
        Open a record for a test.

        Raises:
            ReportingError: if another record is still open
        """
        if self._current is not None:
            raise ReportingError(
                f"Cannot start '{test_name}': '{self._current.test_name}' is still open",
                test_id=test_id,
            )
        self._current = TestRecord(test_id=test_id, test_name=test_name, suite=suite_name)
        self.logger.info(f"Test started: {test_name}", {"test_id": test_id, "suite": suite_name})
        return self._current

    def end_test(self, status: TestStatus, error: Optional[str] = None) -> Optional[TestRecord]:
        """
        Close the open record with its terminal status.

        The closed record is returned and released; a second call finds no
        open record and only logs a warning.
        """
        record = self._current
        if record is None:
            self.logger.warn(f"end_test({status.value}) called with no open test")
            return None

        record.end_time = datetime.now()
        record.status = status
        record.error = error or None
        self._current = None

        self.logger.info(
            f"Test ended: {record.test_name} - Status: {status.value}",
            record.to_summary(),
        )
        return record

    def _require_open(self, operation: str) -> Optional[TestRecord]:
        if self._current is None:
            self.logger.warn(f"{operation} ignored: no open test")
        return self._current

    def add_attachment(
        self,
        name: str,
        content: Union[str, bytes],
        mime_type: str,
        file_path: Optional[Union[str, Path]] = None,
    ) -> Optional[Attachment]:
        """Bind an attachment to the open record."""
        record = self._require_open(f"Attachment '{name}'")
        if record is None:
            return None

        attachment = Attachment(
            name=name,
            mime_type=mime_type,
            content=content,
            source_path=str(file_path) if file_path else None,
        )
        record.attachments.append(attachment)
        self.logger.debug(f"Attachment added: {name} ({mime_type})")
        if file_path:
            self.logger.debug(f"File path: {file_path}")
        return attachment


class TestReporter(BaseReporter):
    """Reporting adapter used by fixtures, page objects and action utilities."""

    __test__ = False

    def __init__(
        self,
        logger: Optional[HarnessLogger] = None,
        allure_reporter: Optional[AllureReporter] = None,
    ):
        super().__init__(logger)
        self.allure_reporter = allure_reporter or AllureReporter(self.logger)

    def start_test(self, test_id: str, test_name: str, suite_name: str) -> TestRecord:
        record = super().start_test(test_id, test_name, suite_name)
        self.add_suite(suite_name)
        self.add_label("test-id", test_id)
        self.add_label("test-name", test_name)
        return record

    def add_step(
        self, step_name: str, step_details: Optional[str] = None, status: str = "passed"
    ) -> Optional[StepRecord]:
        record = self._require_open(f"Step '{step_name}'")
        if record is None:
            return None

        step = StepRecord(name=step_name, details=step_details, status=status)
        record.steps.append(step)
        self.allure_reporter.add_step(step_name, step_details)
        return step

    def add_attachment(
        self,
        name: str,
        content: Union[str, bytes],
        mime_type: str,
        file_path: Optional[Union[str, Path]] = None,
    ) -> Optional[Attachment]:
        attachment = super().add_attachment(name, content, mime_type, file_path)
        if attachment is not None:
            self.allure_reporter.add_attachment(name, content, mime_type)
        return attachment

    def add_screenshot(
        self, name: str, screenshot_path: Union[str, Path]
    ) -> Optional[Attachment]:
        """Attach a PNG file; an unreadable file is logged and skipped."""
        self.logger.info(f"REPORTER: Adding screenshot: {name}")
        if self._require_open(f"Screenshot '{name}'") is None:
            return None
        try:
            content = Path(screenshot_path).read_bytes()
        except OSError as e:
            self.logger.error(
                f"Failed to add screenshot: {screenshot_path}", {"error": str(e)}
            )
            return None
        return self.add_attachment(name, content, MimeType.PNG, screenshot_path)

    def add_json_data(self, name: str, data: Any) -> Optional[Attachment]:
        self.logger.debug(f"REPORTER: Adding JSON data: {name}")
        body = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        return self.add_attachment(name, body, MimeType.JSON)

    def add_test_data(self, data_type: str, data: Any) -> Optional[Attachment]:
        self.logger.debug(f"REPORTER: Adding test data: {data_type}")
        return self.add_json_data(f"Test Data - {data_type}", data)

    def add_test_configuration(self, config: Dict[str, Any]) -> Optional[Attachment]:
        self.logger.debug(
            f"REPORTER: Adding test configuration: {', '.join(config.keys())}"
        )
        return self.add_json_data("Test Configuration", config)

    def add_error_details(self, error: BaseException) -> Optional[Attachment]:
        """Attach the error as structured JSON and label the result with it."""
        self.logger.error(f"REPORTER: Adding error details: {error}")
        record = self._require_open("Error details")
        if record is None:
            return None

        data = error_details(error)
        body = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        attachment = super().add_attachment("Error Details", body, MimeType.JSON)
        record.labels["error"] = error_label(data)
        self.allure_reporter.add_error_details(error, data)
        return attachment

    def _label(self, key: str, value: str) -> bool:
        record = self._require_open(f"Label '{key}'")
        if record is None:
            return False
        record.labels[key] = value
        return True

    def add_suite(self, suite_name: str) -> None:
        if self._label("suite", suite_name):
            self.allure_reporter.add_test_suite(suite_name)

    def add_label(self, name: str, value: str) -> None:
        if self._label(name, value):
            self.allure_reporter.add_test_label(name, value)

    def add_tag(self, tag: str) -> None:
        if self._label(f"tag:{tag}", tag):
            self.allure_reporter.add_test_tag(tag)

    def add_owner(self, owner: str) -> None:
        if self._label("owner", owner):
            self.allure_reporter.add_test_owner(owner)

    def add_severity(self, severity: str) -> None:
        if self._label("severity", severity):
            self.allure_reporter.add_test_severity(severity)

    def add_test_case_id(self, test_case_id: str, url: str = "") -> None:
        if self._label("tms", test_case_id):
            self.allure_reporter.add_test_case_id(test_case_id, url)

    def add_issue(self, issue_id: str, issue_url: Optional[str] = None) -> None:
        if self._label("issue", issue_id):
            self.allure_reporter.add_issue(issue_id, issue_url)

    def add_description(self, description: str) -> None:
        if self._label("description", description):
            self.allure_reporter.add_test_description(description)

    def add_link(self, name: str, url: str, link_type: str = "link") -> None:
        if self._label(f"link:{name}", url):
            self.allure_reporter.add_test_link(name, url, link_type)

    def add_parameter(self, name: str, value: Any, mode: str = "default") -> None:
        if self._label(f"parameter:{name}", "***" if mode == "masked" else str(value)):
            self.allure_reporter.add_test_parameter(name, value, mode)

    def add_epic(self, epic: str) -> None:
        if self._label("epic", epic):
            self.allure_reporter.add_test_epic(epic)

    def add_feature(self, feature: str) -> None:
        if self._label("feature", feature):
            self.allure_reporter.add_test_feature(feature)

    def add_story(self, story: str) -> None:
        if self._label("story", story):
            self.allure_reporter.add_test_story(story)

    def add_layer(self, layer: str) -> None:
        if self._label("layer", layer):
            self.allure_reporter.add_test_layer(layer)

    def add_browser_info(self, browser_name: str, version: str) -> None:
        if self._label("browser", f"{browser_name} {version}"):
            self.allure_reporter.add_browser_info(browser_name, version)

    def add_environment_info(self, environment: str) -> None:
        if self._label("environment", environment):
            self.allure_reporter.add_environment_info(environment)
