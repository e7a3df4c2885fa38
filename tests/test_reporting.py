"""
Unit tests for the reporting models and the test reporting adapter.
"""

from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from e2e_harness.core.exceptions import ActionTimeoutError, ReportingError
from e2e_harness.reporting.models import (
    Attachment,
    MimeType,
    StepRecord,
    TestRecord,
    TestStatus,
)


class TestReportingModels:
    """Test cases for record, step and attachment models."""

    def test_record_defaults(self):
        record = TestRecord(test_id="t-1", test_name="search", suite="DuckDuckGo")

        assert record.status == TestStatus.PASSED
        assert record.is_open is True
        assert record.duration == 0.0
        assert record.steps == []
        assert record.attachments == []

    def test_record_duration(self):
        """Test duration is reported in milliseconds once the record is closed."""
        start = datetime(2024, 1, 1, 12, 0, 0)
        record = TestRecord(
            test_id="t-1",
            test_name="search",
            suite="DuckDuckGo",
            start_time=start,
            end_time=start + timedelta(seconds=1.5),
        )

        assert record.is_open is False
        assert record.duration == 1500.0
        assert record.to_summary()["duration_ms"] == 1500.0

    def test_record_rejects_empty_name(self):
        with pytest.raises(ValidationError):
            TestRecord(test_id="t-1", test_name="  ", suite="DuckDuckGo")

    def test_attachment_size_and_filter(self):
        """Test attachment sizes and filtering by MIME type."""
        png = Attachment(name="shot", mime_type=MimeType.PNG, content=b"\x89PNG")
        data = Attachment(name="data", mime_type=MimeType.JSON, content="{}")
        record = TestRecord(
            test_id="t-1", test_name="search", suite="s", attachments=[png, data]
        )

        assert png.size == 4
        assert data.size == 2
        assert record.get_attachments(MimeType.PNG) == [png]
        assert record.get_attachments(MimeType.HTML) == []

    def test_attachment_is_immutable(self):
        attachment = Attachment(name="shot", mime_type=MimeType.PNG)

        with pytest.raises(ValidationError):
            attachment.name = "other"

    def test_step_default_status(self):
        assert StepRecord(name="Click").status == "passed"


class TestBaseLifecycle:
    """Test cases for opening and closing records."""

    def test_start_test_opens_record(self, test_reporter, mock_allure):
        record = test_reporter.start_test("id-1", "test_search", "DuckDuckGo")

        assert test_reporter.current_test is record
        assert record.labels["suite"] == "DuckDuckGo"
        assert record.labels["test-id"] == "id-1"
        mock_allure.add_test_suite.assert_called_once_with("DuckDuckGo")

    def test_start_while_open_raises(self, test_reporter):
        """Test a second start without ending the first is rejected."""
        test_reporter.start_test("id-1", "first", "suite")

        with pytest.raises(ReportingError) as exc_info:
            test_reporter.start_test("id-2", "second", "suite")

        assert exc_info.value.test_id == "id-2"
        assert test_reporter.current_test.test_name == "first"

    def test_end_test_closes_and_releases(self, test_reporter):
        test_reporter.start_test("id-1", "test_search", "suite")

        record = test_reporter.end_test(TestStatus.FAILED, "[TIMEOUT] click")

        assert record.status == TestStatus.FAILED
        assert record.error == "[TIMEOUT] click"
        assert record.end_time is not None
        assert test_reporter.current_test is None

    def test_end_test_twice_is_noop(self, test_reporter, mock_logger):
        """Test ending a test with no open record only warns."""
        test_reporter.start_test("id-1", "test_search", "suite")
        test_reporter.end_test(TestStatus.PASSED)

        assert test_reporter.end_test(TestStatus.PASSED) is None
        mock_logger.warn.assert_called_once()

    def test_empty_error_stored_as_none(self, test_reporter):
        test_reporter.start_test("id-1", "test_search", "suite")

        assert test_reporter.end_test(TestStatus.PASSED, "").error is None

    def test_records_do_not_leak_between_tests(self, test_reporter):
        test_reporter.start_test("id-1", "first", "suite")
        test_reporter.add_step("Step one")
        first = test_reporter.end_test(TestStatus.PASSED)

        test_reporter.start_test("id-2", "second", "suite")
        second = test_reporter.end_test(TestStatus.PASSED)

        assert len(first.steps) == 1
        assert second.steps == []


class TestReporterWithoutOpenTest:
    """Test cases for calls made when no record is open."""

    def test_step_ignored(self, test_reporter, mock_logger, mock_allure):
        assert test_reporter.add_step("Click") is None

        mock_allure.add_step.assert_not_called()
        assert "no open test" in mock_logger.warn.call_args[0][0]

    def test_attachment_ignored(self, test_reporter, mock_allure):
        assert test_reporter.add_attachment("data", "{}", MimeType.JSON) is None
        mock_allure.add_attachment.assert_not_called()

    def test_labels_ignored(self, test_reporter, mock_allure):
        test_reporter.add_tag("smoke")
        test_reporter.add_severity("critical")

        mock_allure.add_test_tag.assert_not_called()
        mock_allure.add_test_severity.assert_not_called()

    def test_error_details_ignored(self, test_reporter, mock_allure):
        assert test_reporter.add_error_details(ValueError("boom")) is None
        mock_allure.add_error_details.assert_not_called()


class TestReporterOperations:
    """Test cases for steps, attachments and labels on an open record."""

    @pytest.fixture
    def open_reporter(self, test_reporter):
        test_reporter.start_test("id-1", "test_search", "DuckDuckGo")
        return test_reporter

    def test_add_step(self, open_reporter, mock_allure):
        step = open_reporter.add_step("Click element", "#submit")

        assert step.details == "#submit"
        assert open_reporter.current_test.steps == [step]
        mock_allure.add_step.assert_called_once_with("Click element", "#submit")

    def test_steps_keep_order(self, open_reporter):
        for name in ["first", "second", "third"]:
            open_reporter.add_step(name)

        assert [s.name for s in open_reporter.current_test.steps] == [
            "first",
            "second",
            "third",
        ]

    def test_add_attachment(self, open_reporter, mock_allure):
        attachment = open_reporter.add_attachment("page", "<html/>", MimeType.HTML)

        assert attachment.mime_type == MimeType.HTML
        mock_allure.add_attachment.assert_called_once_with("page", "<html/>", MimeType.HTML)

    def test_add_screenshot(self, open_reporter, tmp_path):
        """Test a screenshot file is read and attached as PNG."""
        path = tmp_path / "shot.png"
        path.write_bytes(b"\x89PNG data")

        attachment = open_reporter.add_screenshot("Screenshot - shot", path)

        assert attachment.content == b"\x89PNG data"
        assert attachment.source_path == str(path)
        assert open_reporter.current_test.get_attachments(MimeType.PNG) == [attachment]

    def test_add_missing_screenshot(self, open_reporter, tmp_path, mock_logger):
        """Test an unreadable screenshot is logged and not attached."""
        result = open_reporter.add_screenshot("missing", tmp_path / "missing.png")

        assert result is None
        assert open_reporter.current_test.attachments == []
        mock_logger.error.assert_called_once()

    def test_add_json_data(self, open_reporter):
        attachment = open_reporter.add_json_data("payload", {"query": "Selenium"})

        assert attachment.mime_type == MimeType.JSON
        assert '"query": "Selenium"' in attachment.content

    def test_add_test_data_and_configuration(self, open_reporter):
        data = open_reporter.add_test_data("users", [{"name": "standard"}])
        config = open_reporter.add_test_configuration({"headless": True})

        assert data.name == "Test Data - users"
        assert config.name == "Test Configuration"

    def test_add_error_details(self, open_reporter, mock_allure):
        """Test errors are attached as JSON and labelled on the record."""
        error = ActionTimeoutError("click timed out", action="click", target="#go")

        attachment = open_reporter.add_error_details(error)

        assert attachment.name == "Error Details"
        assert '"name": "ActionTimeoutError"' in attachment.content
        label = open_reporter.current_test.labels["error"]
        assert label == "ActionTimeoutError: [TIMEOUT] click timed out"
        mock_allure.add_error_details.assert_called_once()
        forwarded_error, details = mock_allure.add_error_details.call_args[0]
        assert forwarded_error is error
        assert details["message"] == "[TIMEOUT] click timed out"
        mock_allure.add_attachment.assert_not_called()

    def test_label_helpers(self, open_reporter, mock_allure):
        """Test each label helper records the label and forwards it."""
        open_reporter.add_tag("smoke")
        open_reporter.add_owner("qa-team")
        open_reporter.add_severity("critical")
        open_reporter.add_test_case_id("TC-1")
        open_reporter.add_issue("BUG-7", "https://tracker.test/BUG-7")
        open_reporter.add_description("Search flow")
        open_reporter.add_link("docs", "https://docs.test")
        open_reporter.add_epic("Search")
        open_reporter.add_feature("Query")
        open_reporter.add_story("Persist query")
        open_reporter.add_layer("e2e")
        open_reporter.add_browser_info("chromium", "120.0")
        open_reporter.add_environment_info("qa")

        labels = open_reporter.current_test.labels
        assert labels["tag:smoke"] == "smoke"
        assert labels["owner"] == "qa-team"
        assert labels["severity"] == "critical"
        assert labels["tms"] == "TC-1"
        assert labels["issue"] == "BUG-7"
        assert labels["link:docs"] == "https://docs.test"
        assert labels["browser"] == "chromium 120.0"
        assert labels["environment"] == "qa"
        mock_allure.add_issue.assert_called_once_with("BUG-7", "https://tracker.test/BUG-7")
        mock_allure.add_test_layer.assert_called_once_with("e2e")
        mock_allure.add_browser_info.assert_called_once_with("chromium", "120.0")

    def test_masked_parameter(self, open_reporter, mock_allure):
        open_reporter.add_parameter("password", "secret", mode="masked")

        assert open_reporter.current_test.labels["parameter:password"] == "***"
        mock_allure.add_test_parameter.assert_called_once_with("password", "secret", "masked")
