"""
Allure report backend.

Thin bridge from the reporting adapter to allure-pytest's runtime API. Every
call is mirrored into the harness log. Outside a running allure-pytest test
the allure hooks have no listener and the calls have no effect.
"""

import json
import traceback
from datetime import datetime
from typing import Any, Optional, Union

import allure
from allure_commons.types import AttachmentType

from ..core.logging_config import HarnessLogger
from .models import MimeType

_ATTACHMENT_TYPES = {
    MimeType.PNG: AttachmentType.PNG,
    MimeType.JSON: AttachmentType.JSON,
    MimeType.TEXT: AttachmentType.TEXT,
    MimeType.HTML: AttachmentType.HTML,
}

SEVERITIES = ["blocker", "critical", "normal", "minor", "trivial"]
LAYERS = ["e2e", "api", "unit", "integration"]
PARAMETER_MODES = {
    "default": allure.parameter_mode.DEFAULT,
    "hidden": allure.parameter_mode.HIDDEN,
    "masked": allure.parameter_mode.MASKED,
}


def attachment_type_for(mime_type: str) -> Union[AttachmentType, str]:
    """Map a MIME type to allure's attachment type, passing unknown types through."""
    return _ATTACHMENT_TYPES.get(mime_type, mime_type)


def error_details(error: BaseException) -> dict:
    """Serialize an exception into the structure attached to failed tests."""
    stack = "".join(
        traceback.format_exception(type(error), error, error.__traceback__)
    )
    return {
        "name": type(error).__name__,
        "message": str(error),
        "stack": stack,
        "timestamp": datetime.now().isoformat(),
    }


def error_label(details: dict) -> str:
    return f"{details['name']}: {details['message']}"[:200]


class AllureReporter:
    """Writes steps, attachments and labels to the allure results."""

    def __init__(self, logger: Optional[HarnessLogger] = None):
        self.logger = logger or HarnessLogger.get_instance()

    def add_step(self, step_name: str, step_details: Optional[str] = None) -> None:
        """Record a completed step, with its details attached as text."""
        self.logger.info(f"ALLURE: Adding step: {step_name}")
        with allure.step(step_name):
            if step_details:
                self.logger.debug(step_details)
                allure.attach(
                    step_details,
                    name=f"{step_name} - details",
                    attachment_type=AttachmentType.TEXT,
                )

    def add_attachment(self, name: str, content: Union[str, bytes], mime_type: str) -> None:
        self.logger.debug(f"ALLURE: Adding attachment: {name} ({mime_type})")
        allure.attach(content, name=name, attachment_type=attachment_type_for(mime_type))

    def add_json_attachment(self, name: str, data: Any) -> None:
        self.logger.debug(f"ALLURE: Adding JSON attachment: {name}")
        body = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        allure.attach(body, name=name, attachment_type=AttachmentType.JSON)

    def add_test_case_id(self, test_case_id: str, url: str = "") -> None:
        self.logger.debug(f"ALLURE: Adding test case ID: {test_case_id}")
        allure.dynamic.testcase(url or test_case_id, name=test_case_id)

    def add_issue(self, issue_id: str, issue_url: Optional[str] = None) -> None:
        self.logger.debug(f"ALLURE: Adding issue: {issue_id}")
        allure.dynamic.issue(issue_url or issue_id, name=issue_id)

    def add_test_suite(self, suite_name: str) -> None:
        self.logger.debug(f"ALLURE: Adding test suite: {suite_name}")
        allure.dynamic.suite(suite_name)

    def add_test_owner(self, owner: str) -> None:
        self.logger.debug(f"ALLURE: Adding test owner: {owner}")
        allure.dynamic.label("owner", owner)

    def add_test_severity(self, severity: str) -> None:
        if severity not in SEVERITIES:
            raise ValueError(f"Severity must be one of: {SEVERITIES}")
        self.logger.debug(f"ALLURE: Adding test severity: {severity}")
        allure.dynamic.severity(allure.severity_level(severity))

    def add_test_label(self, name: str, value: str) -> None:
        self.logger.debug(f"ALLURE: Adding test label: {name}: {value}")
        allure.dynamic.label(name, value)

    def add_test_tag(self, tag: str) -> None:
        self.logger.debug(f"ALLURE: Adding test tag: {tag}")
        allure.dynamic.tag(tag)

    def add_test_description(self, description: str) -> None:
        self.logger.debug(f"ALLURE: Adding test description: {description[:100]}...")
        allure.dynamic.description(description)

    def add_test_link(self, name: str, url: str, link_type: str = "link") -> None:
        self.logger.debug(f"ALLURE: Adding test link: {name}: {url}")
        allure.dynamic.link(url, link_type=link_type, name=name)

    def add_test_parameter(self, name: str, value: Any, mode: str = "default") -> None:
        if mode not in PARAMETER_MODES:
            raise ValueError(f"Parameter mode must be one of: {list(PARAMETER_MODES)}")
        self.logger.debug(f"ALLURE: Adding test parameter: {name}")
        allure.dynamic.parameter(name, value, mode=PARAMETER_MODES[mode])

    def add_test_epic(self, epic: str) -> None:
        self.logger.debug(f"ALLURE: Adding test epic: {epic}")
        allure.dynamic.epic(epic)

    def add_test_feature(self, feature: str) -> None:
        self.logger.debug(f"ALLURE: Adding test feature: {feature}")
        allure.dynamic.feature(feature)

    def add_test_story(self, story: str) -> None:
        self.logger.debug(f"ALLURE: Adding test story: {story}")
        allure.dynamic.story(story)

    def add_test_layer(self, layer: str) -> None:
        if layer not in LAYERS:
            raise ValueError(f"Layer must be one of: {LAYERS}")
        self.logger.debug(f"ALLURE: Adding test layer: {layer}")
        allure.dynamic.label("layer", layer)

    def add_browser_info(self, browser_name: str, version: str) -> None:
        self.logger.debug(f"ALLURE: Adding browser info: {browser_name} {version}")
        allure.dynamic.label("browser", browser_name)
        allure.dynamic.label("browser-version", version)

    def add_environment_info(self, environment: str) -> None:
        self.logger.debug(f"ALLURE: Adding environment info: {environment}")
        allure.dynamic.label("environment", environment)

    def add_error_details(self, error: BaseException, details: Optional[dict] = None) -> dict:
        """Attach the serialized error and label the result with its message."""
        data = details if details is not None else error_details(error)
        self.logger.debug(f"ALLURE: Adding error details: {data['message']}")
        self.add_json_attachment("Error Details", data)
        allure.dynamic.label("error", error_label(data))
        return data
