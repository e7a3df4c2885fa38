"""
Pydantic models for test reporting.

Data models for the per-test record, its steps and its attachments.
"""

from typing import Dict, Any, Optional, List, Union, ClassVar
from enum import Enum
from datetime import datetime

from pydantic import BaseModel, Field, ConfigDict, field_validator


class TestStatus(Enum):
    """Terminal status of a test record."""

    __test__ = False

    PASSED = "PASSED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"
    BROKEN = "BROKEN"


class MimeType:
    """MIME types used for report attachments."""

    PNG = "image/png"
    JSON = "application/json"
    TEXT = "text/plain"
    HTML = "text/html"


class Attachment(BaseModel):
    """Named artifact bound to a single test record."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., description="Attachment name")
    mime_type: str = Field(..., description="MIME type of the content")
    content: Union[bytes, str] = Field(default="", description="Text or binary content")
    source_path: Optional[str] = Field(None, description="File the content came from")
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Attachment name cannot be empty")
        return v.strip()

    @property
    def size(self) -> int:
        if isinstance(self.content, bytes):
            return len(self.content)
        return len(self.content.encode("utf-8"))


class StepRecord(BaseModel):
    """Named step recorded under a test."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="Step name")
    details: Optional[str] = Field(None, description="Optional step details")
    status: str = Field("passed", description="Step status")
    timestamp: datetime = Field(default_factory=datetime.now)


class TestRecord(BaseModel):
    """Structured record of one test's execution."""

    __test__: ClassVar[bool] = False

    model_config = ConfigDict(extra="forbid")

    test_id: str = Field(..., description="Unique test identifier")
    test_name: str = Field(..., description="Test name")
    suite: str = Field(..., description="Suite name")
    status: TestStatus = Field(TestStatus.PASSED, description="Current status")
    start_time: datetime = Field(default_factory=datetime.now)
    end_time: Optional[datetime] = Field(None, description="Completion time")
    error: Optional[str] = Field(None, description="Error message if not passed")
    steps: List[StepRecord] = Field(default_factory=list)
    attachments: List[Attachment] = Field(default_factory=list)
    labels: Dict[str, str] = Field(default_factory=dict)

    @field_validator("test_name")
    @classmethod
    def validate_test_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Test name cannot be empty")
        return v.strip()

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    @property
    def duration(self) -> float:
        """Duration in milliseconds, zero until the record is closed."""
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds() * 1000

    def get_attachments(self, mime_type: str) -> List[Attachment]:
        return [a for a in self.attachments if a.mime_type == mime_type]

    def to_summary(self) -> Dict[str, Any]:
        """Create a summary dictionary for logging."""
        return {
            "test_id": self.test_id,
            "test_name": self.test_name,
            "suite": self.suite,
            "status": self.status.value,
            "duration_ms": round(self.duration, 3),
            "steps": len(self.steps),
            "attachments": len(self.attachments),
            "error": self.error,
        }
