"""
Test execution components for the E2E harness.

Artifact management and the per-test lifecycle coordinator. Run-level setup
and teardown live in ``e2e_harness.execution.session``.
"""

from .artifacts import ArtifactManager, sanitize_name
from .lifecycle import TestLifecycle, classify_outcome, failure_message

__all__ = [
    "ArtifactManager",
    "sanitize_name",
    "TestLifecycle",
    "classify_outcome",
    "failure_message",
]
