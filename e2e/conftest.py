"""
Browser end-to-end test configuration.

Run with ``ENV=qa pytest e2e``.
"""

import pytest

from e2e_harness.utils.test_data import DEFAULT_TEST_DATA_FILE, TestDataStore

pytest_plugins = ["e2e_harness.plugin"]


@pytest.fixture(scope="session")
def test_data(harness_config) -> TestDataStore:
    return TestDataStore(harness_config.project_root / DEFAULT_TEST_DATA_FILE)
