"""
E2E Harness - browser end-to-end test automation on Playwright and pytest.

Page objects, action utilities, a shared logger, an allure-backed reporting
adapter and per-test lifecycle fixtures.
"""

__version__ = "0.1.0"
