"""
pytest plugin for browser end-to-end runs.

Load it from the browser test directory's conftest with
``pytest_plugins = ["e2e_harness.plugin"]``.

Hooks:
    pytest_configure: load and validate the configuration once, configure
        the shared logger and point allure-pytest at the results directory
    pytest_sessionstart: global setup
    pytest_runtest_makereport: keep each phase report on the item so the
        lifecycle fixture can classify the outcome
    pytest_sessionfinish: global teardown

Fixtures:
    harness_config, harness_logger, artifact_manager (session scope)
    reporter, playwright_instance, browser, context, page, lifecycle
"""

import asyncio
from pathlib import Path

import pytest
import pytest_asyncio
from playwright.async_api import async_playwright

from .core.config import Config, load_config
from .core.exceptions import ConfigurationError, HarnessError
from .core.logging_config import HarnessLogger
from .execution.artifacts import ArtifactManager
from .execution.lifecycle import TestLifecycle
from .execution.session import global_setup, global_teardown
from .reporting.reporter import TestReporter

HARNESS_CONFIG_KEY = pytest.StashKey[Config]()


def _is_xdist_worker(config: pytest.Config) -> bool:
    return hasattr(config, "workerinput")


def _harness_config(config: pytest.Config) -> Config:
    return config.stash[HARNESS_CONFIG_KEY]


@pytest.hookimpl(tryfirst=True)
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "e2e: browser end-to-end test")

    try:
        harness_config = load_config(Path(str(config.rootpath)))
    except ConfigurationError as e:
        details = "\n".join(f"  - {v}" for v in e.violations)
        raise pytest.UsageError(f"{e.message}\n{details}" if details else e.message)

    config.stash[HARNESS_CONFIG_KEY] = harness_config
    HarnessLogger.configure(harness_config)

    if not getattr(config.option, "allure_report_dir", None):
        config.option.allure_report_dir = str(harness_config.allure_results_dir)


def pytest_sessionstart(session: pytest.Session) -> None:
    if _is_xdist_worker(session.config):
        return
    harness_config = _harness_config(session.config)
    try:
        global_setup(harness_config, HarnessLogger.configure(harness_config))
    except HarnessError as e:
        pytest.exit(f"Global setup failed: {e}", returncode=pytest.ExitCode.INTERNAL_ERROR)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Store each phase report as ``item.rep_<phase>`` and the call exception."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)
    if report.when == "call":
        item.harness_excinfo = call.excinfo


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    if _is_xdist_worker(session.config):
        return
    harness_config = _harness_config(session.config)
    asyncio.run(global_teardown(harness_config, HarnessLogger.configure(harness_config)))


@pytest.fixture(scope="session")
def harness_config(request) -> Config:
    return _harness_config(request.config)


@pytest.fixture(scope="session")
def harness_logger(harness_config) -> HarnessLogger:
    return HarnessLogger.configure(harness_config)


@pytest.fixture(scope="session")
def artifact_manager(harness_config, harness_logger) -> ArtifactManager:
    return ArtifactManager(harness_config, harness_logger)


@pytest.fixture
def reporter(harness_logger) -> TestReporter:
    return TestReporter(harness_logger)


@pytest_asyncio.fixture
async def playwright_instance():
    async with async_playwright() as playwright:
        yield playwright


@pytest_asyncio.fixture
async def browser(playwright_instance, harness_config, harness_logger):
    browser_type = getattr(playwright_instance, harness_config.browser_name)
    browser = await browser_type.launch(
        headless=harness_config.headless, slow_mo=harness_config.slow_mo
    )
    harness_logger.debug(
        f"Launched {harness_config.browser_name} {browser.version}",
        {"headless": harness_config.headless},
    )
    yield browser
    await browser.close()


@pytest_asyncio.fixture
async def context(browser, harness_config):
    context = await browser.new_context(
        viewport=harness_config.viewport, base_url=harness_config.base_url
    )
    yield context
    await context.close()


@pytest_asyncio.fixture
async def page(context):
    page = await context.new_page()
    yield page
    if not page.is_closed():
        await page.close()


@pytest_asyncio.fixture
async def lifecycle(
    request, page, context, browser, harness_config, harness_logger, reporter, artifact_manager
):
    """Open the test record before the test and finish it afterwards."""
    node = request.node
    coordinator = TestLifecycle(
        harness_config,
        harness_logger,
        reporter,
        artifact_manager,
        page=page,
        context=context,
        browser=browser,
    )
    await coordinator.setup(node.nodeid, node.name, node.parent.name)

    yield coordinator

    report = getattr(node, "rep_call", None)
    excinfo = getattr(node, "harness_excinfo", None)
    error = excinfo.value if excinfo is not None else None
    skipped = report is not None and report.skipped
    await coordinator.teardown(error, skipped=skipped)
