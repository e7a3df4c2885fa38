"""
Unit tests for the pytest plugin hooks.

Hooks are called directly with lightweight stand-ins for pytest's config,
session and item objects.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from e2e_harness import plugin
from e2e_harness.core.config import Config
from e2e_harness.core.exceptions import FileOperationError
from e2e_harness.execution.lifecycle import TestLifecycle
from e2e_harness.reporting.models import MimeType, TestStatus


def _pytest_config(rootpath, **extra):
    return SimpleNamespace(
        rootpath=rootpath,
        stash={},
        option=SimpleNamespace(allure_report_dir=None),
        addinivalue_line=MagicMock(),
        **extra,
    )


class TestConfigureHook:
    """Test cases for pytest_configure."""

    def test_configure_loads_and_stashes(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BASE_URL", "https://example.test")
        config = _pytest_config(tmp_path)

        plugin.pytest_configure(config)

        harness_config = config.stash[plugin.HARNESS_CONFIG_KEY]
        assert harness_config.base_url == "https://example.test"
        assert harness_config.project_root == tmp_path
        assert config.option.allure_report_dir == str(tmp_path / "allure-results")
        config.addinivalue_line.assert_called_once_with(
            "markers", "e2e: browser end-to-end test"
        )

    def test_configure_keeps_explicit_results_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BASE_URL", "https://example.test")
        config = _pytest_config(tmp_path)
        config.option.allure_report_dir = "custom-results"

        plugin.pytest_configure(config)

        assert config.option.allure_report_dir == "custom-results"

    def test_invalid_configuration_is_usage_error(self, tmp_path):
        """Test a missing BASE_URL stops the run before collection."""
        with pytest.raises(pytest.UsageError) as exc_info:
            plugin.pytest_configure(_pytest_config(tmp_path))

        assert "BASE_URL is required" in str(exc_info.value)


class TestSessionHooks:
    """Test cases for session start and finish."""

    @pytest.fixture
    def session(self, tmp_path):
        config = _pytest_config(tmp_path)
        config.stash[plugin.HARNESS_CONFIG_KEY] = Config(
            project_root=tmp_path, base_url="https://example.test"
        )
        return SimpleNamespace(config=config)

    def test_sessionstart_runs_global_setup(self, session, tmp_path):
        plugin.pytest_sessionstart(session)

        assert (tmp_path / "reports" / "screenshots").is_dir()

    def test_sessionstart_failure_exits(self, session):
        with patch(
            "e2e_harness.plugin.global_setup",
            side_effect=FileOperationError("read-only file system"),
        ):
            with pytest.raises(pytest.exit.Exception) as exc_info:
                plugin.pytest_sessionstart(session)

        assert "Global setup failed" in str(exc_info.value)

    def test_xdist_worker_skips_setup(self, session):
        session.config.workerinput = {"workerid": "gw0"}

        with patch("e2e_harness.plugin.global_setup") as mock_setup:
            plugin.pytest_sessionstart(session)

        mock_setup.assert_not_called()

    def test_sessionfinish_runs_global_teardown(self, session):
        with patch("e2e_harness.plugin.global_teardown", new_callable=AsyncMock) as mock_teardown:
            plugin.pytest_sessionfinish(session, 0)

        mock_teardown.assert_awaited_once()
        assert mock_teardown.call_args[0][0] is session.config.stash[plugin.HARNESS_CONFIG_KEY]

    def test_xdist_worker_skips_teardown(self, session):
        session.config.workerinput = {"workerid": "gw1"}

        with patch("e2e_harness.plugin.global_teardown", new_callable=AsyncMock) as mock_teardown:
            plugin.pytest_sessionfinish(session, 0)

        mock_teardown.assert_not_called()


class TestMakeReportHook:
    """Test cases for the phase report hook wrapper."""

    def _run(self, item, call, report):
        hook = plugin.pytest_runtest_makereport(item, call)
        next(hook)
        outcome = MagicMock()
        outcome.get_result.return_value = report
        with pytest.raises(StopIteration):
            hook.send(outcome)

    def test_call_report_and_exception_stored(self):
        item = SimpleNamespace()
        excinfo = MagicMock()
        report = SimpleNamespace(when="call", skipped=False)

        self._run(item, SimpleNamespace(excinfo=excinfo), report)

        assert item.rep_call is report
        assert item.harness_excinfo is excinfo

    def test_setup_report_stored_without_exception(self):
        item = SimpleNamespace()
        report = SimpleNamespace(when="setup", skipped=False)

        self._run(item, SimpleNamespace(excinfo=None), report)

        assert item.rep_setup is report
        assert not hasattr(item, "harness_excinfo")


FAKE_BROWSER_CONFTEST = '''
from unittest.mock import AsyncMock, MagicMock

import pytest

pytest_plugins = ["e2e_harness.plugin"]


async def _write_screenshot(path, full_page):
    with open(path, "wb") as f:
        f.write(b"png")


@pytest.fixture
def browser():
    browser = MagicMock()
    browser.browser_type.name = "chromium"
    browser.version = "120.0"
    return browser


@pytest.fixture
def context():
    context = MagicMock()
    context.clear_cookies = AsyncMock()
    return context


@pytest.fixture
def page():
    page = MagicMock()
    page.is_closed.return_value = False
    page.set_viewport_size = AsyncMock()
    page.evaluate = AsyncMock()
    page.screenshot = AsyncMock(side_effect=_write_screenshot)
    return page
'''

FAKE_BROWSER_TESTS = '''
import pytest

from e2e_harness.core.exceptions import ActionTimeoutError


@pytest.mark.asyncio
async def test_passes(lifecycle):
    assert lifecycle.page is not None


@pytest.mark.asyncio
async def test_fails(lifecycle):
    assert "Selenium" == "Playwright"


@pytest.mark.asyncio
async def test_skips(lifecycle):
    pytest.skip("not today")


@pytest.mark.asyncio
async def test_times_out(lifecycle):
    raise ActionTimeoutError("Click on '#go' exceeded 5ms", action="Click", target="#go")


@pytest.mark.asyncio
async def test_breaks(lifecycle):
    raise RuntimeError("driver crashed")
'''


class TestLifecycleFixture:
    """Test cases for the lifecycle fixture running inside a pytest session."""

    @pytest.fixture
    def finished(self):
        records = []
        real_teardown = TestLifecycle.teardown

        async def recording_teardown(lifecycle, error=None, skipped=False):
            record = await real_teardown(lifecycle, error, skipped=skipped)
            records.append(record)
            return record

        with patch.object(TestLifecycle, "teardown", recording_teardown):
            yield records

    @pytest.fixture
    def run(self, pytester, monkeypatch, finished):
        monkeypatch.setenv("BASE_URL", "https://example.test")
        pytester.makeini("[pytest]\nasyncio_mode = strict\n")
        pytester.makeconftest(FAKE_BROWSER_CONFTEST)
        pytester.makepyfile(test_fake_browser=FAKE_BROWSER_TESTS)

        with patch("e2e_harness.plugin.global_teardown", new_callable=AsyncMock):
            result = pytester.runpytest()

        return result, {record.test_name: record for record in finished}

    def test_outcomes(self, run):
        result, _ = run

        result.assert_outcomes(passed=1, failed=3, skipped=1)

    def test_each_test_closes_one_record(self, run):
        _, records = run

        assert set(records) == {
            "test_passes",
            "test_fails",
            "test_skips",
            "test_times_out",
            "test_breaks",
        }
        assert all(not record.is_open for record in records.values())
        assert records["test_passes"].suite == "test_fake_browser.py"

    def test_record_statuses(self, run):
        _, records = run

        assert records["test_passes"].status is TestStatus.PASSED
        assert records["test_passes"].error is None
        assert records["test_fails"].status is TestStatus.FAILED
        assert records["test_skips"].status is TestStatus.SKIPPED
        assert records["test_breaks"].status is TestStatus.BROKEN
        assert records["test_breaks"].error == "driver crashed"

    def test_timeout_is_tagged_with_screenshot(self, run):
        """Test a timed out action ends FAILED with a tagged message and a screenshot."""
        _, records = run
        record = records["test_times_out"]

        assert record.status is TestStatus.FAILED
        assert record.error.startswith("[TIMEOUT]")
        assert record.get_attachments(MimeType.PNG)
        assert record.labels["error"].startswith("ActionTimeoutError")

    def test_passing_test_has_no_screenshot(self, run):
        _, records = run

        assert records["test_passes"].get_attachments(MimeType.PNG) == []
