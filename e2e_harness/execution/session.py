"""
Run-level setup and teardown.

Global setup prepares the output directories once per run. Global teardown
generates the report, relocates it, deletes transient result directories and
prunes old logs. Each teardown step runs on its own: a failing step is logged
and the remaining steps still run.
"""

import os
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from ..core.config import Config
from ..core.logging_config import HarnessLogger, log_performance
from ..reporting.generator import ReportGenerator
from .artifacts import ArtifactManager

BASE_URL_ENV = "PLAYWRIGHT_TEST_BASE_URL"


def global_setup(config: Config, logger: Optional[HarnessLogger] = None) -> Dict[str, Any]:
    """
    Prepare the run: export the base URL and create output directories.

    Raises:
        FileOperationError: if a directory cannot be created
    """
    logger = logger or HarnessLogger.get_instance()
    logger.info("Starting global setup...", {"environment": config.environment})

    if config.base_url:
        os.environ[BASE_URL_ENV] = config.base_url

    created = ArtifactManager(config, logger).prepare_directories()

    summary = {
        "environment": config.environment,
        "base_url": config.base_url,
        "created": [str(d) for d in created],
    }
    logger.info("Global setup completed successfully", summary)
    return summary


async def global_teardown(
    config: Config,
    logger: Optional[HarnessLogger] = None,
    generator: Optional[ReportGenerator] = None,
) -> Dict[str, Any]:
    """
    Finish the run. Never raises.

    Returns:
        Summary with the relocated report path, cleanup results and the
        errors of any failed steps
    """
    logger = logger or HarnessLogger.get_instance()
    artifacts = ArtifactManager(config, logger)
    generator = generator or ReportGenerator(config, logger)
    start_time = time.time()

    logger.info("Starting global teardown...")
    summary: Dict[str, Any] = {
        "report": None,
        "transient": None,
        "logs": None,
        "errors": {},
    }

    async def generate_report() -> Any:
        results = config.allure_results_dir
        if not results.exists() or not any(results.iterdir()):
            logger.info(f"No allure results in {results}; skipping report generation")
            return None
        return str(await generator.generate())

    async def remove_transient() -> Any:
        return artifacts.remove_transient_directories()

    async def prune_logs() -> Any:
        return artifacts.prune_logs()

    steps: Dict[str, Callable[[], Awaitable[Any]]] = {
        "report": generate_report,
        "transient": remove_transient,
        "logs": prune_logs,
    }
    for name, step in steps.items():
        try:
            summary[name] = await step()
        except Exception as e:
            # A failing step must not stop the rest or change the run's result
            summary["errors"][name] = str(e)
            logger.warn(f"Global teardown step '{name}' failed: {e}")

    duration = time.time() - start_time
    log_performance(
        logger.logger, "global_teardown", duration, failed_steps=list(summary["errors"])
    )
    if summary["errors"]:
        logger.warn("Global teardown completed with errors", summary["errors"])
    else:
        logger.info("Global teardown completed successfully")
    return summary
