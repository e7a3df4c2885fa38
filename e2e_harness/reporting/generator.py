"""
Allure report generation.

Runs the external ``allure generate`` command over the results directory and
relocates the generated site into the canonical reports directory.
"""

import asyncio
import time
from pathlib import Path
from typing import List, Optional

from ..core.config import Config
from ..core.exceptions import ReportingError
from ..core.logging_config import HarnessLogger
from ..execution.artifacts import ArtifactManager


class ReportGenerator:
    """Generates the HTML report from allure results."""

    def __init__(
        self,
        config: Config,
        logger: Optional[HarnessLogger] = None,
        command: str = "allure",
        timeout: float = 300.0,
    ):
        self.config = config
        self.logger = logger or HarnessLogger.get_instance()
        self.command = command
        self.timeout = timeout
        # allure writes here first; relocate() moves it under reports/
        self.staging_dir = config.project_root / "allure-report"

    def build_command(self) -> List[str]:
        return [
            self.command,
            "generate",
            str(self.config.allure_results_dir),
            "--clean",
            "-o",
            str(self.staging_dir),
        ]

    async def generate(self) -> Path:
        """
        Run ``allure generate`` and relocate its output.

        Returns:
            Path to the relocated report

        Raises:
            ReportingError: if the command is missing, times out or fails
            FileOperationError: if the output cannot be relocated
        """
        args = self.build_command()
        self.logger.info("Generating test reports...", {"command": " ".join(args)})
        start_time = time.time()

        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise ReportingError(f"Report generator not found: {self.command} ({e})")

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise ReportingError(
                f"Report generation timed out after {self.timeout:.0f}s"
            )

        if process.returncode != 0:
            raise ReportingError(
                f"Report generation failed with exit code {process.returncode}: "
                f"{stderr.decode(errors='replace').strip()}"
            )

        self.logger.info(
            "Allure report generated successfully",
            {"duration": round(time.time() - start_time, 3)},
        )
        return self.relocate()

    def relocate(self, source: Optional[Path] = None) -> Path:
        """Move the generated report into the canonical reports directory."""
        manager = ArtifactManager(self.config, self.logger)
        target = manager.relocate(source or self.staging_dir, self.config.allure_report_dir)
        self.logger.info(f"Allure report moved to {target}")
        return target
