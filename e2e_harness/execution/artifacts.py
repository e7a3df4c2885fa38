"""
Artifact storage and cleanup.

Creates the output directory layout, names per-test screenshots, relocates
generated reports, removes transient result directories and prunes old log
files by retention.
"""

import re
import shutil
import time
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.config import Config
from ..core.exceptions import FileOperationError
from ..core.logging_config import HarnessLogger
from ..utils.dates import generate_timestamp_for_file_name

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_name(name: str) -> str:
    """Make a test name safe to use as a file name."""
    cleaned = _UNSAFE_CHARS.sub("_", name).strip("._")
    return cleaned[:120] or "test"


def _tree_size(path: Path) -> int:
    if path.is_file():
        return path.stat().st_size
    return sum(f.stat().st_size for f in path.rglob("*") if f.is_file())


class ArtifactManager:
    """
    Manages the harness output directories.

    All paths come from the configuration; nothing here depends on the
    process working directory.
    """

    def __init__(self, config: Config, logger: Optional[HarnessLogger] = None):
        self.config = config
        self.logger = logger or HarnessLogger.get_instance()

    def prepare_directories(self) -> List[Path]:
        """
        Create every output directory that does not exist yet.

        Returns:
            Directories that were created by this call
        """
        created = []
        for name, directory in self.config.output_directories().items():
            if directory.exists():
                continue
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise FileOperationError(
                    f"Failed to create {name} directory: {e}",
                    file_path=str(directory),
                    operation="mkdir",
                )
            created.append(directory)
            self.logger.info(f"Created directory: {directory}")
        return created

    def screenshot_path(self, test_name: str) -> Path:
        """Return ``screenshots/<test name>_<timestamp>.png``, creating the folder."""
        directory = self.config.screenshots_dir
        directory.mkdir(parents=True, exist_ok=True)
        file_name = f"{sanitize_name(test_name)}_{generate_timestamp_for_file_name()}.png"
        return directory / file_name

    def relocate(self, source: Path, target: Path) -> Path:
        """
        Move ``source`` to ``target``, replacing anything already there.

        Raises:
            FileOperationError: if the source is missing or the move fails
        """
        source, target = Path(source), Path(target)
        if not source.exists():
            raise FileOperationError(
                f"Nothing to relocate at {source}",
                file_path=str(source),
                operation="relocate",
            )
        try:
            if target.is_dir():
                shutil.rmtree(target)
            elif target.exists():
                target.unlink()
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(target))
        except OSError as e:
            raise FileOperationError(
                f"Failed to relocate {source} to {target}: {e}",
                file_path=str(target),
                operation="relocate",
            )
        self.logger.info(f"Relocated {source.name} to {target}")
        return target

    def remove_transient_directories(self) -> Dict[str, Any]:
        """Delete transient result directories; each failure is logged and collected."""
        removed = []
        errors = []
        for name, directory in self.config.transient_directories().items():
            if not directory.exists():
                continue
            try:
                shutil.rmtree(directory)
            except OSError as e:
                message = f"Failed to remove {directory}: {e}"
                errors.append(message)
                self.logger.warn(message)
                continue
            removed.append(str(directory))
            self.logger.info(f"Cleaned up directory: {directory}")
        return {"removed": removed, "errors": errors}

    def prune_logs(
        self,
        retention_days: Optional[int] = None,
        now: Optional[datetime] = None,
        dry_run: bool = False,
    ) -> Dict[str, Any]:
        """
        Delete log files whose modification time is older than the retention window.

        Args:
            retention_days: Override the configured retention
            now: Reference time, defaults to the current time
            dry_run: Only report what would be deleted

        Returns:
            Cleanup summary with statistics
        """
        start_time = time.time()
        if retention_days is None:
            retention_days = self.config.log_retention_days
        cutoff = (now or datetime.now()) - timedelta(days=retention_days)
        cutoff_ts = cutoff.timestamp()

        deleted: List[str] = []
        freed_space = 0
        errors: List[str] = []

        logs_dir = self.config.logs_dir
        candidates = sorted(p for p in logs_dir.iterdir() if p.is_file()) if logs_dir.exists() else []

        for log_file in candidates:
            try:
                stat = log_file.stat()
                if stat.st_mtime >= cutoff_ts:
                    continue
                if not dry_run:
                    log_file.unlink()
                deleted.append(log_file.name)
                freed_space += stat.st_size
                self.logger.info(f"Deleted old log file: {log_file.name}")
            except OSError as e:
                message = f"Failed to delete {log_file}: {e}"
                errors.append(message)
                self.logger.warn(message)

        summary = {
            "deleted_count": len(deleted),
            "deleted": deleted,
            "freed_space": freed_space,
            "retention_days": retention_days,
            "cutoff": cutoff.isoformat(),
            "duration": time.time() - start_time,
            "dry_run": dry_run,
            "errors": errors,
        }
        self.logger.info(
            f"Log cleanup completed: {len(deleted)} files, {freed_space} bytes freed",
            summary,
        )
        return summary

    def get_storage_statistics(self) -> Dict[str, Any]:
        """Size and file count of each output directory."""
        directories = {
            **self.config.output_directories(),
            **self.config.transient_directories(),
        }
        stats: Dict[str, Any] = {}
        total_size = 0
        for name, directory in directories.items():
            if not directory.exists():
                stats[name] = {"exists": False, "files": 0, "size": 0}
                continue
            size = _tree_size(directory)
            files = sum(1 for f in directory.rglob("*") if f.is_file())
            stats[name] = {"exists": True, "files": files, "size": size}
            nested = any(
                other != directory and other in directory.parents
                for other in directories.values()
            )
            if not nested:
                total_size += size

        return {
            "directories": stats,
            "total_size": total_size,
            "total_size_mb": total_size / (1024 * 1024),
            "retention_days": self.config.log_retention_days,
        }
