"""
Configuration management for the E2E harness.

Handles environment files, environment variables, defaults, and configuration
validation. A Config is loaded once per process and treated as read-only.
"""

import os
from typing import Optional, Dict, Any, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .exceptions import ConfigurationError

VALID_BROWSERS = ["chromium", "firefox", "webkit"]
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARN", "WARNING", "ERROR"]
VALID_LOG_FORMATS = ["text", "json"]

# Subdirectories created by global setup, relative to the project root.
LOGS_DIR = "logs"
REPORTS_DIR = "reports"
SCREENSHOTS_DIR = "reports/screenshots"
ALLURE_REPORT_DIR = "reports/allure-report"
ALLURE_RESULTS_DIR = "allure-results"
TEST_RESULTS_DIR = "test-results"
PLAYWRIGHT_REPORT_DIR = "playwright-report"


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _as_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigurationError(
            f"Invalid integer for {key}: {raw!r}",
            violations=[f"{key} must be an integer"],
        )


def selected_environment(env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Return the environment name selected by ENV (or legacy ``environment``)."""
    env = os.environ if env is None else env
    name = env.get("ENV") or env.get("environment")
    return name.strip() if name and name.strip() else None


def load_environment(project_root: Optional[Path] = None) -> Optional[Path]:
    """
    Load environment variables from the environment-specific file.

    When ENV is set, ``config/env/.env.<ENV>`` is loaded with override and
    must exist. Otherwise a ``.env`` in the project root is loaded if present.

    Returns:
        Path of the file that was loaded, or None
    """
    root = Path(project_root) if project_root else Path.cwd()
    name = selected_environment()

    if name:
        env_file = root / "config" / "env" / f".env.{name}"
        if not env_file.exists():
            raise ConfigurationError(
                f"Environment file not found for ENV={name}: {env_file}",
                violations=[f"missing environment file {env_file}"],
                env_file=str(env_file),
            )
        load_dotenv(env_file, override=True)
        return env_file

    default_file = root / ".env"
    if default_file.exists():
        load_dotenv(default_file, override=False)
        return default_file

    return None


@dataclass(frozen=True)
class Config:
    """Read-only harness configuration with environment variable support."""

    # Environment
    environment: str = field(default="qa")
    base_url: Optional[str] = field(default=None)
    ci_mode: bool = field(default=False)

    # Timeouts in milliseconds
    timeout_default: int = field(default=30000)
    timeout_short: int = field(default=10000)
    timeout_long: int = field(default=60000)

    # Browser settings
    retries: int = field(default=0)
    headless: bool = field(default=True)
    slow_mo: int = field(default=0)
    viewport_width: int = field(default=1280)
    viewport_height: int = field(default=720)
    browser_name: str = field(default="chromium")

    # Logging configuration
    log_level: str = field(default="INFO")
    log_format: str = field(default="text")
    log_to_console: bool = field(default=False)
    log_retention_days: int = field(default=7)

    # Directory paths
    project_root: Path = field(default_factory=lambda: Path.cwd())
    logs_dir: Optional[Path] = field(default=None)
    reports_dir: Optional[Path] = field(default=None)
    screenshots_dir: Optional[Path] = field(default=None)
    allure_results_dir: Optional[Path] = field(default=None)
    allure_report_dir: Optional[Path] = field(default=None)
    test_results_dir: Optional[Path] = field(default=None)
    playwright_report_dir: Optional[Path] = field(default=None)

    def __post_init__(self):
        """Normalize values and derive directory paths from the project root."""
        root = Path(self.project_root)
        self._set("project_root", root)

        defaults = {
            "logs_dir": LOGS_DIR,
            "reports_dir": REPORTS_DIR,
            "screenshots_dir": SCREENSHOTS_DIR,
            "allure_results_dir": ALLURE_RESULTS_DIR,
            "allure_report_dir": ALLURE_REPORT_DIR,
            "test_results_dir": TEST_RESULTS_DIR,
            "playwright_report_dir": PLAYWRIGHT_REPORT_DIR,
        }
        for attr, relative in defaults.items():
            value = getattr(self, attr)
            self._set(attr, Path(value) if value is not None else root / relative)

        level = self.log_level.upper()
        if level == "WARN":
            level = "WARNING"
        self._set("log_level", level if level in VALID_LOG_LEVELS else "INFO")

        # CI runs are headless with machine-readable logs
        if self.ci_mode:
            self._set("headless", True)
            if self.log_format == "text":
                self._set("log_format", "json")

        if self.log_format not in VALID_LOG_FORMATS:
            self._set("log_format", "text")

        if self.base_url is not None:
            self._set("base_url", self.base_url.strip() or None)

    def _set(self, name: str, value: Any) -> None:
        object.__setattr__(self, name, value)

    @property
    def viewport(self) -> Dict[str, int]:
        """Viewport size in the shape the driver expects."""
        return {"width": self.viewport_width, "height": self.viewport_height}

    @property
    def timeouts(self) -> Dict[str, int]:
        """Timeout tiers in milliseconds."""
        return {
            "default": self.timeout_default,
            "short": self.timeout_short,
            "long": self.timeout_long,
        }

    @property
    def debug_enabled(self) -> bool:
        """Check if debug logging is enabled."""
        return self.log_level == "DEBUG"

    def get_log_file_path(self) -> Path:
        """Get the main log file path."""
        return self.logs_dir / "app.log"

    def output_directories(self) -> Dict[str, Path]:
        """Directories global setup must create."""
        return {
            "reports": self.reports_dir,
            "screenshots": self.screenshots_dir,
            "allure_results": self.allure_results_dir,
            "allure_report": self.allure_report_dir,
            "logs": self.logs_dir,
        }

    def transient_directories(self) -> Dict[str, Path]:
        """Directories global teardown removes."""
        return {
            "test_results": self.test_results_dir,
            "playwright_report": self.playwright_report_dir,
            "allure_results": self.allure_results_dir,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for logging and reporting."""
        return {
            "environment": self.environment,
            "base_url": self.base_url,
            "ci_mode": self.ci_mode,
            "timeouts": self.timeouts,
            "retries": self.retries,
            "headless": self.headless,
            "slow_mo": self.slow_mo,
            "viewport": self.viewport,
            "browser_name": self.browser_name,
            "log_level": self.log_level,
            "log_format": self.log_format,
            "log_retention_days": self.log_retention_days,
            "project_root": str(self.project_root),
            "logs_dir": str(self.logs_dir),
            "reports_dir": str(self.reports_dir),
            "screenshots_dir": str(self.screenshots_dir),
            "allure_results_dir": str(self.allure_results_dir),
            "allure_report_dir": str(self.allure_report_dir),
        }

    @classmethod
    def from_env(
        cls,
        project_root: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> "Config":
        """Create configuration from environment variables."""
        env = os.environ if env is None else env
        ci = _as_bool(env.get("CI"), False)

        return cls(
            environment=env.get("TEST_ENV") or selected_environment(env) or "qa",
            base_url=env.get("BASE_URL"),
            ci_mode=ci,
            timeout_default=_as_int(env, "TIMEOUTS_DEFAULT", 30000),
            timeout_short=_as_int(env, "TIMEOUTS_SHORT", 10000),
            timeout_long=_as_int(env, "TIMEOUTS_LONG", 60000),
            retries=_as_int(env, "RETRIES", 0),
            headless=_as_bool(env.get("HEADLESS"), True),
            slow_mo=_as_int(env, "SLOWMO", 0),
            viewport_width=_as_int(env, "VIEWPORT_WIDTH", 1280),
            viewport_height=_as_int(env, "VIEWPORT_HEIGHT", 720),
            browser_name=(env.get("BROWSER") or "chromium").strip().lower(),
            log_level=env.get("HARNESS_LOG_LEVEL", "INFO"),
            log_format=(env.get("HARNESS_LOG_FORMAT") or "text").strip().lower(),
            log_to_console=_as_bool(env.get("HARNESS_LOG_CONSOLE"), False),
            log_retention_days=_as_int(env, "HARNESS_LOG_RETENTION_DAYS", 7),
            project_root=Path(project_root) if project_root else Path.cwd(),
        )

    def validate(self) -> None:
        """Validate configuration and raise ConfigurationError if invalid."""
        errors = []

        if not self.base_url:
            errors.append("BASE_URL is required")

        for name, value in self.timeouts.items():
            if value <= 0:
                errors.append(f"Timeout '{name}' must be positive, got {value}")

        if not self.timeout_short <= self.timeout_default <= self.timeout_long:
            errors.append(
                "Timeouts must satisfy short <= default <= long "
                f"({self.timeout_short}/{self.timeout_default}/{self.timeout_long})"
            )

        if self.viewport_width <= 0 or self.viewport_height <= 0:
            errors.append(
                f"Viewport must be positive, got {self.viewport_width}x{self.viewport_height}"
            )

        if self.browser_name not in VALID_BROWSERS:
            errors.append(
                f"Invalid browser: {self.browser_name}. Must be one of {VALID_BROWSERS}"
            )

        if self.retries < 0:
            errors.append(f"Retries must not be negative, got {self.retries}")

        if self.log_retention_days < 1:
            errors.append(
                f"Log retention must be at least one day, got {self.log_retention_days}"
            )

        if errors:
            message = "Configuration validation failed: " + "; ".join(errors)
            raise ConfigurationError(message, violations=errors)


def load_config(project_root: Optional[Path] = None, validate: bool = True) -> Config:
    """
    Load environment files, build the configuration and validate it.

    Args:
        project_root: Directory holding ``config/env`` and the output folders
        validate: Whether to raise on invalid or missing values

    Returns:
        Loaded configuration
    """
    load_environment(project_root)
    config = Config.from_env(project_root=project_root)
    if validate:
        config.validate()
    return config
