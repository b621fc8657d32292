"""Configuration management for the Chronicle pipeline.

This module provides centralized configuration for all pipeline components.
All settings are loaded from environment variables with sensible defaults.

Environment Variables:
    Sources:
        MEMORY_DIR: Directory of dated daily logs for the activity feed
        PROGRESS_DIR: Directory of local progress report files
        TRACKED_PROJECTS: Comma-separated GitHub URLs or owner/repo pairs
        PROGRESS_REMOTE_DIR: Directory holding progress reports in each repo
        GITHUB_TOKEN: Token for private repositories (optional)
        GITHUB_API_URL: API base URL (GitHub Enterprise)

    Activity Feed:
        ACTIVITY_MAX_AGE_DAYS: Recency window for log documents (default: 7)
        ACTIVITY_LIMIT: Maximum entries in the feed (default: 50)
        ACTIVITY_UTC_OFFSET_HOURS: Fixed offset for log times (default: -5)

    Fetching:
        REQUEST_TIMEOUT_SECONDS: Per-request timeout for remote fetches
        MAX_WORKERS: Maximum concurrent connections

    Output:
        OUTPUT_DIR: Directory for generated markdown documents
        INDEX_FILE: Path for JSONL index of generated documents
        NOTIFICATION_WEBHOOK_URL: HTTP endpoint receiving generated documents

    Optional Features:
        ENABLE_LOGFIRE: Enable Logfire/OpenTelemetry tracing

    Logging:
        LOG_DIR: Directory for log files
        LOG_LEVEL: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_BACKUP_COUNT: Number of rotated log files to keep
        LOG_MAX_BYTES: Max log file size in bytes (0 = time-based rotation)
        LOG_FORMAT: Log format ('text' or 'json' for structured logging)
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta, timezone
from pathlib import Path


def _env(key: str, default: str = "") -> str:
    """Get string environment variable with optional default.

    Args:
        key: Environment variable name
        default: Value to return if not set

    Returns:
        Environment variable value or default
    """
    return os.environ.get(key, default)


def _env_int(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name
        default: Value to return if not set

    Returns:
        Parsed integer or default value

    Raises:
        ValueError: If value is set but cannot be parsed as integer
    """
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"Invalid integer value for {key}: '{val}'")


def _env_float(key: str, default: float) -> float:
    """Get float environment variable with default.

    Raises:
        ValueError: If value is set but cannot be parsed as float
    """
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"Invalid float value for {key}: '{val}'")


def _env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable with default.

    Recognizes truthy values: '1', 'true', 'yes', 'on'
    Recognizes falsy values: '0', 'false', 'no', 'off'
    """
    val = os.environ.get(key, "").lower()
    if val in ("1", "true", "yes", "on"):
        return True
    if val in ("0", "false", "no", "off"):
        return False
    return default


def _env_list(key: str) -> list[str]:
    """Get a comma-separated environment variable as a list of non-empty items."""
    return [item.strip() for item in os.environ.get(key, "").split(",") if item.strip()]


@dataclass
class Config:
    """Application configuration loaded from environment variables.

    All settings can be overridden via environment variables. Use Config.load()
    to create an instance with values from the environment.

    Example:
        >>> config = Config.load()
        >>> if error := config.validate():
        ...     print(f"Config error: {error}")
    """

    # === Sources ===
    memory_dir: Path = field(default_factory=lambda: Path("memory"))  # MEMORY_DIR
    progress_dir: Path = field(default_factory=lambda: Path("progress"))  # PROGRESS_DIR
    tracked_projects: list[str] = field(default_factory=list)  # TRACKED_PROJECTS
    progress_remote_dir: str = "progress"  # PROGRESS_REMOTE_DIR - Folder inside each repo
    github_token: str = ""  # GITHUB_TOKEN - Never logged
    github_api_url: str = "https://api.github.com"  # GITHUB_API_URL

    # === Activity Feed ===
    activity_max_age_days: int = 7  # ACTIVITY_MAX_AGE_DAYS - Recency window
    activity_limit: int = 50  # ACTIVITY_LIMIT - Max entries returned
    activity_utc_offset_hours: float = -5.0  # ACTIVITY_UTC_OFFSET_HOURS - Fixed, no DST

    # === Fetching ===
    request_timeout_seconds: int = 30  # REQUEST_TIMEOUT_SECONDS
    max_workers: int = 8  # MAX_WORKERS - Concurrent connections

    # === Output ===
    output_dir: Path = field(default_factory=lambda: Path("generated"))  # OUTPUT_DIR
    index_file: str = ""  # INDEX_FILE - JSONL index of generated documents
    webhook_url: str = ""  # NOTIFICATION_WEBHOOK_URL

    # === Logging Configuration ===
    log_dir: Path = field(default_factory=lambda: Path("log"))  # LOG_DIR
    log_level: str = "INFO"  # LOG_LEVEL - DEBUG, INFO, WARNING, ERROR
    log_backup_count: int = 30  # LOG_BACKUP_COUNT - Number of rotated logs to keep
    log_max_bytes: int = 0  # LOG_MAX_BYTES - Max file size (0 = time-based rotation)
    log_format: str = "text"  # LOG_FORMAT - 'text' or 'json' for structured logging

    # === Optional: Observability ===
    # Requires: pip install logfire
    enable_logfire: bool = False  # ENABLE_LOGFIRE - Enable distributed tracing
    logfire_token: str = ""  # LOGFIRE_TOKEN - Authentication token

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            memory_dir=Path(_env("MEMORY_DIR", "memory")),
            progress_dir=Path(_env("PROGRESS_DIR", "progress")),
            tracked_projects=_env_list("TRACKED_PROJECTS"),
            progress_remote_dir=_env("PROGRESS_REMOTE_DIR", "progress"),
            github_token=_env("GITHUB_TOKEN"),
            github_api_url=_env("GITHUB_API_URL", "https://api.github.com"),
            activity_max_age_days=_env_int("ACTIVITY_MAX_AGE_DAYS", 7),
            activity_limit=_env_int("ACTIVITY_LIMIT", 50),
            activity_utc_offset_hours=_env_float("ACTIVITY_UTC_OFFSET_HOURS", -5.0),
            request_timeout_seconds=_env_int("REQUEST_TIMEOUT_SECONDS", 30),
            max_workers=_env_int("MAX_WORKERS", 8),
            output_dir=Path(_env("OUTPUT_DIR", "generated")),
            index_file=_env("INDEX_FILE"),
            webhook_url=_env("NOTIFICATION_WEBHOOK_URL"),
            log_dir=Path(_env("LOG_DIR", "log")),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            log_backup_count=_env_int("LOG_BACKUP_COUNT", 30),
            log_max_bytes=_env_int("LOG_MAX_BYTES", 0),
            log_format=_env("LOG_FORMAT", "text").lower(),
            enable_logfire=_env_bool("ENABLE_LOGFIRE", False),
            logfire_token=_env("LOGFIRE_TOKEN"),
        )

    @property
    def activity_tz(self) -> timezone:
        """Fixed-offset timezone used to interpret activity log times."""
        return timezone(timedelta(hours=self.activity_utc_offset_hours))

    def validate(self) -> str | None:
        """Validate configuration values.

        Returns:
            Error message string if invalid, None if valid.
        """
        if self.activity_max_age_days <= 0:
            return "ACTIVITY_MAX_AGE_DAYS must be positive"
        if self.activity_limit <= 0:
            return "ACTIVITY_LIMIT must be positive"
        if not -24 < self.activity_utc_offset_hours < 24:
            return "ACTIVITY_UTC_OFFSET_HOURS must be between -24 and 24"
        if self.request_timeout_seconds <= 0:
            return "REQUEST_TIMEOUT_SECONDS must be positive"
        if self.max_workers <= 0:
            return "MAX_WORKERS must be positive"
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return f"Invalid LOG_LEVEL '{self.log_level}' - must be DEBUG, INFO, WARNING, ERROR, or CRITICAL"
        if self.log_format not in ("text", "json"):
            return f"Invalid LOG_FORMAT '{self.log_format}' - must be 'text' or 'json'"
        if self.log_backup_count < 0:
            return "LOG_BACKUP_COUNT must be non-negative"
        if self.log_max_bytes < 0:
            return "LOG_MAX_BYTES must be non-negative"
        return None
