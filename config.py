"""Configuration management for the AI obituaries discovery pipeline.

This module provides centralized configuration for all pipeline components.
All settings are loaded from environment variables with sensible defaults.
Missing credentials never fail at startup: the matching capability simply
reports itself as unconfigured and contributes empty results.

Environment Variables:
    Trigger:
        CRON_SECRET: Shared secret required as a bearer token on POST
        REQUIRE_CRON_SECRET: Treat an empty CRON_SECRET as a config error

    Search (discovery):
        EXA_API_KEY: Exa search API key
        EXA_BASE_URL: Exa API base URL
        SEARCH_RESULTS: Max results per source query

    Classification:
        ANTHROPIC_API_KEY: Anthropic API key used by the classifier agent
        CLASSIFIER_MODEL: Model for claim classification (provider:model)

    Persistence:
        STORE_BACKEND: 'sanity' (default) or 'sqlite' for local runs
        SANITY_PROJECT_ID: Sanity project (falls back to NEXT_PUBLIC_SANITY_PROJECT_ID)
        SANITY_DATASET: Sanity dataset (falls back to NEXT_PUBLIC_SANITY_DATASET)
        SANITY_WRITE_TOKEN: Sanity token with write access
        SANITY_API_VERSION: Sanity HTTP API version
        DB_PATH: SQLite database file path (sqlite backend)

    Pipeline Behavior:
        DISCOVERY_WINDOW_HOURS: How far back each run searches (default: 24)
        MAX_WORKERS: Maximum concurrent classification calls
        MAX_RETRIES: Per-call retry attempts for search and classification
        RETRY_BASE_DELAY: Base delay for exponential backoff (seconds)
        REQUEST_TIMEOUT: Timeout for a single HTTP request (seconds)

    Server:
        HOST: Bind address for the HTTP trigger
        PORT: Bind port for the HTTP trigger

    Optional Features:
        ENABLE_LOGFIRE: Enable Logfire/OpenTelemetry tracing

    Logging:
        LOG_LEVEL: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_BACKUP_COUNT: Number of rotated log files to keep
        LOG_MAX_BYTES: Max log file size in bytes (0 = time-based rotation)
        LOG_FORMAT: Log format ('text' or 'json' for structured logging)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

# Project ids that ship in example env files and must not count as configured
PLACEHOLDER_PROJECT_IDS = frozenset({"placeholder", "your_project_id"})


def _env(key: str, default: str = "", fallback: str | None = None) -> str:
    """Get string environment variable with optional default.

    Args:
        key: Environment variable name
        default: Value to return if not set
        fallback: Secondary variable name consulted when key is unset

    Returns:
        Environment variable value or default
    """
    value = os.environ.get(key)
    if not value and fallback:
        value = os.environ.get(fallback)
    return value or default


def _env_int(key: str, default: int) -> int:
    """Get integer environment variable with default.

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

    # === Trigger Authentication ===
    cron_secret: str = ""  # CRON_SECRET - bearer secret for POST /api/discover
    require_cron_secret: bool = False  # REQUIRE_CRON_SECRET - refuse to run without one

    # === Search ===
    exa_api_key: str = ""  # EXA_API_KEY
    exa_base_url: str = "https://api.exa.ai"  # EXA_BASE_URL
    search_results: int = 50  # SEARCH_RESULTS - per source query

    # === Classification ===
    anthropic_api_key: str = ""  # ANTHROPIC_API_KEY
    # PydanticAI format: provider:model
    classifier_model: str = "anthropic:claude-haiku-4-5"

    # === Persistence ===
    store_backend: str = "sanity"  # STORE_BACKEND - 'sanity' or 'sqlite'
    sanity_project_id: str = ""  # SANITY_PROJECT_ID
    sanity_dataset: str = "production"  # SANITY_DATASET
    sanity_write_token: str = ""  # SANITY_WRITE_TOKEN
    sanity_api_version: str = "2024-01-01"  # SANITY_API_VERSION
    db_path: Path = field(default_factory=lambda: Path("obituaries.db"))  # DB_PATH

    # === Pipeline Behavior ===
    discovery_window_hours: int = 24  # DISCOVERY_WINDOW_HOURS
    max_workers: int = 4  # MAX_WORKERS - concurrent classification calls

    # === Retry Behavior ===
    max_retries: int = 3  # MAX_RETRIES - API call retry attempts
    retry_base_delay: float = 1.0  # RETRY_BASE_DELAY - Base delay for exponential backoff
    request_timeout: int = 30  # REQUEST_TIMEOUT - seconds per HTTP request

    # === Server ===
    host: str = "0.0.0.0"  # HOST
    port: int = 8080  # PORT

    # === Output Directories ===
    log_dir: Path = field(default_factory=lambda: Path("log"))  # LOG_DIR

    # === Logging Configuration ===
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
            cron_secret=_env("CRON_SECRET"),
            require_cron_secret=_env_bool("REQUIRE_CRON_SECRET", False),
            exa_api_key=_env("EXA_API_KEY"),
            exa_base_url=_env("EXA_BASE_URL", "https://api.exa.ai").rstrip("/"),
            search_results=_env_int("SEARCH_RESULTS", 50),
            anthropic_api_key=_env("ANTHROPIC_API_KEY"),
            classifier_model=_env("CLASSIFIER_MODEL", "anthropic:claude-haiku-4-5"),
            store_backend=_env("STORE_BACKEND", "sanity").lower(),
            sanity_project_id=_env("SANITY_PROJECT_ID", fallback="NEXT_PUBLIC_SANITY_PROJECT_ID"),
            sanity_dataset=_env("SANITY_DATASET", "production", fallback="NEXT_PUBLIC_SANITY_DATASET"),
            sanity_write_token=_env("SANITY_WRITE_TOKEN"),
            sanity_api_version=_env("SANITY_API_VERSION", "2024-01-01"),
            db_path=Path(_env("DB_PATH", "obituaries.db")),
            discovery_window_hours=_env_int("DISCOVERY_WINDOW_HOURS", 24),
            max_workers=_env_int("MAX_WORKERS", 4),
            max_retries=_env_int("MAX_RETRIES", 3),
            retry_base_delay=_env_float("RETRY_BASE_DELAY", 1.0),
            request_timeout=_env_int("REQUEST_TIMEOUT", 30),
            host=_env("HOST", "0.0.0.0"),
            port=_env_int("PORT", 8080),
            log_dir=Path(_env("LOG_DIR", "log")),
            enable_logfire=_env_bool("ENABLE_LOGFIRE", False),
            logfire_token=_env("LOGFIRE_TOKEN"),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            log_backup_count=_env_int("LOG_BACKUP_COUNT", 30),
            log_max_bytes=_env_int("LOG_MAX_BYTES", 0),
            log_format=_env("LOG_FORMAT", "text").lower(),
        )

    @property
    def search_configured(self) -> bool:
        """Whether the search capability has credentials."""
        return bool(self.exa_api_key)

    @property
    def classification_configured(self) -> bool:
        """Whether the classification capability has credentials."""
        return bool(self.anthropic_api_key)

    @property
    def sanity_configured(self) -> bool:
        """Whether Sanity has a real project id and a write token."""
        return bool(
            self.sanity_project_id
            and self.sanity_write_token
            and self.sanity_project_id not in PLACEHOLDER_PROJECT_IDS
        )

    @property
    def persistence_configured(self) -> bool:
        """Whether the selected content store can accept writes."""
        if self.store_backend == "sqlite":
            return True
        return self.sanity_configured

    def validate(self) -> str | None:
        """Validate configuration values.

        Credentials are deliberately not required here; an absent credential
        degrades its capability instead of blocking the run.

        Returns:
            Error message string if invalid, None if valid.
        """
        if self.require_cron_secret and not self.cron_secret:
            return "CRON_SECRET is required when REQUIRE_CRON_SECRET is enabled"
        if self.store_backend not in ("sanity", "sqlite"):
            return f"Invalid STORE_BACKEND '{self.store_backend}' - must be 'sanity' or 'sqlite'"
        if self.discovery_window_hours <= 0:
            return "DISCOVERY_WINDOW_HOURS must be positive"
        if self.search_results <= 0:
            return "SEARCH_RESULTS must be positive"
        if self.max_workers <= 0:
            return "MAX_WORKERS must be positive"
        if self.max_retries < 0:
            return "MAX_RETRIES must be non-negative"
        if self.retry_base_delay < 0:
            return "RETRY_BASE_DELAY must be non-negative"
        if self.request_timeout <= 0:
            return "REQUEST_TIMEOUT must be positive"
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return f"Invalid LOG_LEVEL '{self.log_level}' - must be DEBUG, INFO, WARNING, ERROR, or CRITICAL"
        if self.log_format not in ("text", "json"):
            return f"Invalid LOG_FORMAT '{self.log_format}' - must be 'text' or 'json'"
        if self.log_backup_count < 0:
            return "LOG_BACKUP_COUNT must be non-negative"
        if self.log_max_bytes < 0:
            return "LOG_MAX_BYTES must be non-negative"
        return None
