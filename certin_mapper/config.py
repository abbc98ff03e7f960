"""Configuration for certin-mapper.

Settings are read from environment variables by :func:`load_config`. The CLI
layers its own options on top through ``certin_mapper.cli.main.build_config``.

Environment variables:
- GITHUB_TOKEN: Token for the GitHub REST API. Without it the repository
  signal is skipped entirely.
- EOL_OVERRIDES: Path or http(s) URL of a JSON end-of-life override table.
- HTTP_TIMEOUT: Per-request timeout in seconds (default: 10)
- GITHUB_RETRY_DELAY: Backoff in seconds before the single GitHub retry on
  403/429 (default: 1.2)
- LOG_LEVEL: DEBUG, INFO, WARNING or ERROR (default: INFO)
- SENTRY_DSN: Enables Sentry error reporting when set
"""

import os
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from .exceptions import ConfigurationError

DEFAULT_HTTP_TIMEOUT = 10.0  # seconds
DEFAULT_GITHUB_RETRY_DELAY = 1.2  # seconds
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class Config:
    """Configuration settings for an enrichment run."""

    github_token: Optional[str] = None
    eol_overrides: Optional[str] = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    github_retry_delay: float = DEFAULT_GITHUB_RETRY_DELAY
    log_level: str = "INFO"
    sentry_dsn: Optional[str] = None

    def validate(self) -> None:
        """
        Validate configuration settings.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.http_timeout <= 0:
            raise ConfigurationError(f"HTTP timeout must be positive, got {self.http_timeout}")
        if self.github_retry_delay < 0:
            raise ConfigurationError(f"GitHub retry delay cannot be negative, got {self.github_retry_delay}")

        self.log_level = self.log_level.upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level '{self.log_level}'. Expected one of: {', '.join(VALID_LOG_LEVELS)}"
            )

        if self.eol_overrides and "://" in self.eol_overrides:
            parsed = urlparse(self.eol_overrides)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ConfigurationError("EOL override URL must start with http:// or https:// and include a host")


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got '{raw}'")


def load_config() -> Config:
    """
    Load and validate configuration from environment variables.

    Returns:
        Validated configuration object

    Raises:
        ConfigurationError: If configuration is invalid
    """
    config = Config(
        github_token=os.getenv("GITHUB_TOKEN") or None,
        eol_overrides=os.getenv("EOL_OVERRIDES") or None,
        http_timeout=_float_from_env("HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
        github_retry_delay=_float_from_env("GITHUB_RETRY_DELAY", DEFAULT_GITHUB_RETRY_DELAY),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        sentry_dsn=os.getenv("SENTRY_DSN") or None,
    )
    config.validate()
    return config
