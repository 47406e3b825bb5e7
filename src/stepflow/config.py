"""
Runner configuration for Stepflow.

Settings are read from environment variables with defaults that suit
library use.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _env_level(name: str, default: str) -> int:
    raw = os.getenv(name, default).strip()
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else logging.INFO


@dataclass
class RunnerConfig:
    """Runner and logging settings.

    Environment Variables:
        STEPFLOW_LOG_LEVEL: Minimum log level, name or number (default: INFO)
        STEPFLOW_LOG_JSON: Render logs as JSON (default: false)
        STEPFLOW_VALIDATE_STEPS: Reject non-callable steps up front (default: true)

    Attributes:
        log_level: Level passed to configure_logging()
        log_json: JSON rendering instead of the console renderer
        validate_steps: Check every step is callable before the run starts
    """

    log_level: int = logging.INFO
    log_json: bool = False
    validate_steps: bool = True

    @classmethod
    def from_env(cls) -> RunnerConfig:
        """Load configuration from environment variables with defaults."""
        return cls(
            log_level=_env_level("STEPFLOW_LOG_LEVEL", "INFO"),
            log_json=_env_bool("STEPFLOW_LOG_JSON", "false"),
            validate_steps=_env_bool("STEPFLOW_VALIDATE_STEPS", "true"),
        )


# Singleton for default runner config (loaded lazily)
_default_runner_config: RunnerConfig | None = None


def get_runner_config() -> RunnerConfig:
    """Get the default RunnerConfig, loading from environment on first call."""
    global _default_runner_config
    if _default_runner_config is None:
        _default_runner_config = RunnerConfig.from_env()
    return _default_runner_config


def reset_runner_config() -> None:
    """Reset the runner config singleton. Useful for testing."""
    global _default_runner_config
    _default_runner_config = None
