"""Configuration management for the ClusterAddon controller.

This module handles configuration loading from environment variables and .env files.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from clusteraddon.utils.errors import ConfigurationError

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got '{value}'") from e


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got '{value}'") from e


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass
class ControllerConfig:
    """ClusterAddon controller configuration.

    Loads configuration from environment variables, falling back to the
    defaults below.
    """

    # Ledger record
    ledger_name: str = "kcm-addons"
    ledger_namespace: str = "kcm-system"
    ledger_retry_attempts: int = 5

    # Server-side apply identity
    field_manager: str = "cluster-addon-controller"

    # Requeue intervals (seconds)
    failure_requeue_seconds: float = 30.0
    success_requeue_seconds: float = 300.0

    # Network
    fetch_timeout: float = 60.0
    pass_timeout: float = 600.0
    github_token: str | None = None
    version_cache_ttl: float = 300.0

    # Runtime
    workers: int = 2
    drift_reapply: bool = False
    log_level: str = "info"

    def __post_init__(self):
        """Load configuration from environment variables after initialization."""
        # Load .env file if present
        load_dotenv()

        self.ledger_name = os.getenv("CLUSTERADDON_LEDGER_NAME", self.ledger_name)
        self.ledger_namespace = os.getenv("CLUSTERADDON_LEDGER_NAMESPACE", self.ledger_namespace)
        self.ledger_retry_attempts = _env_int(
            "CLUSTERADDON_LEDGER_RETRY_ATTEMPTS", self.ledger_retry_attempts
        )

        self.field_manager = os.getenv("CLUSTERADDON_FIELD_MANAGER", self.field_manager)

        self.failure_requeue_seconds = _env_float(
            "CLUSTERADDON_FAILURE_REQUEUE_SECONDS", self.failure_requeue_seconds
        )
        self.success_requeue_seconds = _env_float(
            "CLUSTERADDON_SUCCESS_REQUEUE_SECONDS", self.success_requeue_seconds
        )

        self.fetch_timeout = _env_float("CLUSTERADDON_FETCH_TIMEOUT", self.fetch_timeout)
        self.pass_timeout = _env_float("CLUSTERADDON_PASS_TIMEOUT", self.pass_timeout)
        self.github_token = os.getenv("GITHUB_TOKEN", self.github_token)
        self.version_cache_ttl = _env_float(
            "CLUSTERADDON_VERSION_CACHE_TTL", self.version_cache_ttl
        )

        self.workers = _env_int("CLUSTERADDON_WORKERS", self.workers)
        self.drift_reapply = _env_bool("CLUSTERADDON_DRIFT_REAPPLY", self.drift_reapply)
        self.log_level = os.getenv("LOG_LEVEL", self.log_level).lower()

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ConfigurationError: If a value is missing or out of range.
        """
        if not self.ledger_name:
            raise ConfigurationError(
                "Ledger name cannot be empty. Set CLUSTERADDON_LEDGER_NAME environment variable."
            )
        if not self.ledger_namespace:
            raise ConfigurationError(
                "Ledger namespace cannot be empty. "
                "Set CLUSTERADDON_LEDGER_NAMESPACE environment variable."
            )
        if not self.field_manager:
            raise ConfigurationError(
                "Field manager cannot be empty. "
                "Set CLUSTERADDON_FIELD_MANAGER environment variable."
            )

        positive = {
            "ledger_retry_attempts": self.ledger_retry_attempts,
            "failure_requeue_seconds": self.failure_requeue_seconds,
            "success_requeue_seconds": self.success_requeue_seconds,
            "fetch_timeout": self.fetch_timeout,
            "pass_timeout": self.pass_timeout,
            "workers": self.workers,
        }
        for field_name, value in positive.items():
            if value <= 0:
                raise ConfigurationError(f"{field_name} must be positive, got {value}")

        if self.version_cache_ttl < 0:
            raise ConfigurationError(
                f"version_cache_ttl cannot be negative, got {self.version_cache_ttl}"
            )
