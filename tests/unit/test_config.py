"""Unit tests for configuration management."""

import os
from unittest.mock import patch

import pytest

from clusteraddon.config import ControllerConfig
from clusteraddon.utils.errors import ConfigurationError


class TestControllerConfig:
    """Test ControllerConfig class."""

    def test_default_configuration(self):
        """Test default configuration values."""
        config = ControllerConfig()

        assert config.ledger_name == "kcm-addons"
        assert config.ledger_namespace == "kcm-system"
        assert config.ledger_retry_attempts == 5
        assert config.field_manager == "cluster-addon-controller"
        assert config.failure_requeue_seconds == 30.0
        assert config.success_requeue_seconds == 300.0
        assert config.workers == 2
        assert config.drift_reapply is False
        assert config.github_token is None
        assert config.log_level == "info"

    def test_environment_variable_loading(self):
        """Test loading configuration from environment."""
        env = {
            "CLUSTERADDON_LEDGER_NAME": "addons-ledger",
            "CLUSTERADDON_LEDGER_NAMESPACE": "addons-system",
            "CLUSTERADDON_LEDGER_RETRY_ATTEMPTS": "3",
            "CLUSTERADDON_FIELD_MANAGER": "my-manager",
            "CLUSTERADDON_FAILURE_REQUEUE_SECONDS": "10",
            "CLUSTERADDON_SUCCESS_REQUEUE_SECONDS": "60.5",
            "CLUSTERADDON_WORKERS": "4",
            "CLUSTERADDON_DRIFT_REAPPLY": "true",
            "GITHUB_TOKEN": "ghp_test",
            "LOG_LEVEL": "DEBUG",
        }

        with patch.dict(os.environ, env, clear=True):
            config = ControllerConfig()

        assert config.ledger_name == "addons-ledger"
        assert config.ledger_namespace == "addons-system"
        assert config.ledger_retry_attempts == 3
        assert config.field_manager == "my-manager"
        assert config.failure_requeue_seconds == 10.0
        assert config.success_requeue_seconds == 60.5
        assert config.workers == 4
        assert config.drift_reapply is True
        assert config.github_token == "ghp_test"
        assert config.log_level == "debug"

    @pytest.mark.parametrize("value", ["0", "false", "no", "off", "anything"])
    def test_drift_reapply_false_values(self, value):
        """Test non-true strings disable drift re-apply."""
        with patch.dict(os.environ, {"CLUSTERADDON_DRIFT_REAPPLY": value}, clear=True):
            assert ControllerConfig().drift_reapply is False

    def test_invalid_integer(self):
        """Test non-numeric integer settings are rejected."""
        with patch.dict(os.environ, {"CLUSTERADDON_WORKERS": "many"}, clear=True):
            with pytest.raises(ConfigurationError, match="CLUSTERADDON_WORKERS must be an integer"):
                ControllerConfig()

    def test_invalid_number(self):
        """Test non-numeric float settings are rejected."""
        with patch.dict(os.environ, {"CLUSTERADDON_FETCH_TIMEOUT": "soon"}, clear=True):
            with pytest.raises(ConfigurationError, match="must be a number"):
                ControllerConfig()

    def test_validation_success(self):
        """Test validation passes with defaults."""
        ControllerConfig().validate()

    def test_validation_empty_ledger_name(self):
        """Test validation rejects an empty ledger name."""
        config = ControllerConfig()
        config.ledger_name = ""
        with pytest.raises(ConfigurationError, match="Ledger name cannot be empty"):
            config.validate()

    def test_validation_empty_field_manager(self):
        """Test validation rejects an empty field manager."""
        config = ControllerConfig()
        config.field_manager = ""
        with pytest.raises(ConfigurationError, match="Field manager cannot be empty"):
            config.validate()

    def test_validation_non_positive_values(self):
        """Test validation rejects non-positive intervals and counts."""
        with patch.dict(os.environ, {"CLUSTERADDON_LEDGER_RETRY_ATTEMPTS": "0"}, clear=True):
            config = ControllerConfig()
        with pytest.raises(ConfigurationError, match="ledger_retry_attempts must be positive"):
            config.validate()

    def test_load_dotenv_called(self):
        """Test .env files are loaded on construction."""
        with patch("clusteraddon.config.load_dotenv") as mock_load:
            ControllerConfig()
        mock_load.assert_called_once()
