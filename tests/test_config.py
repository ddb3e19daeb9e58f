"""Test configuration management."""

from pathlib import Path

import pytest
from unittest.mock import patch

from consulweb.client.config import ClientConfig, get_config, load_dotenv_for_client


class TestConfiguration:
    """Test configuration loading and management."""

    def test_default_config_values(self):
        """Test default configuration values."""
        config = ClientConfig()
        assert config.base_url == "http://127.0.0.1:8500"
        assert config.max_connections is None
        assert config.environment == "production"

    def test_config_from_environment(self):
        """Test configuration loading from environment variables."""
        env_vars = {
            "CONSUL_HTTP_ADDR": "consul.service:8500",
            "CONSUL_HTTP_MAX_CONNECTIONS": "6",
            "CONSUL_HTTP_TIMEOUT": "12.5",
            "CONSUL_TOKEN_FILE": "/tmp/consul-token.json",
            "MODE": "Development",
        }

        with patch.dict("os.environ", env_vars, clear=True):
            config = ClientConfig.from_environment()

            assert config.base_url == "http://consul.service:8500"
            assert config.max_connections == 6
            assert config.timeout == 12.5
            assert config.token_path == Path("/tmp/consul-token.json")
            assert config.environment == "development"

    def test_unset_or_invalid_limits_are_unbounded(self):
        with patch.dict("os.environ", {"CONSUL_HTTP_MAX_CONNECTIONS": "lots"}, clear=True):
            assert ClientConfig.from_environment().max_connections is None
        with patch.dict("os.environ", {}, clear=True):
            assert ClientConfig.from_environment().max_connections is None

    def test_non_positive_limit_is_rejected(self):
        with patch.dict("os.environ", {"CONSUL_HTTP_MAX_CONNECTIONS": "0"}, clear=True):
            with pytest.raises(Exception):  # Pydantic will raise validation error
                ClientConfig.from_environment()

    def test_config_immutability(self):
        """Test that config is immutable."""
        config = ClientConfig()

        with pytest.raises(Exception):  # Pydantic will raise validation error
            config.max_connections = 4

    def test_get_config_caches(self):
        with patch.dict("os.environ", {"CONSUL_HTTP_MAX_CONNECTIONS": "3"}, clear=True):
            config = get_config(reload=True)
            assert get_config() is config
            assert config.max_connections == 3
        get_config(reload=True)

    def test_load_dotenv_falls_back_to_default_file(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("CONSUL_HTTP_MAX_CONNECTIONS=9\n")
        monkeypatch.chdir(tmp_path)

        with patch.dict("os.environ", {"MODE": "production"}, clear=True):
            load_dotenv_for_client()
            assert ClientConfig.from_environment().max_connections == 9

    def test_load_dotenv_prefers_mode_file(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("CONSUL_HTTP_MAX_CONNECTIONS=9\n")
        (tmp_path / ".env.development").write_text("CONSUL_HTTP_MAX_CONNECTIONS=2\n")
        monkeypatch.chdir(tmp_path)

        with patch.dict("os.environ", {"MODE": "Development"}, clear=True):
            load_dotenv_for_client()
            assert ClientConfig.from_environment().max_connections == 2

    def test_load_dotenv_defaults_to_production_mode(self, tmp_path, monkeypatch):
        (tmp_path / ".env.production").write_text("CONSUL_HTTP_ADDR=consul.prod:8500\n")
        monkeypatch.chdir(tmp_path)

        with patch.dict("os.environ", {}, clear=True):
            load_dotenv_for_client()
            assert ClientConfig.from_environment().base_url == "http://consul.prod:8500"
