"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from logship.config import ShipperConfig, make_logs_client


class TestShipperConfig:
    def test_defaults(self):
        config = ShipperConfig(api_log_group_name="/a", error_log_group_name="/e")

        assert config.stream_prefix == "api-logs"
        assert config.region == "ap-southeast-2"
        assert config.max_attempts == 1
        assert "/health" in config.exclude_paths
        assert "password" in config.sensitive_fields

    def test_group_names_required(self):
        with pytest.raises(ValidationError):
            ShipperConfig(api_log_group_name="  ", error_log_group_name="/e")

    def test_blank_prefix_falls_back(self):
        config = ShipperConfig(api_log_group_name="/a", error_log_group_name="/e", stream_prefix="")

        assert config.stream_prefix == "api-logs"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("CLOUDWATCH_API_LOG_GROUP", "/prod/api")
        monkeypatch.setenv("CLOUDWATCH_ERROR_LOG_GROUP", "/prod/errors")
        monkeypatch.setenv("CLOUDWATCH_STREAM_PREFIX", "svc")
        monkeypatch.setenv("AWS_REGION", "us-west-2")
        monkeypatch.setenv("CLOUDWATCH_READ_TIMEOUT", "2.5")
        monkeypatch.setenv("LOG_EXCLUDE_PATHS", "/health, /metrics")
        monkeypatch.setenv("LOG_SENSITIVE_FIELDS", "password, ssn")

        config = ShipperConfig.from_env()

        assert config.api_log_group_name == "/prod/api"
        assert config.error_log_group_name == "/prod/errors"
        assert config.stream_prefix == "svc"
        assert config.region == "us-west-2"
        assert config.read_timeout == 2.5
        assert config.exclude_paths == ["/health", "/metrics"]
        assert config.sensitive_fields == ["password", "ssn"]

    def test_from_env_missing_groups(self, monkeypatch):
        monkeypatch.delenv("CLOUDWATCH_API_LOG_GROUP", raising=False)
        monkeypatch.delenv("CLOUDWATCH_ERROR_LOG_GROUP", raising=False)

        with pytest.raises(ValidationError):
            ShipperConfig.from_env()

    def test_credentials_need_both_keys(self):
        config = ShipperConfig(api_log_group_name="/a", error_log_group_name="/e", aws_access_key_id="AKIA")

        assert config.credentials() == {}

    def test_client_uses_region_and_timeouts(self):
        config = ShipperConfig(
            api_log_group_name="/a",
            error_log_group_name="/e",
            region="eu-central-1",
            aws_access_key_id="testing",
            aws_secret_access_key="testing",
            read_timeout=7,
        )

        client = make_logs_client(config)

        assert client.meta.region_name == "eu-central-1"
        assert client.meta.config.read_timeout == 7
