"""Test Settings loading from TOML, env vars and overrides."""

import pytest

from cloudwire.core.config import Settings, load_settings
from cloudwire.core.errors import ConfigError


class TestSettingsDefaults:
    def test_default_settings(self):
        settings = Settings()
        assert settings.region == "us-east-1"
        assert settings.endpoint_url is None
        assert settings.model_paths == []

    def test_retry_defaults(self):
        settings = Settings()
        assert settings.retry.max_attempts == 4
        assert settings.retry.base_backoff == 0.5
        assert settings.retry.max_backoff == 20.0

    def test_http_defaults(self):
        settings = Settings()
        assert settings.http.timeout == 60.0
        assert settings.http.connect_timeout == 10.0
        assert settings.http.verify_ssl is True


class TestEnvironment:
    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("CLOUDWIRE_REGION", "eu-west-1")
        assert Settings().region == "eu-west-1"

    def test_nested_delimiter(self, monkeypatch):
        monkeypatch.setenv("CLOUDWIRE_RETRY__MAX_ATTEMPTS", "7")
        monkeypatch.setenv("CLOUDWIRE_OBSERVABILITY__LOG_FORMAT", "json")
        settings = Settings()
        assert settings.retry.max_attempts == 7
        assert settings.observability.log_format == "json"


class TestLoadSettings:
    def test_toml_file(self, tmp_path):
        path = tmp_path / "cloudwire.toml"
        path.write_text(
            'region = "ap-southeast-2"\n'
            "\n"
            "[retry]\n"
            "max_attempts = 2\n"
            "\n"
            "[http]\n"
            "timeout = 5.0\n"
        )
        settings = load_settings(path)
        assert settings.region == "ap-southeast-2"
        assert settings.retry.max_attempts == 2
        assert settings.http.timeout == 5.0

    def test_overrides_beat_file(self, tmp_path):
        path = tmp_path / "cloudwire.toml"
        path.write_text('region = "ap-southeast-2"\n')
        settings = load_settings(path, overrides={"region": "us-west-2"})
        assert settings.region == "us-west-2"

    def test_missing_file_is_ignored(self, tmp_path):
        settings = load_settings(tmp_path / "absent.toml")
        assert settings.region == "us-east-1"

    def test_invalid_region(self):
        with pytest.raises(ConfigError, match="region"):
            load_settings(overrides={"region": "us east 1"})

    def test_endpoint_url_skips_region_check(self):
        settings = load_settings(
            overrides={"region": "", "endpoint_url": "http://localhost:4566"}
        )
        assert settings.endpoint_url == "http://localhost:4566"

    def test_retry_bounds(self):
        with pytest.raises(ValueError):
            Settings(retry={"max_attempts": 0})

    def test_cloudwire_table(self, tmp_path):
        path = tmp_path / "project.toml"
        path.write_text(
            "[tool]\n"
            'name = "other"\n'
            "\n"
            "[cloudwire]\n"
            'region = "eu-central-1"\n'
            "\n"
            "[cloudwire.retry]\n"
            "max_attempts = 5\n"
        )
        settings = load_settings(path)
        assert settings.region == "eu-central-1"
        assert settings.retry.max_attempts == 5

    def test_config_file_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "cloudwire.toml"
        path.write_text('region = "sa-east-1"\n')
        monkeypatch.setenv("CLOUDWIRE_CONFIG_FILE", str(path))
        assert load_settings().region == "sa-east-1"

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "cloudwire.toml"
        path.write_text("region = \n")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_settings(path)

    def test_none_overrides_ignored(self, tmp_path):
        path = tmp_path / "cloudwire.toml"
        path.write_text('region = "ap-south-1"\n')
        settings = load_settings(path, overrides={"region": None})
        assert settings.region == "ap-south-1"
