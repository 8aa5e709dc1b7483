"""Tests for configuration module.

Testing approach:
- Use direct constructor arguments instead of mocking
- Use monkeypatch for environment-driven loading
"""

import pytest
from pydantic import ValidationError

from storehub.app.config import (
    DiskConfig,
    DriverConfig,
    LimitsConfig,
    ProofsConfig,
    ServerConfig,
    Settings,
)


class TestServerConfig:
    """Tests for ServerConfig."""

    def test_default_values(self) -> None:
        config = ServerConfig()
        assert config.bind == ":3000"
        assert config.server_name == "storehub"
        assert config.hub_urls == []

    def test_bind_validation_valid(self) -> None:
        for bind in [":8080", "0.0.0.0:8080", "127.0.0.1:3000", "localhost:80"]:
            assert ServerConfig(bind=bind).bind == bind

    def test_bind_validation_no_port(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ServerConfig(bind="localhost")
        assert "must be in format 'host:port'" in str(exc_info.value)

    def test_bind_validation_invalid_port(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ServerConfig(bind=":abc")
        assert "must be a number" in str(exc_info.value)

    def test_bind_validation_port_out_of_range(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ServerConfig(bind=":70000")
        assert "must be between 1 and 65535" in str(exc_info.value)

    def test_empty_server_name(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ServerConfig(server_name="")
        assert "server_name cannot be empty" in str(exc_info.value)

    def test_host_port(self) -> None:
        assert ServerConfig(bind=":3000").host_port() == ("0.0.0.0", 3000)
        assert ServerConfig(bind="127.0.0.1:80").host_port() == ("127.0.0.1", 80)


class TestDriverConfig:
    """Tests for DriverConfig."""

    def test_disk_requires_read_url_prefix(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            DriverConfig(backend="disk")
        assert "read_url_prefix is required" in str(exc_info.value)

    def test_s3_derives_read_url_prefix(self) -> None:
        assert DriverConfig(backend="s3").read_url_prefix is None

    def test_read_url_prefix_gets_trailing_slash(self) -> None:
        config = DriverConfig(backend="memory", read_url_prefix="https://read.test")
        assert config.read_url_prefix == "https://read.test/"

    def test_read_url_prefix_requires_scheme(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            DriverConfig(backend="memory", read_url_prefix="read.test")
        assert "must start with http:// or https://" in str(exc_info.value)

    def test_unknown_backend(self) -> None:
        with pytest.raises(ValidationError):
            DriverConfig(backend="ftp", read_url_prefix="https://read.test")

    def test_page_size_bounds(self) -> None:
        with pytest.raises(ValidationError):
            DriverConfig(backend="s3", page_size=0)

    def test_disk_root_must_be_absolute(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            DiskConfig(storage_root_dir="relative/dir")
        assert "must be an absolute path" in str(exc_info.value)

    def test_disk_root_trailing_slash_removed(self) -> None:
        assert DiskConfig(storage_root_dir="/data/").storage_root_dir == "/data"


class TestProofsConfig:
    """Tests for ProofsConfig."""

    def test_disabled_by_default(self) -> None:
        assert ProofsConfig().required == 0

    def test_required_needs_service_url(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ProofsConfig(required=1)
        assert "service_url is required" in str(exc_info.value)

    def test_negative_required_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ProofsConfig(required=-1)


class TestLimitsConfig:

    def test_list_body_limit_default(self) -> None:
        assert LimitsConfig().list_body_max_bytes == 4096


class TestSettingsFromEnv:
    """Env-only boot."""

    def test_nested_env_vars(self, monkeypatch) -> None:
        monkeypatch.setenv("STOREHUB_SERVER__SERVER_NAME", "hub.example.com")
        monkeypatch.setenv("STOREHUB_DRIVER__BACKEND", "disk")
        monkeypatch.setenv("STOREHUB_DRIVER__READ_URL_PREFIX", "https://files.example.com")
        monkeypatch.setenv("STOREHUB_DRIVER__DISK__STORAGE_ROOT_DIR", "/srv/hub")
        monkeypatch.setenv("STOREHUB_PROOFS__REQUIRED", "2")
        monkeypatch.setenv("STOREHUB_PROOFS__SERVICE_URL", "https://proofs.example.com")

        settings = Settings()

        assert settings.server.server_name == "hub.example.com"
        assert settings.driver.backend == "disk"
        assert settings.driver.read_url_prefix == "https://files.example.com/"
        assert settings.driver.disk.storage_root_dir == "/srv/hub"
        assert settings.proofs.required == 2

    def test_invalid_env_produces_clear_error(self, monkeypatch) -> None:
        monkeypatch.setenv("STOREHUB_DRIVER__BACKEND", "disk")
        with pytest.raises(ValidationError) as exc_info:
            Settings()
        assert "STOREHUB_DRIVER__READ_URL_PREFIX" in str(exc_info.value)
