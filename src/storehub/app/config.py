"""Configuration module for storehub.

Supports env-only configuration with clear validation errors.
All environment variables use STOREHUB_ prefix with double underscore for nested fields.

Examples:
    STOREHUB_SERVER__BIND=:3000
    STOREHUB_SERVER__SERVER_NAME=hub.example.com
    STOREHUB_DRIVER__BACKEND=disk
    STOREHUB_DRIVER__DISK__STORAGE_ROOT_DIR=/var/lib/storehub
    STOREHUB_PROOFS__REQUIRED=2
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerConfig(BaseSettings):
    """Server configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STOREHUB_SERVER__",
        extra="ignore",
    )

    bind: str = Field(
        default=":3000",
        description="Server bind address (host:port or :port)",
    )
    server_name: str = Field(
        default="storehub",
        description="Deployment identity used to derive the challenge text",
    )
    hub_urls: list[str] = Field(
        default_factory=list,
        description="Accepted hubUrl claims in v1 tokens (empty accepts any)",
    )

    @field_validator("bind")
    @classmethod
    def validate_bind(cls, v: str) -> str:
        """Validate bind address format."""
        if not v:
            raise ValueError("bind address cannot be empty")
        if ":" not in v:
            raise ValueError(
                f"Invalid bind address '{v}': must be in format 'host:port' or ':port'"
            )
        parts = v.rsplit(":", 1)
        try:
            port = int(parts[1])
            if not 1 <= port <= 65535:
                raise ValueError(f"Invalid port {port}: must be between 1 and 65535")
        except ValueError as e:
            if "invalid literal" in str(e):
                raise ValueError(f"Invalid port '{parts[1]}': must be a number") from e
            raise
        return v

    @field_validator("server_name")
    @classmethod
    def validate_server_name(cls, v: str) -> str:
        if not v:
            raise ValueError("server_name cannot be empty")
        return v

    def host_port(self) -> tuple[str, int]:
        """Split bind into (host, port); an empty host binds all interfaces."""
        host, port = self.bind.rsplit(":", 1)
        return host or "0.0.0.0", int(port)


class AuthConfig(BaseSettings):
    """Authentication configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STOREHUB_AUTH__",
        extra="ignore",
    )

    whitelist: list[str] | None = Field(
        default=None,
        description="Namespaces allowed to write (unset allows all)",
    )


class DiskConfig(BaseSettings):
    """Disk driver configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STOREHUB_DRIVER__DISK__",
        extra="ignore",
    )

    storage_root_dir: str = Field(
        default="/var/lib/storehub",
        description="Directory holding one subdirectory per namespace",
    )

    @field_validator("storage_root_dir")
    @classmethod
    def validate_storage_root_dir(cls, v: str) -> str:
        """Validate storage_root_dir is an absolute path."""
        if not v:
            raise ValueError("storage_root_dir cannot be empty")
        if not v.startswith("/"):
            raise ValueError(
                f"Invalid storage_root_dir '{v}': "
                "must be an absolute path starting with '/'"
            )
        return v.rstrip("/") or "/"


class S3Config(BaseSettings):
    """S3 driver configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STOREHUB_DRIVER__S3__",
        extra="ignore",
    )

    endpoint_url: str | None = Field(default=None)
    region: str | None = Field(default=None)
    access_key: str | None = Field(default=None)
    secret_key: str | None = Field(default=None)
    bucket_name: str = Field(default="storehub")


class DriverConfig(BaseSettings):
    """Storage driver selection."""

    model_config = SettingsConfigDict(
        env_prefix="STOREHUB_DRIVER__",
        extra="ignore",
    )

    backend: Literal["disk", "s3", "memory"] = Field(
        default="disk",
        description="Storage backend",
    )
    read_url_prefix: str | None = Field(
        default=None,
        description="Public prefix for read URLs (S3 derives one when unset)",
    )
    page_size: int = Field(default=100, ge=1, le=1000)
    disk: DiskConfig = Field(default_factory=DiskConfig)
    s3: S3Config = Field(default_factory=S3Config)

    @field_validator("read_url_prefix")
    @classmethod
    def validate_read_url_prefix(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid read_url_prefix '{v}': must start with http:// or https://"
            )
        return v.rstrip("/") + "/"

    @model_validator(mode="after")
    def validate_read_url_prefix_for_backend(self) -> Self:
        """Disk and memory backends cannot derive a read URL on their own."""
        if self.backend in ("disk", "memory") and not self.read_url_prefix:
            raise ValueError(
                f"driver.read_url_prefix is required when using '{self.backend}' "
                "backend. Set STOREHUB_DRIVER__READ_URL_PREFIX env var."
            )
        return self


class ProofsConfig(BaseSettings):
    """Social proof policy."""

    model_config = SettingsConfigDict(
        env_prefix="STOREHUB_PROOFS__",
        extra="ignore",
    )

    required: int = Field(default=0, ge=0, description="0 disables proof checks")
    trusted_services: list[str] = Field(default_factory=list)
    service_url: str | None = Field(default=None)
    timeout: float = Field(default=10.0, gt=0)  # seconds

    @model_validator(mode="after")
    def validate_service_url_when_required(self) -> Self:
        if self.required > 0 and not self.service_url:
            raise ValueError(
                "proofs.service_url is required when proofs.required > 0. "
                "Set STOREHUB_PROOFS__SERVICE_URL env var."
            )
        return self


class LimitsConfig(BaseSettings):
    """Request size limits."""

    model_config = SettingsConfigDict(
        env_prefix="STOREHUB_LIMITS__",
        extra="ignore",
    )

    list_body_max_bytes: int = Field(default=4096, gt=0)
    max_upload_bytes: int = Field(default=20 * 1024 * 1024, gt=0)  # 20MB


class LoggingConfig(BaseSettings):
    """Logging configuration.

    rate_limit_per_minute caps rejection logs (bad tokens, missing proofs,
    4xx responses) per namespace or path. ERROR logs are never limited.
    """

    model_config = SettingsConfigDict(
        env_prefix="STOREHUB_LOGGING__",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    json_format: bool = Field(default=True)
    schema_version: str = Field(default="1.0")
    service_name: str = Field(default="storehub")
    slow_threshold_ms: float = Field(default=1000.0)
    rate_limit_per_minute: int = Field(default=100)


class Settings(BaseSettings):
    """Main application settings.

    All settings can be configured via environment variables with STOREHUB_ prefix.
    Nested settings use double underscore as separator.
    """

    model_config = SettingsConfigDict(
        env_prefix="STOREHUB_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    server: ServerConfig = Field(default_factory=ServerConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    driver: DriverConfig = Field(default_factory=DriverConfig)
    proofs: ProofsConfig = Field(default_factory=ProofsConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Raises:
        ValidationError: If configuration is invalid with detailed error message
    """
    return Settings()
