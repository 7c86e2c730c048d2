"""
Pydantic settings for environment configuration.
"""

from typing import Optional, Literal
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BridgeClientSettings(BaseSettings):
    """
    Bridge Client configuration from environment variables.

    Reads from:
    1. Environment variables (BRIDGE_CLIENT_*)
    2. .env file
    3. Defaults

    Example .env file:
        BRIDGE_CLIENT_BASE_URL=https://bridge.example.com
        BRIDGE_CLIENT_API_KEY=anon-key-123
        BRIDGE_CLIENT_TIMEOUT_MS=30000
        BRIDGE_CLIENT_RETRY_MAX_RETRIES=3
        BRIDGE_CLIENT_STATUS_FRESH_WINDOW_MS=2500
        BRIDGE_CLIENT_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix='BRIDGE_CLIENT_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    base_url: str = Field(default="", description="Bridge base URL")
    api_key: Optional[str] = Field(default=None, description="Static apikey header value")
    timeout_ms: int = Field(default=30_000, gt=0)
    verify_ssl: bool = Field(default=True)

    # Retry
    retry_max_retries: int = Field(default=3, ge=0, le=10)
    retry_base_delay_ms: int = Field(default=500, ge=0)
    retry_max_delay_ms: int = Field(default=5000, ge=0)
    retry_non_idempotent: bool = Field(default=True)

    # Status cache
    status_fresh_window_ms: int = Field(default=2500, ge=0)
    status_default_retry_after_sec: int = Field(default=60, gt=0)

    # Logging (disabled unless a level is given)
    log_enabled: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "text"] = Field(default="text")
    log_enable_console: bool = Field(default=True)
    log_enable_file: bool = Field(default=False)
    log_file_path: Optional[str] = None
    log_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    log_backup_count: int = Field(default=5, ge=0)

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL when set."""
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip('/')

    @field_validator('log_level', mode='before')
    @classmethod
    def upper_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @model_validator(mode='after')
    def validate_consistency(self) -> 'BridgeClientSettings':
        if self.retry_max_delay_ms < self.retry_base_delay_ms:
            raise ValueError("retry_max_delay_ms must be >= retry_base_delay_ms")
        if self.log_enable_file and not self.log_file_path:
            raise ValueError("log_file_path is required when log_enable_file=True")
        return self
