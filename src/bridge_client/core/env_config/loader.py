"""
Configuration loader from environment variables and .env files.
"""

import os
from typing import Optional

from ..config import BridgeClientConfig, RetryPolicy, StatusCacheConfig
from ..logging.config import LoggingConfig
from .validator import BridgeClientSettings


def get_env_file_path(profile: Optional[str] = None) -> str:
    """
    .env file for a profile.

    Example:
        >>> get_env_file_path("production")
        '.env.production'
        >>> get_env_file_path(None)  # BRIDGE_CLIENT_ENV unset
        '.env'
    """
    if profile is None:
        profile = os.getenv("BRIDGE_CLIENT_ENV")
    if not profile:
        return ".env"
    return f".env.{profile}"


def load_from_env(
    profile: Optional[str] = None,
    env_file: Optional[str] = None,
    **overrides
) -> BridgeClientConfig:
    """
    Load BridgeClientConfig from environment variables.

    Priority (highest to lowest):
    1. **overrides - explicit settings fields (e.g. ``timeout_ms=5000``)
    2. Environment variables (BRIDGE_CLIENT_*)
    3. .env file (profile-specific or default)
    4. Defaults

    Example:
        >>> config = load_from_env()
        >>> config = load_from_env(profile="staging", retry_max_retries=1)
    """
    if env_file is None:
        env_file = get_env_file_path(profile)

    settings = BridgeClientSettings(_env_file=env_file, **overrides)

    logging_config = None
    if settings.log_enabled:
        logging_config = LoggingConfig.create(
            level=settings.log_level,
            format=settings.log_format,
            enable_console=settings.log_enable_console,
            enable_file=settings.log_enable_file,
            file_path=settings.log_file_path,
            max_bytes=settings.log_max_bytes,
            backup_count=settings.log_backup_count,
        )

    return BridgeClientConfig(
        base_url=settings.base_url,
        api_key=settings.api_key,
        timeout_ms=settings.timeout_ms,
        verify_ssl=settings.verify_ssl,
        retry=RetryPolicy(
            max_retries=settings.retry_max_retries,
            base_delay_ms=settings.retry_base_delay_ms,
            max_delay_ms=settings.retry_max_delay_ms,
            retry_non_idempotent=settings.retry_non_idempotent,
        ),
        status_cache=StatusCacheConfig(
            fresh_window_ms=settings.status_fresh_window_ms,
            default_retry_after_sec=settings.status_default_retry_after_sec,
        ),
        logging=logging_config,
    )
