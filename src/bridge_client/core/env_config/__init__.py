"""
Environment configuration for Bridge Client.

Example:
    >>> from bridge_client.core.env_config import load_from_env
    >>> config = load_from_env(profile="production")
"""

from .loader import load_from_env, get_env_file_path
from .validator import BridgeClientSettings

__all__ = [
    "load_from_env",
    "get_env_file_path",
    "BridgeClientSettings",
]
