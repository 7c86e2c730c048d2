"""
Logging configuration for Bridge Client.

String values ("debug", "JSON") are accepted everywhere and coerced to the
enums, so a config can come straight from environment settings.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def numeric(self) -> int:
        """Matching ``logging`` constant."""
        return logging.getLevelName(self.value)


class LogFormat(str, Enum):
    JSON = "json"  # one object per line, for log shippers
    TEXT = "text"


DEFAULT_MAX_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class LoggingConfig:
    """
    Where and how the bridge client writes its request log.

    Attributes:
        level: Minimum level
        format: json or text
        enable_console: Write to stderr
        enable_file: Write to a rotating file at ``file_path``
        file_path: Required with ``enable_file``
        max_bytes: Rotate after this many bytes
        backup_count: Rotated files to keep
        enable_correlation_id: Stamp records with the active X-Request-Id
        extra_fields: Static fields added to every record (service, env...)

    Example:
        >>> LoggingConfig(level="debug", format="json")
        >>> LoggingConfig.create(enable_file=True, file_path="/var/log/bridge.log")
    """

    level: Union[LogLevel, str] = LogLevel.INFO
    format: Union[LogFormat, str] = LogFormat.TEXT
    enable_console: bool = True
    enable_file: bool = False
    file_path: Optional[str] = None
    max_bytes: int = DEFAULT_MAX_BYTES
    backup_count: int = 5
    enable_correlation_id: bool = True
    extra_fields: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        if not isinstance(self.level, LogLevel):
            object.__setattr__(self, 'level', LogLevel(str(self.level).upper()))
        if not isinstance(self.format, LogFormat):
            object.__setattr__(self, 'format', LogFormat(str(self.format).lower()))
        if not isinstance(self.extra_fields, MappingProxyType):
            object.__setattr__(self, 'extra_fields', MappingProxyType(dict(self.extra_fields)))

        if self.enable_file and not self.file_path:
            raise ValueError("file_path is required when enable_file=True")
        if self.max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        if self.backup_count < 0:
            raise ValueError("backup_count must be non-negative")

    @classmethod
    def create(cls, level: str = "INFO", format: str = "text", **kwargs: Any) -> "LoggingConfig":
        """Keyword constructor kept for symmetry with ``BridgeClientConfig.create``."""
        if kwargs.get("extra_fields") is None:
            kwargs.pop("extra_fields", None)
        return cls(level=level, format=format, **kwargs)
