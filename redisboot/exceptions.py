from enum import Enum
from typing import Any, Optional


class RedisBootError(Exception):
    """base exception for redisboot"""
    pass


class ConfigErrorKind(Enum):
    UNKNOWN_OPTION = 'unknown_option'
    INVALID_PORT = 'invalid_port'
    INVALID_LOG_OPTIONS = 'invalid_log_options'


class ConfigError(RedisBootError):
    """
    Invalid start options. Raised before any I/O happens.

    Args:
        kind (ConfigErrorKind): what is wrong with the options
        key (Optional[str]): offending option name, for unknown options
        value (Any): offending option value, for invalid values
    """

    def __init__(self, kind: ConfigErrorKind, key: Optional[str] = None, value: Any = None):
        self.kind = kind
        self.key = key
        self.value = value
        super().__init__(self._describe())

    def _describe(self) -> str:
        if self.kind is ConfigErrorKind.UNKNOWN_OPTION:
            return (
                f"unknown Redis connection option: {self.key!r}. The connection options"
                " should only contain Redis-specific options (host, port, password, database)"
            )
        if self.kind is ConfigErrorKind.INVALID_PORT:
            return f"expected a positive integer as the value of the port option, got: {self.value!r}"
        return f"the log option must be a mapping of {{event: level}}, got: {self.value!r}"


class ConnectError(RedisBootError):
    """transport could not be established"""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to connect: {reason}")


class SocketConfigError(RedisBootError):
    """socket buffers could not be tuned after connecting"""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to set up socket buffers: {reason}")


class HandshakeError(RedisBootError):
    """
    Server reached but the session could not be set up: AUTH or SELECT was
    rejected, unexpected data followed the replies, or the socket failed
    while reading them. Terminal, unlike ConnectError.
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
