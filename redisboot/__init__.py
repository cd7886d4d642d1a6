"""
redisboot - Redis connection bootstrap: option sanitizing, connect, AUTH/SELECT
"""

from .config import MergedOptions, format_host
from .connection import RedisConnection, connect, start
from .exceptions import (
    RedisBootError,
    ConfigError,
    ConfigErrorKind,
    ConnectError,
    SocketConfigError,
    HandshakeError,
)
from .handshake import auth_and_select_db
from .options import sanitize

__version__ = "0.1.0"

__all__ = [
    "MergedOptions",
    "format_host",
    "RedisConnection",
    "connect",
    "start",
    "RedisBootError",
    "ConfigError",
    "ConfigErrorKind",
    "ConnectError",
    "SocketConfigError",
    "HandshakeError",
    "auth_and_select_db",
    "sanitize",
]
