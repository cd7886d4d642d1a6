from __future__ import annotations
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union
import logging


REDIS_OPTS = ('host', 'port', 'password', 'database')

REDIS_DEFAULT_OPTS: Dict[str, Any] = {
    'host': 'localhost',
    'port': 6379,
    'password': None,
    'database': None,
}

# nested mappings are merged per key, everything else is replaced
BEHAVIOUR_DEFAULT_OPTS: Dict[str, Any] = {
    'socket_opts': (),
    'sync_connect': False,
    'backoff_initial': 500,
    'backoff_max': 30_000,
    'log': {
        'disconnection': 'error',
        'failed_connection': 'error',
        'reconnection': 'info',
    },
    'exit_on_disconnection': False,
    'timeout': None,
}

BEHAVIOUR_OPTS = tuple(BEHAVIOUR_DEFAULT_OPTS)

DEFAULT_TIMEOUT = 5000
DEFAULT_BUFFER_SIZE = 16384

SocketOpt = Tuple[int, int, Union[int, bytes]]


def _default_log() -> Mapping[str, Union[str, int]]:
    return MappingProxyType(dict(BEHAVIOUR_DEFAULT_OPTS['log']))


@dataclass(frozen=True)
class MergedOptions:
    host: str = 'localhost'
    port: int = 6379
    password: Optional[str] = None
    database: Optional[Union[int, str]] = None
    socket_opts: Tuple[SocketOpt, ...] = ()
    sync_connect: bool = False
    backoff_initial: int = 500
    backoff_max: int = 30_000
    log: Mapping[str, Union[str, int]] = field(default_factory=_default_log)
    exit_on_disconnection: bool = False
    timeout: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, 'socket_opts', tuple(self.socket_opts))
        if not isinstance(self.log, MappingProxyType):
            object.__setattr__(self, 'log', MappingProxyType(dict(self.log)))

    @property
    def connect_timeout(self) -> float:
        """connect timeout in seconds"""
        timeout = self.timeout if self.timeout is not None else DEFAULT_TIMEOUT
        return timeout / 1000

    def replace(self, **changes) -> MergedOptions:
        return replace(self, **changes)

    def redis_opts(self) -> Dict[str, Any]:
        opts = {key: getattr(self, key) for key in REDIS_OPTS}
        return {key: value for key, value in opts.items() if value is not None}

    def behaviour_opts(self) -> Dict[str, Any]:
        opts = {key: getattr(self, key) for key in BEHAVIOUR_OPTS}
        opts['log'] = dict(self.log)
        return opts


def format_host(opts: MergedOptions) -> str:
    return f"{opts.host}:{opts.port}"


def log_level(opts: MergedOptions, event: str) -> int:
    """Resolve the logging level configured for `event`."""
    level = opts.log.get(event, logging.ERROR)
    if isinstance(level, int):
        return level
    return logging.getLevelName(level.upper())
