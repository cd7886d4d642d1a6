from typing import Any, Dict, Mapping, Tuple
import logging

from .config import (
    BEHAVIOUR_DEFAULT_OPTS,
    BEHAVIOUR_OPTS,
    REDIS_DEFAULT_OPTS,
    REDIS_OPTS,
    MergedOptions,
)
from .exceptions import ConfigError, ConfigErrorKind


def sanitize(
    redis_opts: Mapping[str, Any],
    other_opts: Mapping[str, Any],
) -> Tuple[MergedOptions, Dict[str, Any]]:
    """
    Validate and merge start options.

    `redis_opts` holds the Redis connection parameters (host, port,
    password, database). `other_opts` mixes the behaviour options (backoff,
    log levels, ...) with options meant for the caller's connection
    primitive; the latter are returned untouched as the second element.

    Raises:
        ConfigError: on unknown connection options, a bad port or a
            malformed log mapping
    """
    check_redis_opts(redis_opts)

    behaviour_opts = {k: v for k, v in other_opts.items() if k in BEHAVIOUR_OPTS}
    passthrough_opts = {k: v for k, v in other_opts.items() if k not in BEHAVIOUR_OPTS}

    if 'log' in behaviour_opts:
        check_log_opts(behaviour_opts['log'])

    given_redis_opts = {k: v for k, v in redis_opts.items() if v is not None}
    merged = merge_options(BEHAVIOUR_DEFAULT_OPTS, behaviour_opts)
    merged.update(merge_options(REDIS_DEFAULT_OPTS, given_redis_opts))

    return MergedOptions(**merged), passthrough_opts


def merge_options(defaults: Mapping[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Overlay `overrides` on `defaults`. Keys whose default is a mapping are
    merged one level deep so unspecified sub keys keep their defaults.
    """
    merged = {}
    for key, default in defaults.items():
        if key not in overrides:
            merged[key] = dict(default) if isinstance(default, Mapping) else default
        elif isinstance(default, Mapping):
            merged[key] = {**default, **overrides[key]}
        else:
            merged[key] = overrides[key]
    for key, value in overrides.items():
        merged.setdefault(key, value)
    return merged


def check_redis_opts(opts: Mapping[str, Any]) -> None:
    for key in opts:
        if key not in REDIS_OPTS:
            raise ConfigError(ConfigErrorKind.UNKNOWN_OPTION, key=key)

    port = opts.get('port')
    if port is None:
        return
    if isinstance(port, bool) or not isinstance(port, int) or port <= 0:
        raise ConfigError(ConfigErrorKind.INVALID_PORT, value=port)


def check_log_opts(log_opts: Any) -> None:
    """log must be a flat {event: level} mapping"""
    if not isinstance(log_opts, Mapping):
        raise ConfigError(ConfigErrorKind.INVALID_LOG_OPTIONS, value=log_opts)
    for event, level in log_opts.items():
        if not isinstance(event, str) or not _is_level(level):
            raise ConfigError(ConfigErrorKind.INVALID_LOG_OPTIONS, value=log_opts)


def _is_level(level: Any) -> bool:
    if isinstance(level, bool):
        return False
    if isinstance(level, int):
        return True
    if isinstance(level, str):
        return isinstance(logging.getLevelName(level.upper()), int)
    return False
