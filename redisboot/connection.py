from __future__ import annotations
from typing import Any, Dict, Mapping, Tuple
import socket

from .config import DEFAULT_BUFFER_SIZE, MergedOptions, format_host, log_level
from .exceptions import ConnectError, HandshakeError, SocketConfigError
from .handshake import auth_and_select_db
from .options import sanitize
from .protocol import pack

import logging

logger = logging.getLogger(__name__)

# applied before the caller's socket_opts
BUILTIN_SOCKET_OPTS = (
    (socket.IPPROTO_TCP, socket.TCP_NODELAY, 1),
)


class RedisConnection:
    """blocking connection to Redis, owned by the caller once connected
    """

    def __init__(self, sock: socket.socket, host: str = 'localhost', port: int = 6379,
                 buffer_size: int = DEFAULT_BUFFER_SIZE):
        self.sock = sock
        self.host = host
        self.port = port
        self.buffer_size = buffer_size

    def send_command(self, *args):
        """
        send raw command
        """
        self.sock.sendall(pack(args))

    def recv(self) -> bytes:
        """
        read whatever is available, up to buffer_size bytes
        """
        return self.sock.recv(self.buffer_size)

    def close(self):
        self.sock.close()

    def __enter__(self) -> RedisConnection:
        return self

    def __exit__(self, *exc_info):
        self.close()


def open_socket(opts: MergedOptions) -> socket.socket:
    """
    establish raw connection
    """
    try:
        sock = socket.create_connection((opts.host, opts.port), timeout=opts.connect_timeout)
    except OSError as e:
        raise ConnectError(str(e) or e.__class__.__name__)

    try:
        for level, option, value in BUILTIN_SOCKET_OPTS + opts.socket_opts:
            sock.setsockopt(level, option, value)
        sock.settimeout(None)
    except (OSError, TypeError, ValueError) as e:
        sock.close()
        raise ConnectError(f"invalid socket option: {e}")
    return sock


def setup_socket_buffers(sock: socket.socket, buffer_size: int = DEFAULT_BUFFER_SIZE) -> int:
    """Return the read buffer size to use: the largest of the kernel send
    and receive buffers and `buffer_size`."""
    sndbuf = sock.getsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF)
    rcvbuf = sock.getsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF)
    effective = max(buffer_size, sndbuf, rcvbuf)
    logger.debug(f"sndbuf={sndbuf} rcvbuf={rcvbuf} buffer={buffer_size}, using {effective}")
    return effective


def connect(opts: MergedOptions) -> RedisConnection:
    """
    Connect to Redis and run the AUTH/SELECT handshake.

    Raises:
        ConnectError: the server could not be reached; safe to retry
        SocketConfigError: the socket buffers could not be inspected
        HandshakeError: the server was reached but rejected the session
    """
    try:
        sock = open_socket(opts)
    except ConnectError as e:
        logger.log(log_level(opts, 'failed_connection'),
                   f"Failed to connect to Redis ({format_host(opts)}): {e.reason}")
        raise

    try:
        buffer_size = setup_socket_buffers(sock)
    except OSError as e:
        sock.close()
        raise SocketConfigError(str(e))

    conn = RedisConnection(sock, opts.host, opts.port, buffer_size)
    try:
        auth_and_select_db(conn, opts)
    except HandshakeError as e:
        conn.close()
        logger.log(log_level(opts, 'failed_connection'),
                   f"Handshake with Redis ({format_host(opts)}) failed: {e.reason}")
        raise
    except BaseException:
        conn.close()
        raise

    logger.debug(f"Connected to Redis ({format_host(opts)})")
    return conn


def start(
    redis_opts: Mapping[str, Any],
    other_opts: Mapping[str, Any],
) -> Tuple[RedisConnection, MergedOptions, Dict[str, Any]]:
    """Sanitize the start options and connect.

    Returns the connection, the merged options and the options that were not
    recognized, meant for the caller's connection process.
    """
    opts, passthrough_opts = sanitize(redis_opts, other_opts)
    return connect(opts), opts, passthrough_opts
