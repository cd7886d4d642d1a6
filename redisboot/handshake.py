from __future__ import annotations
from enum import Enum
from typing import Any, Callable, Sequence, TYPE_CHECKING

from hiredis import ProtocolError, ReplyError

from .config import MergedOptions
from .exceptions import HandshakeError
from .protocol import Complete, ParseResult, parse

import logging

if TYPE_CHECKING:
    from .connection import RedisConnection

logger = logging.getLogger(__name__)


class HandshakeStep(Enum):
    START = 'start'
    AUTH_PENDING = 'auth_pending'
    AUTH_READING = 'auth_reading'
    AUTH_DONE = 'auth_done'
    SELECT_PENDING = 'select_pending'
    SELECT_READING = 'select_reading'
    SELECT_DONE = 'select_done'
    VERIFY = 'verify'
    SUCCESS = 'success'
    ERROR = 'error'


class Handshake:
    """
    AUTH and SELECT on a freshly connected socket.

    The socket is expected to be blocking. Bytes read past the end of one
    reply are kept in `tail` and prepended to the next read; whatever is
    left once both steps ran makes the handshake fail.
    """

    def __init__(self, conn: RedisConnection, opts: MergedOptions):
        self.conn = conn
        self.opts = opts
        self.tail = b''
        self.step = HandshakeStep.START

    def run(self) -> None:
        try:
            self._auth()
            self._select_db()
            self._verify()
        except HandshakeError:
            self.step = HandshakeStep.ERROR
            raise
        self.step = HandshakeStep.SUCCESS

    def _auth(self):
        if self.opts.password is not None:
            logger.debug("Authenticating")
            self._exchange(['AUTH', self.opts.password],
                           HandshakeStep.AUTH_PENDING, HandshakeStep.AUTH_READING)
        self.step = HandshakeStep.AUTH_DONE

    def _select_db(self):
        if self.opts.database is not None:
            logger.debug(f"Selecting database {self.opts.database}")
            self._exchange(['SELECT', self.opts.database],
                           HandshakeStep.SELECT_PENDING, HandshakeStep.SELECT_READING)
        self.step = HandshakeStep.SELECT_DONE

    def _verify(self):
        self.step = HandshakeStep.VERIFY
        if self.tail:
            logger.debug(f"{len(self.tail)} unexpected bytes left after handshake")
            raise HandshakeError('unexpected tail after auth')

    def _exchange(self, command: Sequence[Any], pending: HandshakeStep, reading: HandshakeStep):
        self.step = pending
        try:
            self.conn.send_command(*command)
        except (TypeError, ValueError) as e:
            raise HandshakeError(f"cannot encode {command[0]}: {e}")
        except OSError as e:
            raise HandshakeError(str(e))

        self.step = reading
        reply = self._blocking_recv()
        if reply == b'OK':
            return
        if isinstance(reply, ReplyError):
            raise HandshakeError(str(reply))
        raise HandshakeError(f"unexpected reply to {command[0]}: {reply!r}")

    def _blocking_recv(self) -> Any:
        """
        Read until one full reply is parsed, starting from the current tail.
        Each pass reads at least once from the socket.
        """
        parser: Callable[[bytes], ParseResult] = parse
        pending, self.tail = self.tail, b''
        while True:
            data = self._recv()
            try:
                result = parser(pending + data)
            except ProtocolError as e:
                raise HandshakeError(f"protocol error: {e}")
            pending = b''
            if isinstance(result, Complete):
                self.tail = result.rest
                return result.value
            parser = result.continuation

    def _recv(self) -> bytes:
        try:
            data = self.conn.recv()
        except OSError as e:
            raise HandshakeError(str(e))
        if not data:
            raise HandshakeError('connection closed')
        return data


def auth_and_select_db(conn: RedisConnection, opts: MergedOptions) -> None:
    """
    Authenticate and select the configured database on `conn`.

    Sends AUTH when a password is set and SELECT when a database is set; does
    nothing when neither is configured.

    Raises:
        HandshakeError: when the server rejects a command, the socket fails
            or extra bytes follow the replies
    """
    Handshake(conn, opts).run()
