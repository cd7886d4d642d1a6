import pytest

from redisboot import MergedOptions, RedisConnection


class FakeSocket:
    """serves scripted chunks from recv and records what was sent"""

    def __init__(self, chunks=()):
        self.chunks = list(chunks)
        self.sent = []
        self.reads = 0
        self.closed = False

    def sendall(self, data):
        self.sent.append(data)

    def recv(self, bufsize):
        self.reads += 1
        if not self.chunks:
            return b''
        chunk = self.chunks.pop(0)
        if isinstance(chunk, Exception):
            raise chunk
        return chunk

    def close(self):
        self.closed = True


@pytest.fixture
def redis_opts():
    return MergedOptions()


@pytest.fixture
def make_conn():
    def factory(*chunks):
        return RedisConnection(FakeSocket(chunks))
    return factory
