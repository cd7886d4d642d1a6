import pytest
from hiredis import ProtocolError, ReplyError

from redisboot.protocol import Complete, NeedMore, ReplyParser, pack, parse, reply_end


def test_pack():
    assert pack(['AUTH', 'secret']) == b'*2\r\n$4\r\nAUTH\r\n$6\r\nsecret\r\n'
    assert pack(['SELECT', 3]) == b'*2\r\n$6\r\nSELECT\r\n$1\r\n3\r\n'


def test_parse_status_with_rest():
    result = parse(b'+OK\r\n+PONG')
    assert result == Complete(b'OK', b'+PONG')


def test_parse_error_reply():
    result = parse(b'-ERR invalid password\r\n')
    assert isinstance(result, Complete)
    assert isinstance(result.value, ReplyError)
    assert str(result.value) == 'ERR invalid password'


def test_parse_integer_bulk_and_array():
    assert parse(b':42\r\n').value == 42
    assert parse(b'$3\r\nfoo\r\n').value == b'foo'
    assert parse(b'$-1\r\n').value is None
    assert parse(b'*2\r\n$1\r\na\r\n:1\r\n') == Complete([b'a', 1], b'')


def test_parse_needs_more():
    result = parse(b'+O')
    assert isinstance(result, NeedMore)
    assert isinstance(result.continuation, ReplyParser)


@pytest.mark.parametrize('chunks', [
    [b'+O', b'K', b'\r\n'],
    [b'$5\r\nhel', b'lo\r', b'\n'],
    [b'*2\r\n', b'$1\r\na\r\n', b':', b'7\r\n'],
])
def test_continuation_resumes_across_chunks(chunks):
    result = parse(chunks[0])
    for chunk in chunks[1:]:
        assert isinstance(result, NeedMore)
        result = result.continuation(chunk)
    assert isinstance(result, Complete)
    assert result.rest == b''


def test_bulk_with_crlf_inside():
    assert parse(b'$4\r\na\r\nb\r\n') == Complete(b'a\r\nb', b'')


def test_reply_end_incomplete():
    assert reply_end(b'') is None
    assert reply_end(b'$10\r\nabc') is None
    assert reply_end(b'*2\r\n:1\r\n') is None


@pytest.mark.parametrize('data', [b'?what\r\n', b'$x\r\n'])
def test_parse_invalid_reply(data):
    with pytest.raises(ProtocolError):
        parse(data)


@pytest.mark.parametrize('data', [b'?', b'hello'])
def test_parse_invalid_type_byte_before_line_end(data):
    with pytest.raises(ProtocolError):
        parse(data)
