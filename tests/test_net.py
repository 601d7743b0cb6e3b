import itertools
import socket
import ssl
from dataclasses import dataclass, field
from datetime import timedelta

import pytest

from hyperwire.net import (
    CallableConnector,
    HttpConnector,
    HttpListener,
    HttpsConnector,
    HttpsListener,
    HttpsStream,
    HttpStream,
    NetworkStream,
    Ssl,
    TlsContext,
)


@dataclass
class MockStream(NetworkStream):
    inbound: bytearray = field(default_factory=bytearray)
    written: bytearray = field(default_factory=bytearray)
    read_timeout: object = None
    write_timeout: object = None
    closed_with: object = None

    def read(self, size):
        chunk = bytes(self.inbound[:size])
        del self.inbound[:size]
        return chunk

    def write(self, data):
        self.written.extend(data)
        return len(data)

    def peer_addr(self):
        return ("10.0.0.1", 1234)

    def set_read_timeout(self, dur):
        self.read_timeout = dur

    def set_write_timeout(self, dur):
        self.write_timeout = dur

    def close(self, how=socket.SHUT_RDWR):
        self.closed_with = how

    def clone(self):
        return MockStream(bytearray(self.inbound), bytearray(self.written))


class FakeSsl(Ssl):
    def __init__(self):
        self.client_calls = []
        self.server_calls = []

    def wrap_client(self, stream, host):
        self.client_calls.append((stream, host))
        return MockStream(bytearray(b"client"))

    def wrap_server(self, stream):
        self.server_calls.append(stream)
        return MockStream(bytearray(b"server"))


def _read_exact(stream, n):
    data = b""
    while len(data) < n:
        chunk = stream.read(n - len(data))
        if not chunk:
            break
        data += chunk
    return data


@pytest.fixture
def listener():
    with HttpListener(("127.0.0.1", 0)) as lst:
        yield lst


@pytest.fixture
def pair(listener):
    port = listener.local_addr()[1]
    client = HttpConnector().connect("127.0.0.1", port, "http")
    server = listener.accept()
    client.set_read_timeout(5)
    server.set_read_timeout(5)
    yield client, server
    client.sock.close()
    server.sock.close()


def test_downcast_box_stream():
    mock = MockStream()
    wrapped = HttpsStream(mock, secure=False)
    assert wrapped.inner is mock
    assert isinstance(wrapped.inner, MockStream)
    assert wrapped.inner == MockStream()
    assert wrapped.secure is False


def test_abstract_stream_cannot_be_instantiated():
    with pytest.raises(TypeError):
        NetworkStream()


def test_local_addr_reports_bound_port(listener):
    host, port = listener.local_addr()[:2]
    assert host == "127.0.0.1"
    assert port > 0


def test_roundtrip(pair):
    client, server = pair
    assert client.write(b"ping") == 4
    assert _read_exact(server, 4) == b"ping"
    assert server.write(b"pong") == 4
    assert _read_exact(client, 4) == b"pong"


def test_peer_addr(listener, pair):
    client, server = pair
    assert client.peer_addr() == listener.local_addr()
    assert server.peer_addr() == client.sock.getsockname()


def test_clone_shares_connection(pair):
    client, server = pair
    twin = client.clone()
    try:
        assert twin.fileno() != client.fileno()
        assert twin.write(b"abc") == 3
        assert _read_exact(server, 3) == b"abc"
    finally:
        twin.sock.close()


def test_close_write_half_signals_eof(pair):
    client, server = pair
    client.close(socket.SHUT_WR)
    assert server.read(10) == b""


def test_close_unconnected_socket_is_ignored(listener):
    with socket.socket() as raw:
        stream = HttpStream(raw)
        stream.close(socket.SHUT_RDWR)
        raw.connect(listener.local_addr())
        assert stream.peer_addr() == listener.local_addr()


def test_read_timeout(pair):
    _, server = pair
    server.set_read_timeout(0.05)
    with pytest.raises(TimeoutError):
        server.read(1)


def test_read_timeout_accepts_timedelta(pair):
    _, server = pair
    server.set_read_timeout(timedelta(milliseconds=50))
    with pytest.raises(TimeoutError):
        server.read(1)


@pytest.mark.parametrize("dur", [0, -1, timedelta(0)])
def test_non_positive_timeout_rejected(pair, dur):
    client, _ = pair
    with pytest.raises(ValueError):
        client.set_write_timeout(dur)


def test_invalid_scheme(listener):
    port = listener.local_addr()[1]
    with pytest.raises(ValueError, match="Invalid scheme for Http"):
        HttpConnector().connect("127.0.0.1", port, "ftp")


def test_callable_connector(listener):
    calls = []

    def open_socket(host, port, scheme):
        calls.append((host, port, scheme))
        return socket.create_connection((host, port))

    port = listener.local_addr()[1]
    client = CallableConnector(open_socket).connect("127.0.0.1", port, "anything")
    server = listener.accept()
    with client, server:
        assert calls == [("127.0.0.1", port, "anything")]
        assert client.write(b"hi") == 2
        server.set_read_timeout(5)
        assert _read_exact(server, 2) == b"hi"


def test_listener_clone(listener):
    twin = listener.clone()
    with twin:
        assert twin.local_addr() == listener.local_addr()
        assert twin.fileno() != listener.fileno()
        with socket.create_connection(listener.local_addr()) as raw:
            with twin.accept() as accepted:
                assert accepted.peer_addr() == raw.getsockname()


def test_stream_fileno_and_repr(pair):
    client, _ = pair
    assert client.fileno() == client.sock.fileno()
    assert repr(client) == "HttpStream(_)"


def test_incoming_yields_accepted_streams(listener):
    clients = [socket.create_connection(listener.local_addr()) for _ in range(3)]
    try:
        streams = list(itertools.islice(listener.incoming(), 3))
        try:
            assert sorted(s.peer_addr() for s in streams) == sorted(
                c.getsockname() for c in clients
            )
        finally:
            for stream in streams:
                stream.sock.close()
    finally:
        for client in clients:
            client.close()


def test_https_stream_delegates():
    mock = MockStream(bytearray(b"hello"))
    stream = HttpsStream(mock, secure=True)
    assert stream.read(5) == b"hello"
    assert stream.write(b"abc") == 3
    assert mock.written == bytearray(b"abc")
    stream.set_read_timeout(1)
    stream.set_write_timeout(2)
    assert (mock.read_timeout, mock.write_timeout) == (1, 2)
    assert stream.peer_addr() == ("10.0.0.1", 1234)
    stream.close(socket.SHUT_WR)
    assert mock.closed_with == socket.SHUT_WR


def test_https_stream_clone_keeps_kind():
    stream = HttpsStream(MockStream(bytearray(b"x")), secure=True)
    twin = stream.clone()
    assert twin.secure is True
    assert twin.inner is not stream.inner
    assert twin.read(1) == b"x"


def test_https_connector_plain_scheme(listener):
    fake = FakeSsl()
    port = listener.local_addr()[1]
    stream = HttpsConnector(fake).connect("127.0.0.1", port, "http")
    with listener.accept(), stream.inner:
        assert stream.secure is False
        assert isinstance(stream.inner, HttpStream)
        assert fake.client_calls == []


def test_https_connector_secure_scheme(listener):
    fake = FakeSsl()
    port = listener.local_addr()[1]
    stream = HttpsConnector(fake).connect("127.0.0.1", port, "https")
    (plain, host), = fake.client_calls
    with listener.accept(), plain:
        assert stream.secure is True
        assert host == "127.0.0.1"
        assert isinstance(plain, HttpStream)
        assert stream.read(10) == b"client"


def test_https_listener_wraps_accepted(listener):
    fake = FakeSsl()
    with HttpsListener(("127.0.0.1", 0), fake) as secure:
        with socket.create_connection(secure.local_addr()):
            accepted = secure.accept()
            (plain,) = fake.server_calls
            with plain:
                assert accepted.read(10) == b"server"
                assert isinstance(plain, HttpStream)


def test_https_listener_clone_shares_address():
    with HttpsListener(("127.0.0.1", 0), FakeSsl()) as secure:
        twin = secure.clone()
        with twin:
            assert twin.local_addr() == secure.local_addr()
            assert twin.ssl is secure.ssl


def test_tls_context_missing_files(tmp_path):
    with pytest.raises(FileNotFoundError):
        TlsContext.with_cert_and_key(tmp_path / "cert.pem", tmp_path / "key.pem")


def test_tls_wrap_client_fails_when_peer_closes(listener):
    port = listener.local_addr()[1]
    client = HttpConnector().connect("127.0.0.1", port, "http")
    client.sock.settimeout(5)
    server = listener.accept()
    server.sock.close()
    with pytest.raises(OSError):
        TlsContext(ssl.create_default_context()).wrap_client(client, "localhost")
    client.sock.close()