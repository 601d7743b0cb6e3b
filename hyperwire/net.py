"""Listeners, streams and connectors that the server and client build on."""

from __future__ import annotations

import errno
import logging
import socket
import ssl as _ssl
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from datetime import timedelta
from typing import Any

logger = logging.getLogger(__name__)

Timeout = float | timedelta | None


def _seconds(dur: Timeout) -> float | None:
    """Turn a timeout into seconds, rejecting zero and negative durations."""
    if dur is None:
        return None
    if isinstance(dur, timedelta):
        dur = dur.total_seconds()
    if dur <= 0:
        raise ValueError("timeout must be a positive duration")
    return float(dur)


class NetworkStream(ABC):
    """A readable, writable connection that a server or client can use."""

    @abstractmethod
    def read(self, size: int) -> bytes:
        """Read at most ``size`` bytes; an empty result means end of stream."""

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Write some of ``data`` and return how many bytes were written."""

    def flush(self) -> None:
        """Flush buffered output; unbuffered streams have nothing to do."""
        return None

    @abstractmethod
    def peer_addr(self) -> Any:
        """The remote address of the underlying connection."""

    @abstractmethod
    def set_read_timeout(self, dur: Timeout) -> None:
        """Set the longest time a read may block; None means forever."""

    @abstractmethod
    def set_write_timeout(self, dur: Timeout) -> None:
        """Set the longest time a write may block; None means forever."""

    def close(self, how: int = socket.SHUT_RDWR) -> None:
        """Called when the stream should no longer be kept alive."""
        return None


class NetworkListener(ABC):
    """Something that listens for connections and hands out streams."""

    @abstractmethod
    def accept(self) -> NetworkStream:
        """Wait for the next connection and return its stream."""

    @abstractmethod
    def local_addr(self) -> Any:
        """The address this listener ended up listening on."""

    @abstractmethod
    def clone(self) -> NetworkListener:
        """Another handle on the same listening socket."""

    def incoming(self) -> Iterator[NetworkStream]:
        """Yield accepted connections, one after another, without end."""
        while True:
            yield self.accept()


class NetworkConnector(ABC):
    """Something that opens a stream to a remote host."""

    @abstractmethod
    def connect(self, host: str, port: int, scheme: str) -> NetworkStream:
        """Open a stream to ``host``:``port`` for the given URL scheme."""


class _SocketStream(NetworkStream):
    """A stream over a socket object, with separate read and write timeouts."""

    def __init__(self, sock: socket.socket) -> None:
        self.sock = sock
        current = sock.gettimeout()
        self._read_timeout: float | None = current
        self._write_timeout: float | None = current

    def read(self, size: int) -> bytes:
        self.sock.settimeout(self._read_timeout)
        return self.sock.recv(size)

    def write(self, data: bytes) -> int:
        self.sock.settimeout(self._write_timeout)
        return self.sock.send(data)

    def peer_addr(self) -> Any:
        return self.sock.getpeername()

    def set_read_timeout(self, dur: Timeout) -> None:
        self._read_timeout = _seconds(dur)

    def set_write_timeout(self, dur: Timeout) -> None:
        self._write_timeout = _seconds(dur)

    def close(self, how: int = socket.SHUT_RDWR) -> None:
        try:
            self.sock.shutdown(how)
        except OSError as exc:
            if exc.errno != errno.ENOTCONN:
                raise

    def fileno(self) -> int:
        """The operating-system handle of the socket."""
        return self.sock.fileno()

    def __enter__(self) -> _SocketStream:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.sock.close()


class HttpStream(_SocketStream):
    """A plain TCP connection."""

    def __init__(self, sock: socket.socket) -> None:
        super().__init__(sock)

    def clone(self) -> HttpStream:
        """A second handle on the same connection, with its own descriptor."""
        twin = HttpStream(self.sock.dup())
        twin._read_timeout = self._read_timeout
        twin._write_timeout = self._write_timeout
        return twin

    def fileno(self) -> int:
        return self.sock.fileno()

    def __repr__(self) -> str:
        return "HttpStream(_)"


class TlsStream(_SocketStream):
    """A connection protected by TLS."""

    def __init__(self, sock: _ssl.SSLSocket) -> None:
        super().__init__(sock)

    def clone(self) -> TlsStream:
        """Another handle sharing the same TLS session."""
        twin = TlsStream(self.sock)
        twin._read_timeout = self._read_timeout
        twin._write_timeout = self._write_timeout
        return twin

    def __repr__(self) -> str:
        return "TlsStream(_)"


def _bind(addr: tuple[str, int]) -> socket.socket:
    host, port = addr
    last_error: OSError | None = None
    for family, _, _, _, sockaddr in socket.getaddrinfo(
        host, port, type=socket.SOCK_STREAM
    ):
        try:
            return socket.create_server(sockaddr, family=family)
        except OSError as exc:
            last_error = exc
    if last_error is None:
        raise OSError(f"could not resolve {host!r}")
    raise last_error


class HttpListener(NetworkListener):
    """Listens for plain TCP connections."""

    def __init__(self, addr: tuple[str, int]) -> None:
        self._sock = _bind(addr)

    @classmethod
    def _from_socket(cls, sock: socket.socket) -> HttpListener:
        listener = cls.__new__(cls)
        listener._sock = sock
        return listener

    def accept(self) -> HttpStream:
        conn, _ = self._sock.accept()
        return HttpStream(conn)

    def local_addr(self) -> Any:
        return self._sock.getsockname()

    def clone(self) -> HttpListener:
        return HttpListener._from_socket(self._sock.dup())

    def fileno(self) -> int:
        """The operating-system handle of the listening socket."""
        return self._sock.fileno()

    def __enter__(self) -> HttpListener:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._sock.close()


class HttpConnector(NetworkConnector):
    """Opens plain TCP connections for the ``http`` scheme."""

    def connect(self, host: str, port: int, scheme: str) -> HttpStream:
        if scheme != "http":
            raise ValueError("Invalid scheme for Http")
        logger.debug("http scheme")
        return HttpStream(socket.create_connection((host, port)))

    def __repr__(self) -> str:
        return "HttpConnector()"


DefaultConnector = HttpConnector


class CallableConnector(NetworkConnector):
    """Opens connections with a function ``func(host, port, scheme) -> socket``."""

    def __init__(self, func: Callable[[str, int, str], socket.socket]) -> None:
        self.func = func

    def connect(self, host: str, port: int, scheme: str) -> HttpStream:
        return HttpStream(self.func(host, port, scheme))


class Ssl(ABC):
    """A TLS implementation that can protect client and server streams."""

    @abstractmethod
    def wrap_client(self, stream: HttpStream, host: str) -> NetworkStream:
        """Protect a client connection to ``host``."""

    @abstractmethod
    def wrap_server(self, stream: HttpStream) -> NetworkStream:
        """Protect an accepted server connection."""


class HttpsStream(NetworkStream):
    """A stream that is either plain or protected by TLS."""

    def __init__(self, inner: NetworkStream, secure: bool = False) -> None:
        self.inner = inner
        self.secure = secure

    def read(self, size: int) -> bytes:
        return self.inner.read(size)

    def write(self, data: bytes) -> int:
        return self.inner.write(data)

    def flush(self) -> None:
        self.inner.flush()

    def peer_addr(self) -> Any:
        return self.inner.peer_addr()

    def set_read_timeout(self, dur: Timeout) -> None:
        self.inner.set_read_timeout(dur)

    def set_write_timeout(self, dur: Timeout) -> None:
        self.inner.set_write_timeout(dur)

    def close(self, how: int = socket.SHUT_RDWR) -> None:
        self.inner.close(how)

    def clone(self) -> HttpsStream:
        """Another handle on the same connection."""
        return HttpsStream(self.inner.clone(), self.secure)  # type: ignore[attr-defined]

    def __repr__(self) -> str:
        kind = "Https" if self.secure else "Http"
        return f"HttpsStream.{kind}({self.inner!r})"


class HttpsListener(NetworkListener):
    """Listens for TCP connections and protects each with TLS."""

    def __init__(self, addr: tuple[str, int], ssl: Ssl) -> None:
        self.listener = HttpListener(addr)
        self.ssl = ssl

    @classmethod
    def _from_parts(cls, listener: HttpListener, ssl: Ssl) -> HttpsListener:
        result = cls.__new__(cls)
        result.listener = listener
        result.ssl = ssl
        return result

    def accept(self) -> NetworkStream:
        return self.ssl.wrap_server(self.listener.accept())

    def local_addr(self) -> Any:
        return self.listener.local_addr()

    def clone(self) -> HttpsListener:
        return HttpsListener._from_parts(self.listener.clone(), self.ssl)

    def __enter__(self) -> HttpsListener:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.listener.__exit__(*exc_info)


class HttpsConnector(NetworkConnector):
    """Opens TLS connections for ``https`` and plain ones otherwise."""

    def __init__(self, ssl: Ssl) -> None:
        self.ssl = ssl

    def connect(self, host: str, port: int, scheme: str) -> HttpsStream:
        if scheme == "https":
            logger.debug("https scheme")
            stream = HttpStream(socket.create_connection((host, port)))
            return HttpsStream(self.ssl.wrap_client(stream, host), True)
        return HttpsStream(HttpConnector().connect(host, port, scheme), False)


class TlsContext(Ssl):
    """An ``Ssl`` implementation backed by the standard ``ssl`` module."""

    def __init__(self, context: _ssl.SSLContext | None = None) -> None:
        self.context = context if context is not None else _ssl.create_default_context()

    @classmethod
    def with_cert_and_key(cls, cert: str, key: str) -> TlsContext:
        """A server context from PEM certificate and key files, not verifying peers."""
        context = _ssl.SSLContext(_ssl.PROTOCOL_TLS_SERVER)
        context.set_ciphers("DEFAULT")
        context.load_cert_chain(cert, key)
        context.verify_mode = _ssl.CERT_NONE
        return cls(context)

    def wrap_client(self, stream: HttpStream, host: str) -> TlsStream:
        return TlsStream(self.context.wrap_socket(stream.sock, server_hostname=host))

    def wrap_server(self, stream: HttpStream) -> TlsStream:
        try:
            wrapped = self.context.wrap_socket(stream.sock, server_side=True)
        except _ssl.SSLError:
            raise
        except OSError as exc:
            raise ConnectionAbortedError(str(exc)) from exc
        return TlsStream(wrapped)