# hyperwire

Small building blocks for HTTP software in Python. It has no dependencies
beyond the standard library.

## What is inside

- `hyperwire.status` provides `StatusCode` and `StatusClass`. Any integer from 0 to
  65535 is a valid status code. Anything else raises `ValueError`, and a
  non-integer raises `TypeError`.
  - `canonical_reason()` returns the reason phrase for a registered code and
    `None` for any other code.
  - `status_class()` returns the class of a code. Codes outside 100–599 fall in
    `StatusClass.NO_CLASS`.
  - `StatusClass.default_code()` gives the `x00` fallback code for a class. For
    `NO_CLASS` it gives 200.
  - Codes compare and hash by their number.
  - `str()` gives the number and the reason, for example `404 Not Found`.
- `hyperwire.reasons` provides `canonical_reason(code)`, `is_registered(code)` and
  `registered_codes()`. These functions work with plain integers.
- `hyperwire.version` provides `HttpVersion`. It is an ordered enum of `HTTP/0.9`,
  `HTTP/1.0`, `HTTP/1.1` and `HTTP/2.0`.
- `hyperwire.uri` provides `RequestUri.parse()` and `parse_request_uri()`. These
  sort a request target into one of four forms, given by `UriKind`:
  - `ABSOLUTE_PATH`
  - `ABSOLUTE_URI`
  - `AUTHORITY`
  - `STAR`

  Bad input raises `UriError`, a `ValueError`. For absolute URIs, the scheme and
  host are lower-cased. A URI with the `http`, `https`, `ws`, `wss` or `ftp`
  scheme and an empty path gets the path `/`.
- `hyperwire.net` provides abstract `NetworkStream`, `NetworkListener`,
  `NetworkConnector` and `Ssl` classes. It also provides implementations of
  them:
  - `HttpStream` and `HttpListener` work over plain TCP.
  - `HttpConnector` accepts only the `http` scheme and raises `ValueError`
    otherwise.
  - `CallableConnector` wraps a function `func(host, port, scheme) -> socket`.
  - `HttpsStream`, `HttpsListener` and `HttpsConnector` are the TLS
    counterparts.
  - `TlsStream` and `TlsContext` are built on the standard `ssl` module.
- `hyperwire.listener` provides `ListenerPool`. It clones a listener once per
  thread and hands each accepted stream to a work function.
  - When a worker dies from an exception, it is replaced.
  - An `OSError` from `accept()` is logged and skipped.
  - A worker stops for good when its listener's `accept()` raises
    `StopIteration`.
  - `ListenerPool.accept(work, threads)` blocks until all workers have stopped.
    It raises `ValueError` when `threads` is less than 1.

## Installing

```
pip install hyperwire
```

## Examples

```python
from hyperwire.status import StatusCode, StatusClass

print(StatusCode(418))              # 418 I'm a teapot
print(StatusCode(123))              # 123 <unknown status code>
assert StatusCode(471).status_class().default_code() == StatusCode(400)
assert StatusClass.NO_CLASS.default_code() == StatusCode(200)
```

```python
from hyperwire.uri import RequestUri, UriKind

assert RequestUri.parse("/where?q=now").kind is UriKind.ABSOLUTE_PATH
assert RequestUri.parse("*").kind is UriKind.STAR
assert str(RequestUri.parse("HTTP://Example.COM")) == "http://example.com/"
```

```python
from hyperwire.version import HttpVersion

assert str(HttpVersion.HTTP_11) == "HTTP/1.1"
assert HttpVersion.HTTP_10 < HttpVersion.HTTP_11
```

### Serving connections on a pool of threads

```python
import socket

from hyperwire.listener import ListenerPool
from hyperwire.net import HttpListener

def work(stream):
    with stream:
        stream.write(b"HTTP/1.1 204 No Content\r\n\r\n")
        stream.close(socket.SHUT_RDWR)

listener = HttpListener(("127.0.0.1", 8080))
ListenerPool(listener).accept(work, threads=4)   # blocks
```

### TLS

- **Server side:** build a context with
  `TlsContext.with_cert_and_key("cert.pem", "key.pem")` and pass it to
  `HttpsListener`. Each accepted connection is wrapped on the server side, and
  client certificates are not verified.
- **Client side:** pass `TlsContext()` to `HttpsConnector`. `TlsContext()` uses
  the standard library's default client context. `HttpsConnector` protects
  `https` connections and opens plain ones for `http`.

## What it does not do

hyperwire does not parse HTTP requests or write HTTP responses. It has no
request handler interface, no ready-made server loop and no HTTP client.
Those are left to the code that uses it.

The streams move raw bytes, and `ListenerPool` only hands each connection to
your function.

## Running the tests

```
pip install -e .[test]
pytest
```