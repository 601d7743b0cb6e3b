"""The request-target of an HTTP request line."""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlsplit, urlunsplit

_SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*:")
_SPECIAL_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp"})
_FORBIDDEN_HOST_CHARS = frozenset(" #%/:<>?@[\\]^|")


class UriError(ValueError):
    """Raised when a request-target cannot be parsed."""


class UriKind(Enum):
    """The four forms a request-target can take."""

    ABSOLUTE_PATH = "absolute-path"
    ABSOLUTE_URI = "absolute-uri"
    AUTHORITY = "authority"
    STAR = "star"


def _has_control(s: str) -> bool:
    return any(ord(c) < 0x20 or ord(c) == 0x7F for c in s)


def _split_authority(netloc: str) -> tuple[str, str, str | None]:
    """Split an authority into userinfo, host and port text."""
    userinfo, at, hostport = netloc.rpartition("@")
    if not at:
        userinfo = ""
    if hostport.startswith("["):
        end = hostport.find("]")
        if end == -1:
            raise UriError("invalid IPv6 address")
        host, rest = hostport[: end + 1], hostport[end + 1 :]
        if not rest:
            return userinfo, host, None
        if not rest.startswith(":"):
            raise UriError("invalid port number")
        return userinfo, host, rest[1:]
    host, colon, port = hostport.rpartition(":")
    if not colon:
        return userinfo, hostport, None
    return userinfo, host, port


def _validate_authority(netloc: str) -> str:
    """Check an authority and return it with its host lower-cased."""
    userinfo, host, port = _split_authority(netloc)
    if not host:
        raise UriError("empty host")
    if host.startswith("["):
        try:
            ipaddress.IPv6Address(host[1:-1])
        except ValueError as exc:
            raise UriError("invalid IPv6 address") from exc
    else:
        if any(c in _FORBIDDEN_HOST_CHARS for c in host) or _has_control(host):
            raise UriError("invalid domain character")
        host = host.lower()
    if port:
        if not port.isdigit() or int(port) > 0xFFFF:
            raise UriError("invalid port number")
    result = host if port is None else f"{host}:{port}"
    return f"{userinfo}@{result}" if userinfo else result


def _parse_absolute(s: str) -> str:
    match = _SCHEME_RE.match(s)
    if match is None:
        raise UriError("relative URL without a base")
    if _has_control(s):
        raise UriError("invalid character")
    parts = urlsplit(s)
    scheme = parts.scheme.lower()
    netloc = parts.netloc
    path = parts.path
    if scheme in _SPECIAL_SCHEMES:
        if not netloc:
            raise UriError("empty host")
        if not path:
            path = "/"
    if netloc:
        netloc = _validate_authority(netloc)
    return urlunsplit((scheme, netloc, path, parts.query, parts.fragment))


def _parse_authority(s: str) -> str:
    if _has_control(s):
        raise UriError("invalid character")
    parts = urlsplit("http://" + s)
    if parts.netloc != s:
        raise UriError("not an authority")
    _validate_authority(s)
    return s


@dataclass(frozen=True)
class RequestUri:
    """A parsed request-target: its form and its text."""

    kind: UriKind
    value: str = "*"

    @classmethod
    def parse(cls, s: str) -> RequestUri:
        """Parse a request-target as found on a request line."""
        if not s:
            raise UriError("invalid character")
        if s == "*":
            return cls(UriKind.STAR, "*")
        if s.startswith("/"):
            return cls(UriKind.ABSOLUTE_PATH, s)
        if "/" in s:
            return cls(UriKind.ABSOLUTE_URI, _parse_absolute(s))
        return cls(UriKind.AUTHORITY, _parse_authority(s))

    def __str__(self) -> str:
        return self.value


def parse_request_uri(s: str) -> RequestUri:
    """Parse a request-target; same as ``RequestUri.parse``."""
    return RequestUri.parse(s)