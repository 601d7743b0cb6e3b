"""HTTP protocol versions."""

from __future__ import annotations

import functools
from enum import Enum


@functools.total_ordering
class HttpVersion(Enum):
    """A version of the HTTP specification, ordered from oldest to newest."""

    HTTP_09 = "HTTP/0.9"
    HTTP_10 = "HTTP/1.0"
    HTTP_11 = "HTTP/1.1"
    HTTP_20 = "HTTP/2.0"

    def __str__(self) -> str:
        return self.value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, HttpVersion):
            return NotImplemented
        members = list(type(self))
        return members.index(self) < members.index(other)

    __hash__ = Enum.__hash__