"""HTTP status codes and their classes."""

from __future__ import annotations

import functools
from enum import Enum

from hyperwire.reasons import canonical_reason as _reason_for

_MAX_CODE = 0xFFFF
_UNKNOWN_REASON = "<unknown status code>"


@functools.total_ordering
class StatusClass(Enum):
    """The class of a status code, given by its first digit."""

    INFORMATIONAL = 1
    SUCCESS = 2
    REDIRECTION = 3
    CLIENT_ERROR = 4
    SERVER_ERROR = 5
    NO_CLASS = 6

    def default_code(self) -> StatusCode:
        """The x00 code of this class; codes without a class fall back to 200."""
        return StatusCode(_DEFAULT_CODES[self])

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, StatusClass):
            return NotImplemented
        return self.value < other.value

    __hash__ = Enum.__hash__


_DEFAULT_CODES = {
    StatusClass.INFORMATIONAL: 100,
    StatusClass.SUCCESS: 200,
    StatusClass.REDIRECTION: 300,
    StatusClass.CLIENT_ERROR: 400,
    StatusClass.SERVER_ERROR: 500,
    StatusClass.NO_CLASS: 200,
}

_CLASS_BY_DIGIT = {
    1: StatusClass.INFORMATIONAL,
    2: StatusClass.SUCCESS,
    3: StatusClass.REDIRECTION,
    4: StatusClass.CLIENT_ERROR,
    5: StatusClass.SERVER_ERROR,
}


@functools.total_ordering
class StatusCode:
    """An HTTP status code in the range 0 to 65535, registered or not."""

    __slots__ = ("_code",)

    def __init__(self, code: int) -> None:
        if isinstance(code, bool) or not isinstance(code, int):
            raise TypeError(f"status code must be an int, not {type(code).__name__}")
        if not 0 <= code <= _MAX_CODE:
            raise ValueError(f"status code out of range: {code}")
        self._code = code

    @classmethod
    def from_u16(cls, n: int) -> StatusCode:
        """Build a status code from its number."""
        return cls(n)

    def to_u16(self) -> int:
        """The numeric value of this status code."""
        return self._code

    def canonical_reason(self) -> str | None:
        """The standard reason phrase, or None for unregistered codes."""
        return _reason_for(self._code)

    def status_class(self) -> StatusClass:
        """The class of this code, based on its first digit."""
        if 100 <= self._code <= 599:
            return _CLASS_BY_DIGIT[self._code // 100]
        return StatusClass.NO_CLASS

    def is_informational(self) -> bool:
        return self.status_class() is StatusClass.INFORMATIONAL

    def is_success(self) -> bool:
        return self.status_class() is StatusClass.SUCCESS

    def is_redirection(self) -> bool:
        return self.status_class() is StatusClass.REDIRECTION

    def is_client_error(self) -> bool:
        return self.status_class() is StatusClass.CLIENT_ERROR

    def is_server_error(self) -> bool:
        return self.status_class() is StatusClass.SERVER_ERROR

    def is_strange_status(self) -> bool:
        return self.status_class() is StatusClass.NO_CLASS

    def __str__(self) -> str:
        return f"{self._code} {self.canonical_reason() or _UNKNOWN_REASON}"

    def __repr__(self) -> str:
        return f"StatusCode({self._code})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatusCode):
            return NotImplemented
        return self._code == other._code

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, StatusCode):
            return NotImplemented
        return self._code < other._code

    def __hash__(self) -> int:
        return hash(self._code)