"""FujiNet network device helpers: JSON queries and URL protocols."""

from __future__ import annotations

import json
import re
import urllib.error
import urllib.parse
import urllib.request
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, Optional, Union

METHOD_GET = 12

_INTEGER = re.compile(r"[+-]?[0-9]+")


class ErrorCode(IntEnum):
    """Network status codes reported to the emulated machine."""

    NO_ERROR = 0
    END_OF_FILE = 136
    GENERAL = 144
    NOT_IMPLEMENTED = 146
    INVALID_DEVICE_SPEC = 165
    JSON_PARSE_ERROR = 250


class ProtocolError(Exception):
    """A network operation failed with a FujiNet error code."""

    def __init__(self, code: ErrorCode, message: Optional[str] = None) -> None:
        self.code = ErrorCode(code)
        super().__init__(message or f"network error {int(self.code)} ({self.code.name})")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


def get_json_value(data: Any) -> bytes:
    """Flatten a JSON value into the bytes returned for a query."""
    if data is None:
        return b"NULL"
    if isinstance(data, bool):
        return b"TRUE" if data else b"FALSE"
    if isinstance(data, int):
        return str(data).encode()
    if isinstance(data, float):
        return str(int(data)).encode()
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, list):
        return b"".join(get_json_value(item) for item in data)
    if isinstance(data, dict):
        return b"".join(key.encode("utf-8") + get_json_value(value) for key, value in data.items())
    return b"UNKNOWN"


class FnJson:
    """A parsed JSON document that answers slash separated path queries."""

    def __init__(self) -> None:
        self.data: Any = None
        self.result = b""

    def parse(self, data: Union[bytes, bytearray, str]) -> None:
        """Parse ``data``; raise ProtocolError when it is not valid JSON."""
        text = data if isinstance(data, str) else bytes(data).decode("utf-8", errors="replace")
        try:
            self.data = json.loads(text, parse_constant=_reject_constant)
        except ValueError as error:
            raise ProtocolError(ErrorCode.JSON_PARSE_ERROR) from error

    def query(self, query: Union[bytes, bytearray, str]) -> bytes:
        """Look up a path such as ``/0/account/name`` and store the result.

        Missing keys, bad array indexes and paths through leaves give NULL.
        """
        if isinstance(query, str):
            query = query.encode("utf-8")
        query = bytes(query)
        if query and query[-1] == 0:
            query = query[:-1]
        text = query.decode("utf-8", errors="replace")
        text = text.removesuffix("/0").removeprefix("/").removesuffix("/")
        path = text.split("/")

        self.result = get_json_value(None)
        current = self.data
        for step in path:
            if isinstance(current, dict):
                if step not in current:
                    return self.result
                current = current[step]
            elif isinstance(current, list):
                if not _INTEGER.fullmatch(step):
                    return self.result
                index = int(step)
                if not 0 <= index < len(current):
                    return self.result
                current = current[index]
            else:
                return self.result

        self.result = get_json_value(current)
        return self.result


class Protocol(ABC):
    """A network protocol handler for one opened URL."""

    @abstractmethod
    def open(self, url: str) -> None:
        """Remember the URL to work on."""

    @abstractmethod
    def close(self) -> None:
        """Release the connection."""

    @abstractmethod
    def read_all(self) -> bytes:
        """Return the whole content; raise ProtocolError on failure."""

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Send data."""


class HttpProtocol(Protocol):
    """HTTP and HTTPS access; only GET is supported."""

    def __init__(self, method: int) -> None:
        self.method = method
        self.url: Optional[str] = None
        self.outgoing = bytearray()

    def open(self, url: str) -> None:
        self.url = url

    def close(self) -> None:
        """Forget the opened URL and any data written to it."""
        self.url = None
        self.outgoing.clear()

    def read_all(self) -> bytes:
        if self.method != METHOD_GET:
            raise ProtocolError(ErrorCode.NOT_IMPLEMENTED)
        if self.url is None:
            raise ProtocolError(ErrorCode.GENERAL, "no URL opened")
        try:
            with urllib.request.urlopen(self.url) as response:
                return response.read()
        except (OSError, ValueError) as error:
            raise ProtocolError(ErrorCode.GENERAL) from error

    def write(self, data: bytes) -> None:
        """Accept data; it is kept but never sent."""
        self.outgoing.extend(data)


def instantiate_protocol(
    url: Union[str, urllib.parse.SplitResult], method: int
) -> Protocol:
    """Return the handler for the scheme of ``url``."""
    parsed = urllib.parse.urlsplit(url) if isinstance(url, str) else url
    if parsed.scheme.upper() in ("HTTP", "HTTPS"):
        return HttpProtocol(method)
    raise ProtocolError(ErrorCode.GENERAL, f"unsupported scheme {parsed.scheme!r}")