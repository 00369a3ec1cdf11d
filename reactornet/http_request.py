"""The parts of one HTTP request: method, target, parameters, headers and body."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict


class Method(enum.Enum):
    INVALID = 0
    GET = 1
    POST = 2
    HEAD = 3
    PUT = 4
    DELETE = 5


class Version(enum.Enum):
    UNKNOWN = 0
    HTTP10 = 1
    HTTP11 = 2


_METHODS = {m.name: m for m in Method if m is not Method.INVALID}
_VERSIONS = {"1.0": Version.HTTP10, "1.1": Version.HTTP11}
_VERSION_STRINGS = {Version.HTTP10: "HTTP/1.0", Version.HTTP11: "HTTP/1.1"}


@dataclass
class HttpRequest:
    """A parsed HTTP request.

    ``params`` holds query and form parameters, ``headers`` the header fields.
    Missing parameters and headers read as the empty string.
    """

    method: Method = Method.INVALID
    version: Version = Version.UNKNOWN
    url: str = ""
    protocol: str = ""
    params: Dict[str, str] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""

    def set_version(self, ver: str) -> None:
        """Set the version from its number, "1.0" or "1.1"; anything else is unknown."""
        self.version = _VERSIONS.get(ver, Version.UNKNOWN)

    def version_string(self) -> str:
        return _VERSION_STRINGS.get(self.version, "UNKNOWN")

    def set_method(self, method: str) -> bool:
        """Set the method, ignoring case; return whether it was recognised."""
        self.method = _METHODS.get(method.upper(), Method.INVALID)
        return self.method is not Method.INVALID

    def method_string(self) -> str:
        return self.method.name

    def set_param(self, key: str, value: str) -> None:
        self.params[key] = value

    def get_param(self, key: str) -> str:
        return self.params.get(key, "")

    def add_header(self, field: str, value: str) -> None:
        self.headers[field] = value

    def get_header(self, field: str) -> str:
        return self.headers.get(field, "")

    def is_keep_alive(self) -> bool:
        """True if the client asked for keep-alive or speaks HTTP/1.1."""
        if self.headers.get("Connection") in ("keep-alive", "Keep-Alive"):
            return True
        return self.version is Version.HTTP11