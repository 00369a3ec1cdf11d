"""Building HTTP responses: status line, headers and body."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from email.utils import formatdate
from typing import Dict, Union


class HttpStatusCode(enum.IntEnum):
    UNKNOWN = 0
    CONTINUE = 100
    OK = 200
    CREATED = 201
    NO_CONTENT = 204
    PARTIAL_CONTENT = 206
    FOUND = 302
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    RANGE_NOT_SATISFIABLE = 416
    INTERNAL_SERVER_ERROR = 500


_DEFAULT_MESSAGES = {
    HttpStatusCode.CONTINUE: "Continue",
    HttpStatusCode.OK: "OK",
    HttpStatusCode.CREATED: "Created",
    HttpStatusCode.NO_CONTENT: "No Content",
    HttpStatusCode.FOUND: "Found",
    HttpStatusCode.BAD_REQUEST: "Bad Request",
    HttpStatusCode.UNAUTHORIZED: "Unauthorized",
    HttpStatusCode.FORBIDDEN: "Forbidden",
    HttpStatusCode.NOT_FOUND: "Not Found",
    HttpStatusCode.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HttpStatusCode.INTERNAL_SERVER_ERROR: "Internal Server Error",
}


def default_status_message(code: Union[HttpStatusCode, int]) -> str:
    """Return the reason phrase used for ``code``, or "Unknown"."""
    try:
        code = HttpStatusCode(code)
    except ValueError:
        return "Unknown"
    return _DEFAULT_MESSAGES.get(code, "Unknown")


@dataclass
class HttpResponse:
    """An HTTP response under construction.

    ``body`` may be text (sent as UTF-8) or bytes.
    """

    close_connection: bool = False
    status_code: HttpStatusCode = HttpStatusCode.UNKNOWN
    status_message: str = ""
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    body: Union[str, bytes] = ""
    is_async: bool = False

    def set_status_code(self, code: Union[HttpStatusCode, int]) -> None:
        """Set the status code and its default reason phrase."""
        self.status_code = HttpStatusCode(code)
        self.status_message = default_status_message(self.status_code)

    def set_content_type(self, content_type: str) -> None:
        self.add_header("Content-Type", content_type)

    def add_header(self, key: str, value: str) -> None:
        """Set header ``key``, replacing any earlier value."""
        self.headers[key] = value

    def add_set_cookie(self, cookie: str) -> None:
        """Add a Set-Cookie header unless one is already present."""
        self.headers.setdefault("Set-Cookie", cookie)

    def add_date_header(self) -> None:
        """Set the Date header to the current time in GMT."""
        self.add_header("Date", formatdate(usegmt=True))

    def _body_bytes(self) -> bytes:
        if isinstance(self.body, str):
            return self.body.encode()
        return bytes(self.body)

    def _status_line(self) -> str:
        return f"{self.version} {int(self.status_code)} {self.status_message}\r\n"

    def response_message(self) -> bytes:
        """Return the full response: status line, headers, blank line and body."""
        self.add_date_header()
        body = self._body_bytes()
        lines = [
            self._status_line(),
            f"Content-Length: {len(body)}\r\n",
            "Connection: close\r\n" if self.close_connection else "Connection: Keep-Alive\r\n",
        ]
        lines.extend(f"{key}: {value}\r\n" for key, value in self.headers.items())
        lines.append("\r\n")
        return "".join(lines).encode() + body

    def debug_print(self) -> None:
        """Print the full response between marker lines."""
        print("----- HTTP Response Begin -----")
        print(self.response_message().decode("utf-8", "replace"), end="")
        print("\n----- HTTP Response End -----")