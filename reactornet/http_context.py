"""Incremental state-machine parser for HTTP requests."""

from __future__ import annotations

import enum
import re
from typing import Any, Union

from reactornet.http_request import HttpRequest

CR = "\r"
LF = "\n"
_BLANK = " \t"

_ATOI = re.compile(r"\s*([+-]?\d+)")


class ParseState(enum.Enum):
    INVALID = enum.auto()
    INVALID_METHOD = enum.auto()
    INVALID_URL = enum.auto()
    INVALID_VERSION = enum.auto()
    INVALID_HEADER = enum.auto()

    START = enum.auto()
    METHOD = enum.auto()

    BEFORE_URL = enum.auto()
    IN_URL = enum.auto()

    BEFORE_URL_PARAM_KEY = enum.auto()
    URL_PARAM_KEY = enum.auto()
    BEFORE_URL_PARAM_VALUE = enum.auto()
    URL_PARAM_VALUE = enum.auto()

    BEFORE_PROTOCOL = enum.auto()
    PROTOCOL = enum.auto()

    BEFORE_VERSION = enum.auto()
    VERSION = enum.auto()

    HEADER_KEY = enum.auto()
    HEADER_VALUE = enum.auto()

    WHEN_CR = enum.auto()
    CR_LF = enum.auto()
    CR_LF_CR = enum.auto()
    HEADERS_COMPLETE = enum.auto()

    BODY = enum.auto()

    COMPLETE = enum.auto()


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def _is_upper(ch: str) -> bool:
    return "A" <= ch <= "Z"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def parse_url_encoded_form(body: str, request: HttpRequest) -> None:
    """Store each ``key=value`` pair of a ``&``-separated body as a parameter.

    Parsing stops at the first piece that has no '='.
    """
    start = 0
    while start < len(body):
        equal = body.find("=", start)
        if equal == -1:
            break
        amp = body.find("&", equal)
        key = body[start:equal]
        value = body[equal + 1:] if amp == -1 else body[equal + 1:amp]
        request.set_param(key, value)
        if amp == -1:
            break
        start = amp + 1


class HttpContext:
    """Holds the parser state and the request being built.

    Bytes are decoded as Latin-1 so every byte maps to one character.
    ``context`` is free for the caller to attach its own data.
    """

    def __init__(self) -> None:
        self.request = HttpRequest()
        self.state = ParseState.START
        self.context: Any = None

    def is_complete(self) -> bool:
        return self.state is ParseState.COMPLETE

    def reset(self) -> None:
        """Start over with a fresh request."""
        self.state = ParseState.START
        self.request = HttpRequest()

    def _content_length(self) -> int:
        value = self.request.headers.get("Content-Length")
        return _atoi(value) if value is not None else 0

    def parse_request(self, data: Union[bytes, bytearray, memoryview, str]) -> ParseState:
        """Feed ``data`` to the parser and return the resulting state.

        Returns ``ParseState.HEADERS_COMPLETE`` when the headers are done but
        the body has not fully arrived; the parser then stays in ``BODY``.
        """
        text = bytes(data).decode("latin-1") if not isinstance(data, str) else data
        size = len(text)
        request = self.request
        S = ParseState
        start = end = colon = 0

        while self.state not in (S.INVALID, S.COMPLETE) and end < size:
            ch = text[end]
            state = self.state

            if state is S.START:
                if ch in (CR, LF) or ch in _BLANK:
                    pass
                elif _is_upper(ch):
                    self.state = S.METHOD
                else:
                    self.state = S.INVALID
            elif state is S.METHOD:
                if _is_upper(ch):
                    pass
                elif ch in _BLANK:
                    request.set_method(text[start:end])
                    self.state = S.BEFORE_URL
                    start = end + 1
                else:
                    self.state = S.INVALID
            elif state is S.BEFORE_URL:
                if ch == "/":
                    self.state = S.IN_URL
                    start = end
                elif ch in _BLANK:
                    pass
                else:
                    self.state = S.INVALID
            elif state is S.IN_URL:
                if ch == "?":
                    request.url = text[start:end]
                    start = end + 1
                    self.state = S.BEFORE_URL_PARAM_KEY
                elif ch in _BLANK:
                    request.url = text[start:end]
                    start = end + 1
                    self.state = S.BEFORE_PROTOCOL
            elif state is S.BEFORE_URL_PARAM_KEY:
                if ch in _BLANK or ch in (CR, LF):
                    self.state = S.INVALID
                else:
                    self.state = S.URL_PARAM_KEY
            elif state is S.URL_PARAM_KEY:
                if ch == "=":
                    colon = end
                    self.state = S.BEFORE_URL_PARAM_VALUE
                elif ch in _BLANK:
                    self.state = S.INVALID
            elif state is S.BEFORE_URL_PARAM_VALUE:
                if ch in _BLANK or ch in (CR, LF):
                    self.state = S.INVALID
                else:
                    self.state = S.URL_PARAM_VALUE
            elif state is S.URL_PARAM_VALUE:
                if ch == "&":
                    request.set_param(text[start:colon], text[colon + 1:end])
                    start = end + 1
                    self.state = S.BEFORE_URL_PARAM_KEY
                elif ch in _BLANK:
                    request.set_param(text[start:colon], text[colon + 1:end])
                    start = end + 1
                    self.state = S.BEFORE_PROTOCOL
            elif state is S.BEFORE_PROTOCOL:
                if ch not in _BLANK:
                    self.state = S.PROTOCOL
                    start = end
            elif state is S.PROTOCOL:
                if ch == "/":
                    request.protocol = text[start:end]
                    start = end + 1
                    self.state = S.BEFORE_VERSION
            elif state is S.BEFORE_VERSION:
                if _is_digit(ch):
                    self.state = S.VERSION
                    start = end
                else:
                    self.state = S.INVALID
            elif state is S.VERSION:
                if ch == CR:
                    request.set_version(text[start:end])
                    start = end + 1
                    self.state = S.WHEN_CR
                elif not (_is_digit(ch) or ch == "."):
                    self.state = S.INVALID
            elif state is S.HEADER_KEY:
                if ch == ":":
                    colon = end
                    self.state = S.HEADER_VALUE
            elif state is S.HEADER_VALUE:
                if start == colon + 1 and ch in _BLANK:
                    start += 1
                elif ch == CR:
                    request.add_header(text[start:colon], text[colon + 2:end])
                    start = end + 1
                    self.state = S.WHEN_CR
            elif state is S.WHEN_CR:
                if ch == LF:
                    start = end + 1
                    self.state = S.CR_LF
                else:
                    self.state = S.INVALID
            elif state is S.CR_LF:
                if ch == CR:
                    self.state = S.CR_LF_CR
                elif ch in _BLANK:
                    self.state = S.INVALID
                else:
                    start = end
                    self.state = S.HEADER_KEY
            elif state is S.CR_LF_CR:
                if ch == LF:
                    self.state = S.BODY if self._content_length() > 0 else S.COMPLETE
                    start = end + 1
                else:
                    self.state = S.INVALID
            elif state is S.BODY:
                content_length = self._content_length()
                if size - start >= content_length:
                    request.body = text[start:start + content_length]
                    self.state = S.COMPLETE
                    if request.method_string() == "POST":
                        content_type = request.headers.get("Content-Type")
                        if (
                            content_type is not None
                            and "application/x-www-form-urlencoded" in content_type
                        ):
                            parse_url_encoded_form(request.body, request)
                else:
                    request.body = text[start:]
                    return S.HEADERS_COMPLETE
            else:
                self.state = S.INVALID

            end += 1

        return self.state