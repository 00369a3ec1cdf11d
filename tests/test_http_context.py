import pytest

from reactornet.http_context import HttpContext, ParseState, parse_url_encoded_form
from reactornet.http_request import HttpRequest, Method, Version


def test_simple_get_complete():
    ctx = HttpContext()
    state = ctx.parse_request(b"GET /index.html HTTP/1.1\r\nHost: localhost\r\n\r\n")
    assert state is ParseState.COMPLETE
    assert ctx.is_complete()
    req = ctx.request
    assert req.method is Method.GET
    assert req.url == "/index.html"
    assert req.protocol == "HTTP"
    assert req.version is Version.HTTP11
    assert req.get_header("Host") == "localhost"


def test_text_and_bytes_parse_alike():
    raw = "GET /a HTTP/1.0\r\nAccept: text/html\r\n\r\n"
    a, b = HttpContext(), HttpContext()
    assert a.parse_request(raw) is b.parse_request(raw.encode())
    assert a.request == b.request


def test_query_parameters():
    ctx = HttpContext()
    state = ctx.parse_request(b"GET /search?q=abc&page=2 HTTP/1.0\r\n\r\n")
    assert state is ParseState.COMPLETE
    assert ctx.request.url == "/search"
    assert ctx.request.params == {"q": "abc", "page": "2"}
    assert ctx.request.version is Version.HTTP10


def test_post_form_body_becomes_params():
    ctx = HttpContext()
    raw = (
        b"POST /login HTTP/1.1\r\n"
        b"Content-Type: application/x-www-form-urlencoded\r\n"
        b"Content-Length: 7\r\n\r\n"
        b"a=1&b=2"
    )
    assert ctx.parse_request(raw) is ParseState.COMPLETE
    assert ctx.request.body == "a=1&b=2"
    assert ctx.request.get_param("a") == "1"
    assert ctx.request.get_param("b") == "2"


def test_post_json_body_not_parsed_as_form():
    ctx = HttpContext()
    body = b'{"k":"v"}'
    raw = (
        b"POST /api HTTP/1.1\r\nContent-Type: application/json\r\n"
        b"Content-Length: " + str(len(body)).encode() + b"\r\n\r\n" + body
    )
    assert ctx.parse_request(raw) is ParseState.COMPLETE
    assert ctx.request.body == body.decode()
    assert ctx.request.params == {}


def test_incomplete_body_reports_headers_complete():
    ctx = HttpContext()
    raw = b"POST /up HTTP/1.1\r\nContent-Length: 10\r\n\r\nabcd"
    assert ctx.parse_request(raw) is ParseState.HEADERS_COMPLETE
    assert ctx.state is ParseState.BODY
    assert not ctx.is_complete()
    assert ctx.request.body == "abcd"


def test_partial_headers_wait_for_more():
    ctx = HttpContext()
    state = ctx.parse_request(b"GET / HTTP/1.1\r\nHost: lo")
    assert state is ParseState.HEADER_VALUE
    assert not ctx.is_complete()


@pytest.mark.parametrize(
    "raw",
    [
        b"get / HTTP/1.1\r\n\r\n",
        b"GET index HTTP/1.1\r\n\r\n",
        b"GET / HTTP/x\r\n\r\n",
        b"GET / HTTP/1.1\rX",
        b"GET / HTTP/1.1\r\n Host: a\r\n\r\n",
        b"GET /p? HTTP/1.1\r\n\r\n",
    ],
)
def test_invalid_requests(raw):
    ctx = HttpContext()
    assert ctx.parse_request(raw) is ParseState.INVALID
    assert not ctx.is_complete()


def test_leading_line_break_is_kept_in_method():
    ctx = HttpContext()
    state = ctx.parse_request(b"\r\nGET / HTTP/1.1\r\n\r\n")
    assert state is ParseState.COMPLETE
    assert ctx.request.method is Method.INVALID
    assert ctx.request.url == "/"


def test_reset_gives_fresh_request():
    ctx = HttpContext()
    ctx.parse_request(b"GET /x HTTP/1.1\r\n\r\n")
    ctx.reset()
    assert ctx.state is ParseState.START
    assert ctx.request == HttpRequest()
    assert ctx.parse_request(b"DELETE /y HTTP/1.1\r\n\r\n") is ParseState.COMPLETE
    assert ctx.request.method is Method.DELETE
    assert ctx.request.url == "/y"


def test_parse_url_encoded_form_stops_without_equals():
    req = HttpRequest()
    parse_url_encoded_form("x=1&y&z=3", req)
    assert req.params == {"x": "1"}


def test_parse_url_encoded_form_empty_value():
    req = HttpRequest()
    parse_url_encoded_form("name=&city=Paris", req)
    assert req.params == {"name": "", "city": "Paris"}