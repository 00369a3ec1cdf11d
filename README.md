# reactornet

`reactornet` is a small networking toolkit built around the reactor pattern.
One main event loop accepts TCP connections and hands each one to a sub-loop
running on its own thread. Around that core it offers:

- an incremental HTTP/1.x request parser (`reactornet.http_context`,
  `reactornet.http_request`) and a response builder
  (`reactornet.http_response`);
- a growable byte buffer with cheap prepend space (`reactornet.buffer`);
- a task thread pool returning futures (`reactornet.thread_pool`);
- log-record building blocks (`LogBuffer`, `LogStream`, `fmt`) and a
  double-buffered background writer (`AsyncLog`) that writes hourly log files
  (`LogFile`);
- a microsecond timestamp (`TimeStamp`) and a count-down latch (`Latch`);
- helpers for cookies, URL decoding, file-type detection, SQL escaping and
  random codes (`reactornet.util`).

It has no third-party dependencies. It needs Python 3.10 or later and a POSIX
system.

## Running a TCP server

`TcpServer` listens on an address, accepts clients on its main `EventLoop`
and spreads them over `thread_num` sub-loops (a client goes to sub-loop
`fd % thread_num`). Callbacks are plain attributes:

```python
from reactornet.tcp_server import TcpServer

server = TcpServer("127.0.0.1", 8080, thread_num=3)
server.message_callback = lambda conn, message: conn.send(message)  # echo
server.start()  # runs the main loop on this thread until server.stop()
```

`message_callback` receives the `Connection` and the bytes read since the
socket was last drained. The other callbacks are
`new_connection_callback`, `close_connection_callback`,
`error_connection_callback`, `send_complete_callback` and
`timeout_callback` (called with the loop when a poll times out with nothing
to do). Pass port `0` and read `server.acceptor.address` to learn the port
that was chosen. Call `stop()` from another thread (for example a signal
handler) to stop every loop and I/O thread.

Each sub-loop runs an alarm, first after `time_out` seconds and then every
`time_tval` seconds. Connections that received nothing for more than
`time_out` seconds are then removed from the loop's and the server's
`connections` tables; their sockets are not closed by this.

`Connection.send()` may be called from any thread; from outside the loop's
own thread the data is queued with `EventLoop.queue_in_loop()`. Output is
sent in chunks of at most 512 KiB.

## Parsing HTTP requests

`HttpContext` is a state machine: feed it the bytes that arrived on a
connection and it tells you how far it got.

```python
from reactornet.http_context import HttpContext, ParseState

context = HttpContext()
state = context.parse_request(
    b"GET /files?page=2 HTTP/1.1\r\n"
    b"Host: example.com\r\n"
    b"\r\n"
)
assert state is ParseState.COMPLETE
request = context.request
assert request.url == "/files"
assert request.get_param("page") == "2"
assert request.get_header("Host") == "example.com"
context.reset()  # ready for the next request on the same connection
```

When the headers are done but a body announced by `Content-Length` has not
fully arrived, `parse_request` returns `ParseState.HEADERS_COMPLETE`. A
`POST` body sent as `application/x-www-form-urlencoded` is split into request
parameters once it is complete (`parse_url_encoded_form`). Missing parameters
and headers read as the empty string. `HttpContext.context` is free for your
own data, as is `Connection.context`.

## Building responses

```python
from reactornet.http_response import HttpResponse, HttpStatusCode

response = HttpResponse(False)            # keep the connection alive
response.set_status_code(HttpStatusCode.OK)
response.set_content_type("text/plain")
response.add_set_cookie("sessionId=token; Path=/")
response.body = "hello"
payload = response.response_message()     # bytes: status line, headers, body
```

`response_message()` always adds `Date`, `Content-Length` and a `Connection`
header (`close` or `Keep-Alive`). `default_status_message()` gives the
reason phrase for a code, or `"Unknown"`.

## Buffers and thread pools

```python
from reactornet.buffer import Buffer
from reactornet.thread_pool import ThreadPool

buf = Buffer()
buf.append(b"hello ")
buf.append(b"world")
assert buf.retrieve_all_as_bytes() == b"hello world"

pool = ThreadPool(4, "Work")
future = pool.submit(sum, [1, 2, 3])
assert future.result() == 6
pool.stop()
```

Retrieving more bytes than are readable, or prepending more than the space in
front of the data, raises `ValueError`. Submitting to a stopped pool raises
`RuntimeError`; tasks still queued when the workers exit are cancelled. Each
worker prints a `create <type> thread(<id>).` line when it starts.

## Log records and log files

`LogStream` collects one record in a fixed 4 KiB buffer; data that does not
fit is dropped with a warning on stderr.

```python
from reactornet.log_stream import LogStream, fmt

stream = LogStream()
stream << "port " << 8080 << " ready " << True
assert stream.getvalue() == b"port 8080 ready 1"
assert fmt(".%06d", 42) == b".000042"
```

`AsyncLog` takes data from any thread and writes it on a background thread,
at once when a buffer fills and otherwise at least every three seconds:

```python
from reactornet.async_log import AsyncLog

writer = AsyncLog("logs/")
writer.start()
writer.append(b"server started\n")
writer.stop()   # writes whatever is pending, then joins the thread
```

If the path cannot be opened as a file it is used as a prefix: data goes to
`logs/YYYYMMDD/LogFile_YYYYMMDD_HH.log` (the `logs` directory itself must
exist; the dated one is created). A new file is started when the hour
changes, and once a file reaches 1 GiB the writer continues in a fresh file
under a dated directory in the current working directory. `LogFile` can also
be used on its own and as a context manager.

## Utilities

`reactornet.util` provides `parse_cookie`, `escape_regex`, `url_decode`,
`get_file_type` (`"image"`, `"video"`, `"pdf"`, `"word"`, `"excel"`,
`"powerpoint"`, `"text"`, `"other"` or `"unknown"`),
`generate_unique_file_name`, `string_digest` (a short non-cryptographic
digest), `generate_session_id`, `generate_share_code`,
`generate_extract_code`, and `escape_string`, which escapes text with any
database connection object that has an `escape_string` method (or exposes
one as `raw`) and returns the text unchanged when given `None`.

## What it does not do

- There is no levelled logging front end: nothing formats lines with
  timestamps, thread ids and levels for you. Build records with `LogStream`
  and hand them to `AsyncLog` or `LogFile` yourself.
- There is no database access or connection pool; `escape_string` only works
  with a connection object you supply.
- There is no ready-made HTTP application, routing or file service, and no
  command-line program. Combine `TcpServer`, `HttpContext` and `HttpResponse`
  in your own code to serve HTTP.