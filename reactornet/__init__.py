"""Reactor-pattern TCP server with HTTP request parsing, byte buffers, a thread pool and asynchronous log files."""

__version__ = "0.1.0"