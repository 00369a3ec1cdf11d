[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "reactornet"
version = "0.1.0"
description = "A multi-reactor TCP server with an incremental HTTP request parser, byte buffers, a thread pool and asynchronous log files"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "reactor",
    "event-loop",
    "tcp",
    "http",
    "server",
    "buffer",
    "thread-pool",
    "logging",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: System :: Networking",
    "Topic :: System :: Logging",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["reactornet"]

[tool.hatch.build.targets.sdist]
include = [
    "reactornet",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"
