[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "httpfromtcp"
version = "0.1.0"
description = "A small HTTP/1.1 server built directly on TCP sockets, with an incremental request parser and response writer"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "http/1.1", "tcp", "udp", "server", "parser", "chunked-encoding", "sockets"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
httpfromtcp-server = "httpfromtcp.httpserver:main"
httpfromtcp-listener = "httpfromtcp.tcplistener:main"
httpfromtcp-udpsender = "httpfromtcp.udpsender:main"

[tool.hatch.build.targets.wheel]
packages = ["httpfromtcp"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
