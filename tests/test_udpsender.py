import io
import socket

import pytest

from httpfromtcp.udpsender import main, send_lines


@pytest.fixture
def receiver():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2)
    yield sock
    sock.close()


def test_send_lines_delivers_each_line(receiver):
    port = receiver.getsockname()[1]
    count = send_lines(["hello\n", "world\n"], "127.0.0.1", port)
    assert count == 2
    assert receiver.recv(1024) == b"hello\n"
    assert receiver.recv(1024) == b"world\n"


def test_send_lines_accepts_bytes(receiver):
    port = receiver.getsockname()[1]
    assert send_lines([b"raw bytes"], "127.0.0.1", port) == 1
    assert receiver.recv(1024) == b"raw bytes"


def test_send_lines_with_nothing_sends_nothing(receiver):
    port = receiver.getsockname()[1]
    assert send_lines([], "127.0.0.1", port) == 0
    receiver.settimeout(0.2)
    with pytest.raises(TimeoutError):
        receiver.recv(1024)


def test_main_sends_stdin_lines_with_prompts(receiver, monkeypatch, capsys):
    port = receiver.getsockname()[1]
    monkeypatch.setattr("sys.stdin", io.StringIO("one\ntwo\n"))
    assert main(["--host", "127.0.0.1", "--port", str(port)]) == 0
    assert receiver.recv(1024) == b"one\n"
    assert receiver.recv(1024) == b"two\n"
    assert capsys.readouterr().out.count("> ") == 3


def test_main_rejects_non_numeric_port():
    with pytest.raises(SystemExit):
        main(["--port", "not-a-port"])