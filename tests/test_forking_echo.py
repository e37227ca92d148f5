import socket
import threading
import time
from contextlib import contextmanager

import pytest

from netlab.forking_echo import ForkingEchoServer, main


@contextmanager
def _running(server):
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield
    finally:
        server.close()
        thread.join(timeout=5)


def _echo(port, payload):
    with socket.create_connection(("127.0.0.1", port), timeout=5) as sock:
        sock.sendall(payload)
        received = b""
        while len(received) < len(payload):
            chunk = sock.recv(100)
            if not chunk:
                break
            received += chunk
    return received


def _wait_for_log(path, expected, timeout=5.0):
    deadline = time.monotonic() + timeout
    data = b""
    while time.monotonic() < deadline:
        if path.exists():
            data = path.read_bytes()
            if all(item in data for item in expected):
                return data
        time.sleep(0.05)
    return data


def test_echoes_and_logs_message(tmp_path):
    log = tmp_path / "echomsg.txt"
    server = ForkingEchoServer(0, log_path=log, host="127.0.0.1", message_limit=5)
    port = server.port
    with _running(server):
        reply = _echo(port, b"ping\n")
        data = _wait_for_log(log, [b"ping\n"])
    assert reply == b"ping\n"
    assert b"ping\n" in data


def test_serves_several_clients(tmp_path):
    log = tmp_path / "echomsg.txt"
    server = ForkingEchoServer(0, log_path=log, host="127.0.0.1")
    port = server.port
    with _running(server):
        first = _echo(port, b"first\n")
        second = _echo(port, b"second\n")
        data = _wait_for_log(log, [b"first\n", b"second\n"])
    assert (first, second) == (b"first\n", b"second\n")
    assert b"first\n" in data and b"second\n" in data


def test_log_stops_after_message_limit(tmp_path):
    log = tmp_path / "echomsg.txt"
    server = ForkingEchoServer(0, log_path=log, host="127.0.0.1", message_limit=1)
    port = server.port
    with _running(server):
        first = _echo(port, b"one\n")
        _wait_for_log(log, [b"one\n"])
        second = _echo(port, b"two\n")
        time.sleep(0.2)
        data = log.read_bytes()
    assert (first, second) == (b"one\n", b"two\n")
    assert data == b"one\n"


def test_message_limit_must_be_positive(tmp_path):
    with pytest.raises(ValueError):
        ForkingEchoServer(0, log_path=tmp_path / "log.txt", host="127.0.0.1", message_limit=0)


def test_serve_after_close_raises(tmp_path):
    server = ForkingEchoServer(0, log_path=tmp_path / "log.txt", host="127.0.0.1")
    server.close()
    with pytest.raises(OSError):
        server.serve_forever()


def test_main_usage(capsys):
    assert main([]) == 1
    assert "<port>" in capsys.readouterr().out