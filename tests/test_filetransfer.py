import socket
import threading
import time

import pytest

from netlab.filetransfer import main_client, main_server, receive_file, serve_file


def _free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        probe.bind(("127.0.0.1", 0))
        return probe.getsockname()[1]


def _start_server(path, port, **kwargs):
    result = {}

    def target():
        try:
            result["reply"] = serve_file(path, port, "127.0.0.1", **kwargs)
        except BaseException as exc:
            result["error"] = exc

    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    return thread, result


def _receive(port, destination, **kwargs):
    deadline = time.monotonic() + 5
    while True:
        try:
            return receive_file("127.0.0.1", port, destination, **kwargs)
        except ConnectionRefusedError:
            if time.monotonic() > deadline:
                raise
            time.sleep(0.02)


@pytest.mark.parametrize("size", [0, 7, 30, 90, 1000])
def test_transfer_round_trip(tmp_path, size, capsys):
    source = tmp_path / "source.bin"
    data = bytes(index % 251 for index in range(size))
    source.write_bytes(data)
    destination = tmp_path / "receive.dat"
    port = _free_port()

    thread, result = _start_server(source, port)
    received = _receive(port, destination)
    thread.join(5)

    assert received == len(data)
    assert destination.read_bytes() == data
    assert result.get("reply") == "Thank you"
    out = capsys.readouterr().out
    assert "Received file data" in out
    assert "message from client: Thank you" in out


def test_custom_reply_and_chunk_size(tmp_path):
    source = tmp_path / "source.txt"
    source.write_bytes(b"abcdefghij" * 5)
    destination = tmp_path / "out.dat"
    port = _free_port()

    thread, result = _start_server(source, port, chunk_size=64)
    _receive(port, destination, reply="got it")
    thread.join(5)

    assert result.get("reply") == "got it"
    assert destination.read_bytes() == source.read_bytes()


def test_serve_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        serve_file(tmp_path / "missing.bin", _free_port(), "127.0.0.1")


def test_main_server_usage(capsys):
    assert main_server([]) == 1
    assert "<port>" in capsys.readouterr().out


def test_main_client_usage(capsys):
    assert main_client(["127.0.0.1"]) == 1
    assert "<IP> <PORT>" in capsys.readouterr().out