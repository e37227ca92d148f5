import threading
import time

import pytest

from netlab.chat import ChatClient, ChatServer, format_message, main_client, main_server


@pytest.fixture
def server():
    chat_server = ChatServer(0, "127.0.0.1")
    thread = threading.Thread(target=chat_server.serve_forever, daemon=True)
    thread.start()
    yield chat_server
    chat_server.close()
    thread.join(5)


def _joined(server, name):
    """Connect a client and wait until the server relays its first message back."""
    client = ChatClient("127.0.0.1", server.port, name)
    stream = client.messages()
    client.send("join\n")
    assert next(stream) == format_message(name, "join\n")
    return client, stream


def test_format_message_wraps_name():
    assert format_message("alice", "hello\n") == "[alice] hello\n"


def test_send_returns_byte_count(server):
    client, _ = _joined(server, "a")
    with client:
        assert client.send("hi\n") == len(format_message("a", "hi\n").encode())


def test_broadcast_counts_recipients(server):
    client, stream = _joined(server, "a")
    with client:
        assert server.broadcast(b"note") == 1
        assert next(stream) == "note"


def test_departed_client_is_forgotten(server):
    client, _ = _joined(server, "a")
    client.close()
    deadline = time.monotonic() + 5
    count = server.broadcast(b"x")
    while count and time.monotonic() < deadline:
        time.sleep(0.05)
        count = server.broadcast(b"x")
    assert count == 0


def test_messages_end_when_server_closes(server):
    client, stream = _joined(server, "a")
    with client:
        server.close()
        assert list(stream) == []


def test_main_client_rejects_wrong_arguments():
    assert main_client(["127.0.0.1", "9000"]) == 1


def test_main_server_rejects_wrong_arguments():
    assert main_server([]) == 1