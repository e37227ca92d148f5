import socket

import pytest

from netlab.datagram import (
    main_broadcast,
    main_broadcast_receiver,
    main_multicast,
    main_multicast_receiver,
    receive_datagrams,
    receive_multicast,
    send_broadcast,
    send_multicast,
)


@pytest.fixture
def receiver():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(5)
    yield sock
    sock.close()


def _free_udp_port():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_send_broadcast_skips_blank_and_keeps_first_line(receiver):
    port = receiver.getsockname()[1]
    sent = send_broadcast(port, ["hello\n", "\n", "world\nignored"], address="127.0.0.1")
    assert sent == ["hello", "world"]
    assert receiver.recv(1024) == b"hello"
    assert receiver.recv(1024) == b"world"


def test_send_broadcast_rejects_bad_address():
    with pytest.raises(ValueError):
        send_broadcast(9, ["x"], address="192,168.0.1")


def test_receive_datagrams_reports_sender_and_text():
    port = _free_udp_port()
    messages = receive_datagrams(port, "127.0.0.1")
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sender:
        sender.sendto(b"hello there", ("127.0.0.1", port))
        sender.sendto(b"again", ("127.0.0.1", port))
    try:
        assert next(messages) == ("127.0.0.1", "hello there")
        assert next(messages) == ("127.0.0.1", "again")
    finally:
        messages.close()


def test_send_multicast_delivers_message(receiver):
    port = receiver.getsockname()[1]
    count = send_multicast("127.0.0.1", port, "multicast text", ttl=1)
    assert count == len("multicast text")
    assert receiver.recv(1024) == b"multicast text"


@pytest.mark.parametrize("ttl", [-1, 256])
def test_send_multicast_rejects_bad_ttl(ttl):
    with pytest.raises(ValueError):
        send_multicast("127.0.0.1", 9, "x", ttl=ttl)


def test_send_multicast_rejects_bad_group():
    with pytest.raises(ValueError):
        send_multicast("192,168.0.1", 9, "x")


def test_receive_multicast_rejects_bad_group():
    with pytest.raises(ValueError):
        receive_multicast("192,168.0.1", 9)


@pytest.mark.parametrize(
    "entry, args, usage",
    [
        (main_broadcast, [], "<Port>"),
        (main_broadcast_receiver, ["1", "2"], "<Port>"),
        (main_multicast, ["224.1.1.2", "5000"], "<GroupIP> <Port> <Message>"),
        (main_multicast_receiver, ["224.1.1.2"], "<GroupIP> <Port>"),
    ],
)
def test_mains_print_usage(entry, args, usage, capsys):
    assert entry(args) == 1
    assert usage in capsys.readouterr().out


def test_main_multicast_sends(receiver, capsys):
    port = receiver.getsockname()[1]
    assert main_multicast(["127.0.0.1", str(port), "from main"]) == 0
    assert receiver.recv(1024) == b"from main"
    assert f"127.0.0.1:{port}" in capsys.readouterr().out