"""UDP broadcast and multicast senders and receivers."""

from __future__ import annotations

import socket
import sys
from collections.abc import Iterable, Iterator, Sequence
from typing import TextIO

from netlab.addressing import inet_aton, inet_ntoa

BUF_SIZE = 1024
TTL = 64
BROADCAST_ADDRESS = "255.255.255.255"


def send_broadcast(port: int, messages: Iterable[str], address: str = BROADCAST_ADDRESS) -> list[str]:
    """Broadcast each message's first line; blank messages are skipped.

    Returns the texts that were sent.
    """
    destination = (inet_ntoa(inet_aton(address)), int(port))
    sent: list[str] = []
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        for message in messages:
            text = message.split("\n", 1)[0]
            if not text:
                continue
            sock.sendto(text.encode(), destination)
            print(f"Broadcast message sent: {text}")
            sent.append(text)
    return sent


def _datagrams(sock: socket.socket) -> Iterator[tuple[str, str]]:
    with sock:
        while True:
            data, (sender, _) = sock.recvfrom(BUF_SIZE - 1)
            yield sender, data.decode(errors="replace")


def receive_datagrams(port: int, host: str = "") -> Iterator[tuple[str, str]]:
    """Bind to ``port`` now and return an iterator of ``(sender ip, text)`` pairs."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.bind((host, int(port)))
    except OSError:
        sock.close()
        raise
    return _datagrams(sock)


def send_multicast(group: str, port: int, message: str, ttl: int = TTL) -> int:
    """Send ``message`` to a multicast group with the given TTL; return the bytes sent."""
    destination = (inet_ntoa(inet_aton(group)), int(port))
    if not 0 <= ttl <= 255:
        raise ValueError(f"ttl {ttl!r} is outside 0..255")
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, ttl)
        sent = sock.sendto(message.encode(), destination)
    print(f"Multicast message sent to {group}:{port}")
    return sent


def _texts(sock: socket.socket) -> Iterator[str]:
    with sock:
        while True:
            data = sock.recv(BUF_SIZE - 1)
            yield data.decode(errors="replace")


def receive_multicast(group: str, port: int) -> Iterator[str]:
    """Join ``group`` on ``port`` now and return an iterator of received texts."""
    membership = inet_aton(group) + bytes(4)
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind(("", int(port)))
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, membership)
    except OSError:
        sock.close()
        raise
    return _texts(sock)


def _prompted_lines(stream: TextIO, prompt: str) -> Iterator[str]:
    while True:
        print(prompt, end="", flush=True)
        line = stream.readline()
        if not line:
            return
        yield line


def _args(argv: Sequence[str] | None) -> list[str]:
    return list(sys.argv[1:] if argv is None else argv)


def main_broadcast(argv: Sequence[str] | None = None) -> int:
    """Broadcast lines typed on standard input to the given port."""
    args = _args(argv)
    if len(args) != 1:
        print("Usage: broadcast <Port>")
        return 1
    try:
        send_broadcast(int(args[0]), _prompted_lines(sys.stdin, "Input >> "))
    except OSError as error:
        print(f"sendto() error: {error}", file=sys.stderr)
        return 1
    return 0


def main_broadcast_receiver(argv: Sequence[str] | None = None) -> int:
    """Print every datagram that arrives on the given port."""
    args = _args(argv)
    if len(args) != 1:
        print("Usage : broadcastrecv <Port>")
        return 1
    try:
        messages = receive_datagrams(int(args[0]))
        print(f"Waiting for broadcast message on port {args[0]}...")
        for sender, text in messages:
            print(f"Received message from {sender}: {text}")
    except OSError as error:
        print(f"bind() error: {error}", file=sys.stderr)
        return 1
    return 0


def main_multicast(argv: Sequence[str] | None = None) -> int:
    """Send one message to a multicast group."""
    args = _args(argv)
    if len(args) != 3:
        print("Usage : multicast <GroupIP> <Port> <Message>")
        return 1
    try:
        send_multicast(args[0], int(args[1]), args[2])
    except (OSError, ValueError) as error:
        print(f"sendto() error: {error}", file=sys.stderr)
        return 1
    return 0


def main_multicast_receiver(argv: Sequence[str] | None = None) -> int:
    """Join a multicast group and print the messages it carries."""
    args = _args(argv)
    if len(args) != 2:
        print("Usage : multicastrecv <GroupIP> <Port>")
        return 1
    try:
        messages = receive_multicast(args[0], int(args[1]))
        print(f"Joined multicast group {args[0]} on port {args[1]}. Waiting for message...")
        for text in messages:
            print(f"Received multicast message: {text}")
    except (OSError, ValueError) as error:
        print(f"setsockopt() Group Join error: {error}", file=sys.stderr)
        return 1
    return 0