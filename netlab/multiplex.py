"""Readiness-based servers and clients built on select, poll and epoll."""

from __future__ import annotations

import os
import selectors
import socket
import sys
from collections.abc import Sequence
from typing import BinaryIO, TextIO

BUF_SIZE = 100
POLL_BUF_SIZE = 1024
CHAT_BUF_SIZE = 1024
INPUT_SIZE = 100
INPUT_TIMEOUT = 5.0
RELAY_TIMEOUT = 5.005
MAX_CLIENTS = 100
_QUIT_LINES = frozenset({b"q", b"Q"})


def wait_for_input(stream: BinaryIO | TextIO, timeout: float | None = INPUT_TIMEOUT) -> str | None:
    """Wait up to ``timeout`` seconds for ``stream`` to become readable.

    Returns the text that was available, ``""`` at end of file, or ``None``
    when the wait timed out. A ``timeout`` of ``None`` waits forever.
    """
    if timeout is not None and timeout < 0:
        raise ValueError("timeout must not be negative")
    with selectors.DefaultSelector() as selector:
        selector.register(stream, selectors.EVENT_READ)
        if not selector.select(timeout):
            return None
    return os.read(stream.fileno(), INPUT_SIZE).decode(errors="replace")


def _receive(sock: socket.socket, size: int) -> bytes:
    try:
        return sock.recv(size)
    except ConnectionError:
        return b""


class RelayServer:
    """A select-style server that echoes each message and relays it to every other client."""

    def __init__(self, port: int, host: str = "") -> None:
        self._sock = socket.create_server((host, int(port)), backlog=5)
        self.port: int = self._sock.getsockname()[1]
        self._selector = selectors.DefaultSelector()
        self._selector.register(self._sock, selectors.EVENT_READ)
        self._clients: dict[int, socket.socket] = {}

    def _accept(self) -> None:
        client, _ = self._sock.accept()
        fd = client.fileno()
        self._clients[fd] = client
        self._selector.register(client, selectors.EVENT_READ)
        print(f"connected client: {fd} ")

    def _drop(self, client: socket.socket) -> None:
        fd = client.fileno()
        self._selector.unregister(client)
        self._clients.pop(fd, None)
        client.close()
        print(f"closed client: {fd} ")

    def _relay(self, client: socket.socket) -> None:
        data = _receive(client, BUF_SIZE)
        if not data:
            self._drop(client)
            return
        fd = client.fileno()
        try:
            client.sendall(data)
        except OSError:
            pass
        print(f"message from client {fd}: {data.decode(errors='replace')}")
        for other_fd, other in list(self._clients.items()):
            if other_fd != fd:
                try:
                    other.sendall(data)
                except OSError:
                    pass

    def step(self, timeout: float | None = RELAY_TIMEOUT) -> int:
        """Handle one round of ready sockets; return how many were ready (0 on timeout)."""
        events = self._selector.select(timeout)
        for key, _ in events:
            if key.fileobj is self._sock:
                self._accept()
            else:
                self._relay(key.fileobj)
        return len(events)

    def close(self) -> None:
        """Close every client and stop listening."""
        for client in list(self._clients.values()):
            client.close()
        self._clients.clear()
        self._selector.close()
        self._sock.close()

    def __enter__(self) -> RelayServer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class PollEchoServer:
    """A poll-style echo server watching at most ``max_clients`` descriptors.

    The listening socket counts as one of them; connections beyond the limit
    are closed as soon as they are accepted.
    """

    def __init__(self, port: int, host: str = "", max_clients: int = MAX_CLIENTS) -> None:
        if max_clients < 2:
            raise ValueError("max_clients must leave room for at least one client")
        self.max_clients = max_clients
        self._sock = socket.create_server((host, int(port)), backlog=5)
        self.port: int = self._sock.getsockname()[1]
        self._selector = selectors.DefaultSelector()
        self._selector.register(self._sock, selectors.EVENT_READ)
        self._clients: set[socket.socket] = set()

    def _accept(self) -> None:
        client, _ = self._sock.accept()
        if len(self._clients) + 1 >= self.max_clients:
            client.close()
            return
        self._clients.add(client)
        self._selector.register(client, selectors.EVENT_READ)
        print(f"connected client: {client.fileno()}")

    def _echo(self, client: socket.socket) -> None:
        fd = client.fileno()
        data = _receive(client, POLL_BUF_SIZE)
        if not data:
            self._selector.unregister(client)
            self._clients.discard(client)
            client.close()
            print(f"closed client: {fd}")
            return
        print(f"client[{fd}] {data.decode(errors='replace')}", end="")
        try:
            client.sendall(data)
        except OSError:
            pass

    def step(self, timeout: float | None = None) -> int:
        """Handle one round of ready sockets; return how many were ready (0 on timeout)."""
        events = self._selector.select(timeout)
        for key, _ in events:
            if key.fileobj is self._sock:
                self._accept()
            else:
                self._echo(key.fileobj)
        return len(events)

    def close(self) -> None:
        """Close every client and stop listening."""
        for client in self._clients:
            client.close()
        self._clients.clear()
        self._selector.close()
        self._sock.close()

    def __enter__(self) -> PollEchoServer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def chat_loop(sock: socket.socket, input_stream: BinaryIO | TextIO, output: TextIO | None = None) -> list[str]:
    """Forward input lines to ``sock`` and print what arrives from it.

    Stops at an input line that is ``q`` or ``Q`` or when the server closes
    the connection. Returns the texts received from the server.
    """
    out = sys.stdout if output is None else output
    received: list[str] = []
    pending = b""
    input_fd = input_stream.fileno()
    with selectors.DefaultSelector() as selector:
        selector.register(input_fd, selectors.EVENT_READ, "input")
        selector.register(sock, selectors.EVENT_READ, "socket")
        while True:
            for key, _ in selector.select():
                if key.data == "input":
                    chunk = os.read(input_fd, CHAT_BUF_SIZE)
                    if not chunk:
                        selector.unregister(input_fd)
                        if pending:
                            sock.sendall(pending)
                            pending = b""
                        continue
                    pending += chunk
                    *lines, pending = pending.split(b"\n")
                    for line in lines:
                        if line in _QUIT_LINES:
                            return received
                        sock.sendall(line + b"\n")
                else:
                    data = _receive(sock, CHAT_BUF_SIZE - 1)
                    if not data:
                        out.write("Server closed connection.\n")
                        out.flush()
                        return received
                    text = data.decode(errors="replace")
                    out.write(f"Message from another client: {text}")
                    out.flush()
                    received.append(text)


def _args(argv: Sequence[str] | None) -> list[str]:
    return list(sys.argv[1:] if argv is None else argv)


def main_relay(argv: Sequence[str] | None = None) -> int:
    """Run the relaying select server on the given port."""
    args = _args(argv)
    if len(args) != 1:
        print("Usage: selectsv <port>")
        return 1
    try:
        server = RelayServer(int(args[0]))
    except OSError as error:
        print(f"bind() error: {error}", file=sys.stderr)
        return 1
    with server:
        try:
            while True:
                server.step()
        except KeyboardInterrupt:
            pass
    return 0


def main_poll(argv: Sequence[str] | None = None) -> int:
    """Run the poll echo server on the given port."""
    args = _args(argv)
    if len(args) != 1:
        print("Usage: pollsv <port>")
        return 1
    try:
        server = PollEchoServer(int(args[0]))
    except OSError as error:
        print(f"bind error: {error}", file=sys.stderr)
        return 1
    with server:
        try:
            while True:
                server.step()
        except KeyboardInterrupt:
            pass
    return 0


def main_chat(argv: Sequence[str] | None = None) -> int:
    """Connect to a relay server and chat through standard input and output."""
    args = _args(argv)
    if len(args) != 2:
        print("Usage: chat_client <IP> <PORT>")
        return 1
    try:
        sock = socket.create_connection((args[0], int(args[1])))
    except OSError as error:
        print(f"connect() error: {error}", file=sys.stderr)
        return 1
    print("Connected to server.")
    with sock:
        chat_loop(sock, sys.stdin, sys.stdout)
    return 0