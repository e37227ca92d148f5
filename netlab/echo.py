"""Single-client TCP greeting and echo servers with matching clients."""

from __future__ import annotations

import socket
import sys
from collections.abc import Iterable, Iterator, Sequence
from typing import TextIO

BUFFER_SIZE = 1024
GREETING = "Hello World\n"
_QUIT_WORDS = frozenset({"q", "Q"})


def serve_greeting(port: int, message: str = GREETING, host: str = "") -> tuple[str, int]:
    """Accept one client, send it ``message`` and close; return the client's address."""
    with socket.create_server((host, int(port)), backlog=5) as server:
        client, address = server.accept()
        with client:
            client.sendall(message.encode())
    return address[0], address[1]


def fetch_greeting(host: str, port: int) -> str:
    """Connect, read what the server sends until it closes, and return it."""
    chunks: list[bytes] = []
    received = 0
    with socket.create_connection((host, int(port))) as sock:
        while received < BUFFER_SIZE - 1:
            chunk = sock.recv(BUFFER_SIZE - 1 - received)
            if not chunk:
                break
            chunks.append(chunk)
            received += len(chunk)
    text = b"".join(chunks).decode(errors="replace")
    print(f"Message from server: {text}")
    return text


class EchoServer:
    """A listening socket that echoes everything one client at a time sends."""

    def __init__(self, port: int, host: str = "") -> None:
        self._sock = socket.create_server((host, int(port)), backlog=5)
        self.port: int = self._sock.getsockname()[1]

    def serve_one(self) -> int:
        """Echo one client's data back until it disconnects; return the bytes echoed."""
        client, _ = self._sock.accept()
        echoed = 0
        with client:
            while data := client.recv(BUFFER_SIZE - 1):
                print(f"Message from client: {data.decode(errors='replace')}", end="")
                client.sendall(data)
                echoed += len(data)
        return echoed

    def close(self) -> None:
        """Stop listening."""
        self._sock.close()

    def __enter__(self) -> EchoServer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _receive_exactly(sock: socket.socket, size: int) -> bytes:
    chunks: list[bytes] = []
    remaining = size
    while remaining:
        chunk = sock.recv(min(remaining, BUFFER_SIZE - 1))
        if not chunk:
            raise ConnectionError("server closed the connection")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def echo_session(host: str, port: int, lines: Iterable[str]) -> list[str]:
    """Send each line and collect its echo, stopping at a line that is ``q`` or ``Q``."""
    replies: list[str] = []
    with socket.create_connection((host, int(port))) as sock:
        print("server connected...")
        for line in lines:
            if line.rstrip("\n") in _QUIT_WORDS:
                break
            data = line.encode()
            if not data:
                continue
            sock.sendall(data)
            reply = _receive_exactly(sock, len(data)).decode(errors="replace")
            print(f"Message from server: {reply}", end="" if reply.endswith("\n") else "\n")
            replies.append(reply)
    return replies


def _prompted_lines(stream: TextIO, prompt: str) -> Iterator[str]:
    while True:
        print(prompt, end="", flush=True)
        line = stream.readline()
        if not line:
            return
        yield line


def main_server(argv: Sequence[str] | None = None) -> int:
    """Echo the first client that connects to the given port."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1:
        print("echo_server <port>")
        return 1
    try:
        with EchoServer(int(args[0])) as server:
            server.serve_one()
    except OSError as error:
        print(f"echo_server: {error}", file=sys.stderr)
        return 1
    return 0


def main_client(argv: Sequence[str] | None = None) -> int:
    """Send lines typed on standard input to an echo server."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 2:
        print("echo_client <ip> <port>")
        return 1
    try:
        echo_session(args[0], int(args[1]), _prompted_lines(sys.stdin, "Input message(Q to quit): "))
    except OSError as error:
        print(f"echo_client: {error}", file=sys.stderr)
        return 1
    return 0