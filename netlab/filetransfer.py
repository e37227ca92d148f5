"""Send a file over TCP, half-close, and collect the receiver's acknowledgement."""

from __future__ import annotations

import os
import socket
import sys
from collections.abc import Sequence
from pathlib import Path

BUF_SIZE = 30


def serve_file(
    path: str | os.PathLike,
    port: int,
    host: str = "",
    chunk_size: int = BUF_SIZE,
) -> str:
    """Send ``path`` to the first client that connects and return its reply.

    After the whole file is sent the write side is shut down, so the client
    sees end of file while it can still answer.
    """
    with open(path, "rb") as source, socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server:
        server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        server.bind((host, int(port)))
        server.listen(5)
        client, _ = server.accept()
        with client:
            for chunk in iter(lambda: source.read(chunk_size), b""):
                client.sendall(chunk)
            client.shutdown(socket.SHUT_WR)
            reply = client.recv(chunk_size)
    message = reply.split(b"\0", 1)[0].decode(errors="replace")
    print(f"message from client: {message}")
    return message


def receive_file(
    host: str,
    port: int,
    destination: str | os.PathLike = "receive.dat",
    reply: str = "Thank you",
) -> int:
    """Save everything the server sends into ``destination``, then send ``reply``.

    Returns the number of bytes received.
    """
    received = 0
    with socket.create_connection((host, int(port))) as sock, open(destination, "wb") as target:
        while chunk := sock.recv(BUF_SIZE):
            target.write(chunk)
            received += len(chunk)
        print("Received file data")
        sock.sendall(reply.encode() + b"\0")
    return received


def main_server(argv: Sequence[str] | None = None) -> int:
    """Serve this module's own file on the given port."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1:
        print("file_server <port>")
        return 1
    serve_file(Path(__file__), int(args[0]))
    return 0


def main_client(argv: Sequence[str] | None = None) -> int:
    """Download from the given server into ``receive.dat``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 2:
        print("file_client <IP> <PORT>")
        return 1
    receive_file(args[0], int(args[1]))
    return 0