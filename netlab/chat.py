"""A threaded chat server that relays every message to all clients, and its client."""

from __future__ import annotations

import selectors
import socket
import sys
import threading
from collections.abc import Iterator, Sequence

BUF_SIZE = 100
NAME_SIZE = 20
DEFAULT_NAME = "DEFAULT"
_POLL_INTERVAL = 0.2


def format_message(name: str, text: str) -> str:
    """Prefix ``text`` with the sender's name in brackets."""
    return f"[{name}] {text}"


class ChatServer:
    """Accepts clients on a thread each and sends every message to all of them."""

    def __init__(self, port: int, host: str = "") -> None:
        self._sock = socket.create_server((host, int(port)), backlog=5)
        self.port: int = self._sock.getsockname()[1]
        self._lock = threading.Lock()
        self._clients: list[socket.socket] = []
        self._closed = threading.Event()

    def _handle(self, client: socket.socket) -> None:
        try:
            while data := client.recv(BUF_SIZE):
                self.broadcast(data)
        except OSError:
            pass
        finally:
            with self._lock:
                if client in self._clients:
                    self._clients.remove(client)
            client.close()

    def serve_forever(self) -> None:
        """Accept clients until :meth:`close` is called."""
        with selectors.DefaultSelector() as selector:
            selector.register(self._sock, selectors.EVENT_READ)
            while not self._closed.is_set():
                if not selector.select(_POLL_INTERVAL):
                    continue
                try:
                    client, address = self._sock.accept()
                except OSError:
                    if self._closed.is_set():
                        break
                    raise
                with self._lock:
                    self._clients.append(client)
                threading.Thread(target=self._handle, args=(client,), daemon=True).start()
                print(f"Connected client IP: {address[0]} ")

    def broadcast(self, data: bytes) -> int:
        """Send ``data`` to every connected client; return how many were sent to."""
        sent = 0
        with self._lock:
            for client in self._clients:
                try:
                    client.sendall(data)
                except OSError:
                    continue
                sent += 1
        return sent

    def close(self) -> None:
        """Stop accepting and disconnect every client."""
        self._closed.set()
        self._sock.close()
        with self._lock:
            for client in self._clients:
                try:
                    client.shutdown(socket.SHUT_RDWR)
                except OSError:
                    pass
                client.close()
            self._clients.clear()

    def __enter__(self) -> ChatServer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class ChatClient:
    """A named connection to a chat server."""

    def __init__(self, host: str, port: int, name: str = DEFAULT_NAME) -> None:
        self.name = name
        self._sock = socket.create_connection((host, int(port)))

    def send(self, text: str) -> int:
        """Send ``text`` under this client's name; return the bytes sent."""
        data = format_message(self.name, text).encode()
        self._sock.sendall(data)
        return len(data)

    def messages(self) -> Iterator[str]:
        """Yield the texts the server sends until the connection ends."""
        while True:
            try:
                data = self._sock.recv(NAME_SIZE + BUF_SIZE - 1)
            except OSError:
                return
            if not data:
                return
            yield data.decode(errors="replace")

    def close(self) -> None:
        """Disconnect from the server."""
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._sock.close()

    def __enter__(self) -> ChatClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _args(argv: Sequence[str] | None) -> list[str]:
    return list(sys.argv[1:] if argv is None else argv)


def main_server(argv: Sequence[str] | None = None) -> int:
    """Run the chat server on the given port."""
    args = _args(argv)
    if len(args) != 1:
        print("Usage: th_server <port>")
        return 1
    try:
        server = ChatServer(int(args[0]))
    except OSError as error:
        print(f"bind() error: {error}", file=sys.stderr)
        return 1
    with server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0


def main_client(argv: Sequence[str] | None = None) -> int:
    """Chat under a name: lines from standard input go out, messages are printed."""
    args = _args(argv)
    if len(args) != 3:
        print("Usage : th_client <IP> <port> <name>")
        return 1
    try:
        client = ChatClient(args[0], int(args[1]), args[2])
    except OSError as error:
        print(f"connect() error: {error}", file=sys.stderr)
        return 1

    def show_messages() -> None:
        for text in client.messages():
            sys.stdout.write(text)
            sys.stdout.flush()

    threading.Thread(target=show_messages, daemon=True).start()
    try:
        for line in sys.stdin:
            if line in ("q\n", "Q\n"):
                break
            client.send(line)
    except OSError as error:
        print(f"write error: {error}", file=sys.stderr)
        return 1
    finally:
        client.close()
    return 0