"""An echo server with a worker per client that logs traffic through a pipe."""

from __future__ import annotations

import os
import socket
import sys
import threading
from collections.abc import Sequence

BUF_SIZE = 100
_ACCEPT_POLL = 0.2


class ForkingEchoServer:
    """Echo server with one worker per client and a logging worker fed by a pipe.

    The logging worker stores the first ``message_limit`` reads from the pipe
    in ``log_path`` and then stops.
    """

    def __init__(
        self,
        port: int,
        log_path: str | os.PathLike = "echomsg.txt",
        host: str = "",
        message_limit: int = 10,
    ) -> None:
        if message_limit < 1:
            raise ValueError("message_limit must be at least 1")
        self.log_path = log_path
        self.message_limit = message_limit
        self._pipe_write: int | None = None
        self._pipe_lock = threading.Lock()
        self._stopping = threading.Event()
        self._sock = socket.create_server((host, int(port)), backlog=5)
        self.port: int = self._sock.getsockname()[1]

    def _run_logger(self, read_fd: int) -> None:
        try:
            with open(self.log_path, "wb") as log:
                for _ in range(self.message_limit):
                    chunk = os.read(read_fd, BUF_SIZE)
                    if not chunk:
                        break
                    log.write(chunk)
                    log.flush()
        finally:
            os.close(read_fd)

    def _log(self, data: bytes) -> bool:
        """Pass ``data`` to the logger; return False once the pipe is unusable."""
        with self._pipe_lock:
            if self._pipe_write is None:
                return False
            try:
                os.write(self._pipe_write, data)
            except OSError:
                return False
        return True

    def _handle_client(self, client: socket.socket) -> None:
        with client:
            try:
                while data := client.recv(BUF_SIZE):
                    client.sendall(data)
                    if not self._log(data):
                        break
            except OSError:
                pass
        print("client disconnected...")

    def serve_forever(self) -> None:
        """Accept clients until the server is closed."""
        if self._sock.fileno() == -1:
            raise OSError("server socket is closed")
        read_fd, write_fd = os.pipe()
        with self._pipe_lock:
            self._pipe_write = write_fd
        threading.Thread(target=self._run_logger, args=(read_fd,), daemon=True).start()
        self._sock.settimeout(_ACCEPT_POLL)
        try:
            while not self._stopping.is_set():
                try:
                    client, _ = self._sock.accept()
                except socket.timeout:
                    continue
                except OSError:
                    if self._stopping.is_set() or self._sock.fileno() == -1:
                        break
                    raise
                client.settimeout(None)
                threading.Thread(
                    target=self._handle_client, args=(client,), daemon=True
                ).start()
        finally:
            self._close_pipe()

    def _close_pipe(self) -> None:
        with self._pipe_lock:
            if self._pipe_write is not None:
                try:
                    os.close(self._pipe_write)
                except OSError:
                    pass
                self._pipe_write = None

    def close(self) -> None:
        """Stop listening and release the logging pipe."""
        self._stopping.set()
        self._sock.close()
        self._close_pipe()


def main(argv: Sequence[str] | None = None) -> int:
    """Run the echo server on the given port."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1:
        print("Usage: echo_mpserv <port>")
        return 1
    try:
        server = ForkingEchoServer(int(args[0]))
    except OSError as error:
        print(f"bind() error: {error}", file=sys.stderr)
        return 1
    try:
        server.serve_forever()
    finally:
        server.close()
    return 0