"""Concurrent workers, pipes, exit statuses and alarm signals on POSIX systems."""

from __future__ import annotations

import os
import queue
import signal
import threading
import time
from collections.abc import Callable, Iterable

_GLOBAL_START = 10
_LOCAL_START = 20


class _Worker:
    """Runs a callable in its own thread and records an exit code for it."""

    def __init__(self, target: Callable[[], int | None]) -> None:
        self._target = target
        self._code: int | None = None
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        code = 1
        try:
            result = self._target()
            code = 0 if result is None else int(result)
        except BaseException:
            code = 1
        finally:
            self._code = code

    def poll(self) -> int | None:
        """Return the exit code if the worker has finished, else ``None``."""
        if self._thread.is_alive():
            return None
        return self._code

    def join(self) -> int:
        """Wait for the worker and return its exit code."""
        self._thread.join()
        return 1 if self._code is None else self._code


def _reap(worker: _Worker) -> int:
    """Wait for ``worker`` and raise if it did not finish cleanly."""
    code = worker.join()
    if code != 0:
        raise ChildProcessError(f"worker ended with status {code}")
    return code


def _read_all(fd: int) -> bytes:
    """Read ``fd`` until end of file, then close it."""
    chunks = []
    try:
        while chunk := os.read(fd, 4096):
            chunks.append(chunk)
    finally:
        os.close(fd)
    return b"".join(chunks)


def _write_all(fd: int, data: bytes) -> None:
    view = memoryview(data)
    while view:
        view = view[os.write(fd, view):]


def fork_counters() -> dict[str, tuple[int, int]]:
    """Show that a spawned worker gets its own copy of every variable.

    Both sides start from the same incremented counters; the worker adds
    two to each and the parent subtracts two. Returns both final pairs.
    """
    global_value = _GLOBAL_START + 1
    local_value = _LOCAL_START + 5
    read_fd, write_fd = os.pipe()

    def child(own_global: int = global_value, own_local: int = local_value) -> None:
        own_global += 2
        own_local += 2
        try:
            _write_all(write_fd, f"{own_global} {own_local}".encode())
        finally:
            os.close(write_fd)

    worker = _Worker(child)
    reported = _read_all(read_fd)
    _reap(worker)

    global_value -= 2
    local_value -= 2
    child_global, child_local = (int(number) for number in reported.split())
    return {"parent": (global_value, local_value), "child": (child_global, child_local)}


def pipe_message(message: str = "Who are you") -> str:
    """Send ``message`` from a worker through a pipe and return what the parent read."""
    read_fd, write_fd = os.pipe()

    def child() -> None:
        try:
            _write_all(write_fd, message.encode())
        finally:
            os.close(write_fd)

    worker = _Worker(child)
    received = _read_all(read_fd)
    _reap(worker)
    return received.decode()


def pipe_dialogue(first: str = "who are you", reply: str = "thank you") -> tuple[str, str]:
    """Exchange messages over two pipes: the worker speaks first, the parent replies.

    Returns ``(what the parent heard, what the worker heard)``.
    """
    up_read, up_write = os.pipe()
    down_read, down_write = os.pipe()
    heard_by_child: list[bytes] = []

    def child() -> None:
        try:
            _write_all(up_write, first.encode())
        finally:
            os.close(up_write)
        heard_by_child.append(_read_all(down_read))

    worker = _Worker(child)
    parent_heard = _read_all(up_read)
    try:
        _write_all(down_write, reply.encode())
    finally:
        os.close(down_write)
    _reap(worker)
    return parent_heard.decode(), b"".join(heard_by_child).decode()


def collect_exit_statuses(codes: Iterable[int]) -> list[int]:
    """Start one worker per exit code and return the codes in the order workers finished."""
    codes = list(codes)
    for code in codes:
        if not 0 <= code <= 255:
            raise ValueError(f"exit code {code!r} is outside 0..255")
    finished: queue.Queue[int] = queue.Queue()

    def make_child(code: int) -> Callable[[], int]:
        def child() -> int:
            finished.put(code)
            return code

        return child

    workers = [_Worker(make_child(code)) for code in codes]
    for worker in workers:
        worker.join()
    statuses = []
    while not finished.empty():
        statuses.append(finished.get_nowait())
    return statuses


def poll_child_exit(code: int = 24, delay: float = 15, interval: float = 3) -> tuple[int, int]:
    """Poll without blocking for a worker that exits with ``code`` after ``delay`` seconds.

    Returns the worker's exit code and the number of times the parent slept.
    """
    if not 0 <= code <= 255:
        raise ValueError(f"exit code {code!r} is outside 0..255")

    def child() -> int:
        time.sleep(delay)
        return code

    worker = _Worker(child)
    polls = 0
    while (status := worker.poll()) is None:
        time.sleep(interval)
        polls += 1
        print(f"sleep {interval:g}sec")
    return status, polls


def repeating_alarm(interval: float = 2, count: int = 5) -> int:
    """Wait ``count`` times for a self-rearming alarm signal.

    Each alarm prints ``timeout`` and schedules the next; an interrupt key
    press is reported instead of ending the program. Returns how many alarms
    were handled.
    """
    if interval <= 0:
        raise ValueError("interval must be positive")
    timeouts = 0

    def on_alarm(signum: int, frame: object) -> None:
        nonlocal timeouts
        print("timeout")
        timeouts += 1
        signal.setitimer(signal.ITIMER_REAL, interval)

    def on_interrupt(signum: int, frame: object) -> None:
        print("CTRL+C pressed")

    previous_alarm = signal.signal(signal.SIGALRM, on_alarm)
    previous_interrupt = signal.signal(signal.SIGINT, on_interrupt)
    try:
        signal.setitimer(signal.ITIMER_REAL, interval)
        for _ in range(count):
            print("wait...")
            signal.pause()
    finally:
        signal.setitimer(signal.ITIMER_REAL, 0)
        signal.signal(signal.SIGALRM, previous_alarm)
        signal.signal(signal.SIGINT, previous_interrupt)
    return timeouts