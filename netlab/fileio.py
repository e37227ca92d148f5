"""Low-level file descriptor exercises: standard streams, create, write and read."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

_STANDARD_DESCRIPTORS = (0, 1, 2)
_DEFAULT_GREETING_NAME = "Socket"


def descriptor_numbers() -> tuple[int, int, int]:
    """Return the descriptor numbers of standard input, output and error."""
    streams = (sys.__stdin__, sys.__stdout__, sys.__stderr__)
    numbers = []
    for stream, default in zip(streams, _STANDARD_DESCRIPTORS):
        try:
            numbers.append(stream.fileno() if stream is not None else default)
        except (OSError, ValueError):
            numbers.append(default)
    return tuple(numbers)


@contextmanager
def open_created(path: str | os.PathLike) -> Iterator[int]:
    """Open ``path`` read-only, creating it if missing, and yield the descriptor."""
    fd = os.open(path, os.O_CREAT | os.O_RDONLY, 0o644)
    try:
        yield fd
    finally:
        os.close(fd)


def write_message(path: str | os.PathLike, message: str = "Hello socket\n") -> int:
    """Write ``message`` and a terminating NUL byte at the start of ``path``.

    The file is created if needed but not truncated. Returns the byte count.
    """
    data = message.encode() + b"\0"
    fd = os.open(path, os.O_CREAT | os.O_WRONLY, 0o644)
    with os.fdopen(fd, "wb") as stream:
        stream.write(data)
    return len(data)


def read_message(path: str | os.PathLike, size: int = 20) -> str:
    """Read at most ``size`` bytes from ``path`` and return the text before any NUL."""
    with open(path, "rb") as stream:
        data = stream.read(size)
    return data.split(b"\0", 1)[0].decode(errors="replace")


def main(argv: Sequence[str] | None = None) -> int:
    """Print a greeting, to ``Socket`` unless another name is given."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) > 1:
        print("Usage: netlab [name]", file=sys.stderr)
        return 1
    name = args[0] if args else _DEFAULT_GREETING_NAME
    sys.stdout.write(f"Hello, {name}\n")
    sys.stdout.flush()
    return 0