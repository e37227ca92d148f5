"""Socket programs and helpers for TCP and UDP networking: addressing, echo, file transfer, datagrams, multiplexed and threaded chat servers."""

__version__ = "0.1.0"