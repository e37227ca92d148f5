"""IPv4 address conversion, byte-order helpers, host lookup and socket options."""

from __future__ import annotations

import socket
import string
import sys
from dataclasses import dataclass, field

_HEX = frozenset(string.hexdigits)
_OCT = frozenset(string.octdigits)
_DEC = frozenset(string.digits)

# Largest value allowed for the last part of an address written with 1 to 4 parts.
_LAST_PART_LIMIT = {1: 0xFFFFFFFF, 2: 0xFFFFFF, 3: 0xFFFF, 4: 0xFF}


def _swap(value: int, width: int) -> int:
    """Reinterpret a host-order integer of ``width`` bytes as network order."""
    if not 0 <= value < 1 << (8 * width):
        raise ValueError(f"value {value!r} does not fit in {width} bytes")
    return int.from_bytes(value.to_bytes(width, sys.byteorder), "big")


def htons(value: int) -> int:
    """Convert a 16-bit value from host to network byte order."""
    return _swap(value, 2)


def htonl(value: int) -> int:
    """Convert a 32-bit value from host to network byte order."""
    return _swap(value, 4)


def ntohs(value: int) -> int:
    """Convert a 16-bit value from network to host byte order."""
    return _swap(value, 2)


def ntohl(value: int) -> int:
    """Convert a 32-bit value from network to host byte order."""
    return _swap(value, 4)


def first_byte(value: int) -> int:
    """Return the byte stored at the lowest address of a 32-bit integer."""
    if not 0 <= value <= 0xFFFFFFFF:
        raise ValueError(f"value {value!r} does not fit in 4 bytes")
    return value.to_bytes(4, sys.byteorder)[0]


def _parse_part(part: str) -> int:
    if part[:2].lower() == "0x":
        digits, base, allowed = part[2:], 16, _HEX
    elif len(part) > 1 and part.startswith("0"):
        digits, base, allowed = part[1:], 8, _OCT
    else:
        digits, base, allowed = part, 10, _DEC
    if not digits or not set(digits) <= allowed:
        raise ValueError(f"invalid address component {part!r}")
    return int(digits, base)


def inet_aton(text: str) -> bytes:
    """Parse a dotted IPv4 address into its four network-order bytes.

    Accepts the classic forms ``a``, ``a.b``, ``a.b.c`` and ``a.b.c.d`` with
    decimal, octal (leading ``0``) or hexadecimal (leading ``0x``) parts.
    """
    parts = text.split(".")
    if not 1 <= len(parts) <= 4:
        raise ValueError(f"invalid IPv4 address {text!r}")
    numbers = [_parse_part(part) for part in parts]
    *leading, last = numbers
    if any(number > 0xFF for number in leading) or last > _LAST_PART_LIMIT[len(parts)]:
        raise ValueError(f"invalid IPv4 address {text!r}")
    result = 0
    for position, number in enumerate(leading):
        result |= number << (24 - 8 * position)
    result |= last
    return result.to_bytes(4, "big")


def inet_addr(text: str) -> int:
    """Return the address as the integer a ``sin_addr.s_addr`` field holds."""
    return int.from_bytes(inet_aton(text), sys.byteorder)


def inet_ntoa(value: int | bytes) -> str:
    """Format an ``s_addr`` integer or four packed bytes as dotted decimal."""
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 4:
            raise ValueError("packed IPv4 address must be 4 bytes long")
        packed = bytes(value)
    else:
        if not 0 <= value <= 0xFFFFFFFF:
            raise ValueError(f"value {value!r} is not a 32-bit address")
        packed = value.to_bytes(4, sys.byteorder)
    return ".".join(str(octet) for octet in packed)


@dataclass(frozen=True)
class SockAddrIn:
    """An IPv4 socket address with fields stored as the kernel structure holds them."""

    family: int = 0
    addr: int = 0
    port: int = 0

    @property
    def ip(self) -> str:
        """The address in dotted decimal."""
        return inet_ntoa(self.addr)

    @property
    def host_port(self) -> int:
        """The port number in host byte order."""
        return ntohs(self.port)

    @property
    def endpoint(self) -> tuple[str, int]:
        """The ``(host, port)`` pair the socket module expects."""
        return self.ip, self.host_port


def make_sockaddr(ip: str, port: int | str) -> SockAddrIn:
    """Build an AF_INET address from a dotted address and a port number."""
    return SockAddrIn(family=socket.AF_INET, addr=inet_addr(ip), port=htons(int(port)))


@dataclass(frozen=True)
class HostInfo:
    """What a host lookup returns."""

    name: str
    aliases: list[str] = field(default_factory=list)
    addresses: list[str] = field(default_factory=list)
    addrtype: int = socket.AF_INET


def lookup_host(name: str) -> HostInfo:
    """Resolve a host name to its official name, aliases and IPv4 addresses."""
    official, aliases, addresses = socket.gethostbyname_ex(name)
    return HostInfo(official, list(aliases), list(addresses), socket.AF_INET)


def lookup_address(address: str) -> HostInfo:
    """Resolve a dotted IPv4 address back to its host entry."""
    dotted = inet_ntoa(inet_aton(address))
    official, aliases, addresses = socket.gethostbyaddr(dotted)
    return HostInfo(official, list(aliases), list(addresses), socket.AF_INET)


def socket_buffer_sizes(sock: socket.socket) -> tuple[int, int]:
    """Return the socket's ``(send, receive)`` buffer sizes."""
    send_size = sock.getsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF)
    receive_size = sock.getsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF)
    return send_size, receive_size


def set_receive_buffer(sock: socket.socket, size: int) -> int:
    """Request a receive buffer size and return the size the kernel granted."""
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF, size)
    return sock.getsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF)