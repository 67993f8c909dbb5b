"""Dotted-quad IPv4 helpers.

Addresses travel through the package as canonical dotted-quad strings; the
integer form is only used for mask arithmetic and numeric ordering.
"""

from __future__ import annotations

from typing import Tuple
import ipaddress
import re

from .errors import AddressFormatError


_DOTTED_QUAD = re.compile(r"^([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})$")


def parse(ip: str) -> bytes:
    m = _DOTTED_QUAD.match((ip or "").strip())
    if not m:
        raise AddressFormatError(f"Invalid IP address '{ip}'")
    octets = [int(g) for g in m.groups()]
    if any(o > 255 for o in octets):
        raise AddressFormatError(f"Invalid IP address '{ip}'")
    return bytes(octets)


def is_valid(ip: str) -> bool:
    try:
        parse(ip)
    except AddressFormatError:
        return False
    return True


def to_int(octets: bytes) -> int:
    return int.from_bytes(octets, "big")


def from_int(value: int) -> str:
    return str(ipaddress.IPv4Address(value & 0xFFFFFFFF))


def canonical(ip: str) -> str:
    # "010.000.1.1" and "10.0.1.1" name the same system.
    return ".".join(str(o) for o in parse(ip))


def sort_key(ip: str) -> int:
    return to_int(parse(ip))


def mask(prefix_length: int) -> int:
    if not isinstance(prefix_length, int) or not 0 <= prefix_length <= 32:
        raise AddressFormatError(f"Invalid prefix length '{prefix_length}'")
    if prefix_length == 0:
        return 0
    return (0xFFFFFFFF << (32 - prefix_length)) & 0xFFFFFFFF


def contains(base: str, prefix_length: int, ip: str) -> bool:
    m = mask(prefix_length)
    return (to_int(parse(base)) & m) == (to_int(parse(ip)) & m)


def last_address(base: str, prefix_length: int) -> str:
    """Broadcast address of ``base/prefix_length``.

    Host bits are filled byte by byte starting from the least significant byte,
    at most eight per byte, until every host bit is set.
    """

    mask(prefix_length)
    octets = bytearray(parse(base))
    host_bits = 32 - prefix_length
    i = len(octets) - 1
    while i >= 0 and host_bits > 0:
        n = min(8, host_bits)
        octets[i] |= (1 << n) - 1
        host_bits -= n
        i -= 1
    return ".".join(str(o) for o in octets)


def parse_cidr(cidr: str) -> Tuple[str, int]:
    text = (cidr or "").strip()
    base, sep, prefix = text.partition("/")
    if not sep or not prefix.isdigit():
        raise AddressFormatError(f"Invalid subnet '{cidr}', expected <ip>/<prefix>")
    length = int(prefix)
    mask(length)
    return canonical(base), length
