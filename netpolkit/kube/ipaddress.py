"""IP address and CIDR helpers for IP block peers."""

from __future__ import annotations

import ipaddress

from netpolkit.kube.model import IPBlock


def _parse_cidr(cidr: str) -> ipaddress.IPv4Network | ipaddress.IPv6Network:
    _, slash, prefix = cidr.partition("/")
    if not slash or not prefix.isdigit():
        raise ValueError(f"unable to parse CIDR '{cidr}'")
    try:
        return ipaddress.ip_network(cidr, strict=False)
    except ValueError as exc:
        raise ValueError(f"unable to parse CIDR '{cidr}'") from exc


def _parse_ip(ip: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    try:
        return ipaddress.ip_address(ip)
    except ValueError as exc:
        raise ValueError(f"unable to parse IP '{ip}'") from exc


def is_ip_in_cidr(ip: str, cidr: str) -> bool:
    """Whether the address lies in the CIDR; raises ValueError on malformed input."""
    network = _parse_cidr(cidr)
    address = _parse_ip(ip)
    if isinstance(address, ipaddress.IPv6Address) and network.version == 4:
        mapped = address.ipv4_mapped
        if mapped is not None:
            address = mapped
    return address in network


def is_ip_address_match_for_ip_block(ip: str, ip_block: IPBlock) -> bool:
    """Whether the address lies in the block's CIDR and in none of its exceptions."""
    if not is_ip_in_cidr(ip, ip_block.cidr):
        return False
    return not any(is_ip_in_cidr(ip, except_cidr) for except_cidr in ip_block.except_)


def is_ipv4_address(s: str) -> bool:
    """Tell IPv4 from IPv6 by whichever separator comes first."""
    for char in s:
        if char == ".":
            return True
        if char == ":":
            return False
    raise ValueError(f"address {s} is neither IPv4 nor IPv6")


def _make_cidr(ip_string: str, ones: int) -> str:
    address = _parse_ip(ip_string)
    return str(ipaddress.ip_network((address, ones), strict=False))


def make_cidr_from_zeroes(ip_string: str, zeroes: int) -> str:
    """Normalised CIDR around the address with the given number of host bits."""
    bits = 32 if is_ipv4_address(ip_string) else 128
    return _make_cidr(ip_string, bits - zeroes)


def make_cidr_from_ones(ip_string: str, ones: int) -> str:
    """Normalised CIDR around the address with the given prefix length."""
    is_ipv4_address(ip_string)
    return _make_cidr(ip_string, ones)