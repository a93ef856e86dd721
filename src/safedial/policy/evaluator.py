"""Address policy — pure predicates evaluated before any socket is opened."""

from __future__ import annotations

import ipaddress

from safedial.policy.models import PolicyConfig

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

_LINK_LOCAL_MULTICAST_V4 = ipaddress.IPv4Network("224.0.0.0/24")

# RFC 1918 and RFC 4193 private-use space
_PRIVATE_USE = (
    ipaddress.IPv4Network("10.0.0.0/8"),
    ipaddress.IPv4Network("172.16.0.0/12"),
    ipaddress.IPv4Network("192.168.0.0/16"),
    ipaddress.IPv6Network("fc00::/7"),
)

# IPv6 multicast scope nibbles (RFC 4291 §2.7)
_SCOPE_INTERFACE_LOCAL = 0x1
_SCOPE_LINK_LOCAL = 0x2


def canonical_ip(ip: IPAddress) -> IPAddress:
    """Unwrap IPv4-mapped IPv6 addresses so IPv4 rules apply to them."""
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        return ip.ipv4_mapped
    return ip


def is_private_use(ip: IPAddress) -> bool:
    """Private-use space or loopback.

    Narrower than ``ipaddress``'s ``is_private``, which also covers
    documentation, benchmarking and reserved blocks.
    """
    if ip.is_loopback:
        return True
    return any(ip.version == network.version and ip in network for network in _PRIVATE_USE)


def _multicast_scope(ip: IPAddress) -> int | None:
    if isinstance(ip, ipaddress.IPv6Address) and ip.is_multicast:
        return ip.packed[1] & 0x0F
    return None


def is_link_local(ip: IPAddress) -> bool:
    """Link-local unicast or link-local multicast."""
    if ip.is_link_local:
        return True
    if isinstance(ip, ipaddress.IPv4Address):
        return ip in _LINK_LOCAL_MULTICAST_V4
    return _multicast_scope(ip) == _SCOPE_LINK_LOCAL


def is_multicast(ip: IPAddress) -> bool:
    """Multicast of any scope, interface-local included."""
    return ip.is_multicast or _multicast_scope(ip) == _SCOPE_INTERFACE_LOCAL


class AddressPolicy:
    """Evaluates transports, ports and IPs against a PolicyConfig.

    All checks are independent; an IP must pass every enabled one.
    """

    def __init__(self, config: PolicyConfig) -> None:
        self.config = config

    def is_transport_allowed(self, transport: str) -> bool:
        return transport in self.config.allowed_transports

    def is_port_allowed(self, port: int) -> bool:
        return port in self.config.allowed_ports

    def is_ip_allowed(self, ip: IPAddress) -> bool:
        return self.blocked_by(ip) is None

    def blocked_by(self, ip: IPAddress) -> str | None:
        """Return why *ip* is blocked, or None when it is allowed.

        The reason is a class name (``private``, ``link-local``,
        ``multicast``, ``unspecified``) or the text of the first matching
        blocked range.
        """
        config = self.config
        ip = canonical_ip(ip)

        if config.block_private and is_private_use(ip):
            return "private"
        if config.block_link_local and is_link_local(ip):
            return "link-local"
        if config.block_multicast and is_multicast(ip):
            return "multicast"
        if config.block_unspecified and ip.is_unspecified:
            return "unspecified"

        for network in config.blocked_ranges:
            if ip.version == network.version and ip in network:
                return str(network)
        return None
