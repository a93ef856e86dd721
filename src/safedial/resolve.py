"""Host resolution for the dialer.

Turns a host into the list of candidate IP addresses:
1. IP literals, including the numeric encodings accepted by ``inet_aton``
   (hex, octal, single 32-bit decimal, short forms), are decoded locally
   so an obfuscated spelling of a blocked address is still blocked
2. Everything else goes through ``socket.getaddrinfo()``; its errors
   propagate unchanged
"""

from __future__ import annotations

import ipaddress
import logging
import re
import socket
from collections.abc import Callable
from dataclasses import dataclass, field

from safedial.policy.evaluator import IPAddress, canonical_ip

logger = logging.getLogger(__name__)

_DOTTED_DECIMAL = re.compile(r"^[0-9]+(\.[0-9]+){3}$")
_NUMERIC_PART = r"(0[xX][0-9a-fA-F]*|[0-9]+)"
_INET_ATON_FORM = re.compile(rf"^{_NUMERIC_PART}(\.{_NUMERIC_PART}){{0,3}}$")

# Maximum value of the last part for 1, 2, 3 and 4 part forms.
_LAST_PART_LIMITS = {1: 0xFFFFFFFF, 2: 0xFFFFFF, 3: 0xFFFF, 4: 0xFF}


def _parse_part(part: str) -> int:
    if part[:2] in ("0x", "0X"):
        return int(part[2:] or "0", 16)
    if len(part) > 1 and part.startswith("0"):
        return int(part, 8)
    return int(part, 10)


def _parse_inet_aton(host: str) -> ipaddress.IPv4Address | None:
    """Decode the classic BSD numeric forms: a, a.b, a.b.c, a.b.c.d."""
    if not _INET_ATON_FORM.match(host):
        return None
    try:
        parts = [_parse_part(p) for p in host.split(".")]
    except ValueError:
        # e.g. "08" is not valid octal
        return None

    *leading, last = parts
    if any(p > 0xFF for p in leading) or last > _LAST_PART_LIMITS[len(parts)]:
        return None

    value = 0
    for p in leading:
        value = (value << 8) | p
    value = (value << (8 * (4 - len(leading)))) | last
    return ipaddress.IPv4Address(value)


def parse_ip_literal(host: str) -> IPAddress | None:
    """Return the address *host* denotes if it is an IP literal, else None.

    Four-part dotted decimal with zero-padded segments is read as decimal
    (``000127.0.00000.00001`` is 127.0.0.1); other numeric forms follow
    ``inet_aton`` rules (``0x7f000001``, ``2130706433``, ``0177.1``).
    """
    if not host:
        return None
    try:
        return canonical_ip(ipaddress.ip_address(host))
    except ValueError:
        pass

    if _DOTTED_DECIMAL.match(host):
        octets = [int(p, 10) for p in host.split(".")]
        if all(o <= 0xFF for o in octets):
            return ipaddress.IPv4Address(bytes(octets))

    return _parse_inet_aton(host)


def _family_matches(ip: IPAddress, family: int) -> bool:
    if family == socket.AF_INET:
        return ip.version == 4
    if family == socket.AF_INET6:
        return ip.version == 6
    return True


@dataclass
class HostResolver:
    """Resolves a host to candidate IPs, in resolution order, without duplicates.

    ``getaddrinfo`` is the DNS collaborator; tests swap it out.
    """

    getaddrinfo: Callable[..., list] = field(default=socket.getaddrinfo)

    def lookup(self, host: str, family: int = socket.AF_UNSPEC) -> list[IPAddress]:
        """Resolve *host*. Raises ``socket.gaierror`` unchanged on failure."""
        literal = parse_ip_literal(host)
        if literal is not None:
            return [literal] if _family_matches(literal, family) else []

        if not host:
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")

        records = self.getaddrinfo(host, None, family, socket.SOCK_STREAM)
        ips: list[IPAddress] = []
        for _family, _type, _proto, _canonname, sockaddr in records:
            try:
                ip = canonical_ip(ipaddress.ip_address(sockaddr[0]))
            except ValueError:
                logger.debug("Ignoring unparseable address %r for %s", sockaddr[0], host)
                continue
            if ip not in ips and _family_matches(ip, family):
                ips.append(ip)

        logger.debug("Resolved %s to %s", host, ", ".join(str(ip) for ip in ips))
        return ips
