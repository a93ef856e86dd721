"""Policy data model — an immutable value shared by every dial."""

from __future__ import annotations

import ipaddress
from collections.abc import Iterable
from dataclasses import dataclass

from safedial.errors import PolicyError

IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network

_MAX_PORT = 0xFFFF


@dataclass(frozen=True)
class PolicyConfig:
    """Allow/deny rules plus the dial parameters carried to the connector.

    ``allowed_transports`` and ``allowed_ports`` are exact-match sets; an
    empty set allows nothing. ``blocked_ranges`` keeps its order for
    diagnostics only. ``timeout`` and ``keep_alive`` are seconds,
    ``deadline`` is an absolute ``time.time()`` value.
    """

    allowed_transports: frozenset[str] = frozenset()
    allowed_ports: frozenset[int] = frozenset()
    blocked_ranges: tuple[IPNetwork, ...] = ()
    block_private: bool = False
    block_link_local: bool = False
    block_multicast: bool = False
    block_unspecified: bool = False
    timeout: float | None = None
    deadline: float | None = None
    keep_alive: float | None = None
    local_address: tuple[str, int] | None = None
    name: str = "custom"

    def __post_init__(self) -> None:
        # Accept any iterable but store immutable containers.
        object.__setattr__(self, "allowed_transports", frozenset(self.allowed_transports))
        object.__setattr__(self, "allowed_ports", frozenset(self.allowed_ports))
        object.__setattr__(self, "blocked_ranges", tuple(self.blocked_ranges))

        for port in self.allowed_ports:
            if isinstance(port, bool) or not isinstance(port, int):
                raise PolicyError(f"Port must be an integer: {port!r}")
            if not 0 <= port <= _MAX_PORT:
                raise PolicyError(f"Port out of range: {port}")

        for network in self.blocked_ranges:
            if not isinstance(network, (ipaddress.IPv4Network, ipaddress.IPv6Network)):
                raise PolicyError(f"Blocked range must be a network: {network!r}")

        for label in ("timeout", "keep_alive"):
            value = getattr(self, label)
            if value is not None and value < 0:
                raise PolicyError(f"{label} must not be negative: {value}")


def parse_ranges(ranges: Iterable[str]) -> tuple[IPNetwork, ...]:
    """Parse CIDR strings, keeping their order.

    Host bits must be zero so that a typo such as ``10.0.0.1/8`` is
    reported instead of silently widened.
    """
    parsed: list[IPNetwork] = []
    for text in ranges:
        try:
            parsed.append(ipaddress.ip_network(str(text).strip()))
        except ValueError as exc:
            raise PolicyError(f"Invalid blocked range {text!r}: {exc}") from exc
    return tuple(parsed)


def build_policy(
    *,
    allowed_transports: Iterable[str] = (),
    allowed_ports: Iterable[int] = (),
    blocked_ranges: Iterable[str] = (),
    **kwargs: object,
) -> PolicyConfig:
    """Build a PolicyConfig from literal values, raising PolicyError on bad input."""
    return PolicyConfig(
        allowed_transports=frozenset(allowed_transports),
        allowed_ports=frozenset(allowed_ports),
        blocked_ranges=parse_ranges(blocked_ranges),
        **kwargs,  # type: ignore[arg-type]
    )
