"""The built-in policy for dialing untrusted HTTP(S) URLs."""

from __future__ import annotations

import functools

from safedial.policy.models import PolicyConfig, build_policy

DEFAULT_TRANSPORTS = ("tcp",)

# 8080 and 8443 are common enough on the public web to allow.
DEFAULT_PORTS = (80, 443, 8080, 8443)

# https://en.wikipedia.org/wiki/Reserved_IP_addresses
DEFAULT_BLOCKED_RANGES = (
    "0.0.0.0/8",
    "10.0.0.0/8",
    "100.64.0.0/10",
    "127.0.0.0/8",
    "169.254.0.0/16",
    "172.16.0.0/12",
    "192.0.0.0/24",
    "192.0.2.0/24",
    "192.88.99.0/24",
    "192.168.0.0/16",
    "198.18.0.0/15",
    "198.51.100.0/24",
    "203.0.113.0/24",
    "224.0.0.0/4",
    "240.0.0.0/4",
    "255.255.255.255/32",
    "::/128",
    "::1/128",  # loopback
    "100::/64",
    "64:ff9b::/96",
    "2001::/32",
    "2001:10::/28",
    "2001:20::/28",
    "2001:db8::/32",
    "2002::/16",
    "fc00::/7",  # unique local
    "fe80::/10",  # link-local
    "ff00::/8",  # multicast
)


@functools.lru_cache(maxsize=1)
def default_policy() -> PolicyConfig:
    """Return the shared default policy, built on first use."""
    return build_policy(
        name="default",
        allowed_transports=DEFAULT_TRANSPORTS,
        allowed_ports=DEFAULT_PORTS,
        blocked_ranges=DEFAULT_BLOCKED_RANGES,
        block_private=True,
        block_link_local=True,
        block_multicast=True,
        block_unspecified=True,
    )
