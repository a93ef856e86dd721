"""SafeDial — a guarded replacement for "connect to host:port".

Refuses to dial loopback, link-local, private, multicast, unspecified or
operator-blocked addresses, and ports outside an allow-list, so that an
application fetching attacker-supplied URLs cannot be used to reach
internal services (server-side request forgery).
"""

from __future__ import annotations

__version__ = "0.1.0"

from safedial.dialer import (  # noqa: E402
    DialRequest,
    GuardedDialer,
    create_connection,
    default_dialer,
    dial,
)
from safedial.errors import (  # noqa: E402
    AddressSyntaxError,
    BlockedPortError,
    BlockedRangeError,
    ConnectionFailedError,
    DialError,
    InvalidPortError,
    InvalidTransportError,
    NoAddressesFoundError,
    PolicyError,
)
from safedial.policy.defaults import default_policy  # noqa: E402
from safedial.policy.models import PolicyConfig, build_policy  # noqa: E402

__all__ = [
    "AddressSyntaxError",
    "BlockedPortError",
    "BlockedRangeError",
    "ConnectionFailedError",
    "DialError",
    "DialRequest",
    "GuardedDialer",
    "InvalidPortError",
    "InvalidTransportError",
    "NoAddressesFoundError",
    "PolicyConfig",
    "PolicyError",
    "build_policy",
    "create_connection",
    "default_dialer",
    "default_policy",
    "dial",
]
