"""Guarded dialer — a drop-in "connect to host:port" that refuses unsafe targets.

Every check runs before a socket is opened, in this order:
transport → host:port syntax → port → port allow-list → DNS → every
resolved IP → serial connect. Any blocked IP rejects the whole dial,
even when other addresses of the same host would be allowed.

Typical use with the standard library HTTP client::

    from safedial.http import build_opener

    opener = build_opener()
    opener.open("http://example.com/")
"""

from __future__ import annotations

import functools
import logging
import socket
import time
from collections.abc import Callable
from dataclasses import dataclass

from safedial.address import join_host_port, split_host_port
from safedial.connector import SerialConnector, address_family, socket_type
from safedial.errors import BlockedPortError, BlockedRangeError, InvalidTransportError
from safedial.policy.defaults import default_policy
from safedial.policy.evaluator import AddressPolicy, IPAddress
from safedial.policy.models import PolicyConfig
from safedial.ports import PortResolver
from safedial.resolve import HostResolver

logger = logging.getLogger(__name__)

# Sentinel matching socket.create_connection's "use the global default".
_GLOBAL_DEFAULT_TIMEOUT = getattr(socket, "_GLOBAL_DEFAULT_TIMEOUT", object())


@dataclass(frozen=True)
class DialRequest:
    """A dial that passed every pre-flight check."""

    transport: str
    address: str
    host: str
    port: int
    ips: tuple[IPAddress, ...]


class GuardedDialer:
    """Dials addresses allowed by a PolicyConfig and nothing else.

    The policy is read-only and the dialer keeps no per-call state, so one
    instance can serve any number of concurrent callers.
    """

    def __init__(
        self,
        policy: PolicyConfig | None = None,
        *,
        resolver: HostResolver | None = None,
        port_resolver: PortResolver | None = None,
        connector: SerialConnector | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.policy = policy if policy is not None else default_policy()
        self.rules = AddressPolicy(self.policy)
        self.resolver = resolver or HostResolver()
        self.port_resolver = port_resolver or PortResolver()
        self.connector = connector or SerialConnector(clock=clock)

    def preflight(self, transport: str, address: str) -> DialRequest:
        """Run every validation and resolution step without connecting.

        Raises the DialError subclass of the first failing step, or
        ``socket.gaierror`` unchanged when the host does not resolve.
        """
        if not self.rules.is_transport_allowed(transport) or socket_type(transport) is None:
            logger.info("Rejected transport %r for %s", transport, address)
            raise InvalidTransportError(transport)

        host, port_text = split_host_port(address)
        port = self.port_resolver.resolve(transport, port_text)

        if not self.rules.is_port_allowed(port):
            logger.info("Rejected %s: port %d is not allowed", address, port)
            raise BlockedPortError(address, port)

        ips = self.resolver.lookup(host, address_family(transport))

        for ip in ips:
            reason = self.rules.blocked_by(ip)
            if reason is not None:
                logger.warning("Rejected %s: %s is blocked (%s)", address, ip, reason)
                raise BlockedRangeError(address, ip, reason)

        return DialRequest(
            transport=transport,
            address=address,
            host=host,
            port=port,
            ips=tuple(ips),
        )

    def dial(self, transport: str, address: str) -> socket.socket:
        """Connect to *address* over *transport* if the policy allows it."""
        request = self.preflight(transport, address)
        return self._connect(request)

    def create_connection(
        self,
        address: tuple[str, int],
        timeout: object = _GLOBAL_DEFAULT_TIMEOUT,
        source_address: tuple[str, int] | None = None,
    ) -> socket.socket:
        """Guarded counterpart of ``socket.create_connection``.

        An explicit *timeout* bounds the whole dial and stays set on the
        returned socket; *source_address* overrides the policy's local
        address.
        """
        host, port = address
        request = self.preflight("tcp", join_host_port(host, port))

        if timeout is _GLOBAL_DEFAULT_TIMEOUT:
            sock = self._connect(request, local_address=source_address)
        else:
            sock = self._connect(
                request,
                timeout=timeout,  # type: ignore[arg-type]
                local_address=source_address,
            )
            sock.settimeout(timeout)  # type: ignore[arg-type]
        return sock

    def _connect(
        self,
        request: DialRequest,
        *,
        timeout: float | None | object = _GLOBAL_DEFAULT_TIMEOUT,
        local_address: tuple[str, int] | None = None,
    ) -> socket.socket:
        policy = self.policy
        if timeout is _GLOBAL_DEFAULT_TIMEOUT:
            timeout = policy.timeout
        return self.connector.connect_any(
            request.transport,
            request.ips,
            request.port,
            address=request.address,
            timeout=timeout,  # type: ignore[arg-type]
            deadline=policy.deadline,
            keep_alive=policy.keep_alive,
            local_address=local_address or policy.local_address,
        )


@functools.lru_cache(maxsize=1)
def default_dialer() -> GuardedDialer:
    """Return the shared dialer built from the default policy."""
    return GuardedDialer(default_policy())


def dial(transport: str, address: str) -> socket.socket:
    """Connect using the default policy."""
    return default_dialer().dial(transport, address)


def create_connection(
    address: tuple[str, int],
    timeout: object = _GLOBAL_DEFAULT_TIMEOUT,
    source_address: tuple[str, int] | None = None,
) -> socket.socket:
    """``socket.create_connection`` replacement using the default policy."""
    return default_dialer().create_connection(address, timeout, source_address)
