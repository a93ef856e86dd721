"""Serial connector — tries resolved candidates one at a time within a time budget."""

from __future__ import annotations

import logging
import socket
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from safedial.address import join_host_port
from safedial.errors import ConnectionFailedError, NoAddressesFoundError
from safedial.policy.evaluator import IPAddress

logger = logging.getLogger(__name__)

# Per-attempt floor so many candidates cannot starve each other.
MIN_ATTEMPT_TIMEOUT = 2.0

_SOCKET_TYPES = {"tcp": socket.SOCK_STREAM, "udp": socket.SOCK_DGRAM}


def socket_type(transport: str) -> int | None:
    """Socket type for a transport such as ``tcp4``; None if unknown."""
    base = transport[:-1] if transport[-1:] in ("4", "6") else transport
    return _SOCKET_TYPES.get(base)


def address_family(transport: str) -> int:
    """Address family a transport restricts resolution to."""
    if transport.endswith("4"):
        return socket.AF_INET
    if transport.endswith("6"):
        return socket.AF_INET6
    return socket.AF_UNSPEC


@dataclass(frozen=True)
class TimeBudget:
    """Effective timeout and deadline for one connect_any call.

    ``deadline`` is absolute, on the same clock as ``now`` arguments.
    """

    timeout: float | None = None
    deadline: float | None = None

    @classmethod
    def start(cls, timeout: float | None, deadline: float | None, now: float) -> TimeBudget:
        """Derive the budget at dial start.

        A timeout turns into a deadline of ``now + timeout``; an explicit
        deadline that is earlier still wins.
        """
        if timeout:
            candidate = now + timeout
            if deadline is None or candidate < deadline:
                deadline = candidate
        return cls(timeout=timeout or None, deadline=deadline)

    def attempt_timeout(self, remaining_candidates: int, now: float) -> float | None:
        """Seconds allotted to the next attempt; None means no limit.

        The remaining time is split over the remaining candidates with a
        floor of MIN_ATTEMPT_TIMEOUT, but never past the deadline.
        """
        if self.deadline is None:
            return self.timeout

        left = self.deadline - now
        share = max(left / max(remaining_candidates, 1), MIN_ATTEMPT_TIMEOUT)
        if self.timeout is not None:
            share = min(share, self.timeout)
        return min(share, left)


class SerialConnector:
    """Connects to the first reachable candidate, strictly in order.

    The first error encountered is the one reported when every candidate
    fails, since the first address is normally the preferred one.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.time,
        socket_factory: Callable[..., socket.socket] = socket.socket,
    ) -> None:
        self._clock = clock
        self._socket_factory = socket_factory

    def connect_any(
        self,
        transport: str,
        ips: Sequence[IPAddress],
        port: int,
        *,
        address: str = "",
        timeout: float | None = None,
        deadline: float | None = None,
        keep_alive: float | None = None,
        local_address: tuple[str, int] | None = None,
    ) -> socket.socket:
        """Return a connected socket to the first candidate that accepts.

        Raises NoAddressesFoundError for an empty candidate list and
        ConnectionFailedError carrying the first failure otherwise.
        """
        if not ips:
            raise NoAddressesFoundError(address or join_host_port("", port))

        budget = TimeBudget.start(timeout, deadline, self._clock())
        sock_type = socket_type(transport) or socket.SOCK_STREAM

        first_error: BaseException | None = None
        first_target = ""
        for index, ip in enumerate(ips):
            target = join_host_port(str(ip), port)
            attempt_timeout = budget.attempt_timeout(len(ips) - index, self._clock())
            try:
                sock = self._connect_one(
                    ip, port, sock_type, attempt_timeout, keep_alive, local_address
                )
            except OSError as exc:
                logger.debug("dial %s %s failed: %s", transport, target, exc)
                if first_error is None:
                    first_error = exc
                    first_target = target
                continue

            logger.debug("dial %s %s connected", transport, target)
            return sock

        assert first_error is not None
        raise ConnectionFailedError(transport, first_target, first_error) from first_error

    def _connect_one(
        self,
        ip: IPAddress,
        port: int,
        sock_type: int,
        timeout: float | None,
        keep_alive: float | None,
        local_address: tuple[str, int] | None,
    ) -> socket.socket:
        if timeout is not None and timeout <= 0:
            raise TimeoutError("i/o timeout")

        family = socket.AF_INET6 if ip.version == 6 else socket.AF_INET
        sock = self._socket_factory(family, sock_type)
        try:
            if keep_alive and sock_type == socket.SOCK_STREAM:
                _enable_keep_alive(sock, keep_alive)
            if local_address is not None:
                sock.bind(local_address)
            sock.settimeout(timeout)
            sock.connect((str(ip), port))
            sock.settimeout(None)
        except BaseException:
            sock.close()
            raise
        return sock


def _enable_keep_alive(sock: socket.socket, period: float) -> None:
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
    seconds = max(int(period), 1)
    if hasattr(socket, "TCP_KEEPIDLE"):
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPIDLE, seconds)
    if hasattr(socket, "TCP_KEEPINTVL"):
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPINTVL, seconds)
