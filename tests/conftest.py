"""Shared test fixtures."""

from __future__ import annotations

import socket
import threading
from collections.abc import Iterator

import pytest

from safedial.policy.models import PolicyConfig
from safedial.resolve import HostResolver


def fake_getaddrinfo(table: dict[str, list[str]]):
    """A getaddrinfo stand-in answering from *table*, failing like the system resolver."""

    def _getaddrinfo(host, port, family=0, type=0, proto=0, flags=0):
        if host not in table:
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")
        records = []
        for ip in table[host]:
            if ":" in ip:
                records.append((socket.AF_INET6, type, 6, "", (ip, 0, 0, 0)))
            else:
                records.append((socket.AF_INET, type, 6, "", (ip, 0)))
        return records

    return _getaddrinfo


@pytest.fixture
def make_resolver():
    """Build a HostResolver answering from a host -> IPs table."""

    def _make(table: dict[str, list[str]]) -> HostResolver:
        return HostResolver(getaddrinfo=fake_getaddrinfo(table))

    return _make


@pytest.fixture
def fake_resolver(make_resolver) -> HostResolver:
    return make_resolver(
        {
            "example.org": ["93.184.215.14", "2606:2800:21f:cb07:6820:80da:af6b:8b2c"],
            "localhost": ["::1", "127.0.0.1"],
            "split-horizon.example": ["93.184.215.14", "10.0.0.7"],
            "empty.example": [],
        }
    )


@pytest.fixture
def tcp_server() -> Iterator[int]:
    """A loopback listener accepting connections in the background; yields its port."""
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    server.bind(("127.0.0.1", 0))
    server.listen(8)
    accepted: list[socket.socket] = []
    stop = threading.Event()

    def _accept() -> None:
        server.settimeout(0.2)
        while not stop.is_set():
            try:
                conn, _ = server.accept()
            except (TimeoutError, OSError):
                continue
            accepted.append(conn)

    thread = threading.Thread(target=_accept, daemon=True)
    thread.start()
    try:
        yield server.getsockname()[1]
    finally:
        stop.set()
        thread.join(timeout=2)
        for conn in accepted:
            conn.close()
        server.close()


@pytest.fixture
def loopback_policy(tcp_server: int) -> PolicyConfig:
    """Allows exactly the loopback listener's port, nothing blocked by class."""
    return PolicyConfig(
        name="loopback",
        allowed_transports=frozenset({"tcp"}),
        allowed_ports=frozenset({tcp_server}),
        timeout=5.0,
    )
