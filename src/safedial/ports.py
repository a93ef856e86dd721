"""Port parsing — decimal numbers or service names such as ``http``."""

from __future__ import annotations

import logging
import re
import socket
from collections.abc import Callable
from dataclasses import dataclass, field

from safedial.errors import InvalidPortError

logger = logging.getLogger(__name__)

_DECIMAL = re.compile(r"[0-9]+")
_MAX_PORT = 0xFFFF

# Digit strings at or above this are not treated as numbers at all.
_BIG = 0xFFFFFF


def service_protocol(transport: str) -> str:
    """Map a transport (``tcp6``, ``udp4``, ...) to its services(5) protocol."""
    return "udp" if transport.startswith("udp") else "tcp"


def _decimal(text: str) -> int | None:
    if not _DECIMAL.fullmatch(text):
        return None
    value = 0
    for ch in text:
        value = value * 10 + (ord(ch) - ord("0"))
        if value >= _BIG:
            return None
    return value


@dataclass
class PortResolver:
    """Parses port text, falling back to a service-name lookup."""

    lookup: Callable[[str, str], int] = field(default=socket.getservbyname)

    def resolve(self, transport: str, port_text: str) -> int:
        """Return the numeric port for *port_text*.

        Raises InvalidPortError if the text is neither a decimal number in
        [0, 65535] nor a service known for the transport's protocol.
        """
        port = _decimal(port_text)
        if port is None:
            proto = service_protocol(transport)
            try:
                port = self.lookup(port_text, proto)
            except (OSError, ValueError) as exc:
                logger.debug("Service lookup failed for %s/%s: %s", proto, port_text, exc)
                raise InvalidPortError(
                    f"lookup {transport}/{port_text}: unknown port", port_text
                ) from exc

        if not 0 <= port <= _MAX_PORT:
            raise InvalidPortError(f"address {port_text}: invalid port", port_text)
        return port
