"""Error taxonomy — every rejection is an explicit, typed failure.

All dial errors derive from ``OSError`` so HTTP stacks that treat socket
errors as connection failures handle them without special casing.
Resolution failures are not wrapped: ``socket.gaierror`` propagates as-is.
"""

from __future__ import annotations


class PolicyError(ValueError):
    """Raised when a policy cannot be constructed or loaded."""


class DialError(OSError):
    """Base class for every rejection raised by the dialer."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidTransportError(DialError):
    """The transport is not allow-listed or not understood."""

    def __init__(self, transport: str) -> None:
        self.transport = transport
        super().__init__(f"dial {transport}: invalid network")


class AddressSyntaxError(DialError):
    """The address is not a valid ``host:port`` string."""

    def __init__(self, address: str, reason: str) -> None:
        self.address = address
        self.reason = reason
        super().__init__(f"address {address}: {reason}")


class InvalidPortError(DialError):
    """The port is neither a decimal number in range nor a known service."""

    def __init__(self, message: str, port_text: str) -> None:
        self.port_text = port_text
        super().__init__(message)


class BlockedPortError(DialError):
    """The port resolved but is not allow-listed."""

    def __init__(self, address: str, port: int) -> None:
        self.address = address
        self.port = port
        super().__init__(f"dial {address}: blocked port")


class BlockedRangeError(DialError):
    """A resolved IP falls in a blocked range or class."""

    def __init__(self, address: str, ip: object, reason: str = "") -> None:
        self.address = address
        self.ip = ip
        self.reason = reason
        super().__init__(f"dial {address}: blocked range ({ip})")


class NoAddressesFoundError(DialError):
    """Resolution succeeded but produced no candidates."""

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"dial {address}: no IP addresses found")


class ConnectionFailedError(DialError):
    """Every candidate failed; carries the error of the first one."""

    def __init__(self, transport: str, target: str, first_error: BaseException) -> None:
        self.transport = transport
        self.target = target
        self.first_error = first_error
        reason = getattr(first_error, "strerror", None) or str(first_error)
        super().__init__(f"dial {transport} {target}: {reason}")
