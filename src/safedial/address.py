"""``host:port`` splitting and joining, bracketed IPv6 literals included."""

from __future__ import annotations

from safedial.errors import AddressSyntaxError


def split_host_port(address: str) -> tuple[str, str]:
    """Split ``host:port``, ``[host]:port`` or ``[ipv6%zone]:port``.

    The port is returned as text; it may be a number or a service name.
    Raises AddressSyntaxError for anything else.
    """
    colon = address.rfind(":")
    if colon < 0:
        raise AddressSyntaxError(address, "missing port in address")

    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise AddressSyntaxError(address, "missing ']' in address")
        if end + 1 == len(address):
            raise AddressSyntaxError(address, "missing port in address")
        if end + 1 != colon:
            # Either "]" is followed by something other than ":" or the
            # port itself contains colons.
            if address[end + 1] == ":":
                raise AddressSyntaxError(address, "too many colons in address")
            raise AddressSyntaxError(address, "missing port in address")
        host = address[1:end]
        tail = address[:end + 1]
        if "[" in tail[1:]:
            raise AddressSyntaxError(address, "unexpected '[' in address")
        if "]" in address[end + 1:]:
            raise AddressSyntaxError(address, "unexpected ']' in address")
    else:
        host = address[:colon]
        if ":" in host:
            raise AddressSyntaxError(address, "too many colons in address")
        if "[" in host:
            raise AddressSyntaxError(address, "unexpected '[' in address")
        if "]" in host:
            raise AddressSyntaxError(address, "unexpected ']' in address")

    port = address[colon + 1:]
    if "[" in port:
        raise AddressSyntaxError(address, "unexpected '[' in address")
    if "]" in port:
        raise AddressSyntaxError(address, "unexpected ']' in address")
    return host, port


def join_host_port(host: str, port: int | str) -> str:
    """Inverse of split_host_port; IPv6 hosts are bracketed."""
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"
