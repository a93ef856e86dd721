"""CLI command: safedial connect <address> — dial through the guarded dialer."""

from __future__ import annotations

import dataclasses
import socket
import sys

import click
from rich.console import Console
from rich.markup import escape

from safedial.cli.context import policy_from_context
from safedial.dialer import GuardedDialer
from safedial.errors import DialError

console = Console(stderr=True)


@click.command()
@click.argument("address")
@click.option(
    "--transport",
    "-t",
    default="tcp",
    show_default=True,
    help="Transport to dial over.",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Total seconds allowed for the dial (overrides the policy).",
)
@click.pass_context
def connect(
    ctx: click.Context,
    address: str,
    transport: str,
    timeout: float | None,
) -> None:
    """Open a connection to ADDRESS (host:port), report it, and close it."""
    policy = policy_from_context(ctx)
    if timeout is not None:
        policy = dataclasses.replace(policy, timeout=timeout)

    dialer = GuardedDialer(policy)
    try:
        sock = dialer.dial(transport, address)
    except (DialError, socket.gaierror) as exc:
        console.print(f"  [red]FAILED[/red] {escape(str(exc))}")
        sys.exit(1)

    with sock:
        local = sock.getsockname()
        peer = sock.getpeername()
    console.print(
        f"  [green]CONNECTED[/green] {escape(address)} via {transport}: "
        f"{local[0]}:{local[1]} → {peer[0]}:{peer[1]}"
    )
