"""CLI command: safedial check <address> — pre-flight validation, no connection."""

from __future__ import annotations

import socket
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from safedial.cli.context import policy_from_context
from safedial.dialer import GuardedDialer
from safedial.errors import BlockedRangeError, DialError

console = Console(stderr=True)


@click.command()
@click.argument("address")
@click.option(
    "--transport",
    "-t",
    default="tcp",
    show_default=True,
    help="Transport to validate (tcp, tcp4, tcp6, ...).",
)
@click.pass_context
def check(ctx: click.Context, address: str, transport: str) -> None:
    """Validate ADDRESS (host:port) against the policy without connecting."""
    policy = policy_from_context(ctx)
    dialer = GuardedDialer(policy)

    console.print(
        f"[bold]SafeDial[/bold] checking [cyan]{escape(address)}[/cyan] "
        f"over {transport} with policy [cyan]{policy.name}[/cyan]"
    )

    try:
        request = dialer.preflight(transport, address)
    except BlockedRangeError as exc:
        console.print(f"  [red]BLOCKED[/red] {escape(str(exc))} — {exc.reason}")
        sys.exit(1)
    except (DialError, socket.gaierror) as exc:
        console.print(f"  [red]REJECTED[/red] {escape(str(exc))}")
        sys.exit(1)

    if not request.ips:
        console.print("  [yellow]No IP addresses found[/yellow]")
        sys.exit(1)

    table = Table(show_header=True, box=None, padding=(0, 2))
    table.add_column("Candidate", style="cyan")
    table.add_column("Port", justify="right")
    table.add_column("Verdict")
    for ip in request.ips:
        table.add_row(str(ip), str(request.port), "[green]allowed[/green]")
    console.print(table)
    console.print(f"\n[green]{len(request.ips)} candidate(s) allowed[/green]")
