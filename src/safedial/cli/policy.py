"""CLI command: safedial policy — show the effective policy."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from safedial.cli.context import policy_from_context

console = Console(stderr=True)


def _seconds(value: float | None) -> str:
    return "none" if value is None else f"{value:g}s"


@click.command()
@click.pass_context
def policy(ctx: click.Context) -> None:
    """Print the policy dials are checked against."""
    config = policy_from_context(ctx)

    console.print(f"[bold]Policy[/bold] [cyan]{config.name}[/cyan]")
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="dim")
    table.add_column()

    table.add_row("Transports", ", ".join(sorted(config.allowed_transports)) or "none")
    table.add_row("Ports", ", ".join(str(p) for p in sorted(config.allowed_ports)) or "none")
    table.add_row("Block private", str(config.block_private))
    table.add_row("Block link-local", str(config.block_link_local))
    table.add_row("Block multicast", str(config.block_multicast))
    table.add_row("Block unspecified", str(config.block_unspecified))
    table.add_row("Timeout", _seconds(config.timeout))
    table.add_row("Keep-alive", _seconds(config.keep_alive))
    console.print(table)

    console.print(f"\n[bold]Blocked ranges[/bold] ({len(config.blocked_ranges)})")
    for network in config.blocked_ranges:
        console.print(f"  {network}")
