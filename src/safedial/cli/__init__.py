"""CLI entry point — ``safedial check|connect|policy``."""

from __future__ import annotations

import logging

import click

from safedial import __version__


@click.group()
@click.version_option(version=__version__, prog_name="safedial")
@click.option(
    "--policy",
    "-p",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML dial policy (default: $SAFEDIAL_POLICY, then the XDG policy.yaml, then the built-in policy).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Log every resolution and connect attempt.",
)
@click.pass_context
def main(ctx: click.Context, policy: str | None, verbose: bool) -> None:
    """SafeDial — vet host:port targets against an SSRF dial policy.

    Internal address ranges and unlisted ports are refused before any
    socket is opened; `check` only validates, `connect` also dials.
    """
    ctx.ensure_object(dict)
    ctx.obj["policy_path"] = policy

    # Rejections log at WARNING/INFO; -v adds per-attempt DEBUG lines.
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _register_commands() -> None:
    from safedial.cli.check import check
    from safedial.cli.connect import connect
    from safedial.cli.policy import policy

    for command in (check, connect, policy):
        main.add_command(command)


_register_commands()
