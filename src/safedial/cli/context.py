"""Policy selection shared by the CLI commands."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from safedial.config import SafeDialConfig
from safedial.errors import PolicyError
from safedial.policy.models import PolicyConfig

console = Console(stderr=True)


def policy_from_context(ctx: click.Context) -> PolicyConfig:
    """The --policy file if given, else the environment/XDG configuration.

    Exits with status 1 when the policy cannot be loaded.
    """
    try:
        config = SafeDialConfig.load()
        policy_path = ctx.obj.get("policy_path") if ctx.obj else None
        if policy_path:
            config.policy_path = Path(policy_path)
        return config.policy()
    except (PolicyError, OSError) as exc:
        console.print(f"  [red]REJECTED[/red] policy: {escape(str(exc))}")
        sys.exit(1)
