"""Global configuration — XDG paths, env vars, defaults."""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path

from safedial.errors import PolicyError
from safedial.policy.defaults import default_policy
from safedial.policy.loader import load_policy
from safedial.policy.models import PolicyConfig


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "safedial"
    return Path.home() / ".config" / "safedial"


def _env_seconds(name: str) -> float | None:
    value = os.environ.get(name)
    if not value:
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise PolicyError(f"{name} must be a number of seconds: {value!r}") from exc


@dataclass
class SafeDialConfig:
    """Application-wide configuration."""

    config_dir: Path = field(default_factory=_default_config_dir)
    policy_path: Path | None = None
    timeout: float | None = None
    keep_alive: float | None = None
    verbose: bool = False

    @classmethod
    def load(cls) -> SafeDialConfig:
        """Load config from environment variables with XDG defaults."""
        config = cls()

        env_policy = os.environ.get("SAFEDIAL_POLICY")
        if env_policy:
            config.policy_path = Path(env_policy)
        else:
            # Fall back to the config dir's policy.yaml if it exists
            candidate = config.config_dir / "policy.yaml"
            if candidate.is_file():
                config.policy_path = candidate

        config.timeout = _env_seconds("SAFEDIAL_TIMEOUT")
        config.keep_alive = _env_seconds("SAFEDIAL_KEEPALIVE")
        return config

    def policy(self) -> PolicyConfig:
        """The configured policy with environment overrides applied."""
        policy = load_policy(self.policy_path) if self.policy_path else default_policy()

        overrides: dict = {}
        if self.timeout is not None:
            overrides["timeout"] = self.timeout
        if self.keep_alive is not None:
            overrides["keep_alive"] = self.keep_alive
        if overrides:
            policy = dataclasses.replace(policy, **overrides)
        return policy
