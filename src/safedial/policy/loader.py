"""Load PolicyConfig objects from YAML files."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import yaml

from safedial.address import split_host_port
from safedial.errors import AddressSyntaxError, PolicyError
from safedial.policy.defaults import default_policy
from safedial.policy.models import PolicyConfig, parse_ranges

_PRESET_PREFIX = "preset:"

_PRESETS: dict[str, Callable[[], PolicyConfig]] = {
    "default": default_policy,
}

_FLAGS = ("block_private", "block_link_local", "block_multicast", "block_unspecified")
_SECONDS = ("timeout", "keep_alive")


def load_policy(path: str | Path, _resolved: set[str] | None = None) -> PolicyConfig:
    """Load a policy from a YAML file path."""
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise PolicyError(f"Invalid policy YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise PolicyError("Policy YAML must be a mapping")
    resolved = _resolved if _resolved is not None else set()
    resolved.add(str(Path(path).resolve()))
    return _build_policy(data, _resolved=resolved)


def load_policy_from_string(text: str) -> PolicyConfig:
    """Parse a YAML string into a PolicyConfig, resolving inheritance."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise PolicyError(f"Invalid policy YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise PolicyError("Policy YAML must be a mapping")
    return _build_policy(data, _resolved=set())


def _build_policy(data: dict, _resolved: set[str]) -> PolicyConfig:
    inherit_list = data.get("inherit", [])
    if isinstance(inherit_list, str):
        inherit_list = [inherit_list]

    # Later parents override earlier ones; own keys override all parents.
    base = PolicyConfig()
    inherited_ranges: list = []
    for ref in inherit_list:
        parent = _load_ref(ref, _resolved)
        inherited_ranges.extend(parent.blocked_ranges)
        base = parent

    fields: dict = {
        "name": str(data.get("name", "unnamed")),
        "allowed_transports": base.allowed_transports,
        "allowed_ports": base.allowed_ports,
        "timeout": base.timeout,
        "keep_alive": base.keep_alive,
        "local_address": base.local_address,
    }
    for flag in _FLAGS:
        fields[flag] = bool(data.get(flag, getattr(base, flag)))

    if "allowed_transports" in data:
        fields["allowed_transports"] = frozenset(
            str(t) for t in _as_list(data["allowed_transports"])
        )
    if "allowed_ports" in data:
        fields["allowed_ports"] = frozenset(
            _as_port(p) for p in _as_list(data["allowed_ports"])
        )
    for key in _SECONDS:
        if key in data:
            fields[key] = None if data[key] is None else float(data[key])
    if "local_address" in data:
        fields["local_address"] = _parse_local_address(data["local_address"])

    # Own ranges first, then inherited, without repeats.
    ranges = list(parse_ranges(_as_list(data.get("blocked_ranges", []))))
    for network in inherited_ranges:
        if network not in ranges:
            ranges.append(network)
    fields["blocked_ranges"] = tuple(ranges)

    return PolicyConfig(**fields)


def _as_list(value: object) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _as_port(value: object) -> int:
    if isinstance(value, bool):
        raise PolicyError(f"Invalid port: {value!r}")
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as exc:
        raise PolicyError(f"Invalid port: {value!r}") from exc


def _parse_local_address(value: object) -> tuple[str, int] | None:
    if value is None:
        return None
    try:
        host, port = split_host_port(str(value))
    except AddressSyntaxError as exc:
        raise PolicyError(f"Invalid local_address: {exc}") from exc
    return host, _as_port(port) if port else 0


def _load_ref(ref: str, _resolved: set[str]) -> PolicyConfig:
    if ref.startswith(_PRESET_PREFIX):
        preset_name = ref[len(_PRESET_PREFIX) :]
        if preset_name not in _PRESETS:
            raise PolicyError(f"Unknown policy preset: {preset_name}")
        return _PRESETS[preset_name]()

    # Treat as file path
    key = str(Path(ref).resolve())
    if key in _resolved:
        raise PolicyError(f"Circular policy inheritance detected: {ref}")
    # Copy so sibling parents may share an ancestor.
    return load_policy(ref, _resolved=set(_resolved))
