#!/usr/bin/env python3
"""Configuration for the Node Lease lifecycle check.

Values come from defaults, then an optional YAML file, then command-line flags.
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigurationError

SUPPORTED_PROVIDERS = ("gce", "gke", "aws")

# Providers whose node tunnels can outlive a deleted node
TUNNEL_GRACE_PROVIDERS = {"gke": 5 * 60}

# Numeric settings in seconds: field name -> smallest accepted value
DURATION_MINIMUMS = {
    "lease_timeout": 0,
    "lease_interval": 0.1,
    "node_ready_timeout": 0,
    "group_size_timeout": 0,
    "pod_ready_timeout": 0,
    "tunnel_grace_seconds": 0,
}


@dataclass
class ScenarioConfig:
    """Everything the scenario needs to know about the cluster under test."""

    node_group: str = ""
    num_nodes: int = 0
    provider: Optional[str] = None

    system_namespace: str = "kube-system"
    lease_namespace: str = "kube-node-lease"
    machine_namespace: str = "openshift-machine-api"

    lease_timeout: float = 60
    lease_interval: float = 5
    node_ready_timeout: float = 10 * 60
    group_size_timeout: float = 20 * 60
    pod_ready_timeout: float = 5 * 60

    # None means "whatever the provider needs"
    tunnel_grace_seconds: Optional[float] = None

    @property
    def node_groups(self) -> List[str]:
        """Configured node groups; a comma-separated value lists several."""
        return [group.strip() for group in self.node_group.split(",") if group.strip()]

    def effective_tunnel_grace(self) -> float:
        """Seconds to wait after regrowing the group before trusting node tunnels again."""
        if self.tunnel_grace_seconds is not None:
            return self.tunnel_grace_seconds
        return TUNNEL_GRACE_PROVIDERS.get(self.provider or "", 0)


def _known_keys() -> set:
    return {f.name for f in fields(ScenarioConfig)}


def load_config_file(path) -> Dict[str, Any]:
    """
    Read scenario settings from a YAML file.

    Args:
        path: Path to a YAML file holding a single top-level mapping

    Returns:
        dict: Settings keyed by ScenarioConfig field name

    Raises:
        ConfigurationError: If the file is missing, unparsable, or has unknown keys
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigurationError(f"Config file does not exist: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Config file {config_path} is not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    # YAML keys may use dashes like the command-line flags do
    settings = {str(key).replace("-", "_"): value for key, value in data.items()}
    unknown = sorted(set(settings) - _known_keys())
    if unknown:
        raise ConfigurationError(f"Unknown settings in {config_path}: {', '.join(unknown)}")
    return settings


def _as_seconds(name: str, value: Any) -> float:
    # YAML turns "yes" into True, which float() would accept as 1
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be a number of seconds, got {value!r}")
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number of seconds, got {value!r}") from None
    if seconds < DURATION_MINIMUMS[name]:
        raise ConfigurationError(f"{name} must be at least {DURATION_MINIMUMS[name]}, got {value!r}")
    return seconds


def build_config(file_settings: Optional[Dict[str, Any]] = None, **overrides: Any) -> ScenarioConfig:
    """
    Merge file settings and command-line overrides into a ScenarioConfig.

    Overrides whose value is None are treated as "not given".

    Raises:
        ConfigurationError: If no node group is configured or values are out of range
    """
    settings: Dict[str, Any] = dict(file_settings or {})
    settings.update({key: value for key, value in overrides.items() if value is not None})

    unknown = sorted(set(settings) - _known_keys())
    if unknown:
        raise ConfigurationError(f"Unknown settings: {', '.join(unknown)}")

    config = ScenarioConfig(**settings)
    if config.provider:
        config.provider = str(config.provider).lower()

    if not config.node_groups:
        raise ConfigurationError("No node group configured (set node_group or --node-group)")
    try:
        config.num_nodes = int(config.num_nodes)
    except (TypeError, ValueError):
        raise ConfigurationError(f"num_nodes must be an integer, got {config.num_nodes!r}") from None
    if config.num_nodes <= 0:
        raise ConfigurationError(f"num_nodes must be a positive integer, got {config.num_nodes}")

    for name in DURATION_MINIMUMS:
        value = getattr(config, name)
        if value is None and name == "tunnel_grace_seconds":
            continue
        setattr(config, name, _as_seconds(name, value))
    return config
