#!/usr/bin/env python3
"""Capability guard evaluated before the scenario touches the cluster."""

from dataclasses import dataclass
from enum import Enum

from .scenario_config import SUPPORTED_PROVIDERS

MIN_NODE_COUNT = 2


class Decision(Enum):
    RUN = "run"
    SKIP = "skip"
    FAIL_CONFIG = "fail-config"


@dataclass(frozen=True)
class GuardResult:
    decision: Decision
    reason: str = ""


def evaluate_preconditions(config) -> GuardResult:
    """
    Decide whether the node lease scenario can run with this configuration.

    Configuration errors are checked first, so a misconfigured run fails even
    on a provider where it would otherwise be skipped.

    Args:
        config: ScenarioConfig for the run

    Returns:
        GuardResult: RUN, SKIP with a reason, or FAIL_CONFIG with a reason
    """
    if len(config.node_groups) > 1:
        return GuardResult(
            Decision.FAIL_CONFIG,
            f"Test does not support cluster setup with more than one node group: {config.node_group}",
        )

    if config.provider not in SUPPORTED_PROVIDERS:
        return GuardResult(
            Decision.SKIP,
            f"Only supported for providers {list(SUPPORTED_PROVIDERS)} (not {config.provider})",
        )

    if config.num_nodes < MIN_NODE_COUNT:
        return GuardResult(
            Decision.SKIP,
            f"Requires at least {MIN_NODE_COUNT} nodes (not {config.num_nodes})",
        )

    return GuardResult(Decision.RUN)
