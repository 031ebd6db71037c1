#!/usr/bin/env python3
"""
Node Lease Lifecycle Check - Modular Components.

This package verifies that a node's heartbeat lease is deleted when the node
leaves the cluster while the leases of every other node stay in place.

Modules:
- print_manager: Handles all output formatting and printing
- utilities: oc command execution with retries and shared helpers
- errors: Exception hierarchy for failures, configuration and restore
- models: Node, NodeSet and Lease parsed from oc JSON output
- eventually: Retry-until-true polling primitive
- lease_client: Read-only node lease lookups
- cluster: Cluster handle for node listing and health waits
- node_group: MachineSet-backed node group scaling
- scenario_config: Scenario configuration from YAML and flags
- preconditions: Run / skip / configuration-error guard
- restore: Restore-on-exit guarantee for the node group
- scenario: The node lease deletion scenario
- arguments_parser: Command-line argument parsing
"""

from .arguments_parser import ArgumentsParser
from .cluster import ClusterHandle
from .errors import (
    ConfigurationError,
    ConvergenceTimeout,
    LeaseLookupError,
    NodeLeaseError,
    RestoreError,
    ScenarioFailure,
)
from .eventually import eventually
from .lease_client import LeaseRegistry
from .models import Lease, Node, NodeSet
from .node_group import NodeGroupScaler
from .preconditions import Decision, GuardResult, evaluate_preconditions
from .print_manager import PrintManager, printer, DEBUG_MODE
from .restore import restore_cluster, restore_on_exit
from .scenario import NodeLeaseScenario, Outcome, ScenarioPhase, ScenarioResult
from .scenario_config import ScenarioConfig, build_config, load_config_file
from .utilities import (
    execute_oc_command,
    format_runtime,
    is_not_found_error,
    run_oc_command,
)

__all__ = [
    "ArgumentsParser",
    "ClusterHandle",
    "ConfigurationError",
    "ConvergenceTimeout",
    "LeaseLookupError",
    "NodeLeaseError",
    "RestoreError",
    "ScenarioFailure",
    "eventually",
    "LeaseRegistry",
    "Lease",
    "Node",
    "NodeSet",
    "NodeGroupScaler",
    "Decision",
    "GuardResult",
    "evaluate_preconditions",
    "PrintManager",
    "printer",
    "DEBUG_MODE",
    "restore_cluster",
    "restore_on_exit",
    "NodeLeaseScenario",
    "Outcome",
    "ScenarioPhase",
    "ScenarioResult",
    "ScenarioConfig",
    "build_config",
    "load_config_file",
    "execute_oc_command",
    "format_runtime",
    "is_not_found_error",
    "run_oc_command",
]
