#!/usr/bin/env python3
"""
Node Lease Lifecycle Check

Entry point for the disruptive node lease scenario: shrinks the cluster's single
node group by one node, verifies the removed node's lease is deleted while the
remaining leases survive, then restores the node group.

Exit codes:
    0  scenario passed
    1  scenario failed
    2  configuration error
    3  cluster could not be restored
    4  scenario skipped (not applicable to this cluster)
"""

import sys

from node_lease_e2e import (
    ArgumentsParser,
    ClusterHandle,
    LeaseRegistry,
    NodeGroupScaler,
    NodeLeaseScenario,
    Outcome,
    build_config,
    execute_oc_command,
    load_config_file,
    printer,
    run_oc_command,
)
from node_lease_e2e.errors import ConfigurationError, RestoreError

EXIT_PASSED = 0
EXIT_FAILED = 1
EXIT_CONFIG_ERROR = 2
EXIT_RESTORE_ERROR = 3
EXIT_SKIPPED = 4

OUTCOME_EXIT_CODES = {
    Outcome.PASSED: EXIT_PASSED,
    Outcome.FAILED: EXIT_FAILED,
    Outcome.SKIPPED: EXIT_SKIPPED,
}


def load_scenario_config(args):
    """Merge the optional YAML config file with command-line flags."""
    file_settings = load_config_file(args.config) if args.config else None
    return build_config(
        file_settings,
        node_group=args.node_group,
        num_nodes=args.num_nodes,
        provider=args.provider,
        system_namespace=args.system_namespace,
        lease_namespace=args.lease_namespace,
        machine_namespace=args.machine_namespace,
        lease_timeout=args.lease_timeout,
        lease_interval=args.lease_interval,
        node_ready_timeout=args.node_ready_timeout,
        group_size_timeout=args.group_size_timeout,
        pod_ready_timeout=args.pod_ready_timeout,
        tunnel_grace_seconds=args.tunnel_grace_seconds,
    )


def build_scenario(config):
    """Wire the cluster collaborators for one scenario run."""
    cluster = ClusterHandle(execute_oc_command=execute_oc_command, printer=printer)

    if not config.provider:
        config.provider = cluster.detect_provider()
        printer.print_info(f"Detected provider: {config.provider or 'unknown'}")

    scaler = NodeGroupScaler(
        config.node_groups[0], execute_oc_command, namespace=config.machine_namespace, printer=printer
    )
    leases = LeaseRegistry(run_oc_command, namespace=config.lease_namespace, printer=printer)
    return NodeLeaseScenario(cluster, scaler, leases, config, printer)


def main(argv=None):
    """
    Run the node lease scenario once and translate its outcome into an exit code.

    Args:
        argv: Argument list, defaults to sys.argv[1:]

    Returns:
        int: Process exit code
    """
    args = ArgumentsParser.parse_arguments(argv)
    printer.start_clock()

    try:
        config = load_scenario_config(args)
        scenario = build_scenario(config)
        result = scenario.run()
    except ConfigurationError as e:
        printer.print_error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR
    except RestoreError as e:
        printer.print_error(f"Cluster restore failed: {e}")
        printer.print_error("The node group may be left at the wrong size; fix it before running other scenarios")
        return EXIT_RESTORE_ERROR

    if result.outcome is Outcome.PASSED:
        printer.print_header("Node lease scenario passed")
    elif result.outcome is Outcome.SKIPPED:
        printer.print_header("Node lease scenario skipped")
    else:
        printer.print_header(f"Node lease scenario failed in {result.phase.value}")
        printer.print_error(result.message)
    return OUTCOME_EXIT_CODES[result.outcome]


if __name__ == "__main__":
    sys.exit(main())
