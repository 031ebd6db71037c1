#!/usr/bin/env python3
"""Put the node group and cluster health back the way the scenario found them."""

import time
from contextlib import contextmanager

from .errors import NodeLeaseError, RestoreError


def restore_cluster(cluster, scaler, config, baseline_system_pods, printer, sleep=time.sleep):
    """
    Grow the node group back to its configured size and wait for full health.

    Each step depends on the previous one; the first failure stops the restore.

    Args:
        cluster: ClusterHandle of the cluster under test
        scaler: NodeGroupScaler of the disrupted node group
        config: ScenarioConfig for the run
        baseline_system_pods: Pod count of the system namespace before the scenario
        printer: Printer instance for output
        sleep: Function used for the tunnel grace period

    Raises:
        RestoreError: If any step fails; the cluster is then unfit for further scenarios
    """
    original_size = config.num_nodes

    printer.print_info("Restoring the original node group size")
    if not scaler.resize(original_size):
        raise RestoreError(f"Couldn't restore the original node group size {original_size} of {scaler.group}")

    grace = config.effective_tunnel_grace()
    if grace > 0:
        # Tunnels to a deleted node may be reused until they are all recreated.
        printer.print_info(f"Waiting {int(grace)}s for all dead tunnels to be dropped")
        sleep(grace)

    try:
        scaler.wait_for_size(original_size, timeout=config.group_size_timeout)
    except NodeLeaseError as e:
        raise RestoreError(f"Couldn't restore the original node group size: {e}") from e

    try:
        cluster.wait_for_ready_nodes(original_size, timeout=config.node_ready_timeout)
    except NodeLeaseError as e:
        raise RestoreError(f"Couldn't restore the original cluster size: {e}") from e

    # Later scenarios assume a fully healthy cluster.
    printer.print_info("Waiting for system pods to successfully restart")
    try:
        cluster.wait_for_pods_running_ready(
            config.system_namespace,
            baseline_system_pods,
            allowed_not_ready=0,
            timeout=config.pod_ready_timeout,
        )
    except NodeLeaseError as e:
        raise RestoreError(f"System pods in {config.system_namespace} did not recover: {e}") from e

    printer.print_success(f"Cluster restored to {original_size} nodes and {baseline_system_pods} system pods")


@contextmanager
def restore_on_exit(cluster, scaler, config, baseline_system_pods, printer, sleep=time.sleep):
    """Run the enclosed block, then restore the cluster no matter how the block exited."""
    try:
        yield
    finally:
        restore_cluster(cluster, scaler, config, baseline_system_pods, printer, sleep=sleep)
