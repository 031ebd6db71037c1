#!/usr/bin/env python3
"""Cluster handle: the one object through which the scenario observes the cluster."""

from typing import Any, Callable, Dict, Optional, Tuple

from .errors import ScenarioFailure
from .eventually import eventually
from .models import Node, NodeSet

NODE_READY_TIMEOUT = 10 * 60
NODE_READY_INTERVAL = 20
POD_READY_TIMEOUT = 5 * 60
POD_READY_INTERVAL = 2

# Infrastructure platform type -> provider name used by the scenario guard
PLATFORM_PROVIDERS = {
    "AWS": "aws",
    "GCP": "gce",
}


def _pod_is_running_ready(pod: Dict[str, Any]) -> bool:
    status = pod.get("status", {})
    if status.get("phase") != "Running":
        return False
    for condition in status.get("conditions", []):
        if condition.get("type") == "Ready":
            return condition.get("status") == "True"
    return False


def _split_by_readiness(pods: list) -> Tuple[list, list]:
    """Split pods into (running and ready, not ready) names, ignoring pods that already Succeeded."""
    active = [pod for pod in pods if pod.get("status", {}).get("phase") != "Succeeded"]
    ready = [pod["metadata"]["name"] for pod in active if _pod_is_running_ready(pod)]
    not_ready = [pod["metadata"]["name"] for pod in active if not _pod_is_running_ready(pod)]
    return ready, not_ready


class ClusterHandle:
    """
    Explicit handle on the shared cluster under test.

    Wraps node listing, node readiness waits, and system pod health checks so
    that the scenario never reaches for ambient client state.
    """

    def __init__(self, execute_oc_command: Callable, printer: Optional[Any] = None) -> None:
        """
        Args:
            execute_oc_command: Function to execute oc commands
            printer: Printer instance for output
        """
        self.execute_oc_command = execute_oc_command
        self.printer = printer

    def list_nodes(self) -> Optional[NodeSet]:
        """Return every node in the cluster, or None if the node list could not be read."""
        nodes_data = self.execute_oc_command(["get", "nodes", "-o", "json"], json_output=True, printer=self.printer)
        if nodes_data is None:
            return None
        return NodeSet(Node.from_json(item) for item in nodes_data.get("items", []))

    def list_ready_schedulable_nodes(self) -> NodeSet:
        """
        Return the nodes that are both Ready and schedulable.

        Raises:
            ScenarioFailure: If the node list could not be read
        """
        nodes = self.list_nodes()
        if nodes is None:
            raise ScenarioFailure("Failed to list cluster nodes")
        return NodeSet(node for node in nodes if node.ready and node.schedulable)

    def wait_for_ready_nodes(
        self, expected_count: int, timeout: float = NODE_READY_TIMEOUT, interval: float = NODE_READY_INTERVAL
    ) -> NodeSet:
        """
        Wait until exactly `expected_count` nodes are Ready and schedulable.

        Returns:
            NodeSet: The snapshot that satisfied the wait

        Raises:
            ConvergenceTimeout: If the count never matched within the timeout
        """
        observed = {}

        def _ready_count_matches():
            nodes = self.list_nodes()
            if nodes is None:
                return "node list unavailable"
            ready = NodeSet(node for node in nodes if node.ready and node.schedulable)
            if len(ready) != expected_count:
                return f"{len(ready)} of {len(nodes)} nodes ready and schedulable, expected {expected_count}"
            observed["nodes"] = ready
            return None

        eventually(
            _ready_count_matches,
            timeout=timeout,
            interval=interval,
            description=f"{expected_count} ready nodes",
            printer=self.printer,
        )
        return observed["nodes"]

    def _get_pods(self, namespace: str) -> Optional[list]:
        pods_data = self.execute_oc_command(
            ["get", "pods", "-n", namespace, "-o", "json"], json_output=True, printer=self.printer
        )
        if pods_data is None:
            return None
        return pods_data.get("items", [])

    def count_running_ready_pods(self, namespace: str) -> int:
        """
        Count Running and Ready pods in a namespace, ignoring Succeeded ones.

        Counts exactly what wait_for_pods_running_ready waits for, so a
        baseline taken here is reachable again after a restore.

        Raises:
            ScenarioFailure: If the pods could not be listed
        """
        pods = self._get_pods(namespace)
        if pods is None:
            raise ScenarioFailure(f"Failed to list pods in namespace {namespace}")
        ready, _ = _split_by_readiness(pods)
        return len(ready)

    def wait_for_pods_running_ready(
        self,
        namespace: str,
        min_pods: int,
        allowed_not_ready: int = 0,
        timeout: float = POD_READY_TIMEOUT,
        interval: float = POD_READY_INTERVAL,
    ) -> None:
        """
        Wait until at least `min_pods` pods in a namespace are Running and Ready.

        Pods that already Succeeded are ignored. At most `allowed_not_ready`
        of the remaining pods may be anything other than Running and Ready.

        Raises:
            ConvergenceTimeout: If the pods did not settle within the timeout
        """

        def _pods_ready():
            pods = self._get_pods(namespace)
            if pods is None:
                return f"pods in {namespace} unavailable"
            ready, not_ready = _split_by_readiness(pods)
            ready_count = len(ready)
            if ready_count < min_pods or len(not_ready) > allowed_not_ready:
                shown = ", ".join(not_ready[:5])
                return f"{ready_count}/{min_pods} pods ready, not ready: [{shown}]"
            return None

        eventually(
            _pods_ready,
            timeout=timeout,
            interval=interval,
            description=f"{min_pods} running and ready pods in {namespace}",
            printer=self.printer,
        )

    def detect_provider(self) -> Optional[str]:
        """Map the cluster Infrastructure platform type to a provider name, if known."""
        infra = self.execute_oc_command(
            ["get", "infrastructure", "cluster", "-o", "json"], json_output=True, printer=self.printer
        )
        if not infra:
            return None
        platform = infra.get("status", {}).get("platformStatus", {}).get("type") or infra.get("status", {}).get(
            "platform"
        )
        return PLATFORM_PROVIDERS.get(platform)
