#!/usr/bin/env python3
"""
Shared pytest configuration and fixtures for all tests.
"""

import pytest
import sys
import os
import json
import subprocess
from typing import Any, Dict, List, Optional
from unittest.mock import Mock, patch

# Add the parent directory to Python path so we can import node_lease_e2e
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from node_lease_e2e.scenario_config import ScenarioConfig  # noqa: E402


# =============================================================================
# Output and time
# =============================================================================


@pytest.fixture
def mock_printer() -> Mock:
    """Mock printer for testing output operations.

    Returns:
        Mock: Mock printer instance with all required methods.
    """
    printer = Mock()
    printer.print_header = Mock()
    printer.print_info = Mock()
    printer.print_action = Mock()
    printer.print_success = Mock()
    printer.print_error = Mock()
    printer.print_warning = Mock()
    printer.print_skip = Mock()
    printer.print_step = Mock()
    return printer


class FakeClock:
    """Monotonic clock that only moves when something sleeps."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: List[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock():
    """Patch the poller's time module so polls finish instantly and deterministically."""
    clock = FakeClock()
    with patch("node_lease_e2e.eventually.time") as mock_time:
        mock_time.monotonic.side_effect = clock.monotonic
        mock_time.sleep.side_effect = clock.sleep
        yield clock


# =============================================================================
# OpenShift JSON factories
# =============================================================================


def node_json(
    name: str,
    ready: bool = True,
    unschedulable: bool = False,
    network_unavailable: bool = False,
    taints: Optional[List[Dict[str, str]]] = None,
) -> Dict[str, Any]:
    conditions = [
        {"type": "MemoryPressure", "status": "False"},
        {"type": "Ready", "status": "True" if ready else "False"},
    ]
    if network_unavailable:
        conditions.append({"type": "NetworkUnavailable", "status": "True"})
    spec: Dict[str, Any] = {}
    if unschedulable:
        spec["unschedulable"] = True
    if taints:
        spec["taints"] = taints
    return {
        "apiVersion": "v1",
        "kind": "Node",
        "metadata": {"name": name, "labels": {"node-role.kubernetes.io/worker": ""}},
        "spec": spec,
        "status": {"conditions": conditions},
    }


@pytest.fixture
def node_json_factory():
    """Factory fixture for `oc get nodes -o json` items."""
    return node_json


def lease_json(name: str) -> Dict[str, Any]:
    return {
        "apiVersion": "coordination.k8s.io/v1",
        "kind": "Lease",
        "metadata": {"name": name, "namespace": "kube-node-lease"},
        "spec": {
            "holderIdentity": name,
            "leaseDurationSeconds": 40,
            "renewTime": "2024-05-01T10:00:00.000000Z",
        },
    }


def pod_json(name: str, phase: str = "Running", ready: bool = True) -> Dict[str, Any]:
    return {
        "metadata": {"name": name, "namespace": "kube-system"},
        "status": {
            "phase": phase,
            "conditions": [{"type": "Ready", "status": "True" if ready else "False"}],
        },
    }


def completed(command, returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(["oc"] + list(command), returncode, stdout=stdout, stderr=stderr)


def lease_not_found(name: str) -> str:
    return f'Error from server (NotFound): leases.coordination.k8s.io "{name}" not found\n'


# =============================================================================
# In-memory cluster
# =============================================================================


class FakeOpenShift:
    """In-memory stand-in for the `oc` CLI of a cluster with one MachineSet.

    Scaling down removes `remove_order` nodes first. The lease of a removed
    node disappears only after it has been looked up `lease_deletion_lag`
    more times, like the real node lifecycle controller catching up.
    """

    def __init__(
        self,
        node_names,
        group: str = "cluster-abc-worker-a",
        remove_order: Optional[List[str]] = None,
        lease_deletion_lag: int = 2,
        system_pods: int = 6,
        platform: str = "AWS",
    ):
        self.node_names = list(node_names)
        self.leases = set(self.node_names)
        self.group = group
        self.desired = len(self.node_names)
        self.remove_order = list(remove_order or [])
        self.lease_deletion_lag = lease_deletion_lag
        self.pending_lease_deletions: Dict[str, int] = {}
        self.system_pods = system_pods
        self.platform = platform
        self.fail_scale_to = set()
        self.lost_leases = set()
        self.collateral_lease_loss: List[str] = []
        self.completed_pods: List[str] = []
        self.scale_requests: List[int] = []
        self._added = 0

    # Cluster behaviour ------------------------------------------------------

    def _scale(self, replicas: int) -> None:
        self.scale_requests.append(replicas)
        self.desired = replicas
        while len(self.node_names) > replicas:
            victim = self.remove_order.pop(0) if self.remove_order else self.node_names[-1]
            self.node_names.remove(victim)
            self.pending_lease_deletions[victim] = self.lease_deletion_lag
            self.lost_leases.update(self.collateral_lease_loss)
        while len(self.node_names) < replicas:
            self._added += 1
            name = f"worker-new-{self._added}"
            self.node_names.append(name)
            self.leases.add(name)

    def _lookup_lease(self, name: str) -> bool:
        if name in self.pending_lease_deletions:
            if self.pending_lease_deletions[name] <= 0:
                del self.pending_lease_deletions[name]
                self.leases.discard(name)
            else:
                self.pending_lease_deletions[name] -= 1
        return name in self.leases and name not in self.lost_leases

    # oc entry points --------------------------------------------------------

    def execute_oc_command(self, command, json_output=False, printer=None, **kwargs):
        verb, kind = command[0], command[1]
        if verb == "get" and kind == "nodes":
            return {"items": [node_json(name) for name in self.node_names]}
        if verb == "get" and kind == "pods":
            pods = [pod_json(f"system-pod-{i}") for i in range(self.system_pods)]
            pods += [pod_json(name, phase="Succeeded", ready=False) for name in self.completed_pods]
            return {"items": pods}
        if verb == "get" and kind == "machineset":
            return {"spec": {"replicas": self.desired}, "status": {"replicas": len(self.node_names)}}
        if verb == "get" and kind == "machines":
            return {"items": [{"metadata": {"name": f"machine-{name}"}} for name in self.node_names]}
        if verb == "get" and kind == "infrastructure":
            return {"status": {"platformStatus": {"type": self.platform}}}
        if verb == "scale" and kind == "machineset":
            replicas = int(command[-1].split("=")[1])
            if replicas in self.fail_scale_to:
                return None
            self._scale(replicas)
            return f"machineset.machine.openshift.io/{self.group} scaled"
        raise AssertionError(f"Unexpected oc command: {command}")

    def run_oc_command(self, command, printer=None, **kwargs):
        if command[:2] == ["get", "lease"]:
            name = command[2]
            if self._lookup_lease(name):
                return completed(command, stdout=json.dumps(lease_json(name)))
            return completed(command, returncode=1, stderr=lease_not_found(name))
        raise AssertionError(f"Unexpected oc command: {command}")


@pytest.fixture
def fake_openshift():
    """Four worker nodes A-D; scaling down removes worker-b first."""
    return FakeOpenShift(
        ["worker-a", "worker-b", "worker-c", "worker-d"],
        remove_order=["worker-b"],
    )


@pytest.fixture
def scenario_config() -> ScenarioConfig:
    return ScenarioConfig(node_group="cluster-abc-worker-a", num_nodes=4, provider="aws")
