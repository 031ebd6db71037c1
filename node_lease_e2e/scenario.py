#!/usr/bin/env python3
"""Node lease deletion scenario: leases must follow nodes in and out of the cluster."""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .errors import ConfigurationError, ScenarioFailure
from .eventually import eventually
from .preconditions import Decision, evaluate_preconditions
from .restore import restore_on_exit
from .utilities import format_runtime


class Outcome(Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class ScenarioPhase(Enum):
    INIT = "Init"
    BASELINE_WAIT = "BaselineWait"
    BASELINE_LEASE_CHECK = "BaselineLeaseCheck"
    DISRUPT = "Disrupt"
    IDENTIFY_REMOVED = "IdentifyRemoved"
    DELETION_CHECK = "DeletionCheck"
    SURVIVOR_CHECK = "SurvivorCheck"
    DONE = "Done"


TOTAL_STEPS = 7


@dataclass
class ScenarioResult:
    outcome: Outcome
    phase: ScenarioPhase
    message: str = ""
    removed_node: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.outcome is Outcome.PASSED


def expect_equal(actual: Any, expected: Any, message: str) -> None:
    """Raise ScenarioFailure unless actual == expected."""
    if actual != expected:
        raise ScenarioFailure(f"{message}: expected {expected!r}, got {actual!r}")


class NodeLeaseScenario:
    """
    Verifies that node leases are deleted together with their nodes.

    Shrinks the single node group by one node, then checks that the removed
    node's lease disappears while every surviving node keeps its lease. Once
    setup has completed the node group is always grown back, and a failed
    restore is raised as RestoreError even when the scenario itself failed.
    """

    def __init__(self, cluster, scaler, leases, config, printer, sleep=time.sleep) -> None:
        """
        Args:
            cluster: ClusterHandle of the cluster under test
            scaler: NodeGroupScaler for the configured node group
            leases: LeaseRegistry for the node lease namespace
            config: ScenarioConfig for the run
            printer: PrintManager instance for output formatting
            sleep: Function used for fixed waits (the tunnel grace period)
        """
        self.cluster = cluster
        self.scaler = scaler
        self.leases = leases
        self.config = config
        self.printer = printer
        self.sleep = sleep

        self.phase = ScenarioPhase.INIT
        self.baseline_system_pods: Optional[int] = None
        self.original_nodes = None
        self.target_nodes = None
        self.removed_node: Optional[str] = None

    def _enter(self, phase: ScenarioPhase, step_num: int, message: str) -> None:
        self.phase = phase
        self.printer.print_step(step_num, TOTAL_STEPS, message)

    def _poll(self, condition, description: str) -> None:
        eventually(
            condition,
            timeout=self.config.lease_timeout,
            interval=self.config.lease_interval,
            description=description,
            printer=self.printer,
        )

    def _setup(self) -> Optional[ScenarioResult]:
        """Init phase. Returns a result only when the scenario must not proceed."""
        self._enter(ScenarioPhase.INIT, 1, "Checking preconditions")
        self.baseline_system_pods = self.cluster.count_running_ready_pods(self.config.system_namespace)
        self.printer.print_info(
            f"{self.baseline_system_pods} running and ready pods in {self.config.system_namespace} before the disruption"
        )

        guard = evaluate_preconditions(self.config)
        if guard.decision is Decision.FAIL_CONFIG:
            self.printer.print_error(guard.reason)
            raise ConfigurationError(guard.reason)
        if guard.decision is Decision.SKIP:
            self.printer.print_skip(guard.reason)
            return ScenarioResult(Outcome.SKIPPED, self.phase, guard.reason)
        return None

    def _check_baseline(self) -> None:
        num_nodes = self.config.num_nodes

        self._enter(ScenarioPhase.BASELINE_WAIT, 2, f"Waiting for {num_nodes} ready nodes")
        self.cluster.wait_for_ready_nodes(num_nodes, timeout=self.config.node_ready_timeout)

        self._enter(ScenarioPhase.BASELINE_LEASE_CHECK, 3, "Verifying node lease exists for every node")
        self.original_nodes = self.cluster.list_ready_schedulable_nodes()
        expect_equal(len(self.original_nodes), num_nodes, "Ready schedulable node count before disruption")

        def _all_leases_exist():
            missing = self.leases.missing_leases(self.original_nodes.names())
            if missing:
                return f"some node lease is not ready: {', '.join(missing)}"
            return None

        self._poll(_all_leases_exist, f"leases of nodes {', '.join(self.original_nodes.names())}")
        self.printer.print_success(f"All {num_nodes} nodes have a lease")

    def _disrupt(self) -> None:
        target_count = self.config.num_nodes - 1

        self._enter(ScenarioPhase.DISRUPT, 4, f"Decreasing cluster size to {target_count}")
        if not self.scaler.resize(target_count):
            raise ScenarioFailure(f"Failed to resize node group {self.scaler.group} to {target_count}")
        self.scaler.wait_for_size(target_count, timeout=self.config.group_size_timeout)
        self.cluster.wait_for_ready_nodes(target_count, timeout=self.config.node_ready_timeout)

        self.target_nodes = self.cluster.list_ready_schedulable_nodes()
        expect_equal(len(self.target_nodes), target_count, "Ready schedulable node count after disruption")

    def _identify_removed_node(self) -> str:
        self._enter(ScenarioPhase.IDENTIFY_REMOVED, 5, "Identifying the removed node")
        removed = self.original_nodes.difference(self.target_nodes)
        if len(removed) != 1:
            raise ScenarioFailure(
                f"Expected exactly one removed node, found {len(removed)}: {list(removed)} "
                f"(before: {list(self.original_nodes.names())}, after: {list(self.target_nodes.names())})"
            )
        self.removed_node = removed[0]
        self.printer.print_info(f"Node {self.removed_node} was removed from the cluster")
        return self.removed_node

    def _check_deleted_lease(self, removed_node: str) -> None:
        self._enter(ScenarioPhase.DELETION_CHECK, 6, "Verifying node lease is deleted for the deleted node")

        def _lease_deleted():
            if self.leases.get(removed_node) is not None:
                return f"node lease is not deleted yet for node {removed_node!r}"
            return None

        self._poll(_lease_deleted, f"deletion of the lease of node {removed_node}")
        self.printer.print_success(f"Lease of node {removed_node} was deleted")

    def _check_surviving_leases(self) -> None:
        self._enter(ScenarioPhase.SURVIVOR_CHECK, 7, "Verifying node leases still exist for remaining nodes")
        survivors = self.target_nodes.names()

        def _survivor_leases_exist():
            missing = self.leases.missing_leases(survivors)
            if missing:
                return f"lease missing for remaining nodes: {', '.join(missing)}"
            return None

        self._poll(_survivor_leases_exist, f"leases of remaining nodes {', '.join(survivors)}")
        self.printer.print_success(f"All {len(survivors)} remaining nodes still have a lease")

    def run(self) -> ScenarioResult:
        """
        Run the scenario and its teardown.

        Returns:
            ScenarioResult: passed, failed (with the phase and reason) or skipped

        Raises:
            ConfigurationError: If more than one node group is configured
            RestoreError: If the cluster could not be restored afterwards
        """
        start_time = time.time()
        self.printer.print_header("Node lease deletion")

        try:
            early_result = self._setup()
        except ScenarioFailure as e:
            self.printer.print_error(f"Setup failed: {e}")
            return ScenarioResult(Outcome.FAILED, self.phase, str(e))
        if early_result is not None:
            return early_result

        try:
            with restore_on_exit(
                self.cluster, self.scaler, self.config, self.baseline_system_pods, self.printer, sleep=self.sleep
            ):
                self._check_baseline()
                self._disrupt()
                removed_node = self._identify_removed_node()
                self._check_deleted_lease(removed_node)
                self._check_surviving_leases()
                self.phase = ScenarioPhase.DONE
        except ScenarioFailure as e:
            self.printer.print_error(f"Scenario failed during {self.phase.value}: {e}")
            self.printer.print_info(f"Total runtime before failure: {format_runtime(start_time, time.time())}")
            return ScenarioResult(Outcome.FAILED, self.phase, str(e), self.removed_node)

        self.printer.print_success("Node lease was deleted with its node and all other leases survived")
        self.printer.print_info(f"Total runtime: {format_runtime(start_time, time.time())}")
        return ScenarioResult(Outcome.PASSED, self.phase, "", self.removed_node)
