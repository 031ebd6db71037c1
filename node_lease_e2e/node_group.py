#!/usr/bin/env python3
"""Node group scaling backed by an OpenShift MachineSet."""

from typing import Any, Callable, Dict, Optional

from .eventually import eventually

MACHINE_NAMESPACE = "openshift-machine-api"
MACHINESET_LABEL = "machine.openshift.io/cluster-api-machineset"
GROUP_SIZE_TIMEOUT = 20 * 60
GROUP_SIZE_INTERVAL = 20


class NodeGroupScaler:
    """Changes the desired size of one node group and waits for it to converge.

    Resizing only records intent; callers must follow every `resize` with a
    `wait_for_size` before relying on the new size.
    """

    def __init__(
        self,
        group: str,
        execute_oc_command: Callable,
        namespace: str = MACHINE_NAMESPACE,
        printer: Optional[Any] = None,
    ) -> None:
        """Initialize the scaler.

        Args:
            group: Name of the MachineSet backing the node group
            execute_oc_command: Function to execute OpenShift CLI commands
            namespace: Namespace holding Machines and MachineSets
            printer: PrintManager instance for formatted output
        """
        self.group = group
        self.execute_oc_command = execute_oc_command
        self.namespace = namespace
        self.printer = printer

    def _get_machineset_data(self) -> Optional[Dict[str, Any]]:
        machineset_data = self.execute_oc_command(
            ["get", "machineset", self.group, "-n", self.namespace, "-o", "json"],
            json_output=True,
            printer=self.printer,
        )
        if not machineset_data and self.printer:
            self.printer.print_error(f"Failed to retrieve MachineSet data for: {self.group}")
        return machineset_data

    def current_size(self) -> Optional[int]:
        """Return the number of Machines currently owned by the group, or None if unknown."""
        machines_data = self.execute_oc_command(
            ["get", "machines", "-n", self.namespace, "-l", f"{MACHINESET_LABEL}={self.group}", "-o", "json"],
            json_output=True,
            printer=self.printer,
        )
        if machines_data is None:
            return None
        return len(machines_data.get("items", []))

    def resize(self, target_count: int) -> bool:
        """Set the desired replica count of the group.

        Args:
            target_count: Desired number of nodes

        Returns:
            True if the scale request was accepted, False otherwise
        """
        if self.printer:
            self.printer.print_action(f"Scaling MachineSet '{self.group}' to {target_count} replicas")

        result = self.execute_oc_command(
            ["scale", "machineset", self.group, "-n", self.namespace, f"--replicas={target_count}"],
            printer=self.printer,
        )
        if result is None:
            if self.printer:
                self.printer.print_error(f"Failed to scale MachineSet '{self.group}' to {target_count} replicas")
            return False

        if self.printer:
            self.printer.print_success(f"Requested MachineSet '{self.group}' size {target_count}")
        return True

    def wait_for_size(
        self, target_count: int, timeout: float = GROUP_SIZE_TIMEOUT, interval: float = GROUP_SIZE_INTERVAL
    ) -> None:
        """Wait until the group actually has `target_count` machines.

        Both the MachineSet's observed replica count and the number of Machine
        objects carrying its label must match, so machines still being
        deleted keep the wait going.

        Raises:
            ConvergenceTimeout: If the group did not reach the size in time
        """

        def _size_matches():
            machineset_data = self._get_machineset_data()
            if not machineset_data:
                return f"MachineSet {self.group} unavailable"
            status_replicas = machineset_data.get("status", {}).get("replicas", 0)
            machine_count = self.current_size()
            if machine_count is None:
                return f"Machines of {self.group} unavailable"
            if status_replicas != target_count or machine_count != target_count:
                return f"group size {machine_count} (status.replicas={status_replicas}), waiting for {target_count}"
            return None

        eventually(
            _size_matches,
            timeout=timeout,
            interval=interval,
            description=f"node group {self.group} to reach size {target_count}",
            printer=self.printer,
        )
