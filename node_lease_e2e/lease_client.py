#!/usr/bin/env python3
"""Read-only access to node heartbeat leases."""

import json
from typing import Callable, Optional

from .errors import LeaseLookupError
from .models import Lease
from .utilities import is_not_found_error

NODE_LEASE_NAMESPACE = "kube-node-lease"


class LeaseRegistry:
    """Looks up node leases by node name in the node lease namespace.

    A missing lease is an expected answer here, so `get` returns None for it
    instead of raising; only a lookup that could not be answered raises.
    """

    def __init__(
        self,
        run_oc_command: Callable,
        namespace: str = NODE_LEASE_NAMESPACE,
        printer: Optional[object] = None,
    ) -> None:
        """
        Args:
            run_oc_command: Function running an oc command and returning the raw result
            namespace: Namespace holding the node leases
            printer: Printer instance for output
        """
        self.run_oc_command = run_oc_command
        self.namespace = namespace
        self.printer = printer

    def get(self, node_name: str) -> Optional[Lease]:
        """
        Fetch the lease of one node.

        Args:
            node_name: Name of the node, which is also the lease name

        Returns:
            Lease if it exists, None if the API reports NotFound

        Raises:
            LeaseLookupError: If the API could not answer or returned garbage
        """
        result = self.run_oc_command(
            ["get", "lease", node_name, "-n", self.namespace, "-o", "json"], printer=self.printer
        )
        if result is None:
            raise LeaseLookupError(f"Could not query lease of node {node_name}: oc command did not run")

        if result.returncode != 0:
            if is_not_found_error(result.stderr, resource="leases"):
                return None
            raise LeaseLookupError(f"Could not query lease of node {node_name}: {result.stderr.strip()}")

        try:
            return Lease.from_json(json.loads(result.stdout))
        except (json.JSONDecodeError, KeyError) as e:
            raise LeaseLookupError(f"Unreadable lease of node {node_name}: {e}") from e

    def missing_leases(self, node_names) -> list:
        """Return the node names (in order) whose lease does not exist or cannot be read."""
        missing = []
        for node_name in node_names:
            try:
                lease = self.get(node_name)
            except LeaseLookupError as e:
                if self.printer:
                    self.printer.print_info(f"Try to get lease of node {node_name}, but got error: {e}")
                missing.append(node_name)
                continue
            if lease is None:
                if self.printer:
                    self.printer.print_info(f"Lease of node {node_name} does not exist yet")
                missing.append(node_name)
        return missing
