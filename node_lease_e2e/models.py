#!/usr/bin/env python3
"""Data model for nodes and leases as observed through `oc ... -o json`."""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple

UNSCHEDULABLE_TAINT_EFFECTS = ("NoSchedule", "NoExecute")


def _condition_status(node_data: Dict[str, Any], condition_type: str) -> Optional[str]:
    for condition in node_data.get("status", {}).get("conditions", []):
        if condition.get("type") == condition_type:
            return condition.get("status")
    return None


@dataclass(frozen=True)
class Node:
    """A cluster node. Identity is the name; the rest is a point-in-time observation."""

    name: str
    ready: bool = False
    schedulable: bool = False

    @classmethod
    def from_json(cls, node_data: Dict[str, Any]) -> "Node":
        """Build a Node from one item of `oc get nodes -o json`.

        A node is schedulable when it is not cordoned, its network is
        available, and it carries no taint that keeps ordinary pods away.
        """
        spec = node_data.get("spec", {})
        taints = spec.get("taints") or []
        schedulable = (
            not spec.get("unschedulable", False)
            and _condition_status(node_data, "NetworkUnavailable") != "True"
            and not any(taint.get("effect") in UNSCHEDULABLE_TAINT_EFFECTS for taint in taints)
        )
        return cls(
            name=node_data["metadata"]["name"],
            ready=_condition_status(node_data, "Ready") == "True",
            schedulable=schedulable,
        )


class NodeSet:
    """Immutable, ordered snapshot of nodes captured at one point in time."""

    def __init__(self, nodes=()):
        self._nodes: Tuple[Node, ...] = tuple(nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, name) -> bool:
        return name in self.names()

    def __eq__(self, other) -> bool:
        return isinstance(other, NodeSet) and self._nodes == other._nodes

    def __repr__(self) -> str:
        return f"NodeSet({list(self.names())})"

    def names(self) -> Tuple[str, ...]:
        return tuple(node.name for node in self._nodes)

    def difference(self, other: "NodeSet") -> Tuple[str, ...]:
        """Names present in this snapshot but absent from `other`, in snapshot order."""
        return tuple(name for name in self.names() if name not in other)


@dataclass(frozen=True)
class Lease:
    """A node heartbeat lease. Only its existence matters to the scenario."""

    name: str
    holder_identity: Optional[str] = None
    renew_time: Optional[str] = None
    lease_duration_seconds: Optional[int] = None

    @classmethod
    def from_json(cls, lease_data: Dict[str, Any]) -> "Lease":
        spec = lease_data.get("spec", {})
        return cls(
            name=lease_data["metadata"]["name"],
            holder_identity=spec.get("holderIdentity"),
            renew_time=spec.get("renewTime"),
            lease_duration_seconds=spec.get("leaseDurationSeconds"),
        )
