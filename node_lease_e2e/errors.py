#!/usr/bin/env python3
"""Exception hierarchy for the Node Lease lifecycle check.

    NodeLeaseError
    ├── ConfigurationError   fatal, reported before anything touches the cluster
    ├── ScenarioFailure      an expectation did not hold (also an AssertionError)
    │   ├── ConvergenceTimeout
    │   └── LeaseLookupError
    └── RestoreError         the cluster could not be put back; fatal to the run
"""


class NodeLeaseError(Exception):
    """Base class for every error raised by this package"""


class ConfigurationError(NodeLeaseError):
    """The scenario is configured in a way it can never run with"""


class ScenarioFailure(NodeLeaseError, AssertionError):
    """An expectation about cluster state did not hold"""


class ConvergenceTimeout(ScenarioFailure):
    """A polled condition did not become true before its timeout"""

    def __init__(self, description, timeout, last_error=None):
        self.description = description
        self.timeout = timeout
        self.last_error = last_error
        message = f"Timed out after {timeout}s waiting for {description}"
        if last_error:
            message += f": {last_error}"
        super().__init__(message)


class LeaseLookupError(ScenarioFailure):
    """Looking up a lease failed for a reason other than NotFound"""


class RestoreError(NodeLeaseError):
    """The node group or cluster health could not be restored"""
