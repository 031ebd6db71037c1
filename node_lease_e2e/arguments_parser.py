#!/usr/bin/env python3
"""Arguments Parser module for the Node Lease lifecycle check."""

import argparse

from . import print_manager


class ArgumentsParser:
    """Handles command-line argument parsing for the node lease scenario"""

    @staticmethod
    def build_parser():
        """Build the argument parser; every setting defaults to None so the config file can supply it."""
        parser = argparse.ArgumentParser(
            description="Verify that node leases are deleted with their nodes when a node group shrinks. "
            "The node group is shrunk by one node and restored afterwards."
        )

        parser.add_argument(
            "--config",
            type=str,
            required=False,
            help="Path to a YAML file with scenario settings (flags override it)",
        )
        parser.add_argument(
            "--node-group",
            type=str,
            help="Name of the MachineSet backing the node group (exactly one)",
        )
        parser.add_argument(
            "--num-nodes",
            type=int,
            help="Number of nodes the cluster is configured with",
        )
        parser.add_argument(
            "--provider",
            type=str,
            help="Cloud provider (gce, gke, aws); detected from the cluster when omitted",
        )
        parser.add_argument(
            "--system-namespace",
            type=str,
            help="Namespace whose pods must be healthy again after the restore (default: kube-system)",
        )
        parser.add_argument(
            "--lease-namespace",
            type=str,
            help="Namespace holding the node leases (default: kube-node-lease)",
        )
        parser.add_argument(
            "--machine-namespace",
            type=str,
            help="Namespace holding Machines and MachineSets (default: openshift-machine-api)",
        )
        parser.add_argument(
            "--lease-timeout",
            type=float,
            help="Seconds to wait for each lease check to converge (default: 60)",
        )
        parser.add_argument(
            "--lease-interval",
            type=float,
            help="Seconds between lease checks (default: 5)",
        )
        parser.add_argument(
            "--node-ready-timeout",
            type=float,
            help="Seconds to wait for the ready node count to match (default: 600)",
        )
        parser.add_argument(
            "--group-size-timeout",
            type=float,
            help="Seconds to wait for the node group to reach its new size (default: 1200)",
        )
        parser.add_argument(
            "--pod-ready-timeout",
            type=float,
            help="Seconds to wait for system pods after the restore (default: 300)",
        )
        parser.add_argument(
            "--tunnel-grace-seconds",
            type=float,
            help="Seconds to wait after regrowing the node group (default: 300 on gke, 0 elsewhere)",
        )
        parser.add_argument(
            "--debug",
            action="store_true",
            help="Enable debug output (shows command execution details)",
        )
        return parser

    @staticmethod
    def parse_arguments(argv=None):
        """
        Parse command-line arguments

        Args:
            argv: Argument list, defaults to sys.argv[1:]

        Returns:
            argparse.Namespace: Parsed arguments
        """
        args = ArgumentsParser.build_parser().parse_args(argv)

        # Set global debug mode
        print_manager.DEBUG_MODE = args.debug

        return args
