#!/usr/bin/env python3
"""
Tests for the node_lease_check entry point: argument parsing, config wiring
and the mapping from scenario outcome to process exit code.
"""

import pytest
import sys
import os
from unittest.mock import Mock, patch

# Add parent directory to path for module imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import node_lease_check  # noqa: E402
from node_lease_e2e import print_manager  # noqa: E402
from node_lease_e2e.arguments_parser import ArgumentsParser  # noqa: E402
from node_lease_e2e.errors import ConfigurationError, RestoreError  # noqa: E402
from node_lease_e2e.scenario import Outcome, ScenarioPhase, ScenarioResult  # noqa: E402
from node_lease_e2e.scenario_config import ScenarioConfig  # noqa: E402
from conftest import FakeOpenShift  # noqa: E402

BASE_ARGS = ["--node-group", "cluster-abc-worker-a", "--num-nodes", "4", "--provider", "aws"]


@pytest.fixture(autouse=True)
def reset_debug_mode():
    yield
    print_manager.DEBUG_MODE = False


@pytest.fixture
def patched_printer(mock_printer):
    mock_printer.start_clock = Mock()
    with patch("node_lease_check.printer", mock_printer):
        yield mock_printer


class TestArgumentsParser:
    def test_unset_flags_are_none(self):
        args = ArgumentsParser.parse_arguments([])

        assert args.node_group is None
        assert args.num_nodes is None
        assert args.lease_timeout is None
        assert args.debug is False

    def test_flags_are_typed(self):
        args = ArgumentsParser.parse_arguments(BASE_ARGS + ["--lease-timeout", "90", "--tunnel-grace-seconds", "0"])

        assert args.num_nodes == 4
        assert args.lease_timeout == 90.0
        assert args.tunnel_grace_seconds == 0.0

    def test_debug_flag_sets_debug_mode(self):
        ArgumentsParser.parse_arguments(["--debug"])

        assert print_manager.DEBUG_MODE is True

    def test_num_nodes_must_be_an_integer(self):
        with pytest.raises(SystemExit):
            ArgumentsParser.parse_arguments(["--num-nodes", "four"])


class TestLoadScenarioConfig:
    def test_flags_override_config_file(self, tmp_path):
        path = tmp_path / "scenario.yaml"
        path.write_text("node_group: cluster-abc-worker-a\nnum_nodes: 3\nprovider: gce\nlease_interval: 10\n")
        args = ArgumentsParser.parse_arguments(["--config", str(path), "--num-nodes", "4"])

        config = node_lease_check.load_scenario_config(args)

        assert config.node_group == "cluster-abc-worker-a"
        assert config.num_nodes == 4
        assert config.provider == "gce"
        assert config.lease_interval == 10

    def test_wait_timeouts_have_flags(self):
        args = ArgumentsParser.parse_arguments(
            BASE_ARGS
            + ["--node-ready-timeout", "900", "--group-size-timeout", "1800", "--pod-ready-timeout", "120"]
        )

        config = node_lease_check.load_scenario_config(args)

        assert config.node_ready_timeout == 900
        assert config.group_size_timeout == 1800
        assert config.pod_ready_timeout == 120

    def test_flags_only(self):
        config = node_lease_check.load_scenario_config(ArgumentsParser.parse_arguments(BASE_ARGS))

        assert config == ScenarioConfig(node_group="cluster-abc-worker-a", num_nodes=4, provider="aws")


class TestBuildScenario:
    def test_detects_provider_when_not_given(self, patched_printer):
        fake = FakeOpenShift(["worker-a", "worker-b"], platform="GCP")
        config = ScenarioConfig(node_group="cluster-abc-worker-a", num_nodes=2)

        with patch("node_lease_check.execute_oc_command", fake.execute_oc_command):
            scenario = node_lease_check.build_scenario(config)

        assert config.provider == "gce"
        assert scenario.scaler.group == "cluster-abc-worker-a"
        assert scenario.scaler.namespace == "openshift-machine-api"
        assert scenario.leases.namespace == "kube-node-lease"

    def test_given_provider_is_kept(self, patched_printer):
        config = ScenarioConfig(node_group="cluster-abc-worker-a", num_nodes=2, provider="gke")

        with patch("node_lease_check.execute_oc_command") as mock_execute_oc:
            node_lease_check.build_scenario(config)

        assert config.provider == "gke"
        mock_execute_oc.assert_not_called()


class TestMainExitCodes:
    @pytest.mark.parametrize(
        "outcome,phase,expected",
        [
            (Outcome.PASSED, ScenarioPhase.DONE, node_lease_check.EXIT_PASSED),
            (Outcome.FAILED, ScenarioPhase.DELETION_CHECK, node_lease_check.EXIT_FAILED),
            (Outcome.SKIPPED, ScenarioPhase.INIT, node_lease_check.EXIT_SKIPPED),
        ],
    )
    def test_outcome_exit_codes(self, patched_printer, outcome, phase, expected):
        scenario = Mock()
        scenario.run.return_value = ScenarioResult(outcome, phase, "why")

        with patch("node_lease_check.build_scenario", return_value=scenario):
            assert node_lease_check.main(BASE_ARGS) == expected

        patched_printer.start_clock.assert_called_once()

    def test_failure_reports_phase(self, patched_printer):
        scenario = Mock()
        scenario.run.return_value = ScenarioResult(Outcome.FAILED, ScenarioPhase.SURVIVOR_CHECK, "lease gone")

        with patch("node_lease_check.build_scenario", return_value=scenario):
            node_lease_check.main(BASE_ARGS)

        assert "SurvivorCheck" in patched_printer.print_header.call_args[0][0]
        patched_printer.print_error.assert_called_with("lease gone")

    def test_missing_node_group_is_a_configuration_error(self, patched_printer):
        with patch("node_lease_check.build_scenario") as mock_build:
            assert node_lease_check.main(["--num-nodes", "4"]) == node_lease_check.EXIT_CONFIG_ERROR

        mock_build.assert_not_called()

    def test_bad_duration_in_config_file_exits_before_scaling(self, patched_printer, fake_openshift, tmp_path):
        path = tmp_path / "scenario.yaml"
        path.write_text("node_group: cluster-abc-worker-a\nnum_nodes: 4\nprovider: gke\ntunnel_grace_seconds: 5m\n")

        with patch("node_lease_check.execute_oc_command", fake_openshift.execute_oc_command), patch(
            "node_lease_check.run_oc_command", fake_openshift.run_oc_command
        ):
            exit_code = node_lease_check.main(["--config", str(path)])

        assert exit_code == node_lease_check.EXIT_CONFIG_ERROR
        assert fake_openshift.scale_requests == []

    def test_configuration_error_from_scenario(self, patched_printer):
        scenario = Mock()
        scenario.run.side_effect = ConfigurationError("more than one node group")

        with patch("node_lease_check.build_scenario", return_value=scenario):
            assert node_lease_check.main(BASE_ARGS) == node_lease_check.EXIT_CONFIG_ERROR

    def test_restore_error(self, patched_printer):
        scenario = Mock()
        scenario.run.side_effect = RestoreError("Couldn't restore the original node group size 4")

        with patch("node_lease_check.build_scenario", return_value=scenario):
            assert node_lease_check.main(BASE_ARGS) == node_lease_check.EXIT_RESTORE_ERROR

        assert "Cluster restore failed" in patched_printer.print_error.call_args_list[0][0][0]

    def test_end_to_end_against_fake_cluster(self, patched_printer, fake_openshift, fake_clock):
        with patch("node_lease_check.execute_oc_command", fake_openshift.execute_oc_command), patch(
            "node_lease_check.run_oc_command", fake_openshift.run_oc_command
        ):
            exit_code = node_lease_check.main(BASE_ARGS)

        assert exit_code == node_lease_check.EXIT_PASSED
        assert fake_openshift.scale_requests == [3, 4]
