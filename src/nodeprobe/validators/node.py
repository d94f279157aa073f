# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Validators that read node state from the cluster API."""

import logging

from nodeprobe.defaults import NodeDefaults
from nodeprobe.policies import format_taints
from nodeprobe.polling import wait_for_node_condition
from nodeprobe.scenario import Scenario

logger = logging.getLogger(__name__)

FS_CORRUPTION_MESSAGE = "Found 'structure needs cleaning' in Docker journal."


def validate_taints(scenario: Scenario, expected_taints: str) -> None:
    """Node taints, rendered as key=value:effect joined by commas, equal expected_taints.

    The taints come from kubelet's --register-with-taints flag, so order is
    the registration order.
    """
    node = scenario.cluster.get_node(scenario.node_name)
    actual = format_taints(node.spec.taints if node.spec else None)
    logger.debug(f"node {scenario.node_name} taints: {actual!r}")
    if actual != expected_taints:
        scenario.sink.fail(
            f"expected node {scenario.node_name!r} to have taint {expected_taints!r}, "
            f"but got {actual!r}"
        )


def validate_npd_filesystem_corruption(scenario: Scenario) -> None:
    scenario.executor.execute_and_assert(
        [f"test -f {NodeDefaults.npd_fs_corruption_plugin_path}"],
        0,
        "NPD Custom Plugin configuration for FilesystemCorruptionProblem not found",
    )
    # NPD watches the docker unit's journal for this line
    scenario.executor.execute_and_assert(
        ["sudo systemd-run --unit=docker --no-block bash -c 'echo \"structure needs cleaning\"'"],
        0,
        "Failed to simulate filesystem corruption problem",
    )

    cfg = scenario.config
    condition = wait_for_node_condition(
        scenario,
        "FilesystemCorruptionProblem",
        "FilesystemCorruptionDetected",
        cfg.fs_corruption_interval,
        cfg.fs_corruption_timeout,
    )
    if condition.status != "True":
        scenario.sink.fail(
            f"expected FilesystemCorruptionProblem condition to be True on node, got {condition.status}"
        )
    if FS_CORRUPTION_MESSAGE not in (condition.message or ""):
        scenario.sink.fail(
            f"expected FilesystemCorruptionProblem condition message to contain: "
            f"{FS_CORRUPTION_MESSAGE} Got {condition.message!r}"
        )
