# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
NVIDIA GPU validators, including GPU-count fault detection through NPD.

Fault-injection flow for validate_npd_gpu_count_after_failure:
    1. Unbind GPU 0 from the nvidia driver (node now reports one GPU fewer)
    2. Poll the node until NPD sets GPUMissing=True with reason GPUMissing
    3. Re-bind the GPU, whatever happened in step 2
"""

import json
import logging
import uuid
from contextlib import contextmanager
from typing import Iterator

from kubernetes import client

from nodeprobe.defaults import NodeDefaults
from nodeprobe.exceptions import TransportError
from nodeprobe.polling import (
    wait_for_node_condition,
    wait_for_pod_phase,
    wait_until_resource_available,
)
from nodeprobe.scenario import Scenario

logger = logging.getLogger(__name__)

DISABLED_PCI_ID_FILE = "/tmp/npd_test_disabled_pci_id"


def validate_nvidia_smi_not_installed(scenario: Scenario) -> None:
    result = scenario.executor.execute_and_assert(["sudo nvidia-smi"], 1, "")
    if "nvidia-smi: command not found" not in result.stderr:
        scenario.sink.fail(
            f"expected stderr to contain 'nvidia-smi: command not found', but got {result.stderr!r}"
        )


def validate_nvidia_smi_installed(scenario: Scenario) -> None:
    scenario.executor.execute_and_assert(
        ["sudo nvidia-smi"], 0, "could not execute nvidia-smi command"
    )


def validate_nvidia_modprobe_installed(scenario: Scenario) -> None:
    scenario.executor.execute_and_assert(
        ["sudo nvidia-modprobe"], 0, "could not execute nvidia-modprobe command"
    )


def validate_nvidia_grid_license_valid(scenario: Scenario) -> None:
    steps = [
        "license_status=$(sudo nvidia-smi -q | grep 'License Status' | grep 'Licensed' || true)",
        "if [ -z \"$license_status\" ]; then echo 'License status not valid or not found'; exit 1; fi",
        "active_status=$(sudo systemctl is-active nvidia-gridd)",
        'if [ "$active_status" != "active" ]; then echo "nvidia-gridd is not active: $active_status"; exit 1; fi',
    ]
    scenario.executor.execute_and_assert(
        steps,
        0,
        "failed to validate nvidia-smi license state or nvidia-gridd service status",
    )


def validate_nvidia_persistenced_running(scenario: Scenario) -> None:
    steps = [
        "active_status=$(sudo systemctl is-active nvidia-persistenced.service)",
        'if [ "$active_status" != "active" ]; then echo "nvidia-persistenced is not active: $active_status"; exit 1; fi',
    ]
    scenario.executor.execute_and_assert(
        steps, 0, "failed to validate nvidia-persistenced.service status"
    )


def enable_gpu_npd_toggle(scenario: Scenario) -> None:
    settings = json.dumps({"enable-npd-gpu-checks": "true"})
    steps = [
        f"echo '{settings}' | sudo tee {NodeDefaults.npd_settings_path}",
        "sudo systemctl restart node-problem-detector",
        "sudo systemctl is-active node-problem-detector",
    ]
    scenario.executor.execute_and_assert(
        steps,
        0,
        "could not enable GPU NPD toggle and restart the node-problem-detector service",
    )


def validate_npd_gpu_count_plugin(scenario: Scenario) -> None:
    scenario.executor.execute_and_assert(
        [f"test -f {NodeDefaults.npd_gpu_count_plugin_path}"],
        0,
        "NPD GPU count plugin configuration does not exist",
    )


def validate_npd_gpu_count_condition(scenario: Scenario) -> None:
    """NPD reports GPUMissing=False (reason NoGPUMissing) on a healthy node."""
    cfg = scenario.config
    condition = wait_for_node_condition(
        scenario, "GPUMissing", "NoGPUMissing", cfg.gpu_count_interval, cfg.gpu_count_timeout
    )
    if condition.status != "False":
        scenario.sink.fail(
            f"expected GPUMissing condition to be False, got {condition.status}"
        )
    if "All GPUs are present" not in (condition.message or ""):
        scenario.sink.fail(
            f"expected GPUMissing message to indicate correct count, got {condition.message!r}"
        )


@contextmanager
def gpu_unbound(scenario: Scenario) -> Iterator[None]:
    """Unbind GPU 0 from the nvidia driver for the duration of the block.

    The re-bind always runs, including when the block raises.
    """
    logger.info(f"Unbinding GPU 0 on node {scenario.node_name}")
    scenario.executor.execute_and_assert(
        [
            "sudo systemctl stop nvidia-persistenced.service || true",
            "sudo nvidia-smi -i 0 -pm 0",  # disable persistence mode
            "sudo nvidia-smi -i 0 -c 0",  # default compute mode
            # strip the domain prefix to get the form the nvidia driver expects
            "PCI_ID=$(sudo nvidia-smi -i 0 --query-gpu=pci.bus_id --format=csv,noheader | sed 's/^0000//')",
            f"echo ${{PCI_ID}} | tee {DISABLED_PCI_ID_FILE}",
            "echo ${PCI_ID} | sudo tee /sys/bus/pci/drivers/nvidia/unbind",
        ],
        0,
        "failed to disable GPU",
    )
    try:
        yield
    finally:
        logger.info(f"Re-binding GPU on node {scenario.node_name}")
        try:
            result = scenario.executor.execute(
                [
                    f"cat {DISABLED_PCI_ID_FILE} | sudo tee /sys/bus/pci/drivers/nvidia/bind",
                    f"rm -f {DISABLED_PCI_ID_FILE}",
                ]
            )
        except TransportError as e:
            # whatever the block raised stays the test's failure
            scenario.sink.log_soft(f"failed to re-bind GPU: {e}")
        else:
            if not result.exit_code.matches(0):
                scenario.sink.log_soft(
                    f"failed to re-bind GPU (exit code {result.exit_code.raw!r})\n"
                    f"STDOUT:\n{result.stdout}\n\nSTDERR:\n{result.stderr}"
                )


def validate_npd_gpu_count_after_failure(scenario: Scenario) -> None:
    cfg = scenario.config
    expected = cfg.expected_gpu_count
    with gpu_unbound(scenario):
        condition = wait_for_node_condition(
            scenario, "GPUMissing", "GPUMissing", cfg.gpu_count_interval, cfg.gpu_count_timeout
        )

    if condition.status != "True":
        scenario.sink.fail(f"expected GPUMissing condition to be True, got {condition.status}")
    message = f"Expected to see {expected} GPUs but found {expected - 1}. FaultCode: NHC2009"
    if message not in (condition.message or ""):
        scenario.sink.fail(
            f"expected GPUMissing message to indicate GPU count mismatch {message!r}, "
            f"got {condition.message!r}"
        )


def nvidia_workload_pod(scenario: Scenario) -> client.V1Pod:
    """Pod manifest that requests one GPU on the scenario's node and runs nvidia-smi."""
    cfg = scenario.config
    return client.V1Pod(
        api_version="v1",
        kind="Pod",
        metadata=client.V1ObjectMeta(
            name=f"gpu-workload-{uuid.uuid4().hex[:8]}",
            namespace=cfg.gpu_workload_namespace,
        ),
        spec=client.V1PodSpec(
            restart_policy="Never",
            node_selector={"kubernetes.io/hostname": scenario.node_name},
            tolerations=[client.V1Toleration(operator="Exists")],
            containers=[
                client.V1Container(
                    name="gpu-workload",
                    image=cfg.gpu_workload_image,
                    command=["nvidia-smi"],
                    resources=client.V1ResourceRequirements(
                        limits={NodeDefaults.gpu_resource_name: "1"}
                    ),
                )
            ],
        ),
    )


def validate_pod_using_nvidia_gpu(scenario: Scenario) -> None:
    scenario.sink.log("validating pod using nvidia GPU")
    # the device plugin can advertise the GPU before it is usable
    wait_until_resource_available(scenario, NodeDefaults.gpu_resource_name)
    if scenario.clock.sleep(scenario.config.gpu_settle_delay, scenario.cancel):
        scenario.sink.fail("context cancelled while waiting for GPU to settle")
    ensure_pod = scenario.ensure_pod or run_pod_to_completion
    ensure_pod(scenario, nvidia_workload_pod(scenario))


def run_pod_to_completion(scenario: Scenario, pod: client.V1Pod) -> None:
    """Create pod, wait for it to succeed, then delete it."""
    namespace = pod.metadata.namespace
    name = pod.metadata.name
    scenario.cluster.create_pod(namespace, pod)
    try:
        wait_for_pod_phase(scenario, namespace, name, ["Succeeded"])
        scenario.sink.log(f"pod {namespace}/{name} completed on {scenario.node_name}")
    finally:
        scenario.cluster.delete_pod(namespace, name)
