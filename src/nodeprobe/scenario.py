# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Scenario: everything a validator needs from the orchestrator.

The orchestrator provisions the VM, builds the cluster client and relay, and
hands over one Scenario per node under test. Validators are plain functions
taking a Scenario first; they keep no state of their own.

Usage:
    scenario = Scenario.for_cluster(
        node_name="aks-nodepool1-123-vmss000000",
        distro=OSDistro.UBUNTU,
        target=Target(address="10.224.0.5", relay=RelayPod("debug-abc"), private_key=key),
        cluster=ClusterClient.from_config(config),
        config=config,
    )
    validate_systemd_unit_is_running(scenario, "kubelet")
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from nodeprobe.config import ValidationConfig
from nodeprobe.executor import CommandChannel, RelayPodChannel, RemoteExecutor
from nodeprobe.kube import ClusterClient
from nodeprobe.polling import CancellationToken, Clock
from nodeprobe.report import ReportSink
from nodeprobe.target import OSDistro, Platform, Target


@dataclass
class Scenario:
    """Runtime context for validating one node."""

    node_name: str
    distro: OSDistro
    target: Target
    cluster: ClusterClient
    channel: CommandChannel
    sink: Optional[ReportSink] = None
    config: ValidationConfig = field(default_factory=ValidationConfig)
    clock: Clock = field(default_factory=Clock)
    cancel: CancellationToken = field(default_factory=CancellationToken)
    # Orchestrator hook that runs a pod manifest to completion on the node.
    ensure_pod: Optional[Callable[["Scenario", Any], None]] = None
    logger: Optional[logging.Logger] = None
    executor: RemoteExecutor = field(init=False)

    def __post_init__(self):
        if self.logger is None:
            self.logger = logging.getLogger(f"nodeprobe.{self.node_name}")
        if self.sink is None:
            self.sink = ReportSink(self.logger)
        if self.distro.platform is not self.target.platform:
            raise ValueError(
                f"distro {self.distro.value} runs on {self.distro.platform.value} "
                f"but target is declared {self.target.platform.value}"
            )
        self.executor = RemoteExecutor(
            self.channel, self.target, self.sink, self.cluster, self.node_name
        )

    @classmethod
    def for_cluster(
        cls,
        node_name: str,
        distro: OSDistro,
        target: Target,
        cluster: ClusterClient,
        config: Optional[ValidationConfig] = None,
        **kwargs,
    ) -> "Scenario":
        """Build a scenario that reaches the VM through the relay pod.

        The debug pod lookup of cluster is taken from config.
        """
        config = config or ValidationConfig()
        cluster.debug_pod_namespace = config.debug_pod_namespace
        cluster.debug_pod_label_selector = config.debug_pod_label_selector
        channel = RelayPodChannel(
            cluster,
            ssh_user=config.ssh_user,
            ssh_options=config.ssh_options,
            timeout=config.exec_timeout,
        )
        return cls(
            node_name=node_name,
            distro=distro,
            target=target,
            cluster=cluster,
            channel=channel,
            config=config,
            **kwargs,
        )

    @property
    def is_windows(self) -> bool:
        return self.target.platform is Platform.WINDOWS
