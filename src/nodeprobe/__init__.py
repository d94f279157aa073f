# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Post-provisioning validation of cluster worker nodes over a relay pod."""

from nodeprobe.config import ValidationConfig
from nodeprobe.exceptions import (
    ConfigError,
    NodeProbeError,
    PollCancelledError,
    PollTimeoutError,
    PolicyViolation,
    SetupError,
    TransportError,
    ValidationFailure,
)
from nodeprobe.executor import (
    CommandChannel,
    ExecutionResult,
    ExitCode,
    RelayPodChannel,
    RemoteExecutor,
)
from nodeprobe.kube import ClusterClient
from nodeprobe.polling import (
    CancellationToken,
    Clock,
    ConvergencePoller,
    PollOutcome,
    PollState,
)
from nodeprobe.report import ReportSink
from nodeprobe.scenario import Scenario
from nodeprobe.script import CommandTemplate, Interpreter, Script, template_for
from nodeprobe.target import OSDistro, Platform, RelayPod, Target

__all__ = [
    "CancellationToken",
    "Clock",
    "ClusterClient",
    "CommandChannel",
    "CommandTemplate",
    "ConfigError",
    "ConvergencePoller",
    "ExecutionResult",
    "ExitCode",
    "Interpreter",
    "NodeProbeError",
    "OSDistro",
    "Platform",
    "PollCancelledError",
    "PollOutcome",
    "PollState",
    "PollTimeoutError",
    "PolicyViolation",
    "RelayPod",
    "RelayPodChannel",
    "RemoteExecutor",
    "ReportSink",
    "Scenario",
    "Script",
    "SetupError",
    "Target",
    "TransportError",
    "ValidationConfig",
    "ValidationFailure",
    "template_for",
]
