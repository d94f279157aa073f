# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Remote command execution against a node under test.

Layers, leaf to root:
- CommandChannel: transport primitive, (target, script) -> ExecutionResult or
  TransportError. RelayPodChannel is the production implementation: it execs
  into the relay pod and SSHes to the VM from there.
- RemoteExecutor.execute(): renders steps with the target's CommandTemplate
  (strict-mode preamble included) and runs them once.
- RemoteExecutor.execute_and_assert(): the exit-code chokepoint. A mismatch
  fails the validator with the command, the context and both streams in full.
"""

import base64
import logging
import re
import shlex
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import List, Optional

from kubernetes.client.rest import ApiException

from nodeprobe.defaults import RemoteExecDefaults
from nodeprobe.exceptions import TransportError
from nodeprobe.kube import ClusterClient
from nodeprobe.report import ReportSink
from nodeprobe.script import CommandTemplate, Interpreter, Script, Steps, template_for
from nodeprobe.target import Target

logger = logging.getLogger(__name__)

_DECIMAL = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class ExitCode:
    """A process exit code as reported by the remote side.

    raw keeps the text exactly as received for diagnostics; value is the
    parsed integer, or None when raw is not a decimal integer.
    """

    raw: str
    value: Optional[int]

    @classmethod
    def parse(cls, raw) -> "ExitCode":
        text = "" if raw is None else str(raw)
        value: Optional[int] = None
        if _DECIMAL.fullmatch(text.strip()):
            value = int(text.strip())
        return cls(text, value)

    @property
    def parsed(self) -> bool:
        return self.value is not None

    def matches(self, expected: int) -> bool:
        return self.value is not None and self.value == int(expected)

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True)
class ExecutionResult:
    exit_code: ExitCode
    stdout: str
    stderr: str
    command: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_code.matches(0)


class CommandChannel(ABC):
    """Runs a Script on a Target."""

    @abstractmethod
    def run(self, target: Target, script: Script) -> ExecutionResult:
        """Execute script once. Raises TransportError if it cannot run at all."""


def _encode_for_ssh(script: Script) -> str:
    """Remote command line for ssh that runs script without quoting hazards."""
    if script.interpreter is Interpreter.POWERSHELL:
        encoded = base64.b64encode(script.text.encode("utf-16-le")).decode("ascii")
        return f"powershell -NoProfile -NonInteractive -EncodedCommand {encoded}"
    encoded = base64.b64encode(script.text.encode("utf-8")).decode("ascii")
    return f"echo {encoded} | base64 -d | bash"


class RelayPodChannel(CommandChannel):
    """Reach the VM by SSH from a host-network relay pod."""

    def __init__(
        self,
        cluster: ClusterClient,
        ssh_user: str = RemoteExecDefaults.ssh_user,
        ssh_options: Optional[List[str]] = None,
        timeout: float = RemoteExecDefaults.exec_timeout,
    ):
        self.cluster = cluster
        self.ssh_user = ssh_user
        self.ssh_options = list(
            ssh_options if ssh_options is not None else RemoteExecDefaults.ssh_options
        )
        self.timeout = timeout

    def relay_command(self, target: Target, script: Script) -> List[str]:
        key_file = f"/tmp/nodeprobe-{uuid.uuid4().hex[:12]}"
        ssh = " ".join(
            [
                "ssh",
                "-i",
                key_file,
                *self.ssh_options,
                f"{self.ssh_user}@{target.address}",
                shlex.quote(_encode_for_ssh(script)),
            ]
        )
        wrapper = (
            f"umask 077; printf '%s\\n' {shlex.quote(target.private_key.strip())} > {key_file}; "
            f"{ssh}; rc=$?; rm -f {key_file}; exit $rc"
        )
        return ["sh", "-c", wrapper]

    def run(self, target: Target, script: Script) -> ExecutionResult:
        raw_exit_code, stdout, stderr = self.cluster.exec_in_pod(
            target.relay.namespace,
            target.relay.name,
            self.relay_command(target, script),
            timeout=self.timeout,
        )
        return ExecutionResult(ExitCode.parse(raw_exit_code), stdout, stderr, script.text)


class RemoteExecutor:
    """Executes validator scripts on one Target and reports through a sink."""

    def __init__(
        self,
        channel: CommandChannel,
        target: Target,
        sink: ReportSink,
        cluster: Optional[ClusterClient] = None,
        node_name: Optional[str] = None,
    ):
        self.channel = channel
        self.target = target
        self.sink = sink
        self.cluster = cluster
        self.node_name = node_name
        self.template: CommandTemplate = template_for(target.platform)

    def execute(self, steps: Steps) -> ExecutionResult:
        """Run steps on the target once; no retries.

        TransportError propagates: there is no command outcome to normalise.
        """
        script = self.template.script(steps)
        logger.debug(f"[{self.target.address}] running {script.interpreter.value}:\n{script.text}")
        try:
            result = self.channel.run(self.target, script)
        except TransportError as e:
            self.sink.logger.error(f"failed to execute command on VM {self.target.address}: {e}")
            raise
        if result.command != script.text:
            result = replace(result, command=script.text)
        logger.info(f"[{self.target.address}] exit code {result.exit_code.raw!r}")
        logger.debug(f"STDOUT:\n{result.stdout}\nSTDERR:\n{result.stderr}")
        return result

    def execute_and_assert(
        self, steps: Steps, expected_exit_code: int, context: str = ""
    ) -> ExecutionResult:
        result = self.execute(steps)
        expected = str(int(expected_exit_code))
        if not result.exit_code.matches(expected_exit_code):
            self.sink.fail(
                f'exec command failed with exit code "{result.exit_code.raw}", expected exit code {expected}\n'
                f"Command: {result.command}\n"
                f"Additional detail: {context}\n"
                f"STDOUT:\n{result.stdout}\n\n"
                f"STDERR:\n{result.stderr}"
            )
        return result

    def execute_on_unprivileged_pod(self, command: str) -> ExecutionResult:
        """Run a shell command in the node's non-host-network debug pod."""
        if self.cluster is None or self.node_name is None:
            raise TransportError("no cluster client bound to this executor")
        try:
            pod = self.cluster.get_network_debug_pod_for_node(self.node_name)
        except (LookupError, ApiException) as e:
            raise TransportError(f"failed to get non host debug pod name: {e}") from e
        raw_exit_code, stdout, stderr = self.cluster.exec_in_pod(
            pod.metadata.namespace, pod.metadata.name, ["sh", "-c", command]
        )
        return ExecutionResult(ExitCode.parse(raw_exit_code), stdout, stderr, command)
