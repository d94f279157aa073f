# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Typed cluster access used by validators.

Thin wrapper over kubernetes.client.CoreV1Api:
- node lookup (conditions, taints, allocatable)
- locating the unprivileged network-debug pod scheduled on a node
- exec into a pod over the websocket stream, returning the raw exit code
- pod create / read / delete for workload checks
"""

import logging
import time
import warnings
from contextlib import contextmanager
from typing import List, Optional, Tuple, Union

import yaml
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.stream import stream
from kubernetes.stream.ws_client import ERROR_CHANNEL
from websocket import WebSocketException

from nodeprobe.config import ValidationConfig
from nodeprobe.defaults import RemoteExecDefaults
from nodeprobe.exceptions import TransportError

logger = logging.getLogger(__name__)

# exec status update cadence while streaming, in seconds
STREAM_POLL_SECONDS = 1


@contextmanager
def suppress_deprecation_warnings():
    """Context manager to suppress deprecation warnings during kubernetes API calls.

    The kubernetes client's exception handling calls deprecated urllib3 methods,
    which can cause issues in certain Python/urllib3 version combinations.
    """
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", category=DeprecationWarning)
        yield


def parse_exec_status(status: str) -> Optional[str]:
    """Extract the raw exit code from an exec status-channel message.

    Returns "0" for Success, the ExitCode cause message for a non-zero exit,
    and None when the exec itself failed (no command outcome exists).
    """
    if not status:
        return None
    try:
        data = yaml.safe_load(status)
    except yaml.YAMLError:
        return None
    if not isinstance(data, dict):
        return None
    if data.get("status") == "Success":
        return "0"
    causes = (data.get("details") or {}).get("causes") or []
    for cause in causes:
        if cause.get("reason") == "ExitCode":
            return str(cause.get("message", ""))
    return None


class ClusterClient:
    """Synchronous cluster client for one scenario."""

    def __init__(
        self,
        core_v1: Optional[client.CoreV1Api] = None,
        in_cluster: bool = False,
        debug_pod_namespace: str = RemoteExecDefaults.debug_pod_namespace,
        debug_pod_label_selector: str = RemoteExecDefaults.debug_pod_label_selector,
    ):
        if core_v1 is None:
            self._load_k8s_config(in_cluster)
            core_v1 = client.CoreV1Api()
        self.core_v1 = core_v1
        self.debug_pod_namespace = debug_pod_namespace
        self.debug_pod_label_selector = debug_pod_label_selector

    @classmethod
    def from_config(
        cls,
        cfg: ValidationConfig,
        core_v1: Optional[client.CoreV1Api] = None,
        in_cluster: bool = False,
    ) -> "ClusterClient":
        return cls(
            core_v1=core_v1,
            in_cluster=in_cluster,
            debug_pod_namespace=cfg.debug_pod_namespace,
            debug_pod_label_selector=cfg.debug_pod_label_selector,
        )

    @staticmethod
    def _load_k8s_config(in_cluster: bool) -> None:
        if in_cluster:
            config.load_incluster_config()
            logger.debug("Loaded in-cluster kubernetes config")
            return
        try:
            config.load_kube_config()
            logger.debug("Loaded kubeconfig file")
        except config.ConfigException:
            config.load_incluster_config()
            logger.debug("No kubeconfig found, loaded in-cluster kubernetes config")

    def get_node(self, name: str) -> client.V1Node:
        with suppress_deprecation_warnings():
            return self.core_v1.read_node(name)

    def get_network_debug_pod_for_node(self, node_name: str) -> client.V1Pod:
        """Return the running non-host-network debug pod scheduled on node_name."""
        with suppress_deprecation_warnings():
            pods = self.core_v1.list_namespaced_pod(
                namespace=self.debug_pod_namespace,
                label_selector=self.debug_pod_label_selector,
                field_selector=f"spec.nodeName={node_name}",
            )
        for pod in pods.items:
            if pod.status and pod.status.phase == "Running":
                return pod
        raise LookupError(
            f"no running pod matching '{self.debug_pod_label_selector}' in "
            f"namespace {self.debug_pod_namespace} on node {node_name}"
        )

    def exec_in_pod(
        self,
        namespace: str,
        pod_name: str,
        command: List[str],
        timeout: float = RemoteExecDefaults.exec_timeout,
    ) -> Tuple[str, str, str]:
        """Run command in a pod and return (raw_exit_code, stdout, stderr).

        Raises TransportError when the exec session cannot be opened, breaks
        mid-stream, exceeds timeout, or reports a failure that is not a
        command exit code.
        """
        target = f"{namespace}/{pod_name}"
        try:
            with suppress_deprecation_warnings():
                resp = stream(
                    self.core_v1.connect_get_namespaced_pod_exec,
                    pod_name,
                    namespace,
                    command=command,
                    stderr=True,
                    stdin=False,
                    stdout=True,
                    tty=False,
                    _preload_content=False,
                )
        except (ApiException, WebSocketException, OSError) as e:
            raise TransportError(
                f"failed to open exec session in pod {target}: {e}", target
            ) from e

        stdout: List[str] = []
        stderr: List[str] = []
        deadline = time.monotonic() + timeout
        try:
            while resp.is_open():
                resp.update(timeout=STREAM_POLL_SECONDS)
                if resp.peek_stdout():
                    stdout.append(resp.read_stdout())
                if resp.peek_stderr():
                    stderr.append(resp.read_stderr())
                if time.monotonic() > deadline:
                    raise TransportError(
                        f"exec in pod {target} did not finish within {timeout}s",
                        target,
                    )
            stdout.append(resp.read_stdout())
            stderr.append(resp.read_stderr())
            status = resp.read_channel(ERROR_CHANNEL)
        except (ApiException, WebSocketException, OSError) as e:
            raise TransportError(f"exec stream to pod {target} broke: {e}", target) from e
        finally:
            resp.close()

        exit_code = parse_exec_status(status)
        if exit_code is None:
            raise TransportError(
                f"exec in pod {target} failed without a command exit code: {status!r}",
                target,
            )
        return exit_code, "".join(stdout), "".join(stderr)

    def create_pod(self, namespace: str, manifest: Union[dict, client.V1Pod]) -> client.V1Pod:
        with suppress_deprecation_warnings():
            return self.core_v1.create_namespaced_pod(namespace=namespace, body=manifest)

    def read_pod(self, namespace: str, name: str) -> client.V1Pod:
        with suppress_deprecation_warnings():
            return self.core_v1.read_namespaced_pod(name=name, namespace=namespace)

    def delete_pod(self, namespace: str, name: str) -> bool:
        try:
            with suppress_deprecation_warnings():
                self.core_v1.delete_namespaced_pod(
                    name=name, namespace=namespace, grace_period_seconds=0
                )
            return True
        except ApiException as e:
            if e.status == 404:
                return False
            raise
