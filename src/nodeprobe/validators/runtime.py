# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Kernel, network and container-runtime configuration validators (Linux)."""

import shlex
from typing import List, Mapping

from nodeprobe.defaults import NodeDefaults
from nodeprobe.exceptions import PolicyViolation, SetupError
from nodeprobe.policies import (
    check_version_cardinality,
    distinct_versions,
    parse_key_values,
    parse_node_ips,
    require_not_contains,
    require_single_version_with_prefix,
    soft_contains,
)
from nodeprobe.scenario import Scenario
from nodeprobe.target import OSDistro
from nodeprobe.validators.files import validate_directory_content

PACKAGE_LIST_COMMANDS = {
    OSDistro.UBUNTU: "sudo apt list --installed",
    OSDistro.MARINER: "sudo dnf list installed",
    OSDistro.AZURELINUX: "sudo dnf list installed",
}


def validate_sysctl_config(scenario: Scenario, custom_sysctls: Mapping[str, str]) -> None:
    if not custom_sysctls:
        scenario.sink.fail("no sysctl keys given to validate", SetupError)
    keys = " ".join(shlex.quote(k) for k in custom_sysctls)
    result = scenario.executor.execute_and_assert(
        [f"sudo sysctl {keys}"], 0, "sysctl command failed"
    )
    actual = parse_key_values(result.stdout, "=")
    for name, value in custom_sysctls.items():
        expected = " ".join(str(value).split())
        if actual.get(name) != expected:
            scenario.sink.fail(
                f"expected to find {name} set to {expected}, but was {actual.get(name)!r}.\n"
                f"Stdout:\n{result.stdout}"
            )


def validate_ulimit_settings(scenario: Scenario, ulimits: Mapping[str, str]) -> None:
    """Check Limit*= settings in the containerd unit. Keys match case-insensitively."""
    if not ulimits:
        scenario.sink.fail("no ulimit keys given to validate", SetupError)
    pattern = shlex.quote("|".join(ulimits))
    result = scenario.executor.execute_and_assert(
        [f"sudo systemctl cat containerd.service | grep -E -i {pattern}"],
        0,
        "could not read containerd.service file",
    )
    actual = {k.lower(): v for k, v in parse_key_values(result.stdout, "=").items()}
    for name, value in ulimits.items():
        if actual.get(name.lower()) != str(value):
            scenario.sink.fail(
                f"expected to find {name} set to {value}, but was {actual.get(name.lower())!r}"
            )


def validate_installed_package_version(scenario: Scenario, component: str, version: str) -> bool:
    """Soft check that the package manager lists component at version."""
    scenario.sink.log(f"assert {component} {version} is installed on the VM")
    command = PACKAGE_LIST_COMMANDS.get(scenario.distro)
    if command is None:
        scenario.sink.fail(
            f"command to get package list isn't implemented for OS {scenario.distro.value}",
            SetupError,
        )
    result = scenario.executor.execute_and_assert([command], 0, "could not get package list")
    for line in result.stdout.splitlines():
        if component in line and version in line:
            return True
    scenario.sink.log_soft(
        f"expected to find {component} {version} in the installed packages, but did not"
    )
    return False


def validate_kubelet_node_ip(scenario: Scenario) -> List[str]:
    result = scenario.executor.execute_and_assert(
        ["sudo cat /etc/default/kubelet"], 0, "could not read kubelet config"
    )
    try:
        return parse_node_ips(result.stdout)
    except PolicyViolation as e:
        scenario.sink.fail(str(e))


def validate_imds_restriction_rule(scenario: Scenario, table: str) -> None:
    comment = shlex.quote(NodeDefaults.imds_rule_comment)
    scenario.executor.execute_and_assert(
        [f"sudo iptables -t {shlex.quote(table)} -S | grep -q -F -e {comment}"],
        0,
        "expected to find IMDS restriction rule, but did not",
    )


def validate_multiple_kube_proxy_versions_exist(scenario: Scenario) -> None:
    result = scenario.executor.execute(
        [
            "sudo ctr --namespace k8s.io images list | grep kube-proxy | awk '{print $1}' "
            "| grep -oE '[0-9]+\\.[0-9]+\\.[0-9]+'"
        ]
    )
    if not result.exit_code.matches(0):
        scenario.sink.log_soft(f"Failed to list kube-proxy images: {result.stderr}")
        return
    try:
        scenario.sink.log(check_version_cardinality(distinct_versions(result.stdout), "kube-proxy"))
    except PolicyViolation as e:
        scenario.sink.log_soft(str(e))


def validate_containerd2_properties(scenario: Scenario, versions: List[str]) -> None:
    version = require_single_version_with_prefix(scenario.sink, versions, "2.", "moby-containerd")
    validate_installed_package_version(scenario, "moby-containerd", version)

    result = scenario.executor.execute_on_unprivileged_pod("containerd config dump ")
    require_not_contains(
        scenario.sink,
        result.stdout,
        "level=warning",
        f"do not expect warning message when converting config file {result.stdout}",
    )


def validate_runc12_properties(scenario: Scenario, versions: List[str]) -> None:
    version = require_single_version_with_prefix(scenario.sink, versions, "1.2.", "moby-runc")
    validate_installed_package_version(scenario, "moby-runc", version)


def validate_container_runtime_plugins(scenario: Scenario) -> None:
    # nri plugin is enabled by default
    validate_directory_content(scenario, "/var/run/nri", ["nri.sock"])


def validate_localdns_resolution(scenario: Scenario) -> None:
    domain = NodeDefaults.localdns_test_domain
    result = scenario.executor.execute_and_assert(
        [f"dig {domain} +timeout=1 +tries=1"], 0, "dns resolution failed"
    )
    soft_contains(scenario.sink, result.stdout, "status: NOERROR")
    soft_contains(scenario.sink, result.stdout, f"SERVER: {NodeDefaults.localdns_listener_ip}")
