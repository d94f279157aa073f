# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""systemd unit and service-log validators."""

import shlex

from nodeprobe.policies import soft_contains, soft_not_contains
from nodeprobe.scenario import Scenario


def validate_systemd_unit_is_running(scenario: Scenario, service: str) -> None:
    """Unit is active (Linux) or service is Running (Windows)."""
    template = scenario.executor.template
    scenario.executor.execute_and_assert(
        template.service_is_running(service), 0, f"service {service} is not running"
    )


def validate_systemd_unit_is_not_failed(scenario: Scenario, service: str) -> None:
    s = shlex.quote(service)
    result = scenario.executor.execute(
        [
            f"systemctl --no-pager -n 5 status {s} || true",
            f"systemctl is-failed {s}",
        ]
    )
    # is-failed exits 0 only when the unit is failed
    if result.exit_code.matches(0):
        scenario.sink.fail(
            f'expected "systemctl is-failed" to exit with a non-zero exit code for unit '
            f"{service!r}, unit is in a failed state\nSTDOUT:\n{result.stdout}"
        )


def validate_service_can_restart(
    scenario: Scenario, service: str, restart_timeout_seconds: int
) -> None:
    """Kill the service and check systemd brought it back with a new PID."""
    s = shlex.quote(service)
    steps = [
        f"(systemctl -n 5 status {s} || true)",
        f"systemctl is-active {s}",
        f"INITIAL_PID=`sudo pgrep {s}`",
        "echo INITIAL_PID: $INITIAL_PID",
        # systemctl kill: container restrictions block kill -9 from here
        f"sudo systemctl kill {s}",
        f"sleep {int(restart_timeout_seconds)}",
        f"(systemctl -n 5 status {s} || true)",
        f"systemctl is-active {s}",
        f"POST_PID=`sudo pgrep {s}`",
        "echo POST_PID: $POST_PID",
        'if [[ "$INITIAL_PID" == "$POST_PID" ]]; then echo PID did not change after restart, failing validator. ; exit 1; fi',
    ]
    scenario.executor.execute_and_assert(steps, 0, "command to restart service failed")


def validate_journalctl_output(scenario: Scenario, service: str, expected_content: str) -> None:
    scenario.executor.execute_and_assert(
        [f"sudo journalctl -u {shlex.quote(service)} | grep -q -F -e {shlex.quote(expected_content)}"],
        0,
        f"expected content '{expected_content}' not found in {service} service logs",
    )


def validate_kubelet_has_not_stopped(scenario: Scenario) -> None:
    result = scenario.executor.execute_and_assert(
        ["sudo journalctl -u kubelet"], 0, "could not retrieve kubelet logs with journalctl"
    )
    logs = result.stdout.lower()
    soft_not_contains(scenario.sink, logs, "stopped kubelet", "kubelet logs show 'Stopped kubelet'")
    soft_contains(scenario.sink, logs, "started kubelet", "kubelet logs do not show 'Started kubelet'")


def validate_services_do_not_restart_kubelet(scenario: Scenario) -> None:
    # grep exits 1 when no unit file matches
    scenario.executor.execute_and_assert(
        ["sudo grep -rl 'restart[[:space:]]\\+kubelet' /etc/systemd/system/"],
        1,
        "expected to find no services containing 'restart kubelet' in /etc/systemd/system/",
    )


def validate_kubelet_has_flags(scenario: Scenario, config_file_path: str) -> None:
    """Kubelet logged that it started with --config pointing at config_file_path."""
    result = scenario.executor.execute_and_assert(
        ["sudo journalctl -u kubelet"], 0, "could not retrieve kubelet logs with journalctl"
    )
    flag = f'FLAG: --config="{config_file_path}"'
    if flag not in result.stdout:
        scenario.sink.fail(f"expected to find flag {flag}, but not found")


def validate_node_problem_detector(scenario: Scenario) -> None:
    scenario.executor.execute_and_assert(
        ["systemctl is-active node-problem-detector"],
        0,
        "Node Problem Detector (NPD) service validation failed",
    )


def validate_localdns_service(scenario: Scenario) -> None:
    template = scenario.executor.template
    scenario.executor.execute_and_assert(
        template.service_is_running("localdns"), 0, "localdns service is not up and running"
    )
