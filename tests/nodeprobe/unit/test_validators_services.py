# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for systemd unit and service-log validators."""

import pytest

from nodeprobe.exceptions import ValidationFailure
from nodeprobe.target import OSDistro
from nodeprobe.validators.services import (
    validate_journalctl_output,
    validate_kubelet_has_flags,
    validate_kubelet_has_not_stopped,
    validate_localdns_service,
    validate_service_can_restart,
    validate_services_do_not_restart_kubelet,
    validate_systemd_unit_is_not_failed,
    validate_systemd_unit_is_running,
)

pytestmark = [
    pytest.mark.gpu_0,
    pytest.mark.pre_merge,
    pytest.mark.unit,
    pytest.mark.validators,
]


def test_unit_is_running_linux(make_scenario, fake_channel):
    validate_systemd_unit_is_running(make_scenario(), "containerd")

    assert fake_channel.texts[0].endswith("systemctl is-active containerd")


def test_unit_is_running_windows(make_scenario, fake_channel):
    validate_systemd_unit_is_running(make_scenario(OSDistro.WINDOWS), "kubelet")

    assert "Get-Service -Name 'kubelet'" in fake_channel.texts[0]


def test_unit_not_running_fails(make_scenario, fake_channel):
    fake_channel.queue("3", stdout="inactive")

    with pytest.raises(ValidationFailure, match="service containerd is not running"):
        validate_systemd_unit_is_running(make_scenario(), "containerd")


@pytest.mark.parametrize("exit_code", ["1", "3", "garbled"])
def test_unit_is_not_failed_passes_on_non_zero(make_scenario, fake_channel, exit_code):
    fake_channel.queue(exit_code, stdout="active")
    validate_systemd_unit_is_not_failed(make_scenario(), "kubelet")


def test_unit_is_not_failed_fails_on_zero(make_scenario, fake_channel):
    fake_channel.queue("0", stdout="failed")

    with pytest.raises(ValidationFailure, match="unit is in a failed state"):
        validate_systemd_unit_is_not_failed(make_scenario(), "kubelet")


def test_service_can_restart_script(make_scenario, fake_channel):
    validate_service_can_restart(make_scenario(), "containerd", 10)

    text = fake_channel.texts[0]
    assert "sudo systemctl kill containerd" in text
    assert "sleep 10" in text
    assert "PID did not change after restart" in text


def test_journalctl_output_fixed_string(make_scenario, fake_channel):
    validate_journalctl_output(make_scenario(), "localdns", "Starting CoreDNS.")

    assert "sudo journalctl -u localdns | grep -q -F -e 'Starting CoreDNS.'" in fake_channel.texts[0]


def test_journalctl_output_missing(make_scenario, fake_channel):
    fake_channel.queue("1")

    with pytest.raises(ValidationFailure, match="expected content 'x' not found in kubelet"):
        validate_journalctl_output(make_scenario(), "kubelet", "x")


def test_kubelet_has_not_stopped(make_scenario, fake_channel):
    fake_channel.queue("0", stdout="Jan 01 systemd[1]: Started Kubelet.\n")
    scenario = make_scenario()

    validate_kubelet_has_not_stopped(scenario)

    assert scenario.sink.soft_failures == []


def test_kubelet_stopped_is_soft(make_scenario, fake_channel):
    fake_channel.queue("0", stdout="Started kubelet\nStopped kubelet\n")
    scenario = make_scenario()

    validate_kubelet_has_not_stopped(scenario)

    assert scenario.sink.soft_failures == ["kubelet logs show 'Stopped kubelet'"]


def test_services_do_not_restart_kubelet_expects_no_match(make_scenario, fake_channel):
    fake_channel.queue("1")
    validate_services_do_not_restart_kubelet(make_scenario())

    fake_channel.queue("0", stdout="/etc/systemd/system/bad.service")
    with pytest.raises(ValidationFailure, match="no services containing 'restart kubelet'"):
        validate_services_do_not_restart_kubelet(make_scenario())


def test_kubelet_has_flags(make_scenario, fake_channel):
    fake_channel.queue("0", stdout='I0101 flags.go:64] FLAG: --config="/var/lib/kubelet/config.json"\n')
    validate_kubelet_has_flags(make_scenario(), "/var/lib/kubelet/config.json")

    fake_channel.queue("0", stdout='FLAG: --config=""\n')
    with pytest.raises(ValidationFailure, match="expected to find flag"):
        validate_kubelet_has_flags(make_scenario(), "/var/lib/kubelet/config.json")


def test_localdns_service(make_scenario, fake_channel):
    fake_channel.queue("3")

    with pytest.raises(ValidationFailure, match="localdns service is not up and running"):
        validate_localdns_service(make_scenario())
