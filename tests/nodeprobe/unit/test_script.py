# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for script rendering and per-platform command templates."""

import pytest

from nodeprobe.script import (
    Interpreter,
    LinuxTemplate,
    WindowsTemplate,
    ps_quote,
    template_for,
)
from nodeprobe.target import Platform

pytestmark = [
    pytest.mark.gpu_0,
    pytest.mark.pre_merge,
    pytest.mark.unit,
    pytest.mark.executor,
]


def test_template_selected_by_platform():
    assert isinstance(template_for(Platform.LINUX), LinuxTemplate)
    assert isinstance(template_for(Platform.WINDOWS), WindowsTemplate)
    assert isinstance(template_for("windows"), WindowsTemplate)


def test_linux_script_has_strict_preamble():
    script = LinuxTemplate().script(["echo one", "echo two"])

    assert script.interpreter is Interpreter.BASH
    assert script.text == "set -ex\necho one\necho two"


def test_preamble_is_not_duplicated():
    script = LinuxTemplate().script(["set -ex", "true"])

    assert script.text == "set -ex\ntrue"


def test_single_string_step():
    script = LinuxTemplate().script("dig bing.com")

    assert script.text == "set -ex\ndig bing.com"


def test_windows_script_uses_crlf_and_stop_preference():
    script = WindowsTemplate().script(["Get-Service kubelet"])

    assert script.interpreter is Interpreter.POWERSHELL
    assert script.text == '$ErrorActionPreference = "Stop"\r\nGet-Service kubelet'


def test_ps_quote_doubles_single_quotes():
    assert ps_quote("C:\\k\\it's.json") == "'C:\\k\\it''s.json'"


def test_linux_quotes_paths():
    steps = LinuxTemplate().read_file("/etc/my file")

    assert steps == ["sudo cat '/etc/my file'"]


def test_linux_excludes_content_passes_on_missing_file():
    steps = LinuxTemplate().file_excludes_content("/etc/kubelet.conf", "--foo")

    assert steps[0] == "test -f /etc/kubelet.conf || exit 0"
    assert "then echo 'found excluded content in /etc/kubelet.conf'; exit 1; fi" in steps[-1]
    assert "grep -q -F -e --foo /etc/kubelet.conf" in steps[-1]


def test_windows_excludes_content_errors_on_missing_file():
    steps = WindowsTemplate().file_excludes_content("C:\\k\\config", "--foo")

    assert "if ( -not ( Test-Path -Path 'C:\\k\\config' ) ) { exit 2 }" in steps
    assert steps[-1].endswith("{ exit 1 } else { exit 0 }")


def test_has_content_uses_fixed_string_match():
    linux = LinuxTemplate().file_has_content("/etc/hosts", "a.b")
    windows = WindowsTemplate().file_has_content("C:\\hosts", "a.b")

    assert linux[-1] == "sudo grep -q -F -e a.b /etc/hosts"
    assert "-SimpleMatch" in windows[-1]


def test_service_is_running_per_platform():
    linux = LinuxTemplate().service_is_running("kubelet")
    windows = WindowsTemplate().service_is_running("kubelet")

    assert linux == ["(systemctl -n 5 status kubelet || true)", "systemctl is-active kubelet"]
    assert windows[0] == "$svc = Get-Service -Name 'kubelet'"
    assert windows[-1] == "if ($svc.Status -ne 'Running') { exit 1 }"


def test_process_command_line_per_platform():
    assert LinuxTemplate().process_command_line("kubelet") == [
        "ps -C kubelet -o args= | head -n 1"
    ]
    assert WindowsTemplate().process_command_line("kubelet.exe") == [
        "(Get-CimInstance Win32_Process -Filter \"name='kubelet.exe'\")[0].CommandLine"
    ]
