# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Remote scripts and per-platform command templates.

A Script is source text plus the interpreter that runs it. A CommandTemplate
knows one platform's dialect: its strict-mode preamble, its line separator,
and how to express the handful of probes that exist on both platforms
(listing a directory, reading a file, checking a service...). Validators pick
a template once per Target via template_for() and never branch on platform
themselves.
"""

import shlex
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Union

from nodeprobe.target import Platform

Steps = Union[str, Sequence[str]]


class Interpreter(str, Enum):
    BASH = "bash"
    POWERSHELL = "powershell"

    @property
    def preamble(self) -> str:
        if self is Interpreter.POWERSHELL:
            return '$ErrorActionPreference = "Stop"'
        return "set -ex"


@dataclass(frozen=True)
class Script:
    text: str
    interpreter: Interpreter


def ps_quote(value: str) -> str:
    """Quote a value as a PowerShell single-quoted (verbatim) string."""
    return "'" + value.replace("'", "''") + "'"


class CommandTemplate(ABC):
    """One platform's command dialect."""

    interpreter: Interpreter
    line_separator: str = "\n"

    def script(self, steps: Steps) -> Script:
        """Render steps into a Script, prepending the strict-mode preamble once."""
        lines: List[str] = [steps] if isinstance(steps, str) else list(steps)
        preamble = self.interpreter.preamble
        if not lines or lines[0].strip() != preamble:
            lines.insert(0, preamble)
        return Script(self.line_separator.join(lines), self.interpreter)

    @abstractmethod
    def quote(self, value: str) -> str:
        ...

    @abstractmethod
    def list_directory(self, path: str) -> List[str]:
        ...

    @abstractmethod
    def non_empty_directory(self, path: str) -> List[str]:
        ...

    @abstractmethod
    def read_file(self, path: str) -> List[str]:
        ...

    @abstractmethod
    def file_has_content(self, path: str, contents: str) -> List[str]:
        ...

    @abstractmethod
    def file_excludes_content(self, path: str, contents: str) -> List[str]:
        ...

    @abstractmethod
    def service_is_running(self, service: str) -> List[str]:
        ...

    @abstractmethod
    def process_command_line(self, process: str) -> List[str]:
        ...


class LinuxTemplate(CommandTemplate):
    interpreter = Interpreter.BASH
    line_separator = "\n"

    def quote(self, value: str) -> str:
        return shlex.quote(value)

    def list_directory(self, path: str) -> List[str]:
        return [f"sudo ls -la {self.quote(path)}"]

    def non_empty_directory(self, path: str) -> List[str]:
        return [f"sudo ls -1q {self.quote(path)} | grep -q '^.*$' && true || false"]

    def read_file(self, path: str) -> List[str]:
        return [f"sudo cat {self.quote(path)}"]

    def file_has_content(self, path: str, contents: str) -> List[str]:
        p = self.quote(path)
        return [
            f"ls -la {p}",
            f"sudo cat {p}",
            f"sudo grep -q -F -e {self.quote(contents)} {p}",
        ]

    def file_excludes_content(self, path: str, contents: str) -> List[str]:
        # a missing file trivially excludes the content
        p = self.quote(path)
        return [
            f"test -f {p} || exit 0",
            f"ls -la {p}",
            f"sudo cat {p}",
            f"if sudo grep -q -F -e {self.quote(contents)} {p}; then "
            f"echo 'found excluded content in {path}'; exit 1; fi",
        ]

    def service_is_running(self, service: str) -> List[str]:
        s = self.quote(service)
        return [
            f"(systemctl -n 5 status {s} || true)",
            f"systemctl is-active {s}",
        ]

    def process_command_line(self, process: str) -> List[str]:
        return [f"ps -C {self.quote(process)} -o args= | head -n 1"]


class WindowsTemplate(CommandTemplate):
    interpreter = Interpreter.POWERSHELL
    line_separator = "\r\n"

    def quote(self, value: str) -> str:
        return ps_quote(value)

    def list_directory(self, path: str) -> List[str]:
        return [f"Get-ChildItem -Force -Name -Path {self.quote(path)}"]

    def non_empty_directory(self, path: str) -> List[str]:
        return [
            f"if (-not (Get-ChildItem -Force -Path {self.quote(path)} | Select-Object -First 1)) {{ exit 1 }}"
        ]

    def read_file(self, path: str) -> List[str]:
        return [f"Get-Content -Raw -Path {self.quote(path)}"]

    def file_has_content(self, path: str, contents: str) -> List[str]:
        p = self.quote(path)
        return [
            f"dir {p}",
            f"Get-Content {p}",
            f"if ( -not ( Test-Path -Path {p} ) ) {{ exit 2 }}",
            f"if (Select-String -Path {p} -Pattern {self.quote(contents)} -SimpleMatch -Quiet) {{ exit 0 }} else {{ exit 1 }}",
        ]

    def file_excludes_content(self, path: str, contents: str) -> List[str]:
        # unlike Linux, a missing file is an error here (exit 2)
        p = self.quote(path)
        return [
            f"dir {p}",
            f"Get-Content {p}",
            f"if ( -not ( Test-Path -Path {p} ) ) {{ exit 2 }}",
            f"if (Select-String -Path {p} -Pattern {self.quote(contents)} -SimpleMatch -Quiet) {{ exit 1 }} else {{ exit 0 }}",
        ]

    def service_is_running(self, service: str) -> List[str]:
        return [
            f"$svc = Get-Service -Name {self.quote(service)}",
            "$svc | Format-List | Out-String",
            "if ($svc.Status -ne 'Running') { exit 1 }",
        ]

    def process_command_line(self, process: str) -> List[str]:
        wql = "name=" + ps_quote(process)
        return [f'(Get-CimInstance Win32_Process -Filter "{wql}")[0].CommandLine']


_TEMPLATES = {
    Platform.LINUX: LinuxTemplate(),
    Platform.WINDOWS: WindowsTemplate(),
}


def template_for(platform: Platform) -> CommandTemplate:
    return _TEMPLATES[Platform(platform)]
