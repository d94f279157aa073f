# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Windows node validators.

Version checks compare the VM's registry against the expectations that ship
in windows_settings.json (path from ValidationConfig.windows_settings_path):

    {"WindowsBaseVersions": {"2022-containerd": {"base_image_version": "20348.2966.241205", ...}}}
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Union

from nodeprobe.defaults import NodeDefaults
from nodeprobe.exceptions import PolicyViolation, SetupError
from nodeprobe.policies import get_json_field, require_equal_normalized, split_command_line
from nodeprobe.scenario import Scenario
from nodeprobe.validators.files import (
    validate_json_file_does_not_have_field,
    validate_json_file_has_field,
)

logger = logging.getLogger(__name__)

CURRENT_VERSION_KEY = "HKLM:\\SOFTWARE\\Microsoft\\Windows NT\\CurrentVersion"


def load_windows_settings(path: Union[str, Path]) -> Dict[str, Any]:
    """Load the local Windows settings JSON."""
    path = Path(path)
    logger.debug(f"Loading Windows settings from {path}")
    try:
        return json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise SetupError(f"could not load Windows settings from {path}: {e}") from e


def validate_process_has_cli_arguments(
    scenario: Scenario, process: str, arguments: Iterable[str]
) -> None:
    template = scenario.executor.template
    result = scenario.executor.execute_and_assert(
        template.process_command_line(process),
        0,
        "could not validate command has parameters - might mean file does not have params, "
        "might mean something went wrong",
    )
    actual_args = split_command_line(result.stdout)
    for argument in arguments:
        if argument not in actual_args:
            scenario.sink.fail(
                f"expected process {process} to have argument {argument!r}, "
                f"got {actual_args}"
            )


def validate_windows_version_from_windows_settings(
    scenario: Scenario, windows_version: str
) -> None:
    """BuildLabEx on the VM contains the major of base_image_version for windows_version."""
    settings = load_windows_settings(scenario.config.windows_settings_path)
    try:
        os_version = get_json_field(
            settings, f"WindowsBaseVersions.{windows_version}.base_image_version"
        )
    except PolicyViolation as e:
        scenario.sink.fail(str(e), SetupError)
    if not os_version:
        scenario.sink.fail(
            f"no base_image_version for {windows_version!r} in {scenario.config.windows_settings_path}",
            SetupError,
        )
    major = os_version.split(".")[0]

    result = scenario.executor.execute_and_assert(
        [f'(Get-ItemProperty -Path "{CURRENT_VERSION_KEY}" -Name BuildLabEx).BuildLabEx'],
        0,
        "could not read BuildLabEx from the registry",
    )
    build = result.stdout.strip()
    scenario.sink.log(
        f"Found windows version in windows_settings: {windows_version}: {major} ({os_version})"
    )
    scenario.sink.log(f"Windows version returned from VM {build}")
    if major not in build:
        scenario.sink.fail(f"expected BuildLabEx {build!r} to contain {major!r}")


def _current_version_property(scenario: Scenario, name: str) -> str:
    result = scenario.executor.execute_and_assert(
        [f'(Get-ItemProperty "{CURRENT_VERSION_KEY}").{name}'],
        0,
        f"could not read {name} from the registry",
    )
    return result.stdout


def validate_windows_product_name(scenario: Scenario, product_name: str) -> None:
    actual = _current_version_property(scenario, "ProductName")
    require_equal_normalized(scenario.sink, actual, product_name, "Windows product name")


def validate_windows_display_version(scenario: Scenario, display_version: str) -> None:
    actual = _current_version_property(scenario, "DisplayVersion")
    require_equal_normalized(scenario.sink, actual, display_version, "Windows display version")


def validate_cilium_is_running_windows(scenario: Scenario) -> None:
    validate_json_file_has_field(
        scenario, NodeDefaults.azure_cni_conflist_windows, "plugins.ipam.type", "azure-cns"
    )


def validate_cilium_is_not_running_windows(scenario: Scenario) -> None:
    validate_json_file_does_not_have_field(
        scenario, NodeDefaults.azure_cni_conflist_windows, "plugins.ipam.type", "azure-cns"
    )
