# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""File, directory and JSON-file validators. Work on Linux and Windows targets."""

import logging
from typing import Iterable, Optional

from nodeprobe.exceptions import PolicyViolation
from nodeprobe.policies import get_json_field, require_non_empty_needle
from nodeprobe.scenario import Scenario

logger = logging.getLogger(__name__)


def validate_directory_content(scenario: Scenario, path: str, files: Iterable[str]) -> None:
    template = scenario.executor.template
    result = scenario.executor.execute_and_assert(
        template.list_directory(path), 0, "could not get directory contents"
    )
    for name in files:
        if name not in result.stdout:
            scenario.sink.fail(
                f"expected to find file {name} within directory {path}, but did not.\n"
                f"Directory contents:\n{result.stdout}"
            )


def validate_non_empty_directory(scenario: Scenario, path: str) -> None:
    template = scenario.executor.template
    scenario.executor.execute_and_assert(
        template.non_empty_directory(path),
        0,
        "either could not find expected file, or something went wrong",
    )


def validate_file_has_content(scenario: Scenario, path: str, contents: str) -> None:
    template = scenario.executor.template
    scenario.executor.execute_and_assert(
        template.file_has_content(path, contents),
        0,
        "could not validate file has contents - might mean file does not have contents, "
        "might mean something went wrong",
    )


def validate_file_excludes_content(scenario: Scenario, path: str, contents: str) -> None:
    """Fail if path contains contents.

    On Linux a missing file passes; on Windows it fails. Both behaviours are
    relied on by existing scenarios.
    """
    require_non_empty_needle(scenario.sink, contents, f"a file ({path})")
    template = scenario.executor.template
    scenario.executor.execute_and_assert(
        template.file_excludes_content(path, contents),
        0,
        "could not validate file excludes contents - might mean file does have contents, "
        "might mean something went wrong",
    )


def get_field_from_json_file(scenario: Scenario, path: str, json_path: str) -> Optional[str]:
    """Read a JSON file on the node and return the value at a dotted path."""
    template = scenario.executor.template
    result = scenario.executor.execute_and_assert(
        template.read_file(path), 0, f"could not read JSON file {path}"
    )
    try:
        value = get_json_field(result.stdout, json_path)
    except PolicyViolation as e:
        scenario.sink.fail(f"{path}: {e}")
    logger.debug(f"{path} {json_path} = {value!r}")
    return value


def validate_json_file_has_field(
    scenario: Scenario, path: str, json_path: str, expected_value: str
) -> None:
    actual = get_field_from_json_file(scenario, path, json_path)
    if (actual or "").strip() != expected_value:
        scenario.sink.fail(
            f"expected {json_path} in {path} to be {expected_value!r}, but got {actual!r}"
        )


def validate_json_file_does_not_have_field(
    scenario: Scenario, path: str, json_path: str, value_not_to_be: str
) -> None:
    actual = get_field_from_json_file(scenario, path, json_path)
    if (actual or "").strip() == value_not_to_be:
        scenario.sink.fail(
            f"expected {json_path} in {path} not to be {value_not_to_be!r}, but it was"
        )
