# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""pytest fixtures for suites that run nodeprobe validators.

Registered through the pytest11 entry point, so installing the package is
enough. Pass --nodeprobe-config to load a ValidationConfig from a YAML/JSON
file or an inline JSON string.
"""

import logging

import pytest

from nodeprobe.config import ValidationConfig
from nodeprobe.polling import CancellationToken
from nodeprobe.report import ReportSink


def pytest_addoption(parser):
    parser.addoption(
        "--nodeprobe-config",
        type=str,
        default=None,
        help="ValidationConfig as a YAML/JSON file path or inline JSON",
    )


@pytest.fixture
def validation_config(request) -> ValidationConfig:
    config_arg = request.config.getoption("--nodeprobe-config")
    if config_arg is None:
        return ValidationConfig()
    return ValidationConfig.from_config_arg(config_arg)


@pytest.fixture
def cancel_token():
    token = CancellationToken()
    yield token
    # release any poll loop still waiting on this test's scenario
    token.cancel()


@pytest.fixture
def report_sink(request):
    """ReportSink whose soft failures fail the test at teardown."""
    sink = ReportSink(logging.getLogger(f"nodeprobe.{request.node.name}"))
    yield sink
    sink.raise_if_failed()
