# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging

EXECUTION_CADENCE_MARKERS = [
    "pre_merge: marks tests to run before merging",
    "post_merge: marks tests to run after merge",
    "nightly: marks tests to run nightly",
    "weekly: marks tests to run weekly",
]

GPU_SCALE_MARKERS = [
    "gpu_0: marks tests that don't require GPU",
    "gpu_1: marks tests to run on GPU",
]

TEST_SCOPE_MARKERS = [
    "e2e: marks tests as end-to-end tests",
    "integration: marks tests as integration tests",
    "unit: marks tests as unit tests",
]

FEATURE_MARKERS = [
    "executor: marks tests for remote command execution",
    "polling: marks tests for convergence polling",
    "validators: marks tests for declarative node validators",
]


def pytest_configure(config):
    # Defining markers to avoid `<marker> not found in 'markers' configuration option`
    # errors when pyproject.toml is not available (e.g. running from an sdist).
    # IMPORTANT: Keep this marker list in sync with [tool.pytest.ini_options].markers
    # in pyproject.toml. If you add or remove markers there, mirror the change here.
    markers = [
        "k8s: marks tests as requiring Kubernetes",
    ]
    markers.extend(
        EXECUTION_CADENCE_MARKERS
        + GPU_SCALE_MARKERS
        + TEST_SCOPE_MARKERS
        + FEATURE_MARKERS
    )
    for marker in markers:
        config.addinivalue_line("markers", marker)


LOG_FORMAT = "[TEST] %(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    datefmt=DATE_FORMAT,  # ISO 8601 UTC format
)
