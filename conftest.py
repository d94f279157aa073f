# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Root conftest for the nodeprobe test suite.

Applies pipeline marker implications before marker filtering so that
``-m nightly`` also selects every pre_merge and post_merge test:
- pre_merge implies post_merge and nightly
- post_merge implies nightly

Set NODEPROBE_DISABLE_MARKER_IMPLICATIONS=1 to turn this off.
"""

import os
from typing import Sequence

import pytest

pytest_plugins = ["pytester"]

IMPLIED_MARKERS = {
    "pre_merge": ("post_merge", "nightly"),
    "post_merge": ("nightly",),
}


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(
    session: pytest.Session, config: pytest.Config, items: Sequence[pytest.Item]
) -> None:
    if os.getenv("NODEPROBE_DISABLE_MARKER_IMPLICATIONS") == "1":
        return

    for item in items:
        marker_names = {m.name for m in item.iter_markers()}
        for marker, implied in IMPLIED_MARKERS.items():
            if marker not in marker_names:
                continue
            for name in implied:
                if name not in marker_names:
                    item.add_marker(name)
                    marker_names.add(name)
