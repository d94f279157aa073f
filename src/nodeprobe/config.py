# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import json
import logging
import os
from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from nodeprobe.defaults import NodeDefaults, PollingDefaults, RemoteExecDefaults
from nodeprobe.exceptions import ConfigError

logger = logging.getLogger(__name__)


class ValidationConfig(BaseModel):
    """Tunables for remote execution, polling and node expectations.

    Every field has a default from nodeprobe.defaults; a scenario only
    overrides what differs on its cluster or VM image.
    """

    # Remote execution
    ssh_user: str = Field(
        default_factory=lambda: os.environ.get(
            "NODEPROBE_SSH_USER", RemoteExecDefaults.ssh_user
        )
    )
    ssh_options: List[str] = Field(
        default_factory=lambda: list(RemoteExecDefaults.ssh_options)
    )
    exec_timeout: int = RemoteExecDefaults.exec_timeout
    debug_pod_namespace: str = Field(
        default_factory=lambda: os.environ.get(
            "NODEPROBE_DEBUG_NAMESPACE", RemoteExecDefaults.debug_pod_namespace
        )
    )
    debug_pod_label_selector: str = RemoteExecDefaults.debug_pod_label_selector

    # Convergence polling (seconds)
    gpu_count_interval: float = PollingDefaults.gpu_count_interval
    gpu_count_timeout: float = PollingDefaults.gpu_count_timeout
    fs_corruption_interval: float = PollingDefaults.fs_corruption_interval
    fs_corruption_timeout: float = PollingDefaults.fs_corruption_timeout
    resource_interval: float = PollingDefaults.resource_interval
    resource_timeout: float = PollingDefaults.resource_timeout
    pod_phase_interval: float = PollingDefaults.pod_phase_interval
    pod_phase_timeout: float = PollingDefaults.pod_phase_timeout

    # Node expectations
    gpu_settle_delay: float = NodeDefaults.gpu_settle_delay
    expected_gpu_count: int = NodeDefaults.expected_gpu_count
    gpu_workload_image: str = NodeDefaults.gpu_workload_image
    gpu_workload_namespace: str = NodeDefaults.gpu_workload_namespace
    windows_settings_path: str = Field(
        default_factory=lambda: os.environ.get(
            "NODEPROBE_WINDOWS_SETTINGS", NodeDefaults.windows_settings_path
        )
    )

    @model_validator(mode="after")
    def _validate_config(self) -> "ValidationConfig":
        pairs = {
            "gpu_count": (self.gpu_count_interval, self.gpu_count_timeout),
            "fs_corruption": (self.fs_corruption_interval, self.fs_corruption_timeout),
            "resource": (self.resource_interval, self.resource_timeout),
            "pod_phase": (self.pod_phase_interval, self.pod_phase_timeout),
        }
        for name, (interval, timeout) in pairs.items():
            if interval <= 0:
                raise ValueError(f"{name}_interval must be positive, got {interval}")
            if interval >= timeout:
                raise ValueError(
                    f"{name}_interval ({interval}s) must be shorter than "
                    f"{name}_timeout ({timeout}s)"
                )

        if self.exec_timeout <= 0:
            raise ValueError(f"exec_timeout must be positive, got {self.exec_timeout}")

        if self.expected_gpu_count < 1:
            raise ValueError(
                f"expected_gpu_count must be at least 1, got {self.expected_gpu_count}"
            )

        if self.gpu_settle_delay < 0:
            logger.warning(
                f"Negative gpu_settle_delay ({self.gpu_settle_delay}s) treated as 0"
            )
            self.gpu_settle_delay = 0

        return self

    @classmethod
    def from_config_arg(cls, config_arg: str) -> "ValidationConfig":
        """Create a ValidationConfig from a --config style argument.

        Auto-detects whether the argument is a file path (JSON/YAML) or an
        inline JSON string, loads it, and validates.
        """
        path = Path(config_arg)
        if path.is_file():
            data = cls._load_file(path)
        else:
            try:
                data = json.loads(config_arg)
            except json.JSONDecodeError as e:
                raise ConfigError(
                    f"config value is neither a valid file path nor valid JSON: {e}"
                ) from e

        try:
            return cls.model_validate(data or {})
        except ValidationError as e:
            raise ConfigError(f"invalid validation config: {e}") from e

    @staticmethod
    def _load_file(path: Path) -> dict:
        suffix = path.suffix.lower()
        text = path.read_text()

        try:
            if suffix in (".yaml", ".yml"):
                return yaml.safe_load(text)
            if suffix == ".json":
                return json.loads(text)
            # Try JSON first, then YAML
            try:
                return json.loads(text)
            except json.JSONDecodeError:
                return yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"Could not parse config file '{path}': {e}") from e
