# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for ValidationConfig loading and validation."""

import json

import pytest
from pydantic import ValidationError

from nodeprobe.config import ValidationConfig
from nodeprobe.defaults import NodeDefaults, PollingDefaults, RemoteExecDefaults
from nodeprobe.exceptions import ConfigError

pytestmark = [
    pytest.mark.gpu_0,
    pytest.mark.pre_merge,
    pytest.mark.unit,
]


def test_defaults(monkeypatch):
    monkeypatch.delenv("NODEPROBE_SSH_USER", raising=False)
    monkeypatch.delenv("NODEPROBE_WINDOWS_SETTINGS", raising=False)

    config = ValidationConfig()

    assert config.ssh_user == RemoteExecDefaults.ssh_user
    assert config.gpu_count_interval == PollingDefaults.gpu_count_interval
    assert config.gpu_count_timeout == 180
    assert config.fs_corruption_timeout == 360
    assert config.expected_gpu_count == NodeDefaults.expected_gpu_count
    assert config.windows_settings_path == NodeDefaults.windows_settings_path


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("NODEPROBE_SSH_USER", "core")
    monkeypatch.setenv("NODEPROBE_DEBUG_NAMESPACE", "e2e-debug")
    monkeypatch.setenv("NODEPROBE_WINDOWS_SETTINGS", "/tmp/windows_settings.json")

    config = ValidationConfig()

    assert config.ssh_user == "core"
    assert config.debug_pod_namespace == "e2e-debug"
    assert config.windows_settings_path == "/tmp/windows_settings.json"


def test_explicit_value_beats_env(monkeypatch):
    monkeypatch.setenv("NODEPROBE_SSH_USER", "core")
    assert ValidationConfig(ssh_user="azureuser").ssh_user == "azureuser"


@pytest.mark.parametrize(
    "overrides",
    [
        {"gpu_count_interval": 0},
        {"resource_interval": -1},
        {"fs_corruption_interval": 400, "fs_corruption_timeout": 360},
        {"pod_phase_interval": 5, "pod_phase_timeout": 5},
        {"exec_timeout": 0},
        {"expected_gpu_count": 0},
    ],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ValidationError):
        ValidationConfig(**overrides)


def test_negative_settle_delay_clamped():
    assert ValidationConfig(gpu_settle_delay=-5).gpu_settle_delay == 0


def test_from_inline_json():
    config = ValidationConfig.from_config_arg(json.dumps({"expected_gpu_count": 4, "gpu_count_timeout": 60}))

    assert config.expected_gpu_count == 4
    assert config.gpu_count_timeout == 60


def test_from_yaml_file(tmp_path):
    path = tmp_path / "nodeprobe.yaml"
    path.write_text("expected_gpu_count: 2\nssh_options:\n  - -o ConnectTimeout=5\n")

    config = ValidationConfig.from_config_arg(str(path))

    assert config.expected_gpu_count == 2
    assert config.ssh_options == ["-o ConnectTimeout=5"]


def test_from_json_file(tmp_path):
    path = tmp_path / "nodeprobe.json"
    path.write_text(json.dumps({"resource_timeout": 120}))

    assert ValidationConfig.from_config_arg(str(path)).resource_timeout == 120


def test_empty_yaml_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert ValidationConfig.from_config_arg(str(path)).expected_gpu_count == 8


def test_neither_file_nor_json():
    with pytest.raises(ConfigError, match="neither a valid file path nor valid JSON"):
        ValidationConfig.from_config_arg("/does/not/exist.yaml")


def test_invalid_values_wrapped_in_config_error():
    with pytest.raises(ConfigError, match="invalid validation config"):
        ValidationConfig.from_config_arg('{"gpu_count_interval": 0}')


def test_unparseable_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{broken")

    with pytest.raises(ConfigError, match="Could not parse config file"):
        ValidationConfig.from_config_arg(str(path))
