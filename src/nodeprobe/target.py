# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Where remote commands run: the VM under test and the relay pod in front of it."""

from dataclasses import dataclass
from enum import Enum

from nodeprobe.defaults import RemoteExecDefaults


class Platform(str, Enum):
    LINUX = "linux"
    WINDOWS = "windows"


class OSDistro(str, Enum):
    UBUNTU = "ubuntu"
    MARINER = "mariner"
    AZURELINUX = "azurelinux"
    WINDOWS = "windows"

    @property
    def platform(self) -> Platform:
        if self is OSDistro.WINDOWS:
            return Platform.WINDOWS
        return Platform.LINUX


@dataclass(frozen=True)
class RelayPod:
    """Host-network debug pod used to reach the VM over SSH."""

    name: str
    namespace: str = RemoteExecDefaults.relay_namespace


@dataclass(frozen=True)
class Target:
    """Immutable for the lifetime of a scenario."""

    address: str
    relay: RelayPod
    private_key: str
    platform: Platform = Platform.LINUX

    def __repr__(self) -> str:
        # never render the key
        return (
            f"Target(address={self.address!r}, relay={self.relay!r}, "
            f"platform={self.platform.value!r})"
        )
