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


# Source of truth for validation defaults
class RemoteExecDefaults:
    ssh_user = "azureuser"
    ssh_options = (
        "-o StrictHostKeyChecking=no",
        "-o UserKnownHostsFile=/dev/null",
        "-o PasswordAuthentication=no",
        "-o ConnectTimeout=30",
    )
    exec_timeout = 600  # in seconds
    relay_namespace = "default"
    debug_pod_namespace = "default"
    debug_pod_label_selector = "app=debugnonhost"


class PollingDefaults:
    # (interval, timeout) pairs, in seconds
    gpu_count_interval = 2
    gpu_count_timeout = 180
    fs_corruption_interval = 10
    fs_corruption_timeout = 360
    resource_interval = 1
    resource_timeout = 600
    pod_phase_interval = 5
    pod_phase_timeout = 300


class NodeDefaults:
    gpu_settle_delay = 20  # in seconds
    expected_gpu_count = 8
    gpu_resource_name = "nvidia.com/gpu"
    gpu_workload_image = "mcr.microsoft.com/azuredocs/samples-tf-mnist-demo:gpu"
    gpu_workload_namespace = "default"
    windows_settings_path = "../vhdbuilder/packer/windows/windows_settings.json"
    localdns_listener_ip = "169.254.10.10"
    localdns_test_domain = "bing.com"
    npd_settings_path = "/etc/node-problem-detector.d/public-settings.json"
    npd_gpu_count_plugin_path = "/etc/node-problem-detector.d/custom-plugin-monitor/gpu_checks/custom-plugin-gpu-count.json"
    npd_fs_corruption_plugin_path = "/etc/node-problem-detector.d/custom-plugin-monitor/custom-fs-corruption-monitor.json"
    imds_rule_comment = "AKS managed: added by AgentBaker ensureIMDSRestriction for IMDS restriction feature"
    azure_cni_conflist_windows = "/k/azurecni/netconf/10-azure.conflist"
