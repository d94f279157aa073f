# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from nodeprobe.validators.files import (
    get_field_from_json_file,
    validate_directory_content,
    validate_file_excludes_content,
    validate_file_has_content,
    validate_json_file_does_not_have_field,
    validate_json_file_has_field,
    validate_non_empty_directory,
)
from nodeprobe.validators.gpu import (
    enable_gpu_npd_toggle,
    gpu_unbound,
    validate_npd_gpu_count_after_failure,
    validate_npd_gpu_count_condition,
    validate_npd_gpu_count_plugin,
    validate_nvidia_grid_license_valid,
    validate_nvidia_modprobe_installed,
    validate_nvidia_persistenced_running,
    validate_nvidia_smi_installed,
    validate_nvidia_smi_not_installed,
    validate_pod_using_nvidia_gpu,
)
from nodeprobe.validators.node import validate_npd_filesystem_corruption, validate_taints
from nodeprobe.validators.runtime import (
    validate_container_runtime_plugins,
    validate_containerd2_properties,
    validate_imds_restriction_rule,
    validate_installed_package_version,
    validate_kubelet_node_ip,
    validate_localdns_resolution,
    validate_multiple_kube_proxy_versions_exist,
    validate_runc12_properties,
    validate_sysctl_config,
    validate_ulimit_settings,
)
from nodeprobe.validators.services import (
    validate_journalctl_output,
    validate_kubelet_has_flags,
    validate_kubelet_has_not_stopped,
    validate_localdns_service,
    validate_node_problem_detector,
    validate_service_can_restart,
    validate_services_do_not_restart_kubelet,
    validate_systemd_unit_is_not_failed,
    validate_systemd_unit_is_running,
)
from nodeprobe.validators.windows import (
    load_windows_settings,
    validate_cilium_is_not_running_windows,
    validate_cilium_is_running_windows,
    validate_process_has_cli_arguments,
    validate_windows_display_version,
    validate_windows_product_name,
    validate_windows_version_from_windows_settings,
)

__all__ = [
    "enable_gpu_npd_toggle",
    "get_field_from_json_file",
    "gpu_unbound",
    "load_windows_settings",
    "validate_cilium_is_not_running_windows",
    "validate_cilium_is_running_windows",
    "validate_container_runtime_plugins",
    "validate_containerd2_properties",
    "validate_directory_content",
    "validate_file_excludes_content",
    "validate_file_has_content",
    "validate_imds_restriction_rule",
    "validate_installed_package_version",
    "validate_journalctl_output",
    "validate_json_file_does_not_have_field",
    "validate_json_file_has_field",
    "validate_kubelet_has_flags",
    "validate_kubelet_has_not_stopped",
    "validate_kubelet_node_ip",
    "validate_localdns_resolution",
    "validate_localdns_service",
    "validate_multiple_kube_proxy_versions_exist",
    "validate_node_problem_detector",
    "validate_non_empty_directory",
    "validate_npd_filesystem_corruption",
    "validate_npd_gpu_count_after_failure",
    "validate_npd_gpu_count_condition",
    "validate_npd_gpu_count_plugin",
    "validate_nvidia_grid_license_valid",
    "validate_nvidia_modprobe_installed",
    "validate_nvidia_persistenced_running",
    "validate_nvidia_smi_installed",
    "validate_nvidia_smi_not_installed",
    "validate_pod_using_nvidia_gpu",
    "validate_process_has_cli_arguments",
    "validate_runc12_properties",
    "validate_service_can_restart",
    "validate_services_do_not_restart_kubelet",
    "validate_sysctl_config",
    "validate_systemd_unit_is_not_failed",
    "validate_systemd_unit_is_running",
    "validate_taints",
    "validate_ulimit_settings",
    "validate_windows_display_version",
    "validate_windows_product_name",
    "validate_windows_version_from_windows_settings",
]
