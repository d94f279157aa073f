# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Comparison and normalisation policies shared by validators.

Two flavours:
- pure helpers (parse_*, get_json_field, ...) that raise PolicyViolation and
  know nothing about reporting
- require_*/soft_* helpers that apply a policy and report through a ReportSink
"""

import ipaddress
import json
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from kubernetes import client
from kubernetes.utils import parse_quantity

from nodeprobe.exceptions import PolicyViolation, SetupError
from nodeprobe.report import ReportSink

NODE_IP_FLAG = re.compile(r"--node-ip=([a-zA-Z0-9.,:]*)")
SEMVER = re.compile(r"[0-9]+\.[0-9]+\.[0-9]+")


# =============================================================================
# Substring containment
# =============================================================================


def require_non_empty_needle(sink: ReportSink, needle: str, subject: str) -> None:
    """An empty needle makes 'must not contain' trivially true: reject it."""
    if needle == "":
        sink.fail(
            f"Can't validate that {subject} excludes an empty string.",
            SetupError,
        )


def require_contains(sink: ReportSink, haystack: str, needle: str, message: str = "") -> None:
    if needle not in haystack:
        sink.fail(message or f"expected to find {needle!r}, but did not.\nOutput:\n{haystack}")


def require_not_contains(
    sink: ReportSink, haystack: str, needle: str, message: str = ""
) -> None:
    require_non_empty_needle(sink, needle, "output")
    if needle in haystack:
        sink.fail(message or f"did not expect to find {needle!r}.\nOutput:\n{haystack}")


def soft_contains(sink: ReportSink, haystack: str, needle: str, message: str = "") -> bool:
    if needle in haystack:
        return True
    sink.log_soft(message or f"expected output to contain {needle!r}")
    return False


def soft_not_contains(sink: ReportSink, haystack: str, needle: str, message: str = "") -> bool:
    require_non_empty_needle(sink, needle, "output")
    if needle not in haystack:
        return True
    sink.log_soft(message or f"expected output not to contain {needle!r}")
    return False


# =============================================================================
# Exact equality
# =============================================================================


def normalize(value: Optional[str], lower: bool = False) -> str:
    text = (value or "").strip()
    return text.lower() if lower else text


def require_equal_normalized(
    sink: ReportSink,
    actual: Optional[str],
    expected: str,
    what: str,
    lower: bool = False,
) -> None:
    a, e = normalize(actual, lower), normalize(expected, lower)
    if a != e:
        sink.fail(f"expected {what} to be {e!r}, but got {a!r}")


# =============================================================================
# Structured extraction
# =============================================================================


def parse_node_ips(text: str) -> List[str]:
    """Extract the kubelet --node-ip value: one address, or two for dual-stack."""
    match = NODE_IP_FLAG.search(text)
    if match is None or match.group(1) == "":
        raise PolicyViolation(f"kubelet flag --node-ip not found\nStdout: \n{text}")

    addresses = match.group(1).split(",")
    if len(addresses) > 2:
        raise PolicyViolation(
            f"too many --node-ip addresses: expected at most two, but got {len(addresses)}\nStdout: \n{text}"
        )
    for address in addresses:
        try:
            ipaddress.ip_address(address)
        except ValueError:
            raise PolicyViolation(
                f"--node-ip value {address!r} is not a valid IP address\nStdout: \n{text}"
            ) from None
    return addresses


def parse_key_values(text: str, separator: str = "=") -> Dict[str, str]:
    """Parse 'key<sep>value' lines, collapsing whitespace runs inside values."""
    pairs: Dict[str, str] = {}
    for line in text.splitlines():
        if separator not in line:
            continue
        key, _, value = line.partition(separator)
        key = key.strip()
        if not key:
            continue
        pairs[key] = " ".join(value.split())
    return pairs


def split_command_line(command_line: str) -> List[str]:
    return command_line.strip().split()


# =============================================================================
# Set cardinality / versions
# =============================================================================


def distinct_versions(text: str) -> Set[str]:
    return set(SEMVER.findall(text))


def check_version_cardinality(versions: Set[str], component: str) -> str:
    """Two or more distinct versions are expected. Returns a log line on success."""
    if not versions:
        raise PolicyViolation(f"No {component} versions found.")
    if len(versions) == 1:
        raise PolicyViolation(f"Only one {component} version exists: {sorted(versions)}")
    return f"Multiple {component} versions exist: {sorted(versions)}"


def require_single_version_with_prefix(
    sink: ReportSink, versions: List[str], prefix: str, package: str
) -> str:
    if len(versions) != 1:
        sink.fail(f"Expected exactly one version for {package} but got {len(versions)}")
    version = versions[0]
    if not version.startswith(prefix):
        sink.fail(f"expected {package} version to start with {prefix!r}, got {version}")
    return version


# =============================================================================
# JSON field extraction
# =============================================================================


def _lookup(node: Any, key: str) -> List[Any]:
    if isinstance(node, dict):
        return [node[key]] if key in node else []
    if isinstance(node, list):
        if key.isdigit():
            index = int(key)
            return [node[index]] if index < len(node) else []
        # member enumeration over array elements
        out: List[Any] = []
        for item in node:
            out.extend(_lookup(item, key))
        return out
    return []


def _render(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return json.dumps(value)


def get_json_field(document: Any, path: str) -> Optional[str]:
    """Look up a dotted path in parsed JSON.

    Array segments that are not indexes enumerate every element, so
    "plugins.ipam.type" finds ipam.type in each plugin. Multiple matches are
    joined with newlines; no match returns None.
    """
    if isinstance(document, (str, bytes)):
        try:
            document = json.loads(document)
        except json.JSONDecodeError as e:
            raise PolicyViolation(f"content is not valid JSON: {e}") from e
    nodes = [document]
    for key in path.split("."):
        nodes = [found for node in nodes for found in _lookup(node, key)]
        if not nodes:
            return None
    return "\n".join(_render(n) for n in nodes)


# =============================================================================
# Node status helpers
# =============================================================================


def find_condition(
    node: client.V1Node, condition_type: str, reason: str
) -> Optional[client.V1NodeCondition]:
    conditions = (node.status.conditions if node.status else None) or []
    for condition in conditions:
        if condition.type == condition_type and condition.reason == reason:
            return condition
    return None


def format_taints(taints: Optional[Iterable[client.V1Taint]]) -> str:
    return ",".join(f"{t.key}={t.value or ''}:{t.effect}" for t in taints or [])


def resource_at_least(allocatable: Mapping[str, Any], name: str, minimum: int) -> bool:
    quantity = allocatable.get(name)
    if quantity is None:
        return False
    return parse_quantity(quantity) >= minimum
