# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Fail CI when a test function lacks a pipeline, type or infra marker.

Markers may come from a module-level ``pytestmark`` list, from decorators on
the enclosing class, or from decorators on the test itself.
"""
import re
import sys
from pathlib import Path
from typing import Iterator, List, Set, Tuple

CATEGORIES = {
    "pipeline": {"nightly", "pre_merge", "post_merge", "weekly"},
    "type": {"unit", "integration", "e2e"},
    "infra": {"gpu_0", "gpu_1"},
}

MARKER_PAT = re.compile(r"pytest\.mark\.([A-Za-z0-9_]+)")
DECORATOR_LOOKBACK = 20


def module_markers(lines: List[str]) -> Set[str]:
    """Collect markers from a top-of-file ``pytestmark`` assignment."""
    found: Set[str] = set()
    in_list = False
    for line in lines:
        stripped = line.strip()
        if stripped.startswith(("def ", "class ")):
            break
        if stripped.startswith("pytestmark"):
            found.update(MARKER_PAT.findall(stripped))
            in_list = "[" in stripped and "]" not in stripped
        elif in_list:
            found.update(MARKER_PAT.findall(stripped))
            in_list = "]" not in stripped
    return found


def class_markers(lines: List[str], idx: int) -> Set[str]:
    """Markers decorating the class that encloses the test at ``idx``, if any."""
    indent = len(lines[idx]) - len(lines[idx].lstrip())
    if indent == 0:
        return set()
    for i in range(idx - 1, -1, -1):
        if re.match(r"^class\s+\w+", lines[i]):
            found: Set[str] = set()
            j = i - 1
            while j >= 0 and (lines[j].strip().startswith("@") or not lines[j].strip()):
                found.update(MARKER_PAT.findall(lines[j]))
                j -= 1
            return found
    return set()


def function_markers(lines: List[str], idx: int) -> Set[str]:
    found: Set[str] = set()
    for j in range(idx - 1, max(idx - DECORATOR_LOOKBACK, -1), -1):
        stripped = lines[j].strip()
        if stripped.startswith(("def ", "class ")):
            break
        found.update(m for m in MARKER_PAT.findall(stripped) if m != "parametrize")
    return found


def missing_categories(markers: Set[str]) -> List[str]:
    return [cat for cat, allowed in CATEGORIES.items() if not markers & allowed]


def scan_file(path: Path) -> Iterator[Tuple[int, str, List[str]]]:
    lines = path.read_text(encoding="utf-8").splitlines()
    file_level = module_markers(lines)
    for idx, line in enumerate(lines):
        if not re.match(r"^\s*def test_", line):
            continue
        markers = file_level | class_markers(lines, idx) | function_markers(lines, idx)
        missing = missing_categories(markers)
        if missing:
            yield idx + 1, line.strip(), missing


def main() -> None:
    tests_dir = Path(__file__).parent / "tests"
    if not tests_dir.is_dir():
        print(f"Could not find tests directory at: {tests_dir}")
        sys.exit(1)

    error = False
    for path in sorted(tests_dir.rglob("test_*.py")):
        for lineno, sig, missing in scan_file(path):
            print(
                f"File {path}, line {lineno}: '{sig}' is missing marker(s) from: {', '.join(missing)}"
            )
            error = True

    if error:
        print("\nERROR: Some tests are missing required category markers.")
        sys.exit(1)


if __name__ == "__main__":
    main()
