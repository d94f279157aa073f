# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Failure reporting for validators.

Every validator reports through a ReportSink instead of a global test object:
- fail(msg): abort the current validator (raises)
- log_soft(msg): record the failure and keep going
- log(msg): informational progress

Soft failures are surfaced at the end of the test by raise_if_failed(); the
pytest plugin does this automatically at fixture teardown.
"""

import logging
from typing import List, NoReturn, Optional, Type

from nodeprobe.exceptions import ValidationFailure


class ReportSink:
    """Collects validator outcomes for one test."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.soft_failures: List[str] = []

    def fail(
        self, message: str, error: Type[ValidationFailure] = ValidationFailure
    ) -> NoReturn:
        """Abort the current validator with a hard failure."""
        exc = error(message)
        self.logger.error(str(exc))
        raise exc

    def log_soft(self, message: str) -> None:
        """Record a failure without aborting the current validator."""
        self.logger.error(f"[soft failure] {message}")
        self.soft_failures.append(message)

    def log(self, message: str) -> None:
        self.logger.info(message)

    @property
    def failed(self) -> bool:
        return bool(self.soft_failures)

    def raise_if_failed(self) -> None:
        """Raise a single ValidationFailure summarising all soft failures."""
        if not self.soft_failures:
            return
        summary = "\n".join(f"  - {msg}" for msg in self.soft_failures)
        raise ValidationFailure(
            f"{len(self.soft_failures)} soft failure(s) recorded:\n{summary}"
        )
