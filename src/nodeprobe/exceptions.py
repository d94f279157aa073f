# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Exception hierarchy for node validation.

Transport failures mean no command outcome exists. Validation failures mean a
command ran (or a condition was observed) and did not match; they subclass
AssertionError so pytest reports them as failures rather than errors.
"""

from typing import Optional


class NodeProbeError(Exception):
    """Base exception for all nodeprobe errors.

    Attributes:
        message: Human-readable error description
        help_text: Optional remediation guidance
    """

    def __init__(self, message: str, help_text: Optional[str] = None):
        self.message = message
        self.help_text = help_text
        super().__init__(message)

    def __str__(self) -> str:
        if self.help_text:
            return f"{self.message}\n\nHelp: {self.help_text}"
        return self.message


class ConfigError(NodeProbeError):
    """Raised when validation configuration cannot be loaded."""


class TransportError(NodeProbeError):
    """Raised when the remote channel cannot be established or the call errors.

    Distinct from a command that ran and returned a non-zero exit code.
    """

    def __init__(self, message: str, target: Optional[str] = None):
        help_text = None
        if target:
            help_text = (
                f"Check that the relay pod can reach {target} and that the "
                "scenario credentials are valid"
            )
        super().__init__(message, help_text)
        self.target = target


class ValidationFailure(NodeProbeError, AssertionError):
    """The node did not reach the expected state."""

    label = "Validation failure"


class SetupError(ValidationFailure):
    """The validator was invoked with parameters that cannot be checked."""

    label = "Test setup failure"

    def __init__(self, message: str, help_text: Optional[str] = None):
        if not message.startswith(f"{self.label}:"):
            message = f"{self.label}: {message}"
        super().__init__(message, help_text)


class PollTimeoutError(ValidationFailure):
    """A convergence poller reached its deadline without observing the target."""

    label = "Timed out"


class PollCancelledError(ValidationFailure):
    """A convergence poller observed scenario cancellation."""

    label = "Cancelled"


class PolicyViolation(ValueError):
    """Raised by pure parsing/comparison helpers; converted by validators."""
