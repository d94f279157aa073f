# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Convergence polling for node state that settles asynchronously.

ConvergencePoller is a small state machine:

    POLLING --(predicate matched)----------> SUCCEEDED
    POLLING --(deadline reached)-----------> TIMED_OUT
    POLLING --(cancel token set)-----------> CANCELLED
    POLLING --(predicate raised, or fetch
               raised with errors fatal)---> ERRORED

The first tick is immediate, later ticks are a fixed interval apart, and a
tick only runs strictly before the deadline. Every tick fetches fresh state;
nothing is cached between ticks. Time and cancellation come from a Clock and a
CancellationToken so tests can drive the loop without sleeping.
"""

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Generic, Iterable, Optional, TypeVar

from kubernetes import client

from nodeprobe.exceptions import PollCancelledError, PollTimeoutError, ValidationFailure
from nodeprobe.policies import find_condition, resource_at_least

if TYPE_CHECKING:
    from nodeprobe.scenario import Scenario

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationToken:
    """Scenario-wide cancel signal shared by every poll loop."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """Block up to seconds; return True as soon as cancellation is set."""
        return self._event.wait(max(seconds, 0))


class Clock:
    """Monotonic time plus a cancellable sleep."""

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float, cancel: Optional[CancellationToken] = None) -> bool:
        """Sleep; return True if woken early by cancellation."""
        if cancel is not None:
            return cancel.wait(seconds)
        time.sleep(max(seconds, 0))
        return False


class PollState(str, Enum):
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    TIMED_OUT = "timed-out"
    CANCELLED = "cancelled"
    ERRORED = "errored"


@dataclass
class PollOutcome(Generic[T]):
    state: PollState
    value: Optional[T] = None
    attempts: int = 0
    elapsed: float = 0.0
    error: Optional[BaseException] = None


class ConvergencePoller(Generic[T]):
    """Fetch external state each tick until predicate(state) returns a value.

    predicate returns the observed item (e.g. a node condition) or None to
    keep polling.
    """

    def __init__(
        self,
        fetch: Callable[[], Any],
        predicate: Callable[[Any], Optional[T]],
        interval: float,
        timeout: float,
        clock: Optional[Clock] = None,
        cancel: Optional[CancellationToken] = None,
        tolerate_fetch_errors: bool = True,
        description: str = "condition",
    ):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        self.fetch = fetch
        self.predicate = predicate
        self.interval = interval
        self.timeout = timeout
        self.clock = clock or Clock()
        self.cancel = cancel or CancellationToken()
        self.tolerate_fetch_errors = tolerate_fetch_errors
        self.description = description
        self.state = PollState.POLLING

    def _finish(self, state: PollState, start: float, attempts: int, **kwargs) -> PollOutcome[T]:
        self.state = state
        elapsed = self.clock.monotonic() - start
        return PollOutcome(state=state, attempts=attempts, elapsed=elapsed, **kwargs)

    def run(self) -> PollOutcome[T]:
        self.state = PollState.POLLING
        start = self.clock.monotonic()
        deadline = start + self.timeout
        attempts = 0

        while True:
            if self.cancel.cancelled:
                return self._finish(PollState.CANCELLED, start, attempts)
            if self.clock.monotonic() >= deadline:
                return self._finish(PollState.TIMED_OUT, start, attempts)

            attempts += 1
            try:
                snapshot = self.fetch()
            except Exception as e:
                if not self.tolerate_fetch_errors:
                    logger.error(f"Fetch failed while waiting for {self.description}: {e}")
                    return self._finish(PollState.ERRORED, start, attempts, error=e)
                logger.warning(
                    f"Fetch failed while waiting for {self.description} (attempt {attempts}): {e}"
                )
            else:
                try:
                    found = self.predicate(snapshot)
                except Exception as e:
                    logger.error(f"Predicate failed while waiting for {self.description}: {e}")
                    return self._finish(PollState.ERRORED, start, attempts, error=e)
                if found is not None:
                    outcome = self._finish(PollState.SUCCEEDED, start, attempts, value=found)
                    logger.info(
                        f"Observed {self.description} after {outcome.elapsed:.1f}s ({attempts} attempt(s))"
                    )
                    return outcome

            remaining = deadline - self.clock.monotonic()
            if remaining <= 0:
                return self._finish(PollState.TIMED_OUT, start, attempts)
            if self.clock.sleep(min(self.interval, remaining), self.cancel):
                return self._finish(PollState.CANCELLED, start, attempts)


def wait_for(scenario: "Scenario", poller: ConvergencePoller[T], subject: str) -> T:
    """Run poller and turn any non-success outcome into a hard failure."""
    outcome = poller.run()
    if outcome.state is PollState.SUCCEEDED:
        return outcome.value
    if outcome.state is PollState.CANCELLED:
        scenario.sink.fail(
            f"context cancelled while waiting for {poller.description} on {subject}",
            PollCancelledError,
        )
    if outcome.state is PollState.TIMED_OUT:
        scenario.sink.fail(
            f"timed out waiting for {poller.description} to appear on {subject} "
            f"after {poller.timeout}s ({outcome.attempts} attempt(s))",
            PollTimeoutError,
        )
    scenario.sink.fail(
        f"error while waiting for {poller.description} on {subject}: {outcome.error}",
        ValidationFailure,
    )


def wait_for_node_condition(
    scenario: "Scenario",
    condition_type: str,
    reason: str,
    interval: float,
    timeout: float,
) -> client.V1NodeCondition:
    """Poll the node until it reports condition_type with the given reason."""
    node_name = scenario.node_name
    poller: ConvergencePoller[client.V1NodeCondition] = ConvergencePoller(
        fetch=lambda: scenario.cluster.get_node(node_name),
        predicate=lambda node: find_condition(node, condition_type, reason),
        interval=interval,
        timeout=timeout,
        clock=scenario.clock,
        cancel=scenario.cancel,
        description=f"{condition_type} condition with reason {reason}",
    )
    return wait_for(scenario, poller, f"node {node_name!r}")


def wait_until_resource_available(scenario: "Scenario", resource_name: str) -> None:
    """Poll node allocatable until resource_name has at least one unit.

    A failed node lookup is fatal here.
    """
    node_name = scenario.node_name
    cfg = scenario.config
    poller: ConvergencePoller[bool] = ConvergencePoller(
        fetch=lambda: scenario.cluster.get_node(node_name),
        predicate=lambda node: resource_at_least(
            (node.status.allocatable if node.status else None) or {}, resource_name, 1
        )
        or None,
        interval=cfg.resource_interval,
        timeout=cfg.resource_timeout,
        clock=scenario.clock,
        cancel=scenario.cancel,
        tolerate_fetch_errors=False,
        description=f"allocatable resource {resource_name}",
    )
    wait_for(scenario, poller, f"node {node_name!r}")
    scenario.sink.log(f"resource {resource_name!r} is available")


def wait_for_pod_phase(
    scenario: "Scenario", namespace: str, name: str, phases: Iterable[str]
) -> client.V1Pod:
    """Poll a pod until its phase is one of phases."""
    wanted = set(phases)
    cfg = scenario.config

    def reached(pod: client.V1Pod) -> Optional[client.V1Pod]:
        phase = pod.status.phase if pod.status else None
        if phase == "Failed" and "Failed" not in wanted:
            raise ValidationFailure(f"pod {namespace}/{name} failed")
        return pod if phase in wanted else None

    poller: ConvergencePoller[client.V1Pod] = ConvergencePoller(
        fetch=lambda: scenario.cluster.read_pod(namespace, name),
        predicate=reached,
        interval=cfg.pod_phase_interval,
        timeout=cfg.pod_phase_timeout,
        clock=scenario.clock,
        cancel=scenario.cancel,
        description=f"pod phase in {sorted(wanted)}",
    )
    return wait_for(scenario, poller, f"pod {namespace}/{name}")
