"""Event Publisher port - interface for publishing progress events."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """Progress notification for the UI."""
    step: str
    progress: float  # 0 to 100


ProgressCallback = Callable[[ProgressEvent], None]


@runtime_checkable
class EventPublisher(Protocol):
    """Port for publishing progress events."""

    def publish(self, event: ProgressEvent) -> None:
        """Publish an event."""
        ...

    def subscribe(self, callback: ProgressCallback) -> None:
        """Subscribe to events."""
        ...


class SimpleEventPublisher:
    """Simple synchronous event publisher.

    Subscribers are a side channel: an exception raised by one is logged and
    does not reach the publisher.
    """

    def __init__(self):
        self._subscribers: list[ProgressCallback] = []

    def publish(self, event: ProgressEvent) -> None:
        for callback in self._subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception(f"Progress subscriber failed on '{event.step}'")

    def subscribe(self, callback: ProgressCallback) -> None:
        self._subscribers.append(callback)


class ProgressTracker:
    """Reports progress for one run, never letting the value go backwards.

    A stage that reports a lower value than already seen (e.g. the fallback
    notice after AI inference got halfway) is published at the high-water
    mark instead.
    """

    def __init__(self, publisher: EventPublisher):
        self._publisher = publisher
        self._high_water = 0.0

    @property
    def current(self) -> float:
        return self._high_water

    def report(self, step: str, progress: float) -> None:
        value = min(100.0, max(self._high_water, float(progress)))
        self._high_water = value
        logger.debug(f"Progress {value:.0f}%: {step}")
        self._publisher.publish(ProgressEvent(step=step, progress=value))

    def __call__(self, step: str, progress: float) -> None:
        self.report(step, progress)
