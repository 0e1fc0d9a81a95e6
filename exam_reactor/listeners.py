"""Listeners receiving test outcomes from containers."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field

from exam_reactor.models.description import TestDescription
from exam_reactor.models.result import TestResult

log = logging.getLogger(__name__)


class TestListener(ABC):
    """Receives exactly one result per invoked test."""

    __test__ = False

    def test_started(self, description: TestDescription) -> None:  # noqa: B027
        """Called before a test is invoked."""

    @abstractmethod
    def test_finished(self, result: TestResult) -> None:
        """Called with the outcome of a test."""


@dataclass(kw_only=True)
class RecordingListener(TestListener):
    """Keeps every result in arrival order."""

    results: list[TestResult] = field(default_factory=list)

    def test_finished(self, result: TestResult) -> None:
        """Record the result."""
        self.results.append(result)

    def by_status(self, status: str) -> Sequence[TestResult]:
        """Return the recorded results having the given status."""
        return [result for result in self.results if result.status == status]


class LoggingListener(TestListener):
    """Logs each outcome."""

    def test_started(self, description: TestDescription) -> None:
        """Log the test being started."""
        log.info("Running %s", description)

    def test_finished(self, result: TestResult) -> None:
        """Log the outcome, at warning level for anything but a pass."""
        if result.passed:
            log.info("%s passed (%.3fs)", result.description, result.duration)
        else:
            log.warning(
                "%s %s (%.3fs): %s",
                result.description,
                result.status,
                result.duration,
                result.message,
            )


@dataclass(frozen=True)
class CompositeListener(TestListener):
    """Fans notifications out to several listeners."""

    listeners: Sequence[TestListener]

    def test_started(self, description: TestDescription) -> None:
        """Forward to every listener."""
        for listener in self.listeners:
            listener.test_started(description)

    def test_finished(self, result: TestResult) -> None:
        """Forward to every listener."""
        for listener in self.listeners:
            listener.test_finished(result)
