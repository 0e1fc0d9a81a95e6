"""Abstract base class for staged reactors."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field

from exam_reactor.containers.base import TestContainer
from exam_reactor.errors import ConfigurationError
from exam_reactor.listeners import TestListener
from exam_reactor.models.description import TestDescription
from exam_reactor.models.probe import Probe
from exam_reactor.models.result import TestResult

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class StagedReactor(ABC):
    """Decides which container runs a test and when containers go up and down.

    A suite runner drives the reactor through ``before_suite``,
    ``before_class``, ``before_test``, ``run_test``, ``after_test``,
    ``after_class`` and ``after_suite``, with ``set_up`` and ``tear_down``
    around the whole run. Hooks are no-ops unless a strategy overrides
    them. ``run_test`` calls never overlap.
    """

    containers: Sequence[TestContainer]
    probes: Sequence[Probe]
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.containers:
            raise ConfigurationError("A reactor needs at least one container")
        if not self.probes:
            raise ConfigurationError("A reactor needs at least one probe")

    async def set_up(self) -> None:  # noqa: B027
        """Called once before the suite is staged."""

    async def tear_down(self) -> None:  # noqa: B027
        """Called once after the suite, even when it failed."""

    async def before_suite(self) -> None:  # noqa: B027
        """Called before the first test class."""

    async def after_suite(self) -> None:  # noqa: B027
        """Called after the last test class."""

    async def before_class(self) -> None:  # noqa: B027
        """Called before the tests of a class."""

    async def after_class(self) -> None:  # noqa: B027
        """Called after the tests of a class."""

    async def before_test(self) -> None:  # noqa: B027
        """Called before each test."""

    async def after_test(self) -> None:  # noqa: B027
        """Called after each test."""

    async def run_test(
        self, description: TestDescription, listener: TestListener
    ) -> TestResult | None:
        """Run one test in a container chosen by the strategy.

        Class-level descriptions (no method name) are structural and return
        ``None`` without touching any container.

        Raises:
            ValueError: If no description is given
            ExamReactorError: On infrastructure failure, after the container
                involved has been stopped

        """
        if description is None:
            raise ValueError("TestDescription must not be None")

        if not description.is_executable:
            log.debug("Skipping class-level node %s", description)
            return None

        async with self._lock:
            return await self.execute(description, listener)

    @abstractmethod
    async def execute(
        self, description: TestDescription, listener: TestListener
    ) -> TestResult:
        """Stage a container for the test and run it there."""

    def probe_for(self, description: TestDescription) -> Probe:
        """Return the first probe carrying the test.

        Raises:
            ConfigurationError: If no probe carries it

        """
        for probe in self.probes:
            if probe.serves(description):
                return probe
        raise ConfigurationError(f"No probe provides test {description}")
