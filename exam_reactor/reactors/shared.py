"""Reactors keeping a container running across several tests."""

import logging
from abc import abstractmethod
from dataclasses import dataclass, field

from exam_reactor.containers.base import TestContainer
from exam_reactor.listeners import TestListener
from exam_reactor.models.description import TestDescription
from exam_reactor.models.result import TestResult
from exam_reactor.reactors.base import StagedReactor

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class SharedContainerStagedReactor(StagedReactor):
    """Keeps one container active while tests share an activation key.

    A container is activated lazily by the first test of a key and stopped
    when a test with another key arrives, when the strategy's closing hook
    fires, or when anything goes wrong while staging or running.
    """

    _active: TestContainer | None = field(default=None, init=False, repr=False)
    _active_key: str | None = field(default=None, init=False, repr=False)

    @abstractmethod
    def activation_key(self, description: TestDescription) -> str:
        """Tests with the same key share one container activation."""

    @abstractmethod
    def select_container(self, description: TestDescription) -> TestContainer:
        """Pick the container serving the test."""

    async def execute(
        self, description: TestDescription, listener: TestListener
    ) -> TestResult:
        """Run the test in the active container, activating it if needed."""
        key = self.activation_key(description)
        if self._active is not None and self._active_key != key:
            await self.deactivate()

        container = self.select_container(description)
        probe = self.probe_for(description)

        self._active = container
        self._active_key = key
        try:
            await container.start()
            if container.probe_deployment != probe.name:
                await container.install_probe(probe.open(), probe.name)
            return await container.run_test(description, listener)
        except Exception:
            log.warning("Stopping %s after failure in %s", container, description)
            await self.deactivate()
            raise

    async def deactivate(self) -> None:
        """Stop the active container, if any."""
        if self._active is None:
            return

        container = self._active
        self._active = None
        self._active_key = None
        await container.stop()

    async def after_suite(self) -> None:
        """Nothing outlives the suite."""
        await self.deactivate()

    async def tear_down(self) -> None:
        """Nothing outlives the run."""
        await self.deactivate()


@dataclass(kw_only=True)
class PerClassStagedReactor(SharedContainerStagedReactor):
    """One container activation per test class.

    Classes are spread over the containers round-robin, in the order in
    which they are first seen.
    """

    _class_slots: dict[str, int] = field(default_factory=dict, init=False, repr=False)

    def activation_key(self, description: TestDescription) -> str:
        """Tests of one class share an activation."""
        return description.class_name

    def select_container(self, description: TestDescription) -> TestContainer:
        """Assign the class to the next container in turn."""
        slot = self._class_slots.setdefault(
            description.class_name, len(self._class_slots)
        )
        return self.containers[slot % len(self.containers)]

    async def after_class(self) -> None:
        """Stop the container of the finished class."""
        await self.deactivate()


@dataclass(kw_only=True)
class PerSuiteStagedReactor(SharedContainerStagedReactor):
    """One activation of the first container for the whole run."""

    def activation_key(self, description: TestDescription) -> str:
        """Every test shares the suite's activation."""
        return "suite"

    def select_container(self, description: TestDescription) -> TestContainer:
        """Always the first container."""
        return self.containers[0]
