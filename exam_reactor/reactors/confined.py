"""Reactor giving every test a freshly started container."""

import logging
from dataclasses import dataclass

from exam_reactor.listeners import TestListener
from exam_reactor.models.description import TestDescription
from exam_reactor.models.result import TestResult
from exam_reactor.reactors.base import StagedReactor

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class AllConfinedStagedReactor(StagedReactor):
    """Uses a new container activation for every test (hence confined).

    Always stages the first container: start, install the probe carrying
    the test, run, stop. The stop happens whatever the outcome.
    """

    async def execute(
        self, description: TestDescription, listener: TestListener
    ) -> TestResult:
        """Run the test in its own start/install/stop cycle."""
        container = self.containers[0]
        probe = self.probe_for(description)

        log.debug("Confined run of %s in %s", description, container)
        try:
            await container.start()
            await container.install_probe(probe.open(), probe.name)
            return await container.run_test(description, listener)
        finally:
            await container.stop()
