"""Abstract base class for test containers."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import BinaryIO, Literal, TypeAlias

from exam_reactor.errors import (
    ContainerStartError,
    ContainerTimeoutError,
    DeploymentError,
    ExamReactorError,
    InvocationError,
)
from exam_reactor.invokers.base import ProbeInvoker
from exam_reactor.listeners import TestListener
from exam_reactor.models.description import TestAddress, TestDescription
from exam_reactor.models.result import TestResult

log = logging.getLogger(__name__)

ContainerState: TypeAlias = Literal["stopped", "starting", "running", "stopping"]


@dataclass(kw_only=True)
class TestContainer(ABC):
    """A runtime instance that probes are installed into and tests run in.

    Subclasses implement the runtime hooks (``launch``, ``shutdown``,
    ``deploy``, ``undeploy``, ``create_invoker``). This class owns the
    lifecycle state, keeps deployed modules on a stack so they are removed
    in reverse install order, and maps hook failures onto the error
    taxonomy.
    """

    __test__ = False

    name: str
    start_timeout: float | None = None
    stop_timeout: float | None = None
    state: ContainerState = field(default="stopped", init=False)
    deployed: list[str] = field(default_factory=list, init=False)
    probe_deployment: str | None = field(default=None, init=False)

    @abstractmethod
    async def launch(self) -> None:
        """Bring up the runtime."""

    @abstractmethod
    async def shutdown(self) -> None:
        """Release the runtime; called even if ``launch`` failed half-way."""

    @abstractmethod
    async def deploy(self, name: str, stream: BinaryIO) -> str:
        """Deploy an archive under the given name and return its deployment id."""

    @abstractmethod
    async def undeploy(self, name: str) -> None:
        """Remove a deployment."""

    @abstractmethod
    def create_invoker(self) -> ProbeInvoker:
        """Return the invoker that reaches tests inside this runtime."""

    async def install_modules(self) -> None:  # noqa: B027
        """Deploy the container's configured modules; runs at the end of start."""

    @property
    def is_running(self) -> bool:
        """Whether the container accepts deployments and calls."""
        return self.state == "running"

    async def start(self) -> "TestContainer":
        """Start the runtime and deploy configured modules.

        Raises:
            ContainerTimeoutError: If starting exceeds ``start_timeout``
            ContainerStartError: If the runtime cannot be started

        """
        if self.is_running:
            log.debug("Container %s already running", self.name)
            return self

        log.info("Starting container %s", self.name)
        self.state = "starting"
        try:
            async with asyncio.timeout(self.start_timeout) as deadline:
                await self.launch()
                await self.install_modules()
        except ContainerStartError:
            await self._abort_start()
            raise
        except TimeoutError as exc:
            await self._abort_start()
            if deadline.expired() and self.start_timeout is not None:
                raise ContainerTimeoutError(self.name, self.start_timeout) from exc
            message = str(exc) or type(exc).__name__
            raise ContainerStartError(self.name, message) from exc
        except Exception as exc:
            await self._abort_start()
            message = str(exc) or type(exc).__name__
            raise ContainerStartError(self.name, message) from exc

        self.state = "running"
        log.info("Container %s running", self.name)
        return self

    async def stop(self) -> "TestContainer":
        """Undeploy everything in reverse order and release the runtime.

        Never raises; problems are logged. Safe to call on a container that
        never started or whose start failed.
        """
        if (
            self.state == "stopped"
            and not self.deployed
            and self.probe_deployment is None
        ):
            log.debug("Container %s already stopped", self.name)
            return self

        log.info("Stopping container %s", self.name)
        await self._teardown()
        return self

    async def install(self, stream: BinaryIO, name: str) -> str:
        """Deploy a module and remember it for undeploying on stop.

        Raises:
            DeploymentError: If the container is not up or deploying fails

        """
        if self.state not in ("starting", "running"):
            raise DeploymentError(name, f"container {self.name} is {self.state}")

        try:
            deployment_id = await self.deploy(name, stream)
        except DeploymentError:
            raise
        except Exception as exc:
            raise DeploymentError(name, str(exc) or type(exc).__name__) from exc

        self.deployed.append(name)
        log.info("Deployed %s to %s (id=%s)", name, self.name, deployment_id)
        return deployment_id

    async def install_probe(self, stream: BinaryIO, name: str = "exam-probe") -> str:
        """Install a probe, replacing the one currently installed.

        The probe is tracked apart from modules so it can be uninstalled on
        its own.
        """
        if self.probe_deployment is not None:
            await self.uninstall_probe()

        deployment_id = await self.install(stream, name)
        self.probe_deployment = self.deployed.pop()
        return deployment_id

    async def uninstall_probe(self) -> None:
        """Undeploy the installed probe, if any.

        Raises:
            DeploymentError: If undeploying fails

        """
        if self.probe_deployment is None:
            return

        name = self.probe_deployment
        self.probe_deployment = None
        try:
            await self.undeploy(name)
        except DeploymentError:
            raise
        except Exception as exc:
            raise DeploymentError(name, str(exc) or type(exc).__name__) from exc
        log.info("Undeployed probe %s from %s", name, self.name)

    async def call(self, address: TestAddress) -> TestResult:
        """Invoke one test inside the runtime.

        Raises:
            InvocationError: If the runtime cannot carry out the call

        """
        test_id = address.description.test_id
        if not self.is_running:
            raise InvocationError(test_id, f"container {self.name} is {self.state}")

        try:
            return await self.create_invoker().invoke(address)
        except ExamReactorError:
            raise
        except Exception as exc:
            raise InvocationError(test_id, str(exc) or type(exc).__name__) from exc

    async def run_test(
        self, description: TestDescription, listener: TestListener
    ) -> TestResult:
        """Run a test and report its outcome to the listener."""
        listener.test_started(description)
        result = await self.call(TestAddress(description=description))
        listener.test_finished(result)
        return result

    async def _abort_start(self) -> None:
        """Release whatever a failed start left behind."""
        await self._teardown()

    async def _teardown(self) -> None:
        self.state = "stopping"
        try:
            await self._release()
        finally:
            self.deployed.clear()
            self.probe_deployment = None
            self.state = "stopped"

    async def _release(self) -> None:
        """Undeploy everything, then shut down; each phase within stop_timeout."""
        try:
            async with asyncio.timeout(self.stop_timeout):
                if self.probe_deployment is not None:
                    await self._best_effort(self.uninstall_probe(), "uninstall probe")
                while self.deployed:
                    name = self.deployed.pop()
                    await self._best_effort(self.undeploy(name), f"undeploy {name}")
        except TimeoutError:
            log.error(
                "Container %s did not undeploy within %s seconds",
                self.name,
                self.stop_timeout,
            )
        finally:
            await self._shut_down()

    async def _shut_down(self) -> None:
        try:
            async with asyncio.timeout(self.stop_timeout):
                await self._best_effort(self.shutdown(), "shut down")
        except TimeoutError:
            log.error(
                "Container %s did not shut down within %s seconds",
                self.name,
                self.stop_timeout,
            )

    async def _best_effort(self, step: Awaitable[None], action: str) -> None:
        try:
            await step
        except Exception as exc:
            log.error(
                "Failed to %s in container %s: %s",
                action,
                self.name,
                exc,
                exc_info=exc,
            )

    def __str__(self) -> str:
        return self.name
