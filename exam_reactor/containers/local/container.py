"""In-process container implementation."""

import asyncio
import io
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from exam_reactor.containers.base import TestContainer
from exam_reactor.containers.local.config import LocalContainerConfig
from exam_reactor.errors import ConfigurationError, DeploymentError
from exam_reactor.invokers.local import LocalProbeInvoker, RuntimeContext
from exam_reactor.models.probe import ProbeManifest, read_probe_manifest

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class LocalTestContainer(TestContainer):
    """Runs probes inside the current interpreter.

    Deployments are probe archives whose manifests name importable test
    classes; the runtime is the set of deployments plus the configured
    properties.
    """

    config: LocalContainerConfig = field(repr=False)
    deployments: dict[str, ProbeManifest] = field(
        default_factory=dict, init=False, repr=False
    )
    properties: dict[str, str] = field(default_factory=dict, init=False, repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: LocalContainerConfig
    ) -> AsyncGenerator["LocalTestContainer", None]:
        """Create a container that is stopped when the context exits."""
        container = cls(
            name=config.name,
            config=config,
            start_timeout=config.start_timeout,
            stop_timeout=config.stop_timeout,
        )
        try:
            yield container
        finally:
            await container.stop()

    async def launch(self) -> None:
        """Initialise runtime properties from the configuration."""
        missing = [
            module for module in self.config.modules if not Path(module).is_file()
        ]
        if missing:
            raise ConfigurationError(f"Module archives not found: {missing}")

        self.properties = dict(self.config.system_properties)
        log.info(
            "Local runtime %s started with %d properties",
            self.name,
            len(self.properties),
        )

    async def install_modules(self) -> None:
        """Deploy every configured module archive, named after its file."""
        for module in self.config.modules:
            path = Path(module)
            content = await asyncio.to_thread(path.read_bytes)
            await self.install(io.BytesIO(content), path.stem)

    async def shutdown(self) -> None:
        """Forget all deployments and properties."""
        self.deployments.clear()
        self.properties = {}
        log.info("Local runtime %s shut down", self.name)

    async def deploy(self, name: str, stream: BinaryIO) -> str:
        """Register the probe manifest found in the archive."""
        if name in self.deployments:
            raise DeploymentError(name, "already deployed")

        self.deployments[name] = read_probe_manifest(stream)
        return f"{self.name}/{name}"

    async def undeploy(self, name: str) -> None:
        """Drop a registered deployment."""
        if self.deployments.pop(name, None) is None:
            raise DeploymentError(name, "not deployed")

    def create_invoker(self) -> LocalProbeInvoker:
        """Return an invoker bound to the live runtime state."""
        return LocalProbeInvoker(
            context=RuntimeContext(
                container=self.name,
                properties=self.properties,
                deployments=self.deployments,
            )
        )
