"""Remote container implementation."""

import io
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import BinaryIO
from urllib.parse import quote

import aiohttp
from yarl import URL

from exam_reactor.containers.base import TestContainer
from exam_reactor.containers.remote.config import RemoteContainerConfig
from exam_reactor.containers.remote.models import Deployment, RuntimeStatus
from exam_reactor.errors import DeploymentError
from exam_reactor.invokers.http import HttpProbeInvoker

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class RemoteTestContainer(TestContainer):
    """Container driving a runtime through its HTTP management API.

    Endpoints, relative to ``api_base_url``:
    - POST runtime/start, POST runtime/stop
    - PUT deployments/{name} (201), DELETE deployments/{name} (204)
    - POST invocations (200), see ``HttpProbeInvoker``
    """

    config: RemoteContainerConfig = field(repr=False)
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: RemoteContainerConfig
    ) -> AsyncGenerator["RemoteTestContainer", None]:
        """Create container with managed session lifecycle."""
        headers = {"Accept": "application/json"}
        if config.token is not None:
            headers["Authorization"] = f"Bearer {config.token.get_secret_value()}"

        async with aiohttp.ClientSession(
            base_url=config.api_base_url,
            headers=headers,
        ) as session:
            container = cls(
                name=config.name,
                config=config,
                session=session,
                start_timeout=config.start_timeout,
                stop_timeout=config.stop_timeout,
            )
            try:
                yield container
            finally:
                await container.stop()

    async def launch(self) -> None:
        """Ask the runtime to start, passing the configured properties."""
        payload = {"system_properties": dict(self.config.system_properties)}

        log.info(
            "Starting remote runtime: api_base_url=%s, name=%s",
            self.config.api_base_url,
            self.name,
        )
        async with self.session.post("runtime/start", json=payload) as response:
            if response.status != 200:
                text = await response.text()
                raise RuntimeError(
                    f"Failed to start runtime: {response.status} {text}"
                )
            data = await response.json()

        status = RuntimeStatus.model_validate(data)
        if status.status != "running":
            raise RuntimeError(f"Runtime reported status={status.status}")

    async def install_modules(self) -> None:
        """Fetch every configured module URL and deploy it."""
        if not self.config.modules:
            return

        async with aiohttp.ClientSession() as fetcher:
            for index, module in enumerate(self.config.modules, start=1):
                log.info("Fetching module %s", module)
                async with fetcher.get(module) as response:
                    if response.status != 200:
                        raise DeploymentError(
                            module, f"download failed with status {response.status}"
                        )
                    content = await response.read()

                name = PurePosixPath(URL(module).path).stem or f"app{index}"
                await self.install(io.BytesIO(content), name)

    async def shutdown(self) -> None:
        """Ask the runtime to stop."""
        async with self.session.post("runtime/stop") as response:
            if response.status not in (200, 204):
                text = await response.text()
                raise RuntimeError(f"Failed to stop runtime: {response.status} {text}")

    async def deploy(self, name: str, stream: BinaryIO) -> str:
        """Upload an archive to the runtime."""
        url = f"deployments/{quote(name, safe='')}"
        headers = {"Content-Type": "application/zip"}

        async with self.session.put(
            url, data=stream.read(), headers=headers
        ) as response:
            if response.status != 201:
                text = await response.text()
                raise DeploymentError(name, f"{response.status} {text}")
            data = await response.json()

        return Deployment.model_validate(data).id

    async def undeploy(self, name: str) -> None:
        """Remove an archive from the runtime."""
        url = f"deployments/{quote(name, safe='')}"

        async with self.session.delete(url) as response:
            if response.status != 204:
                text = await response.text()
                raise DeploymentError(
                    name, f"undeploy failed: {response.status} {text}"
                )

    def create_invoker(self) -> HttpProbeInvoker:
        """Return an invoker posting to the runtime's invocation endpoint."""
        return HttpProbeInvoker(
            session=self.session,
            probe_name=self.probe_deployment or "",
        )
