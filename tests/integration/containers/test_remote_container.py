"""Integration tests for the remote container."""

from collections.abc import AsyncGenerator

import pytest
from aiohttp import ClientConnectionError
from aioresponses import aioresponses as aioresponses_cls
from pydantic import SecretStr
from yarl import URL

from exam_reactor.containers.remote import RemoteContainerConfig, RemoteTestContainer
from exam_reactor.errors import ContainerStartError, DeploymentError, InvocationError
from exam_reactor.listeners import RecordingListener
from exam_reactor.models.description import TestAddress, TestDescription
from exam_reactor.models.probe import Probe, ProbeBuilder

API_BASE_URL = "http://runtime.test/exam/"
START_URL = f"{API_BASE_URL}runtime/start"
STOP_URL = f"{API_BASE_URL}runtime/stop"
INVOCATIONS_URL = f"{API_BASE_URL}invocations"
DESCRIPTION = TestDescription(class_name="remote.tests:Probe", method_name="check")


def deployment_url(name: str) -> str:
    return f"{API_BASE_URL}deployments/{name}"


@pytest.fixture
def config() -> RemoteContainerConfig:
    """Create test configuration."""
    return RemoteContainerConfig(
        api_base_url=API_BASE_URL,
        token=SecretStr("runtime-token"),
        system_properties={"exam.mode": "test"},
    )


@pytest.fixture
def probe() -> Probe:
    """Probe for a class only the runtime knows."""
    return ProbeBuilder(name="probe").add_test("remote.tests:Probe", ["check"]).build()


@pytest.fixture
async def container(
    config: RemoteContainerConfig, aioresponses: aioresponses_cls
) -> AsyncGenerator[RemoteTestContainer, None]:
    """Create container with managed session."""
    async with RemoteTestContainer.from_config(config) as impl:
        yield impl


def mock_start(aioresponses: aioresponses_cls) -> None:
    aioresponses.post(START_URL, status=200, payload={"status": "running"})


class TestStart:
    """Tests for starting the runtime."""

    async def test_sends_system_properties(
        self, container: RemoteTestContainer, aioresponses: aioresponses_cls
    ) -> None:
        """Properties travel with the start request."""
        mock_start(aioresponses)

        await container.start()

        assert container.is_running
        call = aioresponses.requests[("POST", URL(START_URL))][0]
        assert call.kwargs["json"] == {"system_properties": {"exam.mode": "test"}}

    async def test_sends_token(self, container: RemoteTestContainer) -> None:
        """The session authenticates with the configured token."""
        assert container.session.headers["Authorization"] == "Bearer runtime-token"

    async def test_http_failure_fails_start(
        self, container: RemoteTestContainer, aioresponses: aioresponses_cls
    ) -> None:
        """A failing start request raises and releases the runtime."""
        aioresponses.post(START_URL, status=500, body="out of memory")
        aioresponses.post(STOP_URL, status=204)

        with pytest.raises(ContainerStartError, match="500 out of memory"):
            await container.start()

        assert container.state == "stopped"
        assert ("POST", URL(STOP_URL)) in aioresponses.requests

    async def test_runtime_not_running_fails_start(
        self, container: RemoteTestContainer, aioresponses: aioresponses_cls
    ) -> None:
        """The runtime must report itself running."""
        aioresponses.post(START_URL, status=200, payload={"status": "stopped"})
        aioresponses.post(STOP_URL, status=204)

        with pytest.raises(ContainerStartError, match="status=stopped"):
            await container.start()

    async def test_deploys_module_urls(
        self, config: RemoteContainerConfig, aioresponses: aioresponses_cls
    ) -> None:
        """Module URLs are fetched and deployed under their stem."""
        module_url = "http://artifacts.test/libs/support-1.0.zip"
        config = config.model_copy(update={"modules": [module_url]})
        mock_start(aioresponses)
        aioresponses.get(module_url, status=200, body=b"archive")
        aioresponses.put(
            deployment_url("support-1.0"),
            status=201,
            payload={"id": "dep-1", "name": "support-1.0"},
        )

        async with RemoteTestContainer.from_config(config) as container:
            await container.start()

            assert container.deployed == ["support-1.0"]
            call = aioresponses.requests[("PUT", URL(deployment_url("support-1.0")))][0]
            assert call.kwargs["data"] == b"archive"

            aioresponses.delete(deployment_url("support-1.0"), status=204)
            aioresponses.post(STOP_URL, status=204)

        assert container.state == "stopped"

    async def test_module_download_failure_fails_start(
        self, config: RemoteContainerConfig, aioresponses: aioresponses_cls
    ) -> None:
        """Unreachable modules abort the start."""
        module_url = "http://artifacts.test/libs/missing.zip"
        config = config.model_copy(update={"modules": [module_url]})
        mock_start(aioresponses)
        aioresponses.get(module_url, status=404)
        aioresponses.post(STOP_URL, status=204)

        async with RemoteTestContainer.from_config(config) as container:
            with pytest.raises(ContainerStartError, match="status 404"):
                await container.start()


class TestProbes:
    """Tests for probe deployment and invocation."""

    async def test_installs_and_invokes_probe(
        self,
        container: RemoteTestContainer,
        probe: Probe,
        aioresponses: aioresponses_cls,
    ) -> None:
        """The probe archive is uploaded and tests are invoked by name."""
        mock_start(aioresponses)
        aioresponses.put(
            deployment_url("probe"), status=201, payload={"id": "d-7", "name": "probe"}
        )
        aioresponses.post(
            INVOCATIONS_URL,
            status=200,
            payload={"status": "failed", "duration": 0.25, "message": "2 != 3"},
        )
        listener = RecordingListener()

        await container.start()
        deployment_id = await container.install_probe(probe.open(), probe.name)
        result = await container.run_test(DESCRIPTION, listener)

        assert deployment_id == "d-7"
        upload = aioresponses.requests[("PUT", URL(deployment_url("probe")))][0]
        assert upload.kwargs["data"] == probe.content
        assert upload.kwargs["headers"] == {"Content-Type": "application/zip"}

        call = aioresponses.requests[("POST", URL(INVOCATIONS_URL))][0]
        assert call.kwargs["json"]["probe"] == "probe"
        assert call.kwargs["json"]["class_name"] == "remote.tests:Probe"
        assert call.kwargs["json"]["method_name"] == "check"

        assert result.status == "failed"
        assert result.duration == 0.25
        assert result.message == "2 != 3"
        assert listener.results == [result]

    async def test_rejected_upload_is_deployment_error(
        self,
        container: RemoteTestContainer,
        probe: Probe,
        aioresponses: aioresponses_cls,
    ) -> None:
        """Uploads must be acknowledged with 201."""
        mock_start(aioresponses)
        aioresponses.put(deployment_url("probe"), status=409, body="exists")

        await container.start()
        with pytest.raises(DeploymentError, match="409 exists"):
            await container.install_probe(probe.open(), probe.name)

        assert container.probe_deployment is None

    @pytest.mark.parametrize(
        ("status", "payload", "message"),
        [
            (500, {"error": "crashed"}, "500"),
            (200, {"status": "unknown"}, "invalid invocation response"),
        ],
    )
    async def test_broken_invocation_is_invocation_error(
        self,
        container: RemoteTestContainer,
        aioresponses: aioresponses_cls,
        status: int,
        payload: dict[str, str],
        message: str,
    ) -> None:
        """Unexpected invocation answers are infrastructure failures."""
        mock_start(aioresponses)
        aioresponses.post(INVOCATIONS_URL, status=status, payload=payload)

        await container.start()
        with pytest.raises(InvocationError, match=message):
            await container.run_test(DESCRIPTION, RecordingListener())

    async def test_stop_undeploys_probe_then_stops_runtime(
        self,
        container: RemoteTestContainer,
        probe: Probe,
        aioresponses: aioresponses_cls,
    ) -> None:
        """Stop removes the probe before stopping the runtime."""
        mock_start(aioresponses)
        aioresponses.put(
            deployment_url("probe"), status=201, payload={"id": "d-7", "name": "probe"}
        )
        aioresponses.delete(deployment_url("probe"), status=204)
        aioresponses.post(STOP_URL, status=204)

        await container.start()
        await container.install_probe(probe.open(), probe.name)
        await container.stop()

        assert list(aioresponses.requests)[-2:] == [
            ("DELETE", URL(deployment_url("probe"))),
            ("POST", URL(STOP_URL)),
        ]
        assert container.state == "stopped"

    async def test_stop_survives_unreachable_runtime(
        self,
        container: RemoteTestContainer,
        aioresponses: aioresponses_cls,
    ) -> None:
        """Stop never raises, even when the runtime cannot be reached."""
        mock_start(aioresponses)
        aioresponses.post(STOP_URL, status=503, body="gone")

        await container.start()
        await container.stop()

        assert container.state == "stopped"


async def test_unreachable_runtime_is_invocation_error(
    container: RemoteTestContainer, aioresponses: aioresponses_cls
) -> None:
    """Transport errors during a call are infrastructure failures."""
    mock_start(aioresponses)
    aioresponses.post(INVOCATIONS_URL, exception=ClientConnectionError("refused"))

    await container.start()
    with pytest.raises(InvocationError, match="refused"):
        await container.call(TestAddress(description=DESCRIPTION))
