"""Integration tests for the local container."""

import io
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from exam_reactor.containers.local import LocalContainerConfig, LocalTestContainer
from exam_reactor.errors import ContainerStartError, DeploymentError
from exam_reactor.listeners import RecordingListener
from exam_reactor.models.description import TestDescription
from exam_reactor.models.probe import Probe, ProbeBuilder
from exam_reactor.testing.sample_probe import OtherProbe, SampleProbe

SAMPLE = "exam_reactor.testing.sample_probe:SampleProbe"


@pytest.fixture
def probe() -> Probe:
    """Probe with the sample tests."""
    return ProbeBuilder(name="probe").add_test_class(SampleProbe).build()


@pytest.fixture
def module_path(tmp_path: Path) -> Path:
    """Module archive deployed when the container starts."""
    path = tmp_path / "support.zip"
    support = ProbeBuilder(name="support").add_test_class(OtherProbe).build()
    path.write_bytes(support.content)
    return path


@pytest.fixture
async def container(module_path: Path) -> AsyncGenerator[LocalTestContainer, None]:
    """Container with managed lifecycle."""
    config = LocalContainerConfig(
        modules=str(module_path), system_properties={"exam.mode": "test"}
    )
    async with LocalTestContainer.from_config(config) as impl:
        yield impl


class TestLifecycle:
    """Tests for start and stop."""

    async def test_start_deploys_modules(self, container: LocalTestContainer) -> None:
        """Configured modules are deployed under their file stem."""
        await container.start()

        assert container.deployed == ["support"]
        assert set(container.deployments) == {"support"}
        assert container.properties == {"exam.mode": "test"}

    async def test_missing_module_fails_start(self, tmp_path: Path) -> None:
        """Start fails when a module archive does not exist."""
        config = LocalContainerConfig(modules=[str(tmp_path / "missing.zip")])
        async with LocalTestContainer.from_config(config) as container:
            with pytest.raises(ContainerStartError, match="Module archives not found"):
                await container.start()

            assert container.state == "stopped"

    async def test_stop_forgets_everything(
        self, container: LocalTestContainer, probe: Probe
    ) -> None:
        """Stopping removes deployments and properties."""
        await container.start()
        await container.install_probe(probe.open(), probe.name)

        await container.stop()

        assert container.deployments == {}
        assert container.properties == {}

    async def test_context_exit_stops_container(self, module_path: Path) -> None:
        """Leaving the factory context stops a running container."""
        config = LocalContainerConfig(modules=[str(module_path)])
        async with LocalTestContainer.from_config(config) as container:
            await container.start()

        assert container.state == "stopped"
        assert container.deployments == {}


class TestDeploy:
    """Tests for probe deployment."""

    async def test_rejects_duplicate_name(
        self, container: LocalTestContainer, probe: Probe
    ) -> None:
        """A name can only be deployed once."""
        await container.start()

        with pytest.raises(DeploymentError, match="already deployed"):
            await container.install(probe.open(), "support")

    async def test_rejects_non_probe_archive(
        self, container: LocalTestContainer
    ) -> None:
        """Only probe archives can be deployed."""
        await container.start()

        with pytest.raises(DeploymentError, match="not a probe archive"):
            await container.install(io.BytesIO(b"garbage"), "garbage")


class TestRunTest:
    """Tests for running sample tests."""

    @pytest.mark.parametrize(
        ("method", "status"),
        [
            ("without_context", "passed"),
            ("with_context", "passed"),
            ("asynchronous", "passed"),
            ("failing", "failed"),
            ("broken", "error"),
        ],
    )
    async def test_reports_outcome(
        self,
        container: LocalTestContainer,
        probe: Probe,
        method: str,
        status: str,
    ) -> None:
        """Each sample method ends with its expected status."""
        await container.start()
        await container.install_probe(probe.open(), probe.name)
        listener = RecordingListener()

        result = await container.run_test(
            TestDescription(class_name=SAMPLE, method_name=method), listener
        )

        assert result.status == status
        assert listener.results == [result]

    async def test_module_classes_are_callable(
        self, container: LocalTestContainer
    ) -> None:
        """Classes deployed as modules can be run as well."""
        await container.start()

        result = await container.run_test(
            TestDescription(
                class_name="exam_reactor.testing.sample_probe:OtherProbe",
                method_name="only",
            ),
            RecordingListener(),
        )

        assert result.passed
