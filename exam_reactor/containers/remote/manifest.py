"""Remote container manifest."""

from exam_reactor.containers.manifest import ContainerManifest
from exam_reactor.containers.remote.config import RemoteContainerConfig
from exam_reactor.containers.remote.container import RemoteTestContainer

remote_manifest = ContainerManifest(
    config_cls=RemoteContainerConfig,
    container_factory=RemoteTestContainer.from_config,
)
