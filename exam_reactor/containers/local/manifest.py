"""Local container manifest."""

from exam_reactor.containers.local.config import LocalContainerConfig
from exam_reactor.containers.local.container import LocalTestContainer
from exam_reactor.containers.manifest import ContainerManifest

local_manifest = ContainerManifest(
    config_cls=LocalContainerConfig,
    container_factory=LocalTestContainer.from_config,
)
