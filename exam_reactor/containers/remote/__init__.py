"""Remote container module."""

from exam_reactor.containers.remote.config import RemoteContainerConfig
from exam_reactor.containers.remote.container import RemoteTestContainer
from exam_reactor.containers.remote.manifest import remote_manifest

__all__ = ["RemoteContainerConfig", "RemoteTestContainer", "remote_manifest"]
