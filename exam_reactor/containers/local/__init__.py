"""Local container module."""

from exam_reactor.containers.local.config import LocalContainerConfig
from exam_reactor.containers.local.container import LocalTestContainer
from exam_reactor.containers.local.manifest import local_manifest

__all__ = ["LocalContainerConfig", "LocalTestContainer", "local_manifest"]
