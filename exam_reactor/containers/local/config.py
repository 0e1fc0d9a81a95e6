"""Configuration for the local container."""

from exam_reactor.containers.config import ContainerConfig


class LocalContainerConfig(ContainerConfig):
    """Configuration for the in-process container.

    ``modules`` are paths to probe archives deployed when the container
    starts.
    """

    name: str = "local"
